"""Load balancer controller leftovers: ALB/NLBs and their security groups."""

from .load_balancers import (
    delete_load_balancers,
    find_controller_load_balancers,
    wait_for_load_balancers_gone,
)
from .security_groups import (
    delete_controller_security_groups,
    find_controller_security_groups,
)

__all__ = [
    "delete_load_balancers",
    "find_controller_load_balancers",
    "wait_for_load_balancers_gone",
    "delete_controller_security_groups",
    "find_controller_security_groups",
]
