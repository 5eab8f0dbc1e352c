"""Kubernetes-side cleanup of load balancer owners."""

from .access import (
    check_cluster_connection,
    connect_to_cluster,
    get_cluster_status,
    kubectl_base_args,
)
from .resources import (
    delete_ingresses,
    delete_load_balancer_services,
    list_ingresses,
    list_load_balancer_services,
)

__all__ = [
    "check_cluster_connection",
    "connect_to_cluster",
    "get_cluster_status",
    "kubectl_base_args",
    "delete_ingresses",
    "delete_load_balancer_services",
    "list_ingresses",
    "list_load_balancer_services",
]
