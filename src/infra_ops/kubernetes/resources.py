"""Kubernetes objects that make the AWS Load Balancer Controller create ALBs/NLBs."""

from __future__ import annotations
import json

from ..utils import CommandError, get_logger, run_command
from .access import kubectl_base_args

logger = get_logger()

LOAD_BALANCER_SELECTOR = "spec.type=LoadBalancer"


def _list_names(args: list[str]) -> list[str]:
    result = run_command(args + ["-o", "json"])
    items = json.loads(result.stdout or "{}").get("items", [])
    return [
        f"{item['metadata'].get('namespace', 'default')}/{item['metadata']['name']}"
        for item in items
    ]


def list_ingresses(kubeconfig: str | None = None) -> list[str]:
    """List all Ingresses as namespace/name."""
    return _list_names(
        kubectl_base_args(kubeconfig) + ["get", "ingress", "--all-namespaces"]
    )


def list_load_balancer_services(kubeconfig: str | None = None) -> list[str]:
    """List all Services of type LoadBalancer as namespace/name."""
    return _list_names(
        kubectl_base_args(kubeconfig)
        + [
            "get",
            "services",
            "--all-namespaces",
            "--field-selector",
            LOAD_BALANCER_SELECTOR,
        ]
    )


def delete_ingresses(kubeconfig: str | None = None, dry_run: bool = False) -> bool:
    """
    Delete every Ingress in every namespace (removes ALBs).

    Not-found is success, so calling this repeatedly is safe.

    Returns:
        True if kubectl succeeded (or dry-run), False on any error
    """
    try:
        if dry_run:
            for name in list_ingresses(kubeconfig):
                logger.info(f"[DRY-RUN] Would delete ingress {name}")
            return True

        run_command(
            kubectl_base_args(kubeconfig)
            + [
                "delete",
                "ingress",
                "--all",
                "--all-namespaces",
                "--ignore-not-found=true",
            ]
        )
        logger.info("Deleted all Ingresses")
        return True
    except (CommandError, ValueError) as e:
        logger.warning(f"Error deleting Ingresses: {e}")
        return False


def delete_load_balancer_services(
    kubeconfig: str | None = None, dry_run: bool = False
) -> bool:
    """Delete every LoadBalancer Service in every namespace (removes NLBs)."""
    try:
        if dry_run:
            for name in list_load_balancer_services(kubeconfig):
                logger.info(f"[DRY-RUN] Would delete LoadBalancer service {name}")
            return True

        run_command(
            kubectl_base_args(kubeconfig)
            + [
                "delete",
                "services",
                "--all-namespaces",
                "--field-selector",
                LOAD_BALANCER_SELECTOR,
                "--ignore-not-found=true",
            ]
        )
        logger.info("Deleted all LoadBalancer services")
        return True
    except (CommandError, ValueError) as e:
        logger.warning(f"Error deleting LoadBalancer services: {e}")
        return False
