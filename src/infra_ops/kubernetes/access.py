"""EKS cluster access: existence check and kubeconfig update."""

from __future__ import annotations
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..models.config import AWS_CLI_BIN, KUBECTL_BIN
from ..utils import CommandError, error_code, get_logger, run_command

logger = get_logger()


def kubectl_base_args(kubeconfig: str | None = None) -> list[str]:
    """kubectl invocation prefix, pinned to a kubeconfig file when one is given."""
    args = [KUBECTL_BIN]
    if kubeconfig:
        args += ["--kubeconfig", kubeconfig]
    return args


def get_cluster_status(cluster_name: str, region: str) -> str | None:
    """Return the EKS cluster status, or None if it does not exist or cannot be read."""
    try:
        eks = boto3.client("eks", region_name=region)
        response = eks.describe_cluster(name=cluster_name)
        return response["cluster"]["status"]
    except ClientError as e:
        if error_code(e) == "ResourceNotFoundException":
            logger.warning(f"EKS cluster {cluster_name} not found in {region}")
        else:
            logger.warning(f"Cannot describe EKS cluster {cluster_name}: {e}")
        return None
    except BotoCoreError as e:
        logger.warning(f"Cannot reach EKS API in {region}: {e}")
        return None


def connect_to_cluster(
    cluster_name: str, region: str, kubeconfig: str | None = None
) -> bool:
    """
    Point kubectl at the cluster via `aws eks update-kubeconfig`.

    Returns:
        True if kubeconfig was updated, False if the cluster is gone or unreachable
    """
    status = get_cluster_status(cluster_name, region)
    if status is None:
        return False
    if status in ("DELETING", "FAILED"):
        logger.warning(
            f"EKS cluster {cluster_name} is {status}, skipping Kubernetes cleanup",
            extra={"cluster_name": cluster_name, "status": status},
        )
        return False

    args = [
        AWS_CLI_BIN,
        "eks",
        "update-kubeconfig",
        "--region",
        region,
        "--name",
        cluster_name,
    ]
    if kubeconfig:
        args += ["--kubeconfig", kubeconfig]

    try:
        run_command(args)
    except CommandError as e:
        logger.warning(f"Cannot update kubeconfig for {cluster_name}: {e}")
        return False

    logger.info(
        "Connected to EKS cluster",
        extra={"cluster_name": cluster_name, "region": region, "status": status},
    )
    return True


def check_cluster_connection(kubeconfig: str | None = None) -> bool:
    """Return True if `kubectl get nodes` succeeds with the current context."""
    try:
        run_command(kubectl_base_args(kubeconfig) + ["get", "nodes"])
        return True
    except CommandError as e:
        logger.debug(f"kubectl get nodes failed: {e}")
        return False
