"""Fluent Bit deployment to EKS via Helm.

Fluent Bit is installed from the upstream Helm chart rather than the EKS
add-on, which does not support Kubernetes 1.33+. Logs land in CloudWatch log
groups named /aws/eks/<cluster>/<namespace>.
"""

from __future__ import annotations
import os
import tempfile
from pathlib import Path

import yaml

from ..models.config import HELM_BIN, LoggingDeployConfig
from ..kubernetes.access import check_cluster_connection, kubectl_base_args
from ..utils import CommandError, get_logger, run_command

logger = get_logger()

APP_LABEL = "app.kubernetes.io/name=fluent-bit"


class LoggingDeployError(RuntimeError):
    """A step of the Fluent Bit deployment failed."""


def render_values(config: LoggingDeployConfig) -> str:
    """
    Substitute cluster, region and role ARN into the values template.

    Raises:
        LoggingDeployError: rendered values are not valid YAML
    """
    template = config.values_template.read_text(encoding="utf-8")
    rendered = (
        template.replace("FLUENT_BIT_ROLE_ARN", config.role_arn)
        .replace("AWS_REGION_PLACEHOLDER", config.region)
        .replace("CLUSTER_NAME_PLACEHOLDER", config.cluster_name)
    )

    try:
        yaml.safe_load(rendered)
    except yaml.YAMLError as e:
        raise LoggingDeployError(f"Rendered values are not valid YAML: {e}") from e
    return rendered


def add_helm_repo(config: LoggingDeployConfig) -> None:
    logger.info("Adding FluentBit Helm repository...")
    run_command(
        [HELM_BIN, "repo", "add", config.repo_name, config.repo_url, "--force-update"]
    )
    run_command([HELM_BIN, "repo", "update", config.repo_name])
    logger.info("Helm repository updated")


def install_chart(config: LoggingDeployConfig, values_file: Path) -> None:
    logger.info(f"Deploying FluentBit to {config.namespace} namespace...")
    args = [
        HELM_BIN,
        "upgrade",
        "--install",
        config.release_name,
        config.chart,
        "--namespace",
        config.namespace,
        "--values",
        str(values_file),
        "--wait",
        "--timeout",
        f"{config.timeout}s",
    ]
    if config.kubeconfig:
        args += ["--kubeconfig", config.kubeconfig]
    run_command(args, capture=False)


def wait_for_pods(config: LoggingDeployConfig) -> None:
    logger.info("Waiting for FluentBit pods to be ready...")
    run_command(
        kubectl_base_args(config.kubeconfig)
        + [
            "wait",
            "--for=condition=ready",
            "pod",
            "-l",
            APP_LABEL,
            "-n",
            config.namespace,
            f"--timeout={config.timeout}s",
        ],
        capture=False,
    )


def deploy_fluent_bit(config: LoggingDeployConfig) -> None:
    """
    Install or upgrade the Fluent Bit release and wait until its pods are ready.

    Every step is required; the first failure aborts the deployment.

    Raises:
        LoggingDeployError: cluster unreachable or a helm/kubectl step failed
    """
    logger.info(
        f"Deploying FluentBit for cluster: {config.cluster_name}",
        extra={"cluster_name": config.cluster_name, "region": config.region},
    )

    if not check_cluster_connection(config.kubeconfig):
        raise LoggingDeployError(
            "Cannot connect to cluster. Run: aws eks update-kubeconfig "
            f"--region {config.region} --name {config.cluster_name}"
        )

    try:
        add_helm_repo(config)

        logger.info("Preparing FluentBit configuration...")
        rendered = render_values(config)
        fd, tmp_name = tempfile.mkstemp(prefix="fluent-bit-values-", suffix=".yaml")
        values_file = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(rendered)
            install_chart(config, values_file)
        finally:
            values_file.unlink(missing_ok=True)

        logger.info("FluentBit deployed successfully")
        wait_for_pods(config)
        logger.info("FluentBit pods are ready")
    except CommandError as e:
        raise LoggingDeployError(str(e)) from e


def deployment_summary(config: LoggingDeployConfig) -> list[str]:
    """Operator-facing lines describing where the logs go."""
    prefix = config.log_group_prefix
    return [
        f"FluentBit DaemonSet deployed in {config.namespace} namespace",
        "Logs will appear in CloudWatch Log Groups with pattern:",
        f"  {prefix}/{{namespace}}",
        "",
        "Examples:",
        f"  {prefix}/default",
        f"  {prefix}/kube-system",
        "",
        "To check FluentBit status:",
        f"  kubectl get pods -n {config.namespace} -l {APP_LABEL}",
    ]
