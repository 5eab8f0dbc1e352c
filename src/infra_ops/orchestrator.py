"""Environment teardown orchestration.

Kubernetes objects that own AWS load balancers are removed before Terraform
destroys the VPC they live in. Otherwise Terraform fails with
DependencyViolation on subnets, security groups and the VPC itself.

Order:
  1. Connect to the EKS cluster (warning and continue if unreachable)
  2. Delete Ingresses (ALBs) and LoadBalancer Services (NLBs)
  3. Wait for the controller to remove its load balancers
  4. Force-delete any remaining k8s-* load balancers and wait
  5. Delete controller-owned security groups
  6. terraform destroy (fatal on failure)
"""

from __future__ import annotations
import time

from .models import TeardownConfig, TeardownReport, StepResult
from .models.step_result import DRY_RUN, FAILED, OK, SKIPPED, WARNING
from .kubernetes import connect_to_cluster, delete_ingresses, delete_load_balancer_services
from .elb import (
    delete_controller_security_groups,
    delete_load_balancers,
    find_controller_load_balancers,
    wait_for_load_balancers_gone,
)
from .terraform import TerraformDestroyError, check_environment_dir, terraform_destroy
from .utils import get_logger

logger = get_logger()


def _lb_owner_filter(config: TeardownConfig) -> str | None:
    return config.cluster_name if config.cluster_scoped_lbs else None


def cleanup_kubernetes_resources(
    config: TeardownConfig, report: TeardownReport
) -> bool:
    """
    Steps 1-3: remove load balancer owners inside the cluster.

    Returns:
        True if the cluster was reachable and cleanup was attempted
    """
    connected = connect_to_cluster(config.cluster_name, config.region, config.kubeconfig)
    if not connected:
        logger.warning(
            "Cannot access EKS cluster - may already be destroyed. "
            "Proceeding with load balancer sweep and Terraform destroy",
            extra={"cluster_name": config.cluster_name, "region": config.region},
        )
        report.add(
            StepResult(
                "connect_cluster",
                WARNING,
                f"cluster {config.cluster_name} unreachable",
            )
        )
        report.add(StepResult("delete_kubernetes_resources", SKIPPED, "cluster unreachable"))
        return False

    report.add(StepResult("connect_cluster", OK, config.cluster_name))

    ingresses_ok = delete_ingresses(config.kubeconfig, config.dry_run)
    report.add(
        StepResult(
            "delete_ingresses",
            (DRY_RUN if config.dry_run else OK) if ingresses_ok else WARNING,
        )
    )

    services_ok = delete_load_balancer_services(config.kubeconfig, config.dry_run)
    report.add(
        StepResult(
            "delete_load_balancer_services",
            (DRY_RUN if config.dry_run else OK) if services_ok else WARNING,
        )
    )

    if config.dry_run:
        report.add(StepResult("wait_for_controller", SKIPPED, "dry-run"))
        return True

    gone = wait_for_load_balancers_gone(
        config.region,
        timeout=config.k8s_cleanup_timeout,
        name_pattern=config.lb_name_pattern,
        cluster_name=_lb_owner_filter(config),
        initial_delay=config.poll_initial_delay,
        max_delay=config.poll_max_delay,
    )
    report.add(
        StepResult(
            "wait_for_controller",
            OK if gone else WARNING,
            "" if gone else f"load balancers remain after {config.k8s_cleanup_timeout:.0f}s",
        )
    )
    return True


def sweep_load_balancers(config: TeardownConfig, report: TeardownReport) -> None:
    """Step 4: force-delete controller load balancers still present."""
    remaining = find_controller_load_balancers(
        config.region, config.lb_name_pattern, _lb_owner_filter(config)
    )
    if not remaining:
        logger.info("No remaining Load Balancers found")
        report.add(StepResult("sweep_load_balancers", OK, "none found"))
        return

    logger.warning(
        f"Found {len(remaining)} remaining Load Balancer(s) - force deleting",
        extra={"region": config.region},
    )
    deleted = delete_load_balancers(remaining, config.region, config.dry_run)

    if config.dry_run:
        report.add(StepResult("sweep_load_balancers", DRY_RUN, resources=deleted))
        return

    gone = wait_for_load_balancers_gone(
        config.region,
        timeout=config.lb_deletion_timeout,
        name_pattern=config.lb_name_pattern,
        cluster_name=_lb_owner_filter(config),
        initial_delay=config.poll_initial_delay,
        max_delay=config.poll_max_delay,
    )
    status = OK if gone and len(deleted) == len(remaining) else WARNING
    report.add(
        StepResult(
            "sweep_load_balancers",
            status,
            f"deleted {len(deleted)} of {len(remaining)}",
            resources=deleted,
        )
    )


def sweep_security_groups(config: TeardownConfig, report: TeardownReport) -> None:
    """Step 5: controller security groups that would pin the VPC."""
    deleted, remaining = delete_controller_security_groups(
        config.cluster_name, config.region, config.dry_run
    )
    if config.dry_run:
        status = DRY_RUN
    else:
        status = WARNING if remaining else OK
    report.add(
        StepResult(
            "sweep_security_groups",
            status,
            f"{len(remaining)} still in use" if remaining else "",
            resources=deleted,
        )
    )


def destroy_environment(config: TeardownConfig) -> TeardownReport:
    """
    Tear down one environment in dependency-safe order.

    Every cleanup step is best-effort; only the Terraform step is fatal.
    Terraform never runs before the Kubernetes and load balancer cleanup
    steps have finished.

    Raises:
        ConfigError: invalid configuration (nothing has been touched)
        TerraformError: environment directory or tfvars missing (nothing touched)
        TerraformDestroyError: terraform destroy failed (after cleanup); its
            report attribute holds the steps run so far, ending in FAILED
    """
    config.validate()
    check_environment_dir(config.environment_dir)

    start_time = time.time()
    report = TeardownReport(
        environment=config.environment,
        region=config.region,
        cluster_name=config.cluster_name,
        dry_run=config.dry_run,
    )
    logger.info(
        f"Starting infrastructure destruction (DRY_RUN={config.dry_run})",
        extra={
            "environment": config.environment,
            "region": config.region,
            "cluster_name": config.cluster_name,
        },
    )

    cleanup_kubernetes_resources(config, report)
    sweep_load_balancers(config, report)
    sweep_security_groups(config, report)

    try:
        terraform_destroy(config.environment_dir, config.dry_run)
    except TerraformDestroyError as e:
        report.add(StepResult("terraform_destroy", FAILED, str(e)))
        e.report = report
        raise
    finally:
        report.duration_seconds = time.time() - start_time

    report.add(
        StepResult(
            "terraform_destroy",
            DRY_RUN if config.dry_run else OK,
            str(config.environment_dir),
        )
    )
    logger.info(
        f"Infrastructure destruction completed in {report.duration_seconds:.1f}s "
        f"with {len(report.warnings)} warning(s)"
    )
    return report
