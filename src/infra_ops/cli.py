"""Command line entry point.

Usage:
    infra-ops destroy ENVIRONMENT REGION CLIENT_NAME [options]
    infra-ops deploy-logging CLUSTER_NAME REGION FLUENT_BIT_ROLE_ARN [options]

Examples:
    infra-ops destroy stage us-east-1 stage-test-xxx
    infra-ops destroy stage us-east-1 stage-test-xxx --dry-run --confirm destroy
    infra-ops deploy-logging stage-beatly-eks-cluster us-east-1 \\
        arn:aws:iam::123456789012:role/stage-beatly-fluent-bit-role

The Fluent Bit role ARN comes from Terraform:
    cd environments/stage && terraform output fluent_bit_role_arn
"""

from __future__ import annotations
import argparse
import json
import sys
from typing import Callable, Sequence

from .models.config import (
    CONFIRMATION_TOKEN,
    ConfigError,
    LoggingDeployConfig,
    TeardownConfig,
)
from .fluentbit import LoggingDeployError, deploy_fluent_bit, deployment_summary
from .orchestrator import destroy_environment
from .terraform import REMEDIATION_HINTS, TerraformDestroyError, TerraformError
from .utils import get_logger

logger = get_logger()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="infra-ops",
        description="Teardown and logging deployment helpers for the EKS environments.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    destroy = subparsers.add_parser(
        "destroy",
        help="delete Kubernetes load balancers, then terraform destroy the environment",
        description=(
            "Deletes Ingresses and LoadBalancer Services (which own ALBs/NLBs), "
            "sweeps remaining k8s-* load balancers, then runs terraform destroy "
            "in environments/ENVIRONMENT."
        ),
    )
    destroy.add_argument("environment", help="environment name, e.g. stage")
    destroy.add_argument("region", help="AWS region, e.g. us-east-1")
    destroy.add_argument(
        "client_name", help="client name; the cluster is <client_name>-eks-cluster"
    )
    destroy.add_argument(
        "--cluster-name", dest="cluster_name", default="", help="override the EKS cluster name"
    )
    destroy.add_argument(
        "--terraform-dir",
        dest="terraform_dir",
        default=".",
        help="directory holding environments/ (default: current dir)",
    )
    destroy.add_argument("--kubeconfig", help="kubeconfig file to write and use")
    destroy.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="log what would be deleted and run terraform plan -destroy",
    )
    destroy.add_argument(
        "--confirm",
        metavar="TOKEN",
        help=f"confirmation token; must be '{CONFIRMATION_TOKEN}' (skips the prompt)",
    )
    destroy.add_argument(
        "--lb-name-pattern",
        dest="lb_name_pattern",
        help="substring identifying controller load balancers (default: k8s-)",
    )
    destroy.add_argument(
        "--cluster-scoped",
        action="store_true",
        dest="cluster_scoped",
        help="skip k8s-* load balancers tagged for a different cluster",
    )
    destroy.add_argument(
        "--k8s-cleanup-timeout",
        dest="k8s_cleanup_timeout",
        type=float,
        help="seconds to wait for the controller to remove load balancers (default: 90)",
    )
    destroy.add_argument(
        "--lb-deletion-timeout",
        dest="lb_deletion_timeout",
        type=float,
        help="seconds to wait for force-deleted load balancers (default: 60)",
    )
    destroy.add_argument(
        "--json", action="store_true", help="print the step report as JSON"
    )
    destroy.set_defaults(func=run_destroy)

    logging_cmd = subparsers.add_parser(
        "deploy-logging",
        help="install or upgrade Fluent Bit with CloudWatch namespace log groups",
    )
    logging_cmd.add_argument("cluster_name", help="EKS cluster name")
    logging_cmd.add_argument("region", help="AWS region, e.g. us-east-1")
    logging_cmd.add_argument(
        "role_arn", help="Fluent Bit IAM role ARN (terraform output fluent_bit_role_arn)"
    )
    logging_cmd.add_argument("--namespace", help="namespace for the release (default: kube-system)")
    logging_cmd.add_argument(
        "--values-file", dest="values_file", help="values template to render"
    )
    logging_cmd.add_argument(
        "--timeout", type=int, help="helm and pod readiness timeout in seconds (default: 300)"
    )
    logging_cmd.add_argument("--kubeconfig", help="kubeconfig file to use")
    logging_cmd.set_defaults(func=run_deploy_logging)

    return parser


def confirm_destruction(
    config: TeardownConfig,
    token: str | None = None,
    input_func: Callable[[], str] | None = None,
) -> bool:
    """
    Require the exact confirmation token before anything is deleted.

    The banner and prompt go to stderr so stdout stays clean for --json.
    """
    if input_func is None:
        input_func = input

    print(f"Infrastructure Destruction: {config.environment}", file=sys.stderr)
    print("============================================", file=sys.stderr)
    print(f"Region: {config.region}", file=sys.stderr)
    print(f"Client: {config.client_name}", file=sys.stderr)
    print(f"Cluster: {config.cluster_name}", file=sys.stderr)
    print("", file=sys.stderr)
    print(
        f"This will destroy ALL infrastructure in the {config.environment} environment!",
        file=sys.stderr,
    )

    if token is None:
        print(f"Type '{CONFIRMATION_TOKEN}' to confirm: ", end="", file=sys.stderr, flush=True)
        try:
            token = input_func()
        except EOFError:
            token = ""

    if token != CONFIRMATION_TOKEN:
        print("Cancelled", file=sys.stderr)
        logger.warning(
            "Destruction cancelled at confirmation",
            extra={"environment": config.environment, "cluster_name": config.cluster_name},
        )
        return False
    return True


def _teardown_config(args: argparse.Namespace) -> TeardownConfig:
    overrides = {}
    if args.dry_run is not None:
        overrides["dry_run"] = args.dry_run
    if args.lb_name_pattern is not None:
        overrides["lb_name_pattern"] = args.lb_name_pattern
    if args.k8s_cleanup_timeout is not None:
        overrides["k8s_cleanup_timeout"] = args.k8s_cleanup_timeout
    if args.lb_deletion_timeout is not None:
        overrides["lb_deletion_timeout"] = args.lb_deletion_timeout

    return TeardownConfig(
        environment=args.environment,
        region=args.region,
        client_name=args.client_name,
        cluster_name=args.cluster_name,
        terraform_root=args.terraform_dir,
        kubeconfig=args.kubeconfig,
        cluster_scoped_lbs=args.cluster_scoped,
        **overrides,
    )


def run_destroy(args: argparse.Namespace) -> int:
    config = _teardown_config(args)
    try:
        config.validate()
    except ConfigError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return EXIT_FAILED

    if not confirm_destruction(config, args.confirm):
        return EXIT_FAILED

    try:
        report = destroy_environment(config)
    except TerraformDestroyError as e:
        logger.error(
            "Terraform destroy failed",
            extra={"environment": config.environment, "returncode": e.returncode},
        )
        if args.json and e.report is not None:
            print(json.dumps(e.report.to_dict(), indent=2))
        print("", file=sys.stderr)
        print(f"Terraform destroy failed! ({e})", file=sys.stderr)
        print("   Common fixes:", file=sys.stderr)
        for i, hint in enumerate(REMEDIATION_HINTS, start=1):
            print(f"   {i}. {hint}", file=sys.stderr)
        return EXIT_FAILED
    except TerraformError as e:
        logger.error(str(e), extra={"environment": config.environment})
        print(str(e), file=sys.stderr)
        return EXIT_FAILED

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print("")
        print("Infrastructure destruction completed successfully!")
        for step in report.steps:
            detail = f" ({step.detail})" if step.detail else ""
            print(f"  [{step.status}] {step.name}{detail}")
        print("")
        print("Check AWS Console to verify no resources remain")
    return EXIT_OK


def run_deploy_logging(args: argparse.Namespace) -> int:
    overrides = {}
    if args.namespace:
        overrides["namespace"] = args.namespace
    if args.values_file:
        overrides["values_template"] = args.values_file
    if args.timeout is not None:
        overrides["timeout"] = args.timeout

    config = LoggingDeployConfig(
        cluster_name=args.cluster_name,
        region=args.region,
        role_arn=args.role_arn,
        kubeconfig=args.kubeconfig,
        **overrides,
    )
    try:
        config.validate()
        deploy_fluent_bit(config)
    except (ConfigError, LoggingDeployError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_FAILED

    print("Deployment Summary")
    for line in deployment_summary(config):
        print(line)
    print("Logging setup complete!")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
