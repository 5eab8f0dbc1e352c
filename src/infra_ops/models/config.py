"""Configuration from environment variables and CLI arguments."""

from __future__ import annotations
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

# Configuration from environment variables
DRY_RUN = os.environ.get("DRY_RUN", "false").lower() == "true"

# Logging configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Load balancers created by the AWS Load Balancer Controller are named k8s-<ns>-<name>-<hash>
LB_NAME_PATTERN = os.environ.get("LB_NAME_PATTERN", "k8s-")
LB_CLUSTER_TAG = "elbv2.k8s.aws/cluster"

# Wait budgets (seconds)
K8S_CLEANUP_TIMEOUT_SECONDS = int(os.environ.get("K8S_CLEANUP_TIMEOUT_SECONDS", "90"))
LB_DELETION_TIMEOUT_SECONDS = int(os.environ.get("LB_DELETION_TIMEOUT_SECONDS", "60"))
POLL_INITIAL_DELAY_SECONDS = float(os.environ.get("POLL_INITIAL_DELAY_SECONDS", "5"))
POLL_MAX_DELAY_SECONDS = float(os.environ.get("POLL_MAX_DELAY_SECONDS", "30"))

# Fluent Bit deployment
FLUENT_BIT_NAMESPACE = os.environ.get("FLUENT_BIT_NAMESPACE", "kube-system")
FLUENT_BIT_RELEASE = os.environ.get("FLUENT_BIT_RELEASE", "fluent-bit")
FLUENT_BIT_REPO_NAME = "fluent"
FLUENT_BIT_REPO_URL = "https://fluent.github.io/helm-charts"
FLUENT_BIT_CHART = f"{FLUENT_BIT_REPO_NAME}/fluent-bit"
FLUENT_BIT_TIMEOUT_SECONDS = int(os.environ.get("FLUENT_BIT_TIMEOUT_SECONDS", "300"))
FLUENT_BIT_VALUES_TEMPLATE = Path(__file__).resolve().parent.parent / "fluentbit" / "values.yaml"

# External CLI binaries
AWS_CLI_BIN = os.environ.get("AWS_CLI_BIN", "aws")
KUBECTL_BIN = os.environ.get("KUBECTL_BIN", "kubectl")
HELM_BIN = os.environ.get("HELM_BIN", "helm")
TERRAFORM_BIN = os.environ.get("TERRAFORM_BIN", "terraform")

# How long a streamed command (terraform, helm) gets to exit after Ctrl-C before it is terminated
COMMAND_INTERRUPT_GRACE_SECONDS = float(os.environ.get("COMMAND_INTERRUPT_GRACE_SECONDS", "120"))

CONFIRMATION_TOKEN = "destroy"
CLUSTER_NAME_SUFFIX = "-eks-cluster"

_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_REGION_RE = re.compile(r"^[a-z]{2}(-gov|-iso[a-z]*)?-[a-z]+-\d+$")
_ROLE_ARN_RE = re.compile(r"^arn:aws[a-zA-Z-]*:iam::\d{12}:role/[\w+=,.@/-]+$")


class ConfigError(ValueError):
    """Raised when required settings are missing or malformed."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


def _check_region(region: str, problems: list[str]) -> None:
    if not region:
        problems.append("region is required")
    elif not _REGION_RE.match(region):
        problems.append(f"region '{region}' is not a valid AWS region name")


@dataclass
class TeardownConfig:
    """Settings for one environment teardown."""

    environment: str
    region: str
    client_name: str
    cluster_name: str = ""
    terraform_root: Path = Path(".")
    dry_run: bool = DRY_RUN
    kubeconfig: str | None = None
    lb_name_pattern: str = LB_NAME_PATTERN
    cluster_scoped_lbs: bool = False
    k8s_cleanup_timeout: float = K8S_CLEANUP_TIMEOUT_SECONDS
    lb_deletion_timeout: float = LB_DELETION_TIMEOUT_SECONDS
    poll_initial_delay: float = POLL_INITIAL_DELAY_SECONDS
    poll_max_delay: float = POLL_MAX_DELAY_SECONDS

    def __post_init__(self):
        self.terraform_root = Path(self.terraform_root)
        if not self.cluster_name and self.client_name:
            self.cluster_name = f"{self.client_name}{CLUSTER_NAME_SUFFIX}"

    @property
    def environment_dir(self) -> Path:
        """Terraform root module for the environment."""
        return self.terraform_root / "environments" / self.environment

    def validate(self) -> None:
        problems: list[str] = []

        if not self.environment:
            problems.append("environment is required")
        elif not _NAME_RE.match(self.environment):
            problems.append(
                f"environment '{self.environment}' may only contain letters, digits, '-' and '_'"
            )
        _check_region(self.region, problems)
        if not self.client_name:
            problems.append("client name is required")
        if not self.lb_name_pattern:
            problems.append("load balancer name pattern must not be empty")
        for name in ("k8s_cleanup_timeout", "lb_deletion_timeout"):
            if getattr(self, name) < 0:
                problems.append(f"{name} must not be negative")
        if self.poll_initial_delay <= 0 or self.poll_max_delay < self.poll_initial_delay:
            problems.append(
                "poll delays must be positive with max delay >= initial delay"
            )

        if problems:
            raise ConfigError(problems)


@dataclass
class LoggingDeployConfig:
    """Settings for the Fluent Bit Helm release."""

    cluster_name: str
    region: str
    role_arn: str
    namespace: str = FLUENT_BIT_NAMESPACE
    release_name: str = FLUENT_BIT_RELEASE
    repo_name: str = FLUENT_BIT_REPO_NAME
    repo_url: str = FLUENT_BIT_REPO_URL
    chart: str = FLUENT_BIT_CHART
    values_template: Path = field(default=FLUENT_BIT_VALUES_TEMPLATE)
    timeout: int = FLUENT_BIT_TIMEOUT_SECONDS
    kubeconfig: str | None = None

    def __post_init__(self):
        self.values_template = Path(self.values_template)

    @property
    def log_group_prefix(self) -> str:
        return f"/aws/eks/{self.cluster_name}"

    def validate(self) -> None:
        problems: list[str] = []

        if not self.cluster_name:
            problems.append("cluster name is required")
        _check_region(self.region, problems)
        if not self.role_arn:
            problems.append("Fluent Bit role ARN is required")
        elif not _ROLE_ARN_RE.match(self.role_arn):
            problems.append(f"'{self.role_arn}' is not an IAM role ARN")
        if not self.namespace:
            problems.append("namespace is required")
        if self.timeout <= 0:
            problems.append("timeout must be positive")
        if not self.values_template.is_file():
            problems.append(f"values template not found: {self.values_template}")

        if problems:
            raise ConfigError(problems)
