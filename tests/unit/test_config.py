"""Unit tests for configuration validation."""

from __future__ import annotations
import pytest
from pathlib import Path

from infra_ops.models import ConfigError, LoggingDeployConfig, TeardownConfig
from infra_ops.models.config import FLUENT_BIT_VALUES_TEMPLATE


class TestTeardownConfig:
    """Test teardown settings derivation and validation."""

    def test_cluster_name_derived_from_client_name(self):
        """
        GIVEN a client name without an explicit cluster name
        WHEN TeardownConfig is created
        THEN the cluster name should be <client>-eks-cluster
        """
        config = TeardownConfig("stage", "us-east-1", "stage-test-xxx")

        assert config.cluster_name == "stage-test-xxx-eks-cluster"

    def test_explicit_cluster_name_wins(self):
        config = TeardownConfig("stage", "us-east-1", "demo", cluster_name="other")

        assert config.cluster_name == "other"

    def test_environment_dir_under_environments(self, tmp_path):
        config = TeardownConfig("prod", "eu-west-1", "demo", terraform_root=tmp_path)

        assert config.environment_dir == tmp_path / "environments" / "prod"

    def test_default_wait_budgets(self):
        """
        GIVEN no wait overrides
        WHEN TeardownConfig is created
        THEN controller wait is 90s and load balancer deletion wait is 60s
        """
        config = TeardownConfig("stage", "us-east-1", "demo")

        assert config.k8s_cleanup_timeout == 90
        assert config.lb_deletion_timeout == 60
        assert config.lb_name_pattern == "k8s-"

    def test_valid_config_passes(self):
        TeardownConfig("stage", "us-east-1", "demo").validate()

    @pytest.mark.parametrize(
        "environment,region,client_name",
        [
            ("", "us-east-1", "demo"),
            ("stage", "", "demo"),
            ("stage", "us-east-1", ""),
        ],
    )
    def test_missing_required_fields_rejected(self, environment, region, client_name):
        """
        GIVEN a required field left empty
        WHEN validate is called
        THEN ConfigError should be raised
        """
        with pytest.raises(ConfigError):
            TeardownConfig(environment, region, client_name).validate()

    def test_environment_cannot_escape_environments_dir(self):
        with pytest.raises(ConfigError) as exc_info:
            TeardownConfig("../prod", "us-east-1", "demo").validate()

        assert "environment" in str(exc_info.value)

    def test_invalid_region_rejected(self):
        with pytest.raises(ConfigError) as exc_info:
            TeardownConfig("stage", "useast1", "demo").validate()

        assert "useast1" in str(exc_info.value)

    def test_all_problems_reported_together(self):
        with pytest.raises(ConfigError) as exc_info:
            TeardownConfig("", "", "", k8s_cleanup_timeout=-1).validate()

        assert len(exc_info.value.problems) == 4

    def test_poll_delays_must_be_ordered(self):
        with pytest.raises(ConfigError):
            TeardownConfig(
                "stage", "us-east-1", "demo", poll_initial_delay=10, poll_max_delay=5
            ).validate()


class TestLoggingDeployConfig:
    """Test Fluent Bit deployment settings."""

    ROLE_ARN = "arn:aws:iam::508153278741:role/stage-beatly-fluent-bit-role"

    def test_packaged_values_template_exists(self):
        assert FLUENT_BIT_VALUES_TEMPLATE.is_file()

    def test_defaults(self):
        config = LoggingDeployConfig("demo-eks-cluster", "us-east-1", self.ROLE_ARN)

        assert config.namespace == "kube-system"
        assert config.release_name == "fluent-bit"
        assert config.chart == "fluent/fluent-bit"
        assert config.timeout == 300
        assert config.log_group_prefix == "/aws/eks/demo-eks-cluster"
        config.validate()

    def test_rejects_non_role_arn(self):
        """
        GIVEN an ARN that is not an IAM role
        WHEN validate is called
        THEN ConfigError should be raised
        """
        config = LoggingDeployConfig(
            "demo", "us-east-1", "arn:aws:iam::508153278741:user/someone"
        )

        with pytest.raises(ConfigError):
            config.validate()

    def test_rejects_missing_values_template(self, tmp_path):
        config = LoggingDeployConfig(
            "demo",
            "us-east-1",
            self.ROLE_ARN,
            values_template=tmp_path / "missing.yaml",
        )

        with pytest.raises(ConfigError) as exc_info:
            config.validate()

        assert "values template not found" in str(exc_info.value)

    def test_values_template_accepts_string_path(self, tmp_path):
        template = tmp_path / "values.yaml"
        template.write_text("a: b\n")

        config = LoggingDeployConfig(
            "demo", "us-east-1", self.ROLE_ARN, values_template=str(template)
        )

        assert isinstance(config.values_template, Path)
        config.validate()
