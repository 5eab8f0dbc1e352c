"""Pytest configuration and shared fixtures for infra-ops tests."""

from __future__ import annotations
import json
import subprocess
import pytest
from typing import Any
from unittest.mock import Mock, patch
from botocore.exceptions import ClientError

from infra_ops.models import TeardownConfig


class LoadBalancerBuilder:
    """Builder for ELBv2 DescribeLoadBalancers entries and their tags."""

    def __init__(self):
        self._lb = {
            "LoadBalancerArn": "arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/k8s-default-web-abc123/1",
            "LoadBalancerName": "k8s-default-web-abc123",
            "Type": "application",
        }
        self._tags: list[dict[str, str]] = []

    def with_name(self, name: str) -> LoadBalancerBuilder:
        """Set name and derive a matching ARN."""
        self._lb["LoadBalancerName"] = name
        self._lb["LoadBalancerArn"] = (
            f"arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/{name}/1"
        )
        return self

    def with_cluster_tag(self, cluster_name: str) -> LoadBalancerBuilder:
        """Add the tag the AWS Load Balancer Controller puts on its load balancers."""
        self._tags.append({"Key": "elbv2.k8s.aws/cluster", "Value": cluster_name})
        return self

    def build(self) -> dict[str, Any]:
        return dict(self._lb)

    def tag_description(self) -> dict[str, Any]:
        return {"ResourceArn": self._lb["LoadBalancerArn"], "Tags": list(self._tags)}


def make_client_error(code: str, operation: str = "Operation") -> ClientError:
    """ClientError with the given AWS error code."""
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def completed(stdout: str = "", returncode: int = 0) -> subprocess.CompletedProcess:
    """CompletedProcess as returned by run_command."""
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


def kubectl_items(*names: str) -> str:
    """kubectl -o json output for namespace/name pairs."""
    items = []
    for full_name in names:
        namespace, name = full_name.split("/")
        items.append({"metadata": {"namespace": namespace, "name": name}})
    return json.dumps({"items": items})


# Shared fixtures


@pytest.fixture
def lb_builder():
    """Fixture that returns a new LoadBalancerBuilder."""
    return LoadBalancerBuilder()


@pytest.fixture
def mock_elbv2_client():
    """Factory for mock ELBv2 clients with a single describe page.

    Example:
        elbv2 = mock_elbv2_client(load_balancers=[lb], tag_descriptions=[...])
    """

    def _create_mock(load_balancers=None, tag_descriptions=None):
        mock = Mock()
        mock.get_paginator.return_value.paginate.return_value = [
            {"LoadBalancers": load_balancers or []}
        ]
        mock.describe_tags.return_value = {"TagDescriptions": tag_descriptions or []}
        return mock

    return _create_mock


@pytest.fixture
def environment_root(tmp_path):
    """Terraform root with environments/stage/terraform.tfvars."""
    env_dir = tmp_path / "environments" / "stage"
    env_dir.mkdir(parents=True)
    (env_dir / "terraform.tfvars").write_text('client_name = "demo"\n')
    return tmp_path


@pytest.fixture
def teardown_config(environment_root):
    """Valid live-mode TeardownConfig for stage/us-east-1/demo."""
    return TeardownConfig(
        environment="stage",
        region="us-east-1",
        client_name="demo",
        terraform_root=environment_root,
        dry_run=False,
        poll_initial_delay=1,
        poll_max_delay=1,
    )


@pytest.fixture
def client_error():
    """Factory for botocore ClientErrors by error code."""
    return make_client_error


@pytest.fixture
def completed_process():
    """Factory for subprocess results returned by run_command."""
    return completed


@pytest.fixture
def kubectl_json():
    """Factory for kubectl -o json list output."""
    return kubectl_items


@pytest.fixture
def lb_factory():
    """Factory for independent LoadBalancerBuilders."""
    return LoadBalancerBuilder


ORCHESTRATOR_COLLABORATORS = [
    "connect_to_cluster",
    "delete_ingresses",
    "delete_load_balancer_services",
    "wait_for_load_balancers_gone",
    "find_controller_load_balancers",
    "delete_load_balancers",
    "delete_controller_security_groups",
    "terraform_destroy",
]


@pytest.fixture
def collaborators():
    """Patch every collaborator of the orchestrator onto one call recorder."""
    recorder = Mock()
    recorder.connect_to_cluster.return_value = True
    recorder.delete_ingresses.return_value = True
    recorder.delete_load_balancer_services.return_value = True
    recorder.wait_for_load_balancers_gone.return_value = True
    recorder.find_controller_load_balancers.return_value = []
    recorder.delete_load_balancers.return_value = []
    recorder.delete_controller_security_groups.return_value = ([], [])
    recorder.terraform_destroy.return_value = None

    patchers = [
        patch(f"infra_ops.orchestrator.{name}", getattr(recorder, name))
        for name in ORCHESTRATOR_COLLABORATORS
    ]
    for p in patchers:
        p.start()
    yield recorder
    for p in patchers:
        p.stop()
