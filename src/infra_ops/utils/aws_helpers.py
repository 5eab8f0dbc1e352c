"""AWS helper functions."""

from __future__ import annotations
from botocore.exceptions import ClientError


def convert_tags_to_dict(tags: list[dict[str, str]] | None) -> dict[str, str]:
    """Convert AWS tag list to dictionary."""
    return {tag["Key"]: tag["Value"] for tag in tags} if tags else {}


def extract_cluster_name(tags_dict: dict[str, str]) -> str | None:
    """Extract owning cluster name from load balancer controller or kubernetes tags."""
    if "elbv2.k8s.aws/cluster" in tags_dict:
        return tags_dict["elbv2.k8s.aws/cluster"]
    for key in tags_dict.keys():
        if key.startswith("kubernetes.io/cluster/"):
            return key.split("/")[-1]
    return tags_dict.get("aws:eks:cluster-name")


def error_code(error: ClientError) -> str:
    """Return the AWS error code of a ClientError."""
    return error.response.get("Error", {}).get("Code", "")
