"""ALB/NLBs left behind by the AWS Load Balancer Controller."""

from __future__ import annotations
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..models.config import LB_NAME_PATTERN
from ..utils import (
    convert_tags_to_dict,
    error_code,
    extract_cluster_name,
    get_logger,
    wait_until,
)

logger = get_logger()

# DescribeTags accepts at most 20 ARNs per call
_TAGS_BATCH_SIZE = 20


def _owning_clusters(elbv2, arns: list[str]) -> dict[str, str | None]:
    owners: dict[str, str | None] = {}
    for i in range(0, len(arns), _TAGS_BATCH_SIZE):
        response = elbv2.describe_tags(ResourceArns=arns[i : i + _TAGS_BATCH_SIZE])
        for description in response["TagDescriptions"]:
            tags_dict = convert_tags_to_dict(description.get("Tags", []))
            owners[description["ResourceArn"]] = extract_cluster_name(tags_dict)
    return owners


def find_controller_load_balancers(
    region: str,
    name_pattern: str = LB_NAME_PATTERN,
    cluster_name: str | None = None,
) -> list[dict[str, str]]:
    """
    List ELBv2 load balancers whose name contains name_pattern.

    When cluster_name is given, load balancers tagged as owned by a different
    cluster are left out. Untagged matches are kept.

    Returns:
        List of {"LoadBalancerArn", "LoadBalancerName"}; empty if the API
        cannot be read (treated as nothing left to clean up)
    """
    try:
        elbv2 = boto3.client("elbv2", region_name=region)
        paginator = elbv2.get_paginator("describe_load_balancers")

        matches = []
        for page in paginator.paginate():
            for lb in page.get("LoadBalancers", []):
                if name_pattern in lb["LoadBalancerName"]:
                    matches.append(
                        {
                            "LoadBalancerArn": lb["LoadBalancerArn"],
                            "LoadBalancerName": lb["LoadBalancerName"],
                        }
                    )

        if cluster_name and matches:
            owners = _owning_clusters(elbv2, [lb["LoadBalancerArn"] for lb in matches])
            scoped = []
            for lb in matches:
                owner = owners.get(lb["LoadBalancerArn"])
                if owner and owner != cluster_name:
                    logger.info(
                        f"Skipping {lb['LoadBalancerName']}: owned by cluster {owner}"
                    )
                    continue
                scoped.append(lb)
            matches = scoped

        return matches

    except (ClientError, BotoCoreError) as e:
        logger.warning(f"Cannot list load balancers in {region}: {e}")
        return []


def delete_load_balancers(
    load_balancers: list[dict[str, str]], region: str, dry_run: bool = False
) -> list[str]:
    """
    Force-delete the given load balancers.

    Returns:
        Names of load balancers deleted (or that would be deleted in dry-run)
    """
    elbv2 = boto3.client("elbv2", region_name=region)
    deleted = []

    for lb in load_balancers:
        name = lb["LoadBalancerName"]
        if dry_run:
            logger.info(f"[DRY-RUN] Would DELETE load_balancer {name} in {region}")
            deleted.append(name)
            continue

        try:
            elbv2.delete_load_balancer(LoadBalancerArn=lb["LoadBalancerArn"])
            logger.info(f"DELETE load_balancer {name} in {region}")
            deleted.append(name)
        except ClientError as e:
            if error_code(e) == "LoadBalancerNotFound":
                logger.info(f"Load balancer {name} already deleted")
                deleted.append(name)
            else:
                logger.warning(f"Could not delete load balancer {name}: {e}")
        except BotoCoreError as e:
            logger.warning(f"Could not delete load balancer {name}: {e}")

    return deleted


def wait_for_load_balancers_gone(
    region: str,
    timeout: float,
    name_pattern: str = LB_NAME_PATTERN,
    cluster_name: str | None = None,
    initial_delay: float = 5.0,
    max_delay: float = 30.0,
) -> bool:
    """Poll until no matching load balancers remain or timeout elapses."""
    return wait_until(
        lambda: not find_controller_load_balancers(region, name_pattern, cluster_name),
        timeout=timeout,
        description=f"Waiting for '{name_pattern}*' load balancers in {region} to disappear",
        initial_delay=initial_delay,
        max_delay=max_delay,
    )
