"""Security groups created by the AWS Load Balancer Controller.

The controller creates k8s-traffic-* and k8s-<namespace>-* groups in the
cluster VPC. Left behind, they make the VPC deletion fail with
DependencyViolation.
"""

from __future__ import annotations
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..models.config import LB_CLUSTER_TAG
from ..utils import error_code, get_logger

logger = get_logger()


def find_controller_security_groups(cluster_name: str, region: str) -> list[dict]:
    """Return security groups tagged as managed by the controller for this cluster."""
    try:
        ec2 = boto3.client("ec2", region_name=region)
        paginator = ec2.get_paginator("describe_security_groups")
        groups = []
        for page in paginator.paginate(
            Filters=[{"Name": f"tag:{LB_CLUSTER_TAG}", "Values": [cluster_name]}]
        ):
            groups.extend(page.get("SecurityGroups", []))
        return groups
    except (ClientError, BotoCoreError) as e:
        logger.warning(f"Cannot list controller security groups in {region}: {e}")
        return []


def delete_controller_security_groups(
    cluster_name: str, region: str, dry_run: bool = False
) -> tuple[list[str], list[str]]:
    """
    Delete controller-owned security groups for the cluster.

    Returns:
        (deleted group IDs, group IDs that still have dependencies or failed)
    """
    groups = find_controller_security_groups(cluster_name, region)
    if not groups:
        return [], []

    ec2 = boto3.client("ec2", region_name=region)
    deleted: list[str] = []
    remaining: list[str] = []

    for sg in groups:
        sg_id = sg["GroupId"]
        if dry_run:
            logger.info(
                f"[DRY-RUN] Would delete security group {sg_id} ({sg.get('GroupName', '')})"
            )
            deleted.append(sg_id)
            continue

        try:
            ec2.delete_security_group(GroupId=sg_id)
            logger.info(f"Deleted security group {sg_id} ({sg.get('GroupName', '')})")
            deleted.append(sg_id)
        except ClientError as e:
            code = error_code(e)
            if code == "InvalidGroup.NotFound":
                deleted.append(sg_id)
            elif code == "DependencyViolation":
                logger.warning(f"Security group {sg_id} still has dependencies")
                remaining.append(sg_id)
            else:
                logger.warning(f"Could not delete security group {sg_id}: {e}")
                remaining.append(sg_id)
        except BotoCoreError as e:
            logger.warning(f"Could not delete security group {sg_id}: {e}")
            remaining.append(sg_id)

    return deleted, remaining
