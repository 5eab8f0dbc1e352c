"""Ordered teardown and logging deployment for the Terraform-managed EKS environments."""

__version__ = "0.1.0"
