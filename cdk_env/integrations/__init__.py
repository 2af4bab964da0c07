"""
Integrations with the external CLIs the toolkit drives.
"""

from .aws_cli import AwsCli
from .cdk_cli import CdkCli

__all__ = ["AwsCli", "CdkCli"]
