"""
The toolchain the installer provisions and the validator checks.
"""

from typing import Dict

from config.settings import ToolsConfig
from ..models.tool import ToolRequirement


def build_requirements(tools: ToolsConfig) -> Dict[str, ToolRequirement]:
    """Create tool requirements keyed by executable name."""
    return {
        "node": ToolRequirement(
            name="node",
            display_name="Node.js",
            minimum_version=tools.node,
            version_parser="strip_v",
            hint="Install Node.js from https://nodejs.org/"
        ),
        "npm": ToolRequirement(
            name="npm",
            display_name="npm",
            minimum_version=tools.npm,
            version_parser="plain",
            hint="npm ships with Node.js; reinstall Node.js from https://nodejs.org/"
        ),
        "aws": ToolRequirement(
            name="aws",
            display_name="AWS CLI",
            minimum_version=tools.aws,
            version_parser="slash_field",
            merge_stderr=True,
            hint="Run 'cdk-env setup' to install AWS CLI v2"
        ),
        "tsc": ToolRequirement(
            name="tsc",
            display_name="TypeScript",
            minimum_version=tools.tsc,
            version_parser="second_field",
            hint="npm install -g typescript"
        ),
        "cdk": ToolRequirement(
            name="cdk",
            display_name="AWS CDK",
            minimum_version=tools.cdk,
            version_parser="first_field",
            hint="npm install -g aws-cdk"
        ),
    }
