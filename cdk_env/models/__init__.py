"""
Data models for the CDK environment toolkit.
"""

from .tool import ToolRequirement
from .validation import CheckStatus, CheckResult, ValidationSummary
from .aws import CredentialRecord, CallerIdentity, BootstrapResult, LambdaFunction

__all__ = [
    "ToolRequirement",
    "CheckStatus",
    "CheckResult",
    "ValidationSummary",
    "CredentialRecord",
    "CallerIdentity",
    "BootstrapResult",
    "LambdaFunction"
]
