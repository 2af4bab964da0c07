"""
Error types raised by the installer, bootstrapper and helpers.
"""

from typing import Optional


class CdkEnvError(Exception):
    """Base error carrying a one-line remediation hint."""

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class MissingToolError(CdkEnvError):
    """A required executable is not on PATH."""


class InstallStepError(CdkEnvError):
    """An external command in an install sequence exited non-zero."""

    def __init__(self, message: str, output: str = "", hint: Optional[str] = None):
        super().__init__(message, hint)
        self.output = output


class PostInstallVerificationError(CdkEnvError):
    """A tool is still missing after its install step reported success."""


class CredentialSourceError(CdkEnvError):
    """A credential source could not produce a usable record."""


class CredentialsError(CdkEnvError):
    """AWS rejected the configured credentials."""


class InvokeError(CdkEnvError):
    """A Lambda function could not be selected or invoked."""
