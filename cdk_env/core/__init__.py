"""
Core modules for the CDK environment toolkit.
"""

from .command_runner import CommandRunner, CommandResult, SubprocessRunner
from .versioning import check_version
from .validator import EnvironmentValidator
from .installer import EnvironmentInstaller
from .bootstrap import CdkBootstrapper
from .invoker import LambdaInvoker
from .stacks import StackCommands

__all__ = [
    "CommandRunner",
    "CommandResult",
    "SubprocessRunner",
    "check_version",
    "EnvironmentValidator",
    "EnvironmentInstaller",
    "CdkBootstrapper",
    "LambdaInvoker",
    "StackCommands"
]
