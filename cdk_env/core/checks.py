"""
Read-only environment checks.

Each check returns a CheckResult; ValidationSession folds results into a
ValidationSummary and prints one classified line per result.
"""

import configparser
import logging
from pathlib import Path
from typing import Optional

from ..models.tool import ToolRequirement
from ..models.validation import CheckResult, ValidationSummary
from ..utils.console import Reporter
from .command_runner import CommandRunner
from .versioning import check_version, extract_version


logger = logging.getLogger(__name__)


class ValidationSession:
    """Pairs a summary with the reporter that prints each recorded result."""

    def __init__(self, reporter: Reporter, summary: Optional[ValidationSummary] = None):
        self.reporter = reporter
        self.summary = summary if summary is not None else ValidationSummary()

    def record(self, result: CheckResult) -> CheckResult:
        self.summary.record(result)
        self.reporter.tagged(result.status.value, result.message, result.hint)
        logger.debug(f"{result.name}: {result.status.value} {result.message}")
        return result


def detect_version(requirement: ToolRequirement, runner: CommandRunner) -> str:
    """Run the tool's version command and extract a version string."""
    result = runner.run(
        [requirement.name, *requirement.version_args],
        merge_stderr=requirement.merge_stderr
    )
    if not result.ok:
        logger.debug(f"{requirement.name} version query exited {result.exit_code}")
        return ""
    return extract_version(requirement.version_parser, result.output)


def check_tool(requirement: ToolRequirement, runner: CommandRunner) -> CheckResult:
    """
    Check presence and minimum version of a tool.

    A missing tool is a FAIL and its version is never queried. A tool older
    than the minimum is a WARN: usable, but not recommended.
    """
    name = requirement.display_name
    minimum = requirement.minimum_version

    if not runner.exists(requirement.name):
        return CheckResult.failed(
            f"tool:{requirement.name}",
            f"{name} is not installed or not in PATH",
            requirement.hint
        )

    version = detect_version(requirement, runner)
    requirement.current_version = version or None

    if not version:
        return CheckResult.warned(
            f"tool:{requirement.name}",
            f"{name} is installed but its version could not be determined "
            f"(minimum v{minimum} required)"
        )

    if check_version(version, minimum):
        return CheckResult.passed(
            f"tool:{requirement.name}",
            f"{name} {version} (minimum v{minimum} required)"
        )
    return CheckResult.warned(
        f"tool:{requirement.name}",
        f"{name} {version} (recommend v{minimum} or higher)",
        requirement.hint
    )


def check_credentials_file(path: Path) -> CheckResult:
    if path.is_file():
        return CheckResult.passed("aws:credentials", f"AWS credentials file exists ({path})")
    return CheckResult.failed(
        "aws:credentials",
        f"AWS credentials file not found ({path})",
        "Run 'cdk-env setup' or 'aws configure'"
    )


def read_config_region(path: Path) -> Optional[str]:
    """Return the first `region` value found in an AWS config file."""
    parser = configparser.ConfigParser()
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError) as e:
        logger.warning(f"Could not parse {path}: {e}")
        return None
    for section in parser.sections():
        region = parser.get(section, "region", fallback="").strip()
        if region:
            return region
    return None


def check_region_configured(path: Path) -> CheckResult:
    region = read_config_region(path)
    if region:
        return CheckResult.passed("aws:region", f"Default region configured: {region}")
    return CheckResult.warned(
        "aws:region",
        f"No default region configured in {path}",
        "aws configure set region us-east-1"
    )


def check_path_contains(directory: str, path_env: str, name: str, label: str = "") -> CheckResult:
    described = f"{label}{directory}"
    # Substring match, as with `echo $PATH | grep -q dir`
    if directory in path_env:
        return CheckResult.passed(name, f"PATH includes {described}")
    return CheckResult.warned(
        name,
        f"PATH does not include {described}",
        "Restart your terminal or run 'source ~/.bashrc'"
    )


def npm_global_bin(runner: CommandRunner, default: str = "/usr/local/bin") -> str:
    """Resolve npm's global bin directory from `npm config get prefix`."""
    result = runner.run(["npm", "config", "get", "prefix"])
    prefix = result.output.strip()
    if not result.ok or not prefix:
        return default
    return str(Path(prefix) / "bin")
