"""
Version comparison and tool-specific version extraction.
"""

import logging
from typing import Callable, Dict

from packaging.version import InvalidVersion, Version


logger = logging.getLogger(__name__)


def check_version(current: str, minimum: str) -> bool:
    """
    Return True when `current` meets or exceeds `minimum`.

    Versions are ordered numerically per dot segment, so "10.0.0" sorts after
    "9.0.0". If either string is not a parseable version, a plain string
    comparison is used instead. That fallback is less reliable: it misorders
    multi-digit segments ("10.0.0" < "9.0.0" as strings). Semver pre-release
    tags that are not PEP 440, such as "1.2.3-next.0", also take this path.

    Args:
        current: Detected version
        minimum: Required minimum version

    Returns:
        Whether the requirement is satisfied
    """
    try:
        return Version(current) >= Version(minimum)
    except InvalidVersion:
        logger.warning(
            f"Cannot parse {current!r} or {minimum!r} as a version; "
            f"falling back to string comparison (less reliable)"
        )
        return current >= minimum


def _first_line(output: str) -> str:
    lines = output.strip().splitlines()
    return lines[0].strip() if lines else ""


def _field(line: str, index: int) -> str:
    parts = line.split()
    return parts[index] if len(parts) > index else ""


def parse_strip_v(output: str) -> str:
    """`node --version` prints `v18.17.0`."""
    line = _first_line(output)
    return line[1:] if line.startswith("v") else line


def parse_plain(output: str) -> str:
    """`npm --version` prints the bare version."""
    return _first_line(output)


def parse_slash_field(output: str) -> str:
    """`aws --version` prints `aws-cli/2.13.0 Python/3.11.4 ...`."""
    first = _field(_first_line(output), 0)
    if "/" not in first:
        return ""
    return first.split("/", 1)[1]


def parse_second_field(output: str) -> str:
    """`tsc --version` prints `Version 5.1.6`."""
    return _field(_first_line(output), 1)


def parse_first_field(output: str) -> str:
    """`cdk --version` prints `2.100.0 (build e1b5c77)`."""
    return _field(_first_line(output), 0)


VERSION_PARSERS: Dict[str, Callable[[str], str]] = {
    "strip_v": parse_strip_v,
    "plain": parse_plain,
    "slash_field": parse_slash_field,
    "second_field": parse_second_field,
    "first_field": parse_first_field,
}


def extract_version(parser: str, output: str) -> str:
    """Run the named extractor over a tool's version output."""
    try:
        func = VERSION_PARSERS[parser]
    except KeyError:
        raise ValueError(f"Unknown version parser: {parser}")
    return func(output)
