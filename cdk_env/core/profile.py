"""
Shell profile PATH management.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, MutableMapping, Optional


logger = logging.getLogger(__name__)


def export_line(directory: str) -> str:
    return f'export PATH="{directory}:$PATH"'


def update_path(directory: str, profile_files: Iterable[Path]) -> List[Path]:
    """
    Append a PATH export for `directory` to each existing profile file.

    A file is left alone when the directory string already occurs anywhere in
    it. This is a substring test, so `/opt/tool` counts as present in a file
    that only mentions `/opt/tool/bin`. Files that do not exist are skipped,
    never created.

    Args:
        directory: Directory to put on PATH
        profile_files: Candidate shell startup files

    Returns:
        Files that were modified
    """
    modified: List[Path] = []
    for profile_file in profile_files:
        profile_file = Path(profile_file)
        if not profile_file.is_file():
            continue

        content = profile_file.read_text(encoding="utf-8", errors="replace")
        if directory in content:
            logger.info(f"{directory} already exists in {profile_file}")
            continue

        prefix = "" if not content or content.endswith("\n") else "\n"
        with open(profile_file, "a", encoding="utf-8") as f:
            f.write(f"{prefix}{export_line(directory)}\n")
        logger.info(f"Added {directory} to {profile_file}")
        modified.append(profile_file)

    return modified


def extend_session_path(directories: Iterable[str],
                        environ: Optional[MutableMapping[str, str]] = None) -> str:
    """Prepend directories to PATH of the running process, skipping ones already there."""
    environ = environ if environ is not None else os.environ
    current = environ.get("PATH", "")
    entries = current.split(os.pathsep) if current else []
    for directory in reversed(list(directories)):
        if directory not in entries:
            entries.insert(0, directory)
    environ["PATH"] = os.pathsep.join(entries)
    return environ["PATH"]
