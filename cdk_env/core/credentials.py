"""
AWS credential sources and the writer for ~/.aws/credentials and ~/.aws/config.

Sources are tried in order: the CSV seed file first, then interactive
prompts. A source either returns a CredentialRecord or raises
CredentialSourceError.
"""

import csv
import getpass
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

from config.settings import AwsConfig
from ..models.aws import CredentialRecord
from ..utils.console import Reporter
from .exceptions import CredentialSourceError


CREDENTIALS_MODE = 0o600
CONFIG_MODE = 0o644


class CredentialSource:
    """Produces an access key id and secret, or raises CredentialSourceError."""

    description = "credential source"

    def load(self) -> Tuple[str, str]:
        raise NotImplementedError


class CsvCredentialSource(CredentialSource):
    """Reads the first data row of a `key,secret` CSV with a header line."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.description = f"CSV file {self.path}"

    def load(self) -> Tuple[str, str]:
        if not self.path.is_file():
            raise CredentialSourceError(f"CSV file not found: {self.path}")

        with open(self.path, newline="", encoding="utf-8-sig") as f:
            rows = csv.reader(f)
            next(rows, None)  # header
            row = next(rows, None)

        if not row or not any(field.strip() for field in row):
            raise CredentialSourceError(f"No credentials found in CSV file: {self.path}")

        access_key_id = row[0].strip()
        secret_access_key = row[1].strip() if len(row) > 1 else ""
        if not access_key_id or not secret_access_key:
            raise CredentialSourceError(f"Invalid credentials format in CSV file: {self.path}")

        return access_key_id, secret_access_key


class InteractiveCredentialSource(CredentialSource):
    """Prompts until both values are non-empty. The secret is read without echo."""

    description = "interactive input"

    def __init__(self,
                 prompt: Callable[[str], str] = input,
                 secret_prompt: Callable[[str], str] = getpass.getpass,
                 reporter: Optional[Reporter] = None):
        self.prompt = prompt
        self.secret_prompt = secret_prompt
        self.reporter = reporter or Reporter()

    def _ask(self, ask: Callable[[str], str], label: str) -> str:
        while True:
            try:
                value = ask(f"Enter {label}: ").strip()
            except EOFError:
                raise CredentialSourceError(f"No input available for {label}")
            if value:
                return value
            self.reporter.warning(f"{label} cannot be empty. Please try again.")

    def load(self) -> Tuple[str, str]:
        access_key_id = self._ask(self.prompt, "AWS Access Key ID")
        secret_access_key = self._ask(self.secret_prompt, "AWS Secret Access Key")
        return access_key_id, secret_access_key


def resolve_credentials(sources: Iterable[CredentialSource],
                        reporter: Optional[Reporter] = None) -> Tuple[str, str]:
    """
    Return the first credential pair any source produces.

    Raises:
        CredentialSourceError: if every source fails
    """
    logger = logging.getLogger(__name__)
    reporter = reporter or Reporter()
    errors = []

    for source in sources:
        try:
            access_key_id, secret_access_key = source.load()
        except CredentialSourceError as e:
            logger.info(f"{source.description} unavailable: {e}")
            reporter.warning(f"Could not read credentials from {source.description}: {e.message}")
            errors.append(e.message)
            continue
        reporter.success(f"Read AWS credentials from {source.description}")
        return access_key_id, secret_access_key

    raise CredentialSourceError(
        "No credential source produced usable credentials: " + "; ".join(errors),
        hint="Provide master-root.csv next to the installer or enter keys interactively"
    )


def write_aws_files(record: CredentialRecord, aws_dir: Path) -> Tuple[Path, Path]:
    """
    Write the default profile to `aws_dir/credentials` and `aws_dir/config`.

    The two files are written one after the other; an interruption in between
    leaves only the credentials file updated.

    Returns:
        Paths of the credentials and config files
    """
    aws_dir = Path(aws_dir)
    aws_dir.mkdir(parents=True, exist_ok=True)

    credentials_file = aws_dir / "credentials"
    credentials_file.write_text(
        "[default]\n"
        f"aws_access_key_id = {record.access_key_id}\n"
        f"aws_secret_access_key = {record.secret_access_key.get_secret_value()}\n",
        encoding="utf-8"
    )
    credentials_file.chmod(CREDENTIALS_MODE)

    config_file = aws_dir / "config"
    config_file.write_text(
        "[default]\n"
        f"region = {record.region}\n"
        f"output = {record.output}\n",
        encoding="utf-8"
    )
    config_file.chmod(CONFIG_MODE)

    return credentials_file, config_file


def configure_credentials(aws_settings: AwsConfig,
                          sources: Iterable[CredentialSource],
                          reporter: Optional[Reporter] = None) -> CredentialRecord:
    """
    Resolve credentials, combine them with the default region and output
    format, and write the AWS files.
    """
    logger = logging.getLogger(__name__)
    reporter = reporter or Reporter()

    access_key_id, secret_access_key = resolve_credentials(sources, reporter)
    record = CredentialRecord(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        region=aws_settings.region,
        output=aws_settings.output
    )
    reporter.detail(f"  Access Key ID: {record.masked_key}")

    credentials_file, config_file = write_aws_files(record, aws_settings.config_dir)
    logger.info(f"Wrote {credentials_file} and {config_file}")

    reporter.success("AWS profile configured successfully!")
    reporter.detail(f"  Region: {record.region}")
    reporter.detail(f"  Output format: {record.output}")
    return record


def default_sources(aws_settings: AwsConfig, reporter: Optional[Reporter] = None):
    """CSV seed file first, interactive prompts second."""
    return [
        CsvCredentialSource(aws_settings.credentials_csv),
        InteractiveCredentialSource(reporter=reporter),
    ]
