"""
Configuration settings for the CDK environment toolkit.
"""

import re
from typing import List, Optional
from pathlib import Path
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings


PROJECT_ROOT = Path(__file__).resolve().parent.parent
SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class AwsConfig(BaseModel):
    """AWS CLI configuration written by the installer."""
    region: str = Field(default="us-east-1", description="Default region")
    output: str = Field(default="json", description="Default CLI output format")
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".aws",
        description="Directory holding the credentials and config files"
    )
    credentials_csv: Path = Field(
        default=PROJECT_ROOT / "master-root.csv",
        description="CSV seed file with a header and one access-key,secret row"
    )

    @property
    def credentials_file(self) -> Path:
        return self.config_dir / "credentials"

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config"


class ToolsConfig(BaseModel):
    """Minimum versions for the required toolchain."""
    node: str = Field(default="18.0.0", description="Minimum Node.js version")
    npm: str = Field(default="8.0.0", description="Minimum npm version")
    aws: str = Field(default="2.0.0", description="Minimum AWS CLI version")
    tsc: str = Field(default="4.0.0", description="Minimum TypeScript version")
    cdk: str = Field(default="2.0.0", description="Minimum AWS CDK version")

    @validator('node', 'npm', 'aws', 'tsc', 'cdk')
    def validate_semver(cls, v):
        if not SEMVER_PATTERN.match(v):
            raise ValueError(f"Minimum versions must be MAJOR.MINOR.PATCH, got {v!r}")
        return v


class ProfileConfig(BaseModel):
    """Shell startup files that receive PATH exports."""
    files: List[Path] = Field(
        default_factory=lambda: [Path.home() / name for name in (".bashrc", ".zshrc", ".profile")]
    )


class InstallerConfig(BaseModel):
    """Installer behaviour."""
    aws_cli_url: str = Field(
        default="https://awscli.amazonaws.com/awscli-exe-linux-x86_64.zip",
        description="AWS CLI v2 bundle"
    )
    aws_bin_dir: Path = Field(default=Path("/usr/local/bin"))
    aws_install_dir: Path = Field(default=Path("/usr/local/aws-cli"))
    use_sudo: bool = Field(default=True, description="Run the AWS CLI installer through sudo")
    default_npm_bin: Path = Field(default=Path("/usr/local/bin"))
    command_timeout: int = Field(default=600, description="Timeout for install commands in seconds")
    configure_credentials: bool = Field(default=True)
    run_validation: bool = Field(default=True)


class BootstrapConfig(BaseModel):
    """CDK bootstrap settings."""
    toolkit_stack_name: str = Field(default="CDKToolkit")
    verbose: bool = Field(default=True, description="Pass --verbose to cdk bootstrap")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="WARNING", description="Console logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format"
    )
    file_path: Optional[Path] = Field(default=None, description="Log file, disabled when unset")
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")


class Settings(BaseSettings):
    """Main application settings."""
    aws: AwsConfig = Field(default_factory=AwsConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    installer: InstallerConfig = Field(default_factory=InstallerConfig)
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        env_prefix = "CDK_ENV_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"  # Ignore extra fields from environment
