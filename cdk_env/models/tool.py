"""
Tool requirement model.
"""

import re
from typing import Optional, List
from pydantic import BaseModel, Field, validator


SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


class ToolRequirement(BaseModel):
    """A command-line tool the CDK toolchain depends on."""
    name: str = Field(..., description="Executable looked up on PATH")
    display_name: str = Field(..., description="Human readable tool name")
    version_args: List[str] = Field(default_factory=lambda: ["--version"])
    minimum_version: str = Field(..., description="Minimum 3-part semantic version")
    version_parser: str = Field(..., description="Key into the version extractor registry")
    merge_stderr: bool = Field(default=False, description="Tool prints its version on stderr")
    current_version: Optional[str] = Field(None, description="Version detected on this host")
    hint: Optional[str] = Field(None, description="Remediation when the tool is missing")

    @validator('minimum_version')
    def validate_semver(cls, v):
        if not SEMVER_PATTERN.match(v):
            raise ValueError(f"minimum_version must be MAJOR.MINOR.PATCH, got {v!r}")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "name": "cdk",
                "display_name": "AWS CDK",
                "version_args": ["--version"],
                "minimum_version": "2.0.0",
                "version_parser": "first_field",
                "hint": "npm install -g aws-cdk"
            }
        }
