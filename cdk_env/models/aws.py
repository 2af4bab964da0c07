"""
AWS-side models: credentials, caller identity, bootstrap state and Lambda functions.
"""

from typing import Optional
from pydantic import BaseModel, Field, SecretStr, validator


class CredentialRecord(BaseModel):
    """Credentials and defaults written to ~/.aws."""
    access_key_id: str = Field(..., description="AWS access key id")
    secret_access_key: SecretStr = Field(..., description="AWS secret access key")
    region: str = Field(default="us-east-1", description="Default region")
    output: str = Field(default="json", description="Default CLI output format")

    @validator('access_key_id')
    def validate_access_key(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("access_key_id cannot be empty")
        return v

    @validator('secret_access_key')
    def validate_secret(cls, v):
        if not v.get_secret_value().strip():
            raise ValueError("secret_access_key cannot be empty")
        return SecretStr(v.get_secret_value().strip())

    @property
    def masked_key(self) -> str:
        return f"{self.access_key_id[:10]}..."


class CallerIdentity(BaseModel):
    """Output of `aws sts get-caller-identity`."""
    account: str = Field(..., alias="Account")
    arn: str = Field(..., alias="Arn")
    user_id: Optional[str] = Field(None, alias="UserId")

    class Config:
        populate_by_name = True


class BootstrapResult(BaseModel):
    """State of the CDK toolkit stack after a bootstrap run."""
    account: str
    region: str
    bootstrapped: bool = Field(..., description="Toolkit stack exists after the run")
    performed: bool = Field(..., description="cdk bootstrap was executed in this run")
    bootstrap_version: Optional[str] = None
    stack_status: Optional[str] = None


class LambdaFunction(BaseModel):
    """A deployed Lambda function as listed by the AWS CLI."""
    name: str = Field(..., alias="Name")
    runtime: Optional[str] = Field(None, alias="Runtime")
    handler: Optional[str] = Field(None, alias="Handler")

    class Config:
        populate_by_name = True
