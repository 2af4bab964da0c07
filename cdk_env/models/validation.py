"""
Check result and validation summary models.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class CheckStatus(str, Enum):
    """Classification of a single check, also used as the overall verdict."""
    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


class CheckResult(BaseModel):
    """Outcome of one validation check."""
    name: str = Field(..., description="Check identifier")
    status: CheckStatus = Field(..., description="Classification")
    message: str = Field(..., description="One-line description of the outcome")
    hint: Optional[str] = Field(None, description="Actionable remediation")

    @classmethod
    def passed(cls, name: str, message: str) -> "CheckResult":
        return cls(name=name, status=CheckStatus.PASS, message=message)

    @classmethod
    def warned(cls, name: str, message: str, hint: Optional[str] = None) -> "CheckResult":
        return cls(name=name, status=CheckStatus.WARN, message=message, hint=hint)

    @classmethod
    def failed(cls, name: str, message: str, hint: Optional[str] = None) -> "CheckResult":
        return cls(name=name, status=CheckStatus.FAIL, message=message, hint=hint)


class ValidationSummary(BaseModel):
    """
    Counters for one validation run.

    Counts only ever increase. A summary is created per run and passed
    explicitly to whatever records results into it.
    """
    passed: int = 0
    warned: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.warned + self.failed

    def record(self, result: CheckResult) -> CheckResult:
        """Fold a result into the counters."""
        if result.status == CheckStatus.PASS:
            self.passed += 1
        elif result.status == CheckStatus.WARN:
            self.warned += 1
        else:
            self.failed += 1
        return result

    def merge(self, other: "ValidationSummary") -> "ValidationSummary":
        """Add another summary's counts into this one."""
        self.passed += other.passed
        self.warned += other.warned
        self.failed += other.failed
        return self

    @property
    def verdict(self) -> CheckStatus:
        if self.failed > 0:
            return CheckStatus.FAIL
        if self.warned > 0:
            return CheckStatus.WARN
        return CheckStatus.PASS

    @property
    def exit_code(self) -> int:
        """Process exit status: only a FAIL verdict is non-zero."""
        return 1 if self.verdict == CheckStatus.FAIL else 0
