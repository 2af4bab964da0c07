import unittest

from pydantic import ValidationError

from cdk_env.models.aws import CallerIdentity, CredentialRecord
from cdk_env.models.tool import ToolRequirement
from cdk_env.models.validation import CheckResult, CheckStatus, ValidationSummary


class TestValidationSummary(unittest.TestCase):

    def _summary(self, passed=0, warned=0, failed=0):
        summary = ValidationSummary()
        for _ in range(passed):
            summary.record(CheckResult.passed("p", "ok"))
        for _ in range(warned):
            summary.record(CheckResult.warned("w", "old"))
        for _ in range(failed):
            summary.record(CheckResult.failed("f", "missing"))
        return summary

    def test_all_passed(self):
        summary = self._summary(passed=5)
        self.assertEqual(summary.total, 5)
        self.assertEqual(summary.verdict, CheckStatus.PASS)
        self.assertEqual(summary.exit_code, 0)

    def test_warnings_without_failures(self):
        summary = self._summary(passed=3, warned=2)
        self.assertEqual(summary.verdict, CheckStatus.WARN)
        self.assertEqual(summary.exit_code, 0)

    def test_any_failure_wins_over_warnings(self):
        summary = self._summary(passed=3, warned=4, failed=1)
        self.assertEqual(summary.verdict, CheckStatus.FAIL)
        self.assertEqual(summary.exit_code, 1)

    def test_empty_run_passes(self):
        self.assertEqual(ValidationSummary().verdict, CheckStatus.PASS)

    def test_merge(self):
        merged = self._summary(passed=1).merge(self._summary(warned=1, failed=2))
        self.assertEqual((merged.passed, merged.warned, merged.failed), (1, 1, 2))
        self.assertEqual(merged.total, 4)


class TestToolRequirement(unittest.TestCase):

    def test_minimum_version_must_be_three_part(self):
        with self.assertRaises(ValidationError):
            ToolRequirement(name="cdk", display_name="AWS CDK",
                            minimum_version="2.0", version_parser="first_field")

    def test_default_version_args(self):
        req = ToolRequirement(name="cdk", display_name="AWS CDK",
                              minimum_version="2.0.0", version_parser="first_field")
        self.assertEqual(req.version_args, ["--version"])


class TestCredentialRecord(unittest.TestCase):

    def test_secret_is_masked_in_repr(self):
        record = CredentialRecord(access_key_id="AKIAEXAMPLE123", secret_access_key="s3cr3t")
        self.assertNotIn("s3cr3t", repr(record))
        self.assertEqual(record.masked_key, "AKIAEXAMPL...")

    def test_empty_values_rejected(self):
        with self.assertRaises(ValidationError):
            CredentialRecord(access_key_id="  ", secret_access_key="x")
        with self.assertRaises(ValidationError):
            CredentialRecord(access_key_id="AKIA", secret_access_key="   ")

    def test_caller_identity_from_cli_json(self):
        identity = CallerIdentity.model_validate(
            {"UserId": "AIDA", "Account": "123456789012", "Arn": "arn:aws:iam::123456789012:root"}
        )
        self.assertEqual(identity.account, "123456789012")


if __name__ == "__main__":
    unittest.main()
