import subprocess
import unittest
from unittest.mock import MagicMock, patch

from cdk_env.core.command_runner import CommandResult, SubprocessRunner
from cdk_env.integrations.aws_cli import AwsCli
from cdk_env.integrations.cdk_cli import CdkCli
from tests.fakes import healthy_runner


class TestSubprocessRunner(unittest.TestCase):

    @patch("subprocess.run")
    def test_captures_output_and_exit_code(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="v20.0.0\n", stderr="")
        result = SubprocessRunner().run(["node", "--version"])

        self.assertEqual(result, CommandResult("v20.0.0\n", 0))
        self.assertTrue(result.ok)
        self.assertEqual(mock_run.call_args[0][0], ["node", "--version"])
        self.assertEqual(mock_run.call_args[1]["stderr"], subprocess.PIPE)

    @patch("subprocess.run")
    def test_merge_stderr(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="aws-cli/2.15.0", stderr=None)
        SubprocessRunner().run(["aws", "--version"], merge_stderr=True)
        self.assertEqual(mock_run.call_args[1]["stderr"], subprocess.STDOUT)

    @patch("subprocess.run")
    def test_undecodable_output_is_replaced(self, mock_run):
        raw = b"caf\xe9 2.0.0\n"
        mock_run.return_value = MagicMock(
            returncode=0, stdout=raw.decode("utf-8", errors="replace"), stderr=""
        )
        result = SubprocessRunner().run(["tool", "--version"])

        self.assertEqual(mock_run.call_args[1]["errors"], "replace")
        self.assertTrue(mock_run.call_args[1]["text"])
        self.assertEqual(result.output, "caf\ufffd 2.0.0\n")

    @patch("subprocess.run", side_effect=FileNotFoundError())
    def test_missing_executable(self, mock_run):
        self.assertEqual(SubprocessRunner().run(["nope"]).exit_code, 127)

    @patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["npm"], 5))
    def test_timeout(self, mock_run):
        result = SubprocessRunner(default_timeout=5).run(["npm", "install", "-g", "aws-cdk"])
        self.assertEqual(result.exit_code, 124)
        self.assertEqual(mock_run.call_args[1]["timeout"], 5)

    @patch("shutil.which", return_value="/usr/bin/node")
    def test_which_reads_current_path(self, mock_which):
        with patch.dict("os.environ", {"PATH": "/opt/bin"}):
            self.assertTrue(SubprocessRunner().exists("node"))
        mock_which.assert_called_with("node", path="/opt/bin")


class TestAwsCli(unittest.TestCase):

    def test_caller_identity(self):
        identity = AwsCli(healthy_runner()).caller_identity()
        self.assertEqual(identity.arn, "arn:aws:iam::123456789012:user/dev")

    def test_caller_identity_bad_json(self):
        runner = healthy_runner().on(["aws", "sts", "get-caller-identity", "--output", "json"], "{oops")
        self.assertIsNone(AwsCli(runner).caller_identity())

    def test_stack_parameter(self):
        stack = {"Parameters": [{"ParameterKey": "BootstrapVersion", "ParameterValue": "21"}]}
        self.assertEqual(AwsCli.stack_parameter(stack, "BootstrapVersion"), "21")
        self.assertIsNone(AwsCli.stack_parameter({}, "BootstrapVersion"))

    def test_version_first_line(self):
        self.assertTrue(AwsCli(healthy_runner()).version().startswith("aws-cli/2.15.10"))


class TestCdkCli(unittest.TestCase):

    def test_version_first_line(self):
        runner = healthy_runner().on(["cdk", "--version"], "2.120.0 (build 58b90c4)\nnotice\n")
        self.assertEqual(CdkCli(runner).version(), "2.120.0 (build 58b90c4)")


if __name__ == "__main__":
    unittest.main()
