import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from cdk_env.core.command_runner import CommandResult
from cdk_env.core.credentials import CsvCredentialSource
from cdk_env.core.exceptions import InstallStepError, MissingToolError, PostInstallVerificationError
from cdk_env.core.installer import EnvironmentInstaller
from config.settings import AwsConfig, InstallerConfig, ProfileConfig, Settings
from tests.fakes import FakeRunner, capture_reporter, healthy_runner


AWS_INSTALL = ["sudo", "./aws/install", "--bin-dir", "/usr/local/bin",
               "--install-dir", "/usr/local/aws-cli", "--update"]


class TestEnvironmentInstaller(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.home = Path(self.tmp.name)
        self.bashrc = self.home / ".bashrc"
        self.bashrc.write_text("# bashrc\n")
        self.csv = self.home / "master-root.csv"
        self.csv.write_text("Access key ID,Secret access key\nAKIAEXAMPLE,secretEXAMPLE\n")
        self.settings = Settings(
            aws=AwsConfig(config_dir=self.home / ".aws", credentials_csv=self.csv),
            profile=ProfileConfig(files=[self.bashrc, self.home / ".zshrc"]),
            installer=InstallerConfig()
        )
        self.environ = {"PATH": "/usr/bin:/bin"}
        self.reporter, self.buffer = capture_reporter()
        self.validator = MagicMock()
        self.validator.run.return_value.exit_code = 0

    def tearDown(self):
        self.tmp.cleanup()

    def _installer(self, runner, sources=None):
        if sources is None:
            sources = [CsvCredentialSource(self.csv)]
        return EnvironmentInstaller(
            self.settings, runner, self.reporter,
            credential_sources=sources,
            environ=self.environ,
            validator_factory=lambda: self.validator
        )

    def test_bare_host_stops_at_node_check(self):
        runner = FakeRunner()
        with self.assertRaises(MissingToolError) as ctx:
            self._installer(runner).run()

        self.assertIn("Node.js", ctx.exception.message)
        self.assertFalse(runner.called("curl"))
        self.assertFalse(runner.called("npm"))
        self.assertFalse((self.home / ".aws").exists())
        self.validator.run.assert_not_called()

    def test_missing_npm_is_fatal(self):
        runner = FakeRunner({"node": "/usr/bin/node"}).on(["node", "--version"], "v20.0.0\n")
        with self.assertRaises(MissingToolError) as ctx:
            self._installer(runner).run()
        self.assertIn("npm", ctx.exception.message)

    def test_already_installed_tools_are_not_reinstalled(self):
        runner = healthy_runner()
        exit_code = self._installer(runner).run()

        self.assertEqual(exit_code, 0)
        self.assertFalse(runner.called("curl"))
        self.assertFalse(runner.called("npm", "install"))
        self.assertIn("aws_access_key_id = AKIAEXAMPLE", self.settings.aws.credentials_file.read_text())
        self.assertIn("AWS credentials verified successfully", self.buffer.getvalue())
        self.validator.run.assert_called_once()

    def test_prints_next_steps_and_installed_versions(self):
        self._installer(healthy_runner()).run()
        output = self.buffer.getvalue()
        self.assertIn("aws-cli/2.15.10", output)
        self.assertIn("2.120.0 (build 58b90c4)", output)
        self.assertIn("Next Steps", output)
        self.assertIn("cdk init app --language typescript", output)
        self.assertIn("npm run build && cdk deploy", output)

    def test_validation_verdict_is_exit_code(self):
        self.validator.run.return_value.exit_code = 1
        self.assertEqual(self._installer(healthy_runner()).run(), 1)

    def test_installs_missing_tools(self):
        runner = healthy_runner()
        for name in ("aws", "tsc", "cdk"):
            del runner.tools[name]
        runner.on(["curl", "-fsSL", self.settings.installer.aws_cli_url, "-o", "awscliv2.zip"])
        runner.on(["unzip", "-q", "awscliv2.zip"])

        def installs(tool):
            def run(args):
                runner.install(tool)
                return CommandResult("added 1 package", 0)
            return run

        runner.on_call(AWS_INSTALL, installs("aws"))
        runner.on_call(["npm", "install", "-g", "typescript"], installs("tsc"))
        runner.on_call(["npm", "install", "-g", "aws-cdk"], installs("cdk"))

        self.assertEqual(self._installer(runner).run(), 0)

        self.assertTrue(runner.called("unzip"))
        self.assertTrue(runner.called("npm", "install", "-g", "aws-cdk"))
        # aws bin dir and npm global bin are both /usr/local/bin: one export line
        self.assertEqual(self.bashrc.read_text().count("/usr/local/bin"), 1)
        self.assertFalse((self.home / ".zshrc").exists())
        self.assertTrue(self.environ["PATH"].startswith("/usr/local/bin"))

    def test_failed_download_aborts(self):
        runner = healthy_runner()
        del runner.tools["aws"]
        runner.on(["curl", "-fsSL", self.settings.installer.aws_cli_url, "-o", "awscliv2.zip"],
                  "curl: (6) Could not resolve host", exit_code=6)

        with self.assertRaises(InstallStepError) as ctx:
            self._installer(runner).run()

        self.assertIn("Could not resolve host", ctx.exception.output)
        self.assertFalse(runner.called("unzip"))
        self.assertFalse(runner.called("npm", "install"))
        self.assertFalse(self.settings.aws.credentials_file.exists())

    def test_tool_still_missing_after_install(self):
        runner = healthy_runner()
        del runner.tools["tsc"]
        runner.on(["npm", "install", "-g", "typescript"], "added 1 package")

        with self.assertRaises(PostInstallVerificationError):
            self._installer(runner).run()
        self.assertFalse(runner.called("npm", "install", "-g", "aws-cdk"))

    def test_no_sudo(self):
        self.settings.installer.use_sudo = False
        runner = healthy_runner()
        del runner.tools["aws"]
        runner.on(["curl", "-fsSL", self.settings.installer.aws_cli_url, "-o", "awscliv2.zip"])
        runner.on(["unzip", "-q", "awscliv2.zip"])

        def install(args):
            runner.install("aws")
            return CommandResult("", 0)

        runner.on_call(AWS_INSTALL[1:], install)
        self._installer(runner).run()
        self.assertFalse(runner.called("sudo"))

    def test_skip_credentials(self):
        self.settings.installer.configure_credentials = False
        self._installer(healthy_runner(), sources=[]).run()
        self.assertFalse(self.settings.aws.credentials_file.exists())

    def test_identity_failure_only_warns(self):
        runner = healthy_runner().on(
            ["aws", "sts", "get-caller-identity", "--output", "json"], "", exit_code=255
        )
        self.assertEqual(self._installer(runner).run(), 0)
        self.assertIn("verification failed", self.buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
