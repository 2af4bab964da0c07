#!/usr/bin/env python3
"""
Main entry point for the AWS CDK environment toolkit.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from cdk_env.core.bootstrap import CdkBootstrapper
from cdk_env.core.command_runner import SubprocessRunner
from cdk_env.core.exceptions import CdkEnvError, InstallStepError
from cdk_env.core.installer import EnvironmentInstaller
from cdk_env.core.invoker import LambdaInvoker, default_stack_name
from cdk_env.core.stacks import StackCommands
from cdk_env.core.validator import EnvironmentValidator
from cdk_env.integrations.cdk_cli import STACK_COMMANDS
from cdk_env.utils.console import Reporter
from cdk_env.utils.logging import setup_root_logger
from config.settings import Settings


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="cdk-env",
        description="Install, validate and exercise an AWS CDK toolchain"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Console logging level (default: WARNING)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write a debug log to this file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "validate",
        help="Check the toolchain and AWS configuration (exit 1 on any failure)"
    )

    setup = subparsers.add_parser(
        "setup",
        help="Install AWS CLI, TypeScript and AWS CDK, then configure credentials"
    )
    setup.add_argument(
        "--credentials-csv",
        type=Path,
        help="CSV with a header line and one 'access key,secret' row"
    )
    setup.add_argument(
        "--skip-credentials",
        action="store_true",
        help="Do not write ~/.aws/credentials and ~/.aws/config"
    )
    setup.add_argument(
        "--skip-validation",
        action="store_true",
        help="Do not run the validator after installing"
    )
    setup.add_argument(
        "--no-sudo",
        action="store_true",
        help="Run the AWS CLI installer without sudo"
    )

    bootstrap = subparsers.add_parser(
        "bootstrap",
        help="Bootstrap the CDK toolkit stack in the current account and region"
    )
    bootstrap.add_argument(
        "-y", "--yes",
        action="store_true",
        help="Update an existing bootstrap stack without asking"
    )

    stack = subparsers.add_parser("stack", help="Run a cdk stack command")
    stack.add_argument("action", choices=STACK_COMMANDS)
    stack.add_argument("stacks", nargs="*", help="Stack names (default: all)")
    stack.add_argument(
        "--app-dir",
        type=Path,
        default=Path.cwd(),
        help="CDK app directory containing cdk.json (default: current directory)"
    )
    stack.add_argument(
        "--force",
        action="store_true",
        help="Skip approval prompts for deploy and destroy"
    )

    invoke = subparsers.add_parser("invoke", help="Invoke a Lambda function of a deployed stack")
    invoke.add_argument("payload", nargs="?", type=Path, help="JSON payload file")
    target = invoke.add_mutually_exclusive_group()
    target.add_argument("--function-name", help="Invoke this function directly")
    target.add_argument(
        "--stack-name",
        help="Discover functions of this stack (default: <current directory>Stack)"
    )
    invoke.add_argument("--response-file", type=Path, help="Where to save the raw response")

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file, environment and command line."""
    config_data = {}
    if args.config and args.config.exists():
        with open(args.config) as f:
            config_data = json.load(f)

    # Override with command line args
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level
    if args.log_file:
        config_data.setdefault("logging", {})["file_path"] = str(args.log_file)

    if args.command == "setup":
        installer = config_data.setdefault("installer", {})
        if args.credentials_csv:
            config_data.setdefault("aws", {})["credentials_csv"] = str(args.credentials_csv)
        if args.skip_credentials:
            installer["configure_credentials"] = False
        if args.skip_validation:
            installer["run_validation"] = False
        if args.no_sudo:
            installer["use_sudo"] = False

    return Settings(**config_data)


def run_command(args, settings: Settings, reporter: Reporter) -> int:
    """Dispatch the selected subcommand and return its exit code."""
    runner = SubprocessRunner()

    if args.command == "validate":
        return EnvironmentValidator(settings, runner, reporter).run().exit_code

    if args.command == "setup":
        return EnvironmentInstaller(settings, runner, reporter).run()

    if args.command == "bootstrap":
        CdkBootstrapper(settings, runner, reporter, assume_yes=args.yes).run()
        return 0

    if args.command == "stack":
        StackCommands(runner, args.app_dir, reporter).run(args.action, args.stacks, force=args.force)
        return 0

    if args.command == "invoke":
        invoker = LambdaInvoker(runner, reporter)
        if args.function_name:
            invoker.invoke(args.function_name, args.payload, args.response_file)
        else:
            stack_name = args.stack_name or default_stack_name(Path.cwd())
            invoker.invoke_from_stack(stack_name, args.payload, args.response_file)
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = parse_arguments(argv)
    reporter = Reporter()

    try:
        settings = load_config(args)
    except (ValueError, OSError) as e:
        reporter.error(f"Invalid configuration: {e}")
        return 1

    setup_root_logger(
        settings.logging.file_path,
        settings.logging.level,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count
    )
    logger = logging.getLogger(__name__)
    logger.info(f"Arguments: {vars(args)}")

    try:
        return run_command(args, settings, reporter)
    except CdkEnvError as e:
        logger.debug(f"{type(e).__name__}: {e.message}", exc_info=True)
        if isinstance(e, InstallStepError) and e.output:
            reporter.detail(e.output.rstrip(), style="dim")
        reporter.error(e.message, hint=e.hint)
        return 1
    except KeyboardInterrupt:
        reporter.blank()
        reporter.warning("Interrupted")
        return 130


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
