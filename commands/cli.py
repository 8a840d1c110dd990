#!/usr/bin/env python3
"""Monorepo utilities command line.

Examples:
  monorepo-utils changefile 1234
  monorepo-utils changefile 1234 --owner my-org --name my-repo --dev-repo-path ~/src/my-repo
  monorepo-utils code-freeze verify-day --override 2024-05-22
"""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

from configs.config import Config  # noqa: E402
from commands.changefile import ChangefilePipeline, clone_strategy  # noqa: E402
from commands.code_freeze import verify_day  # noqa: E402
from utils.errors import ChangefileError  # noqa: E402
from utils.github_client import GithubApiError, GithubAuthError  # noqa: E402

# Set up logging
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="monorepo-utils",
		description="Monorepo utilities",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog=__doc__.split("Examples:", 1)[1] if __doc__ else None,
	)
	parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
	sub = parser.add_subparsers(dest="command")

	cf = sub.add_parser("changefile", help="Changelog utilities")
	cf.add_argument("pr_number", type=int, metavar="pr-number", help="Pull request number")
	cf.add_argument("-o", "--owner", default=Config.DEFAULT_OWNER,
		help=f"Repository owner. Default: {Config.DEFAULT_OWNER}")
	cf.add_argument("-n", "--name", default=Config.DEFAULT_NAME,
		help=f"Repository name. Default: {Config.DEFAULT_NAME}")
	cf.add_argument("-d", "--dev-repo-path", dest="dev_repo_path",
		help="Path to existing repo. Use this option to avoid cloning a fresh repo for development purposes. "
			"Note that using this option assumes dependencies are already installed.")
	cf.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS, help="Enable verbose logging")

	cz = sub.add_parser("code-freeze", help="Code freeze utilities")
	cz_sub = cz.add_subparsers(dest="code_freeze_command")
	vd = cz_sub.add_parser("verify-day", help="Verify if today is the code freeze day")
	vd.add_argument("-o", "--override", default="now",
		help="Time Override: The time to use in checking whether the action should run (default: 'now').")

	return parser


def setup_logging(verbose: bool) -> None:
	log_level = logging.DEBUG if verbose else logging.INFO
	logging.basicConfig(
		level=log_level,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)

	# Suppress verbose logs from libraries unless in debug mode
	if not verbose:
		logging.getLogger("urllib3").setLevel(logging.WARNING)
		logging.getLogger("utils.github_client").setLevel(logging.WARNING)


def _run_changefile(args: argparse.Namespace) -> int:
	pipeline = ChangefilePipeline()
	try:
		result = pipeline.run(args.pr_number, args.owner, args.name, clone_strategy(args.dev_repo_path))
	finally:
		pipeline.close()
	if result.failed:
		logger.warning(f"No changelog was created for {', '.join(result.failed)}")
	return 0


def main(argv: Optional[List[str]] = None) -> None:
	"""CLI entry point for the monorepo utilities."""
	parser = build_parser()
	args = parser.parse_args(argv)
	verbose = getattr(args, "verbose", False)
	setup_logging(verbose)

	try:
		if args.command == "changefile":
			sys.exit(_run_changefile(args))

		if args.command == "code-freeze":
			if args.code_freeze_command != "verify-day":
				parser.error("code-freeze requires a subcommand: verify-day")
			verify_day(args.override)
			sys.exit(0)

		parser.print_help()
		sys.exit(1)

	except ChangefileError as e:
		print(f"Error: {e}", file=sys.stderr)
		if verbose:
			logger.exception("Detailed error information:")
		sys.exit(1)

	except (GithubApiError, GithubAuthError) as e:
		if getattr(e, "code", None) == "TIMEOUT":
			print(
				f"Error: Timeout while fetching data ({Config.HTTP_TIMEOUT_S}s). Please retry or increase HTTP_TIMEOUT_S.",
				file=sys.stderr,
			)
		else:
			print(f"Error: {e}", file=sys.stderr)
		if verbose:
			logger.exception("Detailed error information:")
		sys.exit(1)

	except ValueError as e:
		print(f"Error: {e}", file=sys.stderr)
		sys.exit(1)

	except KeyboardInterrupt:
		print("\nOperation cancelled by user", file=sys.stderr)
		sys.exit(1)

	except Exception as e:
		# Unexpected error
		print(f"Unexpected error: {e}", file=sys.stderr)
		if verbose:
			logger.exception("Detailed error information:")
		else:
			print("Use --verbose for more details", file=sys.stderr)
		sys.exit(1)


if __name__ == "__main__":
	main()
