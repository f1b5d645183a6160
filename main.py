#!/usr/bin/env python3
"""
command-ext - run a recipe invocation, optionally wrapped in sudo/ssh/redirect
"""
import argparse
import logging
import sys

from core.errors import CommandError
from core.escape import join
from core.execution import ExitStatus
from core.invocation import lossy_text
from core.recipe import build_recipe, run_recipe
from utils.constants import CHECK_MODES, DEFAULT_LOG_LEVEL, LOG_FORMAT
from utils.helpers import load_config


def parse_cli_args(argv=None):
    """Parse runtime CLI arguments."""
    parser = argparse.ArgumentParser(description="Run a structured invocation recipe")
    parser.add_argument(
        "--config",
        default="recipe.yaml",
        help="Path to recipe YAML file (default: recipe.yaml)",
    )
    parser.add_argument(
        "--check",
        choices=list(CHECK_MODES),
        default=None,
        help="Override the recipe's check mode",
    )
    parser.add_argument(
        "--print-only",
        action="store_true",
        help="Print the final shell-quoted command line instead of running it",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override logging.level from the recipe",
    )
    return parser.parse_args(argv)


def setup_logging(config: dict, level_override=None) -> None:
    """Setup logging based on configuration"""
    log_level = str(level_override or config.get("logging", {}).get("level", DEFAULT_LOG_LEVEL)).upper()
    level = getattr(logging, log_level, logging.INFO)
    # stdout is reserved for command output
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _print_result(mode: str, result) -> int:
    if mode == "output":
        sys.stdout.write(result)
        return 0
    if mode == "full":
        sys.stdout.write(result.stdout_lossy)
        sys.stderr.write(result.stderr_lossy)
        if result.status.code is None:
            return 1
        return result.status.code
    if mode == "check":
        print(result)
        return 0 if result.success else 1
    # status: check_status only returns when the child exited 0
    print(ExitStatus(code=0))
    return 0


def main(argv=None) -> int:
    args = parse_cli_args(argv)
    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(config, args.log_level)
    logger = logging.getLogger(__name__)

    try:
        if args.print_only:
            invocation = build_recipe(config)
            print(join(lossy_text(part) for part in invocation.argv()))
            return 0
        mode, result = run_recipe(config, args.check)
    except CommandError as e:
        logger.debug("Recipe failed", exc_info=True)
        print(str(e), file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid recipe: {e}", file=sys.stderr)
        return 2

    return _print_result(mode, result)


if __name__ == "__main__":
    sys.exit(main())
