"""Entry point: ``devenv [global options] <command> [args...]``.

Only the global options before the command are parsed; everything after
the command name is handed to the handler untouched.
"""
from __future__ import annotations

import argparse
import sys
from typing import NoReturn, Optional, Sequence

from devenv.core.core_config import load_config
from devenv.core.core_exec import ExecContext
from devenv.core.core_utils import debug_print_config, log
from devenv.dispatch.commands import COMMANDS, print_usage

USAGE_EXIT = 1
INTERRUPTED_EXIT = 130


class UsageError(ValueError):
    pass


class DispatchArgumentParser(argparse.ArgumentParser):
    """argparse errors become a usage failure instead of exiting with status 2."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = DispatchArgumentParser(
        prog="devenv",
        description="docker-compose dispatcher for the local dev stack",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="devenv YAML config (default: $DEVENV_CONFIG, then configs/devenv.yml)",
    )
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        help="Repeatable KEY=VALUE config override (dotted keys, ex: compose.project_name=shop)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the external commands instead of running them",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print the resolved configuration before dispatching",
    )
    parser.add_argument("command", nargs="?", default=None, help="Command name (see 'devenv help')")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments forwarded to the command")
    return parser


def dispatch(argv: Optional[Sequence[str]] = None) -> int:
    """Parse argv, run the matching handler and return its exit code."""
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as e:
        log("devenv", "dispatch", str(e))
        print_usage()
        return USAGE_EXIT

    spec = COMMANDS.get(args.command) if args.command is not None else None
    if spec is None:
        if args.command is not None:
            log("devenv", "dispatch", f"commande inconnue: {args.command!r}")
        print_usage()
        return USAGE_EXIT

    if not spec.needs_config:
        return spec.handler(None, list(args.args))

    config = load_config(args.config, args.override)
    if args.verbose:
        debug_print_config(config)

    ctx = ExecContext(config=config, dry_run=args.dry_run)
    try:
        return spec.handler(ctx, list(args.args))
    except KeyboardInterrupt:
        log("devenv", spec.name, "interrompu")
        return INTERRUPTED_EXIT


def main(argv: Optional[Sequence[str]] = None) -> None:
    sys.exit(dispatch(argv))


if __name__ == "__main__":
    main()
