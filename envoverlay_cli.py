"""Run a command with env files layered over the current environment.

    envoverlay --env-file .env --env-file .env.defaults -- python app.py

Files are applied in the order given and the first file to define a name
wins. Without ``--env-file`` the list comes from ``ENV_OVERLAY_FILES``, then
falls back to ``.env``.
"""

import argparse
import os
import subprocess
import sys

from envoverlay.core.config import config
from envoverlay.services.diagnostics import Verbosity
from envoverlay.services.overlay import get_overlay_manager, load_env_files

DEFAULT_ENV_FILE = ".env"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="envoverlay", description=__doc__.splitlines()[0])
    ap.add_argument(
        "--env-file",
        dest="env_files",
        action="append",
        metavar="PATH",
        help="Env file to load; repeat for more. Earlier files take precedence.",
    )
    ap.add_argument(
        "--log-level",
        choices=[level.name.lower() for level in Verbosity],
        help="Diagnostic verbosity (default: ENV_OVERLAY_LOG_LEVEL or info)",
    )
    ap.add_argument(
        "--print",
        dest="print_vars",
        action="store_true",
        help="Print the overlaid variables and the file each came from",
    )
    ap.add_argument("command", nargs=argparse.REMAINDER, help="Command to run with the overlaid environment")
    return ap


def resolve_env_files(cli_files: list[str] | None) -> list[str]:
    if cli_files:
        return cli_files
    if config.DEFAULT_ENV_FILES:
        return list(config.DEFAULT_ENV_FILES)
    return [DEFAULT_ENV_FILE]


def format_variables() -> list[str]:
    lines = []
    for name, record in sorted(get_overlay_manager().variables().items()):
        lines.append(f"{name}={record.value}  # {record.source}")
    return lines


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    verbosity = Verbosity.parse(args.log_level) if args.log_level else None
    command = args.command
    if command and command[0] == "--":
        command = command[1:]

    load_env_files(resolve_env_files(args.env_files), verbosity)

    if args.print_vars:
        for line in format_variables():
            print(line)

    if not command:
        return 0
    try:
        return subprocess.run(command, env=dict(os.environ)).returncode
    except FileNotFoundError:
        print(f"Error: command not found: {command[0]}", file=sys.stderr)
        return 127
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
