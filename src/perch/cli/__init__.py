"""Perch CLI.

Entry point registered as ``perch`` in ``pyproject.toml``::

    [project.scripts]
    perch = "perch.cli:main"

Only one subcommand exists::

    perch run blog:app --host 0.0.0.0 --port 8080 --log-level debug
"""

import argparse
import sys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="perch",
        description="Serve a perch app: regex routes over ASGI, one response per request.",
    )
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="serve an app until interrupted")
    run.add_argument("app", help="module[:name] of the App to serve (name defaults to 'app')")
    # None means "use the app's config"
    run.add_argument("--host", help="host address on which to listen (default: 127.0.0.1)")
    run.add_argument("--port", type=int, help="port on which to listen (default: 9999)")
    run.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="lowest level written: trace, debug, info, warn, error or critical",
    )
    run.add_argument(
        "--no-log-hits",
        action="store_true",
        help="do not write a hit line for every request",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``perch`` command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from perch.cli._run import run_server

    run_server(args)
