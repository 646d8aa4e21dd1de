"""``perch run`` — start the HTTP server for an app.

Resolves an import string to a perch App, applies CLI overrides on top
of the app's config, and hands the app to pounce.
"""

import argparse
import sys
from dataclasses import replace

from perch.cli._resolve import resolve_app
from perch.log import parse_level


def run_server(args: argparse.Namespace) -> None:
    """Start the perch server.

    CLI flags override the app config. A bad import string or log
    level exits with status 1.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    overrides: dict[str, object] = {}
    if args.log_level is not None:
        try:
            level = parse_level(args.log_level)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            raise SystemExit(1) from exc
        app.log.set_level(level)
        overrides["log_level"] = level.name.lower()
    if args.no_log_hits:
        overrides["log_hits"] = False
    if overrides:
        app.config = replace(app.config, **overrides)

    app.run(host=args.host, port=args.port)
