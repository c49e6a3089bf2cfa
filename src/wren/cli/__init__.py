"""Wren CLI — run an application or list its routes.

Entry point registered as ``wren`` in ``pyproject.toml``::

    [project.scripts]
    wren = "wren.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wren`` command."""
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Wren — bootstrap and serve ASGI applications.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wren run ---------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Initialize and serve an application")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument(
        "--log-level",
        default="info",
        choices=("debug", "info", "warning", "error"),
        help="Log level for the default logger (used when the app has none)",
    )

    # -- wren routes ------------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from wren.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from wren.cli._routes import run_routes

        run_routes(args)
