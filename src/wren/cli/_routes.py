"""``wren routes`` — list registered routes."""

import argparse
import sys

from wren.cli._resolve import resolve_app
from wren.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print a METHOD / PATH / HANDLER table for ``args.app``.

    Assembles the app in-process to validate its routes; no socket is
    opened.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    try:
        app._ensure_assembled()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rows = [
        (method, path, getattr(handler, "__name__", repr(handler)))
        for method, path, handler in app.describe()
    ]
    if not rows:
        print("No routes registered.")
        return

    max_method = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    max_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLER"))
    sep_len = max_method + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for method, path, handler_name in rows:
        print(fmt.format(method, path, handler_name))
