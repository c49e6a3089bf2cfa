"""``wren run`` — initialize and serve an application."""

import argparse
import logging
import sys

from wren.cli._resolve import resolve_app
from wren.errors import BindError, ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app``, supply a logger if it has none, and serve it.

    Configuration and bind errors are fatal: they are reported on stderr
    and the process exits with status 1.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if app.logger is None:
        logging.basicConfig(
            level=args.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        app.logger = logging.getLogger(app.config.app_name)

    try:
        app.run()
    except (ConfigurationError, BindError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
