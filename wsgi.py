"""
Serve the OpsBoard API with Waitress.

Usage::

    python wsgi.py
    waitress-serve --call wsgi:build_app

Environment:
    FLASK_ENV         Config name; ``production`` when unset.
    WAITRESS_HOST     Bind address (default ``127.0.0.1``).
    WAITRESS_PORT     Bind port (default ``8080``).
    WAITRESS_THREADS  Worker threads (default ``4``).
"""

import logging
import os

from waitress import serve

from opsboard import create_app

logger = logging.getLogger("opsboard.wsgi")


def build_app(environ=None):
    """Build the app; the production config applies unless FLASK_ENV names another."""
    environ = os.environ if environ is None else environ
    return create_app(environ.get("FLASK_ENV", "production"))


def serve_options(environ=None) -> dict:
    """Read the Waitress bind address and thread count from the environment."""
    environ = os.environ if environ is None else environ
    return {
        "host": environ.get("WAITRESS_HOST", "127.0.0.1"),
        "port": int(environ.get("WAITRESS_PORT", "8080")),
        "threads": int(environ.get("WAITRESS_THREADS", "4")),
    }


def main() -> None:
    app = build_app()
    options = serve_options()
    logger.info(
        "Serving %s config on %s:%d with %d thread(s)",
        os.environ.get("FLASK_ENV", "production"),
        options["host"],
        options["port"],
        options["threads"],
    )
    serve(app, **options)


if __name__ == "__main__":
    main()
