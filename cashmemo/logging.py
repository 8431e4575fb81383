"""Root logger setup for the terminal app.

Logs go to stderr so they do not interleave with the menus on stdout.
"""

import logging
import sys

from cashmemo.settings import settings

TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging() -> None:
    """Configure the root logger based on settings. Call once at startup."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)

    if settings.log_json:
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={"asctime": "timestamp", "levelname": "level"},
            )
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # fpdf is chatty about font substitutions at DEBUG.
    logging.getLogger("fpdf").setLevel(logging.WARNING)
    # Migrations run on every start; their INFO lines would clutter the menus.
    logging.getLogger("alembic").setLevel(max(level, logging.WARNING))

