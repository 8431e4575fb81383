"""Start the cash memo terminal: ``python -m cashmemo`` or the ``cashmemo`` script."""

import logging

from cashmemo.cli.app import main_menu
from cashmemo.db import initialize_db
from cashmemo.logging import configure_logging
from cashmemo.settings import settings

logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging()
    logger.info("Starting cash memo for %s", settings.shop_name)
    initialize_db()
    try:
        main_menu()
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    main()
