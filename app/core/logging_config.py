"""Logging setup"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the application.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)

    # SQLAlchemy echo is controlled separately by settings.debug
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
