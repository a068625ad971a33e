"""Logging setup for the command-line entry point."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the CLI and the local API.

    Library modules only create loggers; handlers are installed here.

    Args:
        level: Logging level name (e.g. "DEBUG", "INFO")
    """
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # Werkzeug logs every request at INFO
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
