"""Logging setup for the command line."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=numeric_level, format=LOG_FORMAT, datefmt="%H:%M:%S")
    root.setLevel(numeric_level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))
