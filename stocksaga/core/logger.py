"""
Module loggers for stocksaga.

Library code logs under the ``stocksaga`` namespace and stays silent until
the host configures logging. The CLI turns console output on with
``configure_default_logging``.
"""

import logging

ROOT_LOGGER = "stocksaga"


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return ``name``'s logger with a NullHandler attached on first use."""
    log = logging.getLogger(name)
    if not log.handlers:
        log.addHandler(logging.NullHandler())
    return log


def configure_default_logging(
    level: int = logging.INFO,
    format_string: str = "%(asctime)s %(levelname)-7s %(name)s: %(message)s",
) -> None:
    logging.basicConfig(level=level, format=format_string)
    logging.getLogger(ROOT_LOGGER).setLevel(level)
