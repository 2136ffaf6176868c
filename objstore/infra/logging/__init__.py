"""Logging infrastructure.

Usage:
    import logging

    from objstore.infra.logging import setup_logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Listing objects", extra={"prefix": "invoice-42/"})
"""

from objstore.infra.logging.config import configure_logging, setup_logging
from objstore.infra.logging.formatters import JSONFormatter

__all__ = ["JSONFormatter", "configure_logging", "setup_logging"]
