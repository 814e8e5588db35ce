"""Logging configuration helpers."""

import logging
import re

_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE)


class RedactTokensFilter(logging.Filter):
    """Masks bearer credentials that end up in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _BEARER.sub(r"\1[redacted]", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure client logging with a single stream handler."""
    logger = logging.getLogger("pantry_client")
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    handler.addFilter(RedactTokensFilter())
    logger.addHandler(handler)
    logger.propagate = False
