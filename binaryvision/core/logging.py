"""
Logging setup shared by the analysis service, the capture client and scripts.

Every line carries the logger name so a failure can be traced from the
capture controller through the route to the Gemini client.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Client libraries that log one line per request at INFO.
CHATTY_LOGGERS = ("httpx", "httpcore", "google.auth", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and keep HTTP client noise out unless debugging."""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger().setLevel(numeric_level)

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


__all__ = ["CHATTY_LOGGERS", "LOG_FORMAT", "configure_logging"]
