import logging
import sys
import time

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Send log records to stderr with UTC timestamps.

    Replaces any handlers already installed on the root logger so repeated
    calls (tests, re-configuration after settings are loaded) do not
    duplicate output.
    """
    formatter = logging.Formatter(LOG_FORMAT)
    formatter.converter = time.gmtime

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
