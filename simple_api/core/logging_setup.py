"""
logging_setup.py
================
One root handler on stderr for the whole process. uvicorn runs with
log_config=None, so its error and access records land here too.
"""

import logging
import sys

# uvicorn's extra level, below DEBUG
TRACE_LEVEL = 5

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def to_logging_level(level: str) -> int:
    if level.lower() == "trace":
        return TRACE_LEVEL
    return logging.getLevelName(level.upper())


def configure_logging(level: str = "info") -> None:
    logging.addLevelName(TRACE_LEVEL, "TRACE")
    logging.basicConfig(
        level=to_logging_level(level),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
