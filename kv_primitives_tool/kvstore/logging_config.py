"""
Logging configuration for kvstore.

Verbosity levels follow the CLI's -v flag count:
    0: WARNING
    1: INFO
    2: DEBUG
    3+: TRACE (DEBUG including redis, boto3 and botocore internals)
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_THIRD_PARTY_LOGGERS = ("redis", "boto3", "botocore", "urllib3")


def setup_logging(verbosity: int = 0) -> None:
    """
    Configure root logging for CLI use.

    Args:
        verbosity: Number of -v flags given on the command line
    """
    if verbosity <= 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)

    # Library chatter stays quiet below TRACE
    third_party_level = logging.DEBUG if verbosity >= 3 else logging.WARNING
    for name in _THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
