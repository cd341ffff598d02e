"""
credstore - Logging Setup

Used by the command line only; library modules just call
logging.getLogger(__name__) and never add handlers.
"""

import logging
import sys

from . import config


def setup_logging(verbose: bool = False, log_file: str = config.LOG_FILE) -> None:
    """
    Configure the root logger once.

    Normal runs append warnings and errors to `log_file`; verbose runs
    send everything down to DEBUG to stderr instead.
    """
    if logging.getLogger().handlers:
        return  # already configured

    if verbose:
        logging.basicConfig(
            stream=sys.stderr,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(
            filename=log_file,
            filemode="a",
            level=logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
