"""Logging setup for the command-line entry point.

Library modules only create module-level loggers; handlers are installed
here, once, by whoever owns the process.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_CONFIGURED_FLAG = "_game_onboarding_configured"


def configure_logging(level: int = logging.WARNING, log_file: Path | None = None) -> None:
    """Install a stderr handler and, optionally, a file handler.

    Calling this more than once only adjusts the level.

    Args:
        level: Root log level
        log_file: Optional file to also write logs to
    """
    root = logging.getLogger()
    root.setLevel(level)

    if getattr(root, _CONFIGURED_FLAG, False):
        return

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    setattr(root, _CONFIGURED_FLAG, True)
    logging.getLogger(__name__).debug("Logging initialized (level=%s, file=%s)", level, log_file)
