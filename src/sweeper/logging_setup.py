"""
Logging configuration for the command line entry points.
"""
import logging
import sys
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s:%(lineno)d | %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Level for the project packages.
        log_file: Optional path of a log file written next to stderr output.
    """
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, mode="w", encoding="utf-8"))

    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True,
    )

    for name in ("surface", "sweeper", "agents", "training"):
        logging.getLogger(name).setLevel(level)
