"""Process-wide logging setup for the command line entry point."""

import logging
import sys
from typing import TextIO

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int = logging.WARNING,
    fmt: str = DEFAULT_FORMAT,
    stream: TextIO = sys.stderr,
) -> None:
    """Install a single stream handler on the root logger.

    Modules only ever call ``logging.getLogger(__name__)``; this function is
    called once by the CLI. Calling it again adjusts the level without adding
    a second handler.

    Args:
        level: Root logger level.
        fmt: Log record format string.
        stream: Stream the handler writes to.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    root.setLevel(level)
