"""Logging setup shared by the CLI and library callers."""

from __future__ import annotations

import logging
import sys

_HANDLER_NAME = "augmentor-console"


def configure_logging(level: str | int = "INFO", fmt: str | None = None) -> None:
    """Install a single stderr handler on the root logger.

    Calling this again only adjusts the level and rebinds the handler to the
    current stderr, so repeated CLI invocations in one process do not stack
    handlers.
    """
    root = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)

    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setLevel(level)
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(sys.stderr)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt or "%(levelname)s %(name)s - %(message)s"))
    root.addHandler(handler)
