from __future__ import annotations

import logging
import sys

from ltcsync.config import LoggingSettings


def configure_logging(settings: LoggingSettings) -> None:
    """Configure process-wide logging once at startup.

    Records always go to stderr because stdout carries the JSON and table
    output of the CLI. ``settings.file`` adds a persistent copy of the run log.
    """

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if settings.file is not None:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        format=settings.format,
        handlers=handlers,
        force=True,
    )
