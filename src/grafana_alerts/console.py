"""Terminal styling and structlog setup for the CLI."""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

import structlog

# ── Colors ───────────────────────────────────────────────────────────────────
BOLD = "\033[1m"
YELLOW = "\033[93m"
RESET = "\033[0m"

HEADER = BOLD
HIGHLIGHT = YELLOW
NEUTRAL = ""


def write_line(stream: TextIO, text: str, style: str = NEUTRAL) -> None:
    if style:
        stream.write(f"{style}{text}{RESET}\n")
    else:
        stream.write(f"{text}\n")


def supports_color(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(stream: Optional[TextIO] = None) -> None:
    """Human-readable log events on *stream*; stdout is reserved for the table."""
    stream = stream or sys.stderr
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=supports_color(stream)),
        ],
        cache_logger_on_first_use=False,
    )
