"""
utils/logger.py — Project-wide logging configuration
=====================================================
Every module obtains its logger through `get_logger(name)`.  Loggers share
one colour-coded console format; the default level comes from
`config.LOG_LEVEL` (overridable with the PULSESCAN_LOG_LEVEL env var).
"""

import logging
import sys

from config import LOG_LEVEL

_COLOURS = {
    logging.DEBUG:    "\033[36m",   # cyan
    logging.INFO:     "\033[32m",   # green
    logging.WARNING:  "\033[33m",   # yellow
    logging.ERROR:    "\033[31m",   # red
    logging.CRITICAL: "\033[35m",   # magenta
}
_RESET = "\033[0m"

_BASE_FMT = "%(asctime)s  %(levelname)s  %(name)-18s  %(message)s"
_DATE_FMT = "%H:%M:%S"


class _ColourFormatter(logging.Formatter):
    """Wrap the level tag in ANSI colour when writing to a terminal."""

    def __init__(self, use_colour: bool):
        super().__init__(fmt=_BASE_FMT, datefmt=_DATE_FMT)
        self._use_colour = use_colour

    def format(self, record: logging.LogRecord) -> str:
        if not self._use_colour:
            return super().format(record)
        # Format a copy so other handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        colour = _COLOURS.get(record.levelno, _RESET)
        record.levelname = f"{colour}{record.levelname:<8}{_RESET}"
        return super().format(record)


# Module-level registry to avoid adding duplicate handlers
_loggers: dict[str, logging.Logger] = {}


def resolve_level(level: int | str | None) -> int:
    """
    Numeric logging level for a name ("warn", "INFO"), a numeric string
    ("10") or an int.  Unknown names fall back to INFO.
    """
    if level is None:
        level = LOG_LEVEL
    if isinstance(level, str):
        if level.strip().isdigit():
            return int(level)
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def get_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """
    Return (or create) a named logger.

    Parameters
    ----------
    name  : str              Component name shown in log lines.
    level : int | str | None Minimum severity; defaults to config.LOG_LEVEL.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))
    logger.propagate = False          # Avoid duplicate messages from root

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_ColourFormatter(use_colour=sys.stdout.isatty()))
    logger.addHandler(handler)

    _loggers[name] = logger
    return logger


def set_level(level: int | str) -> None:
    """Change the level of every logger created so far (used by the CLI)."""
    resolved = resolve_level(level)
    for logger in _loggers.values():
        logger.setLevel(resolved)
