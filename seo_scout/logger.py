"""Site‑wide logging configuration for the **SEO Scout** project.

Highlights
----------
* Unified format for console and optional file output (with rotation).
* Single, importable instance :data:`logger` – simply::

      from seo_scout.logger import logger
      logger.info("Audit started")
* Re‑configurable at runtime via :func:`configure`.
* :func:`mask_ip` keeps client addresses out of log files.
* :func:`audit_record` writes one JSON line per finished audit.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Final, Mapping, Optional, TextIO, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SEOScout"

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


def _stream_handler(fmt: str, stream: Optional[TextIO] = None) -> logging.StreamHandler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """(Re)configure the global project logger.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Path to a logfile. *None* → console‑only output.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        *True* – remove existing handlers; *False* – just append new one(s).
    stream
        Console stream; *None* → ``sys.stdout``.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        lg.handlers.clear()

    lg.addHandler(_stream_handler(log_format, stream))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Shortcut used by the CLI: replace handlers and apply *level*."""
    return configure(
        level=level, log_file=log_file, log_format=log_format, replace_handlers=True, stream=stream
    )


def get_logger(suffix: str | None = None) -> logging.Logger:
    """Return the project logger or one of its children (``SEOScout.<suffix>``)."""
    return logging.getLogger(f"{LOGGER_NAME}.{suffix}" if suffix else LOGGER_NAME)


def mask_ip(ip: str | None) -> str:
    """Blank out the host part of a client address before it is logged."""
    if not ip:
        return "***"
    if "." in ip:
        return ".".join(ip.split(".")[:3]) + ".0"
    if ":" in ip:
        return ":".join(ip.split(":")[:3]) + "::"
    return "***"


def audit_record(data: Mapping[str, Any]) -> dict[str, Any]:
    """Log one finished audit as a single JSON line on ``SEOScout.audit``.

    The client address under ``ip`` is masked. With ``--log-file`` the lines
    end up in the rotating log file.
    """
    entry: dict[str, Any] = {"timestamp": datetime.now(timezone.utc).isoformat(), **data}
    if "ip" in entry:
        entry["ip"] = mask_ip(entry["ip"])
    get_logger("audit").info(json.dumps(entry, ensure_ascii=False))
    return entry


# --------------------------------------------------------------------------- #
# Ready‑to‑use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger", "mask_ip", "audit_record", "LOGGER_NAME"]
