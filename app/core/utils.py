"""Shared utility functions for the MoneyWhisper project."""

import logging
import re
import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

import colorlog

ROOT_LOGGER = "money-whisper"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
MAX_LOG_LEN = 300

_JSON_FENCE_RE = re.compile(r"```json\s*")
_TRAILING_FENCE_RE = re.compile(r"```\s*$")
_LEADING_FENCE_RE = re.compile(r"^```\s*")
_CENTS = Decimal("0.01")


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get a project logger; the shared root gets a colorized console handler once.

    Module loggers ("money-whisper.api", ...) propagate to the root so the file handler
    added at startup sees every record.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    if not any(type(h) is logging.StreamHandler for h in logger.handlers):
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            f"%(log_color)s{LOG_FORMAT}",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logging.getLogger(name)


def ensure_dir(path: str | Path) -> None:
    """Ensure a directory exists (like mkdir -p)."""
    Path(path).mkdir(parents=True, exist_ok=True)


def local_now() -> datetime:
    """Get the current local wall-clock time (naive, as stored in the expenses table)."""
    return datetime.now()  # noqa: DTZ005


def new_id() -> str:
    """Generate a fresh unique record id."""
    return str(uuid.uuid4())


def to_money(value: object) -> Decimal:
    """Convert a number to a Decimal rounded to two fractional digits."""
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence wrapping (```json ... ```) from an LLM reply."""
    cleaned = text.strip()
    cleaned = _JSON_FENCE_RE.sub("", cleaned)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned)
    cleaned = _LEADING_FENCE_RE.sub("", cleaned)
    return cleaned.strip()


def truncate(text: str, limit: int = MAX_LOG_LEN) -> str:
    """Shorten text for log output."""
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text
