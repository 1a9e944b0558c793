"""
Utility functions for text processing, price/date formatting, and logging.
"""
import logging
import math
import re
import time
from datetime import datetime, timezone
from typing import Optional


def init_logger(
    name: str = "kijiji_scraper",
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_file: Optional[str] = "kijiji_scraper.log"
) -> logging.Logger:
    """
    Configure the package logger used by capture, storage and export.

    Console gets progress lines (saved listings, export paths, notifier
    messages); the optional file also keeps DEBUG detail such as strategy
    failures and per-screenshot writes. Calling it again reuses the
    existing handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    console_level_num = getattr(logging, console_level.upper(), logging.INFO)
    ch = logging.StreamHandler()
    ch.setLevel(console_level_num)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:  # Create file handler only if log_file is provided
        file_level_num = getattr(logging, file_level.upper(), logging.DEBUG)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level_num)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def now_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def now_millis() -> int:
    """Return milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def clean_text(s: Optional[str]) -> str:
    """Collapse whitespace and drop control characters (not valid in spreadsheet cells)."""
    if not s:
        return ""
    s = _CONTROL_CHARS.sub("", re.sub(r"\s+", " ", s))
    return s.strip()


def to_float(text: Optional[str]) -> Optional[float]:
    """Safely convert text to float."""
    if not text:
        return None
    try:
        return float(text.replace(",", "").strip())
    except ValueError:
        return None


def format_price(raw: Optional[str]) -> Optional[str]:
    """
    Render a machine-readable price as dollars with grouped thousands.

    "15995" -> "$15,995", "15995.5" -> "$15,995.5". Returns None when the
    value is not numeric so callers can fall back to display text.
    """
    value = to_float(raw)
    if value is None or not math.isfinite(value):
        return None
    if value.is_integer():
        return f"${int(value):,}"
    # at most three fraction digits, trailing zeros dropped
    return "$" + f"{value:,.3f}".rstrip("0").rstrip(".")


def short_date(dt: datetime) -> str:
    """Render a date as M/D/YYYY."""
    return f"{dt.month}/{dt.day}/{dt.year}"


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def relative_date(value: str, now: Optional[datetime] = None) -> Optional[str]:
    """
    Turn a machine-readable timestamp into a human relative date.

    Returns "Today", "Yesterday", "<n> days ago" for under a week, otherwise
    M/D/YYYY. Returns None if the timestamp cannot be parsed.
    """
    dt = parse_timestamp(value)
    if dt is None:
        return None
    now = now or datetime.now(timezone.utc)
    diff_days = int((now - dt).total_seconds() // 86400)

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if 1 < diff_days < 7:
        return f"{diff_days} days ago"
    return short_date(dt.astimezone())


def locale_datetime(value: str) -> str:
    """Render an ISO timestamp in local time as 'M/D/YYYY, h:mm:ss AM'. Unparseable values pass through."""
    dt = parse_timestamp(value)
    if dt is None:
        return value or ""
    local = dt.astimezone()
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{short_date(local)}, {hour}:{local.minute:02d}:{local.second:02d} {meridiem}"
