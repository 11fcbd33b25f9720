from __future__ import annotations

import math
import re
import warnings
from datetime import datetime
from typing import Callable

import pandas as pd


PT_MONTHS = {
    "jan": 1,
    "fev": 2,
    "mar": 3,
    "abr": 4,
    "mai": 5,
    "jun": 6,
    "jul": 7,
    "ago": 8,
    "set": 9,
    "out": 10,
    "nov": 11,
    "dez": 12,
}

_ISO_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[ T](\d{2}):(\d{2}):(\d{2}))?$")
_WRITTEN_PT_PATTERN = re.compile(
    r"^(\d{1,2})\s+de\s+([a-zç]{3})\.?\s+de\s+(\d{4})(?:,?\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?$",
    re.IGNORECASE,
)
_NUMERIC_PATTERN = re.compile(
    r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})(?:,?\s+(\d{1,2}):(\d{2})(?::(\d{2}))?)?$"
)

# pandas fills a missing date part from today's date
_YEAR_PATTERN = re.compile(r"\d{4}")


def time_to_seconds(value: object) -> int:
    """Convert "H:MM[:SS]" to seconds; anything malformed becomes 0."""
    if value is None:
        return 0
    text = str(value).strip()
    if not text:
        return 0
    parts = text.split(":")
    if len(parts) < 2:
        return 0
    try:
        hours = int(parts[0] or 0)
        minutes = int(parts[1] or 0)
        seconds = int(parts[2] or 0) if len(parts) >= 3 else 0
    except ValueError:
        return 0
    return hours * 3600 + minutes * 60 + seconds


def seconds_to_time(total_seconds: float | None) -> str:
    if total_seconds is None or (isinstance(total_seconds, float) and math.isnan(total_seconds)):
        return ""
    value = int(round(total_seconds))
    sign = "-" if value < 0 else ""
    value = abs(value)
    hours, remainder = divmod(value, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


def parse_brazilian_number(value: object) -> float:
    """Parse "1.234,56" or "12,5%" style numbers; anything unparsable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return 0.0
    cleaned = text.replace(".", "").replace(",", ".", 1).replace("%", "").strip()
    try:
        number = float(cleaned)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _build_datetime(year: str, month: int | str, day: str, hour: str | None, minute: str | None, second: str | None) -> datetime | None:
    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
        )
    except ValueError:
        return None


def parse_iso_date(text: str) -> datetime | None:
    match = _ISO_PATTERN.match(text)
    if not match:
        return None
    year, month, day, hour, minute, second = match.groups()
    return _build_datetime(year, month, day, hour, minute, second)


def parse_generic_date(text: str) -> datetime | None:
    if not _YEAR_PATTERN.search(text):
        return None
    try:
        with warnings.catch_warnings():
            # pandas warns when it falls back to dateutil for a single value
            warnings.simplefilter("ignore", UserWarning)
            parsed = pd.to_datetime(text, errors="coerce", dayfirst=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(None)
    return parsed.to_pydatetime()


def parse_written_pt_date(text: str) -> datetime | None:
    match = _WRITTEN_PT_PATTERN.match(text)
    if not match:
        return None
    day, month_name, year, hour, minute, second = match.groups()
    month = PT_MONTHS.get(month_name.lower())
    if month is None:
        return None
    return _build_datetime(year, month, day, hour, minute, second)


def parse_numeric_date(text: str) -> datetime | None:
    match = _NUMERIC_PATTERN.match(text)
    if not match:
        return None
    day, month, year, hour, minute, second = match.groups()
    return _build_datetime(year, month, day, hour, minute, second)


DATE_PARSERS: tuple[Callable[[str], datetime | None], ...] = (
    parse_iso_date,
    parse_generic_date,
    parse_written_pt_date,
    parse_numeric_date,
)


def parse_date(value: object) -> datetime | None:
    """Try each date format in order; the first one that parses wins."""
    if value is None:
        return None
    text = str(value).replace('"', "").strip()
    if not text:
        return None
    for parser in DATE_PARSERS:
        parsed = parser(text)
        if parsed is not None:
            return parsed
    return None


def difference_in_seconds(later: datetime | None, earlier: datetime | None) -> int | None:
    if later is None or earlier is None:
        return None
    return int((later - earlier).total_seconds())


def difference_in_minutes(later: datetime | None, earlier: datetime | None) -> int | None:
    seconds = difference_in_seconds(later, earlier)
    if seconds is None:
        return None
    return math.floor(seconds / 60)
