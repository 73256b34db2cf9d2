"""
Utility functions for Trip Splitter
"""
from __future__ import annotations
import math
import os
import uuid
from datetime import date, datetime
from typing import Optional

# Formats accepted when reading dates from imported files
DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d-%m-%Y",
]


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def parse_any_date(s: str) -> Optional[date]:
    """
    Parse a date written in one of DATE_FORMATS, or an ISO timestamp
    such as 2024-08-15T10:00:00.000Z. Returns None if nothing matches.
    """
    s = (s or "").strip()
    if not s:
        return None
    if len(s) > 10 and s[10] == "T":
        s = s[:10]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_amount(s: str) -> Optional[float]:
    """Parse "$1,234.50" style text into a finite float, or None"""
    cleaned = (s or "").replace("$", "").replace(",", "").strip()
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_count(s: str) -> Optional[int]:
    """Parse a head count cell; "2" and "2.0" both give 2"""
    s = (s or "").strip()
    try:
        return int(s)
    except ValueError:
        pass
    try:
        value = float(s)
    except ValueError:
        return None
    return int(value) if math.isfinite(value) else None


def new_id() -> str:
    return str(uuid.uuid4())


def app_dir() -> str:
    """
    Get application data directory: ~/.trip_splitter
    Creates directory if it doesn't exist.
    """
    path = os.path.join(os.path.expanduser("~"), ".trip_splitter")
    os.makedirs(path, exist_ok=True)
    return path
