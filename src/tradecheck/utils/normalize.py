"""Normalization helpers."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional


DECIMAL_RE = re.compile(r"[^0-9,\.-]+")


def parse_decimal(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    text = DECIMAL_RE.sub("", text)
    if "," in text and "." in text:
        # Decide decimal separator by last occurrence.
        last_comma = text.rfind(",")
        last_dot = text.rfind(".")
        if last_comma > last_dot:
            # European format: 1.234,56 -> 1234.56
            text = text.replace(".", "").replace(",", ".")
        else:
            # US format: 1,234.56 -> 1234.56
            text = text.replace(",", "")
    elif "," in text:
        # 8,850 is a thousands group, 9,5 a decimal comma
        head, _, tail = text.rpartition(",")
        if len(tail) == 3 and head:
            text = text.replace(",", "")
        else:
            text = text.replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return None


def parse_number(value: object) -> Optional[float | int]:
    """Like parse_decimal but keeps integral values as int."""
    number = parse_decimal(value)
    if number is None:
        return None
    if number.is_integer():
        return int(number)
    return number


def parse_date_to_iso(value: object) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    text = str(value).strip()
    if not text:
        return None
    # dd.mm.yyyy
    m = re.match(r"^(\d{2})\.(\d{2})\.(\d{4})$", text)
    if m:
        day, month, year = m.groups()
        return f"{year}-{month}-{day}"
    # yyyy-mm-dd or yyyy/mm/dd
    m = re.match(r"^(\d{4})[-/](\d{2})[-/](\d{2})$", text)
    if m:
        year, month, day = m.groups()
        return f"{year}-{month}-{day}"
    return None


def normalize_text(value: object) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    return text


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_value(value: object) -> str:
    if value is None:
        return "-"
    if is_number(value):
        if float(value).is_integer():
            return f"{int(value):,}"
        return f"{value:,.2f}".rstrip("0").rstrip(".")
    if isinstance(value, dict):
        return ", ".join(f"{key}={format_value(item)}" for key, item in value.items())
    return str(value)
