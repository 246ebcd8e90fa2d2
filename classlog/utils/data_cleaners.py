# ABOUTME: Cell cleaning utilities for sheet rows
# ABOUTME: Normalizes text, periods, timestamps and minute counts read from workbook cells

import re
from datetime import datetime


def clean_text(value):
    """
    Convert a cell value to trimmed text.

    Examples:
        "  Ada  " -> "Ada"
        None -> ""
        42 -> "42"
    """
    if value is None:
        return ""
    return str(value).strip()


def clean_period(value):
    """
    Normalize a period cell so numeric and text periods compare equal.

    Examples:
        3 -> "3"
        3.0 -> "3"
        " P2 " -> "P2"
        None -> ""
    """
    if isinstance(value, bool):
        return str(value)

    if isinstance(value, float) and value.is_integer():
        return str(int(value))

    return clean_text(value)


def clean_student_id(value):
    """
    Normalize a student id the way a barcode scanner would type it.

    Examples:
        12345 -> "12345"
        12345.0 -> "12345"
        " 0042 " -> "0042"
    """
    return clean_period(value)


def parse_timestamp(value):
    """
    Convert a timestamp cell to a naive local datetime.

    Examples:
        datetime(2024, 1, 2, 9, 30) -> datetime(2024, 1, 2, 9, 30)
        "2024-01-02T09:30:00" -> datetime(2024, 1, 2, 9, 30)
        "" -> None
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value.astimezone().replace(tzinfo=None) if value.tzinfo else value

    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None

    if parsed.tzinfo:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def clean_minutes(value):
    """
    Convert a duration cell to whole minutes.

    Examples:
        "7" -> 7
        7.0 -> 7
        "" -> None
    """
    if value is None or value == "":
        return None

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(round(value))

    value_str = str(value).strip()
    try:
        return int(round(float(value_str)))
    except ValueError:
        return None


def normalize_header(name):
    """
    Normalize header names for column matching.

    Examples:
        "Student ID" -> "student_id"
        "Period #" -> "period"
    """
    name = str(name or "").lower()
    name = re.sub(r'[/\-\s]+', '_', name)
    name = re.sub(r'[^a-z0-9_]', '', name)
    name = re.sub(r'_+', '_', name)
    return name.strip('_')
