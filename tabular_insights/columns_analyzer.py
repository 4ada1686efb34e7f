from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence
import re
import math
from datetime import datetime

# =========================
# Config / constants
# =========================

# NOTE:
# - Detection looks at the first SAMPLE_SIZE rows only, so re-ingesting the
#   same file (same row order) always yields the same types.
# - Date detection is deliberately narrower than date aggregation: only the
#   four literal layouts below count here, while summary statistics accept
#   anything pandas can parse.

SAMPLE_SIZE = 10
MAJORITY_THRESHOLD = 0.7

COLUMN_TYPES = ("number", "date", "boolean", "string")

RE_NUMBER = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")

# (pattern, strptime layout)
DATE_PATTERNS = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),  # YYYY-MM-DD
    (re.compile(r"^\d{2}/\d{2}/\d{4}$"), "%m/%d/%Y"),  # MM/DD/YYYY
    (re.compile(r"^\d{2}-\d{2}-\d{4}$"), "%m-%d-%Y"),  # MM-DD-YYYY
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "%Y/%m/%d"),  # YYYY/MM/DD
]

BOOL_LITERALS = {"true", "false"}


# =========================
# Helpers
# =========================

def is_empty(value: Any) -> bool:
    """None, '' and NaN cells count as missing."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value == ""


def parse_number(value: Any) -> Optional[float]:
    """Return the finite float a cell represents, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not RE_NUMBER.match(s):
            return None
        number = float(s)
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def is_valid_date(value: Any) -> bool:
    """True when the value matches a supported layout and is a real calendar date."""
    if not isinstance(value, str):
        return False
    for pattern, layout in DATE_PATTERNS:
        if pattern.match(value):
            try:
                datetime.strptime(value, layout)
            except ValueError:
                return False
            return True
    return False


def is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    return isinstance(value, str) and value.lower() in BOOL_LITERALS


# =========================
# Detection
# =========================

def detect_column_type(sample_values: Iterable[Any]) -> str:
    """
    Classify a column from its sample values.

    Each non-empty value is counted as a number, else a date, else a boolean;
    values matching none of these are left out of every count, including the
    denominator of the majority ratio.
    """
    number_count = 0
    date_count = 0
    boolean_count = 0

    for value in sample_values:
        if is_empty(value):
            continue
        if parse_number(value) is not None:
            number_count += 1
        elif is_valid_date(value):
            date_count += 1
        elif is_boolean(value):
            boolean_count += 1

    valid_total = number_count + date_count + boolean_count
    if valid_total == 0:
        return "string"

    if number_count / valid_total > MAJORITY_THRESHOLD:
        return "number"
    if date_count / valid_total > MAJORITY_THRESHOLD:
        return "date"
    if boolean_count / valid_total > MAJORITY_THRESHOLD:
        return "boolean"
    return "string"


def detect_type(rows: Sequence[Dict[str, Any]], column_name: str) -> str:
    """Detect a column's type from the first SAMPLE_SIZE rows of a table."""
    if not rows:
        return "string"
    sample = rows[:min(SAMPLE_SIZE, len(rows))]
    return detect_column_type(row.get(column_name) for row in sample)


def describe_columns(rows: Sequence[Dict[str, Any]], column_names: List[str]) -> List[Dict[str, str]]:
    """Build column descriptors ({name, type}) for the given column order."""
    return [
        {"name": name, "type": detect_type(rows, name)}
        for name in column_names
    ]
