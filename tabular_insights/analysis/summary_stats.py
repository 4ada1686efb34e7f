"""
Summary statistics over a parsed table.

generate_summary_stats() is a pure function of (rows, columns). The text
produced by format_stats_for_ai() is embedded verbatim in LLM prompts, so
its layout and rounding must stay stable.
"""

import math
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from tabular_insights.columns_analyzer import is_empty, parse_number

MS_PER_DAY = 1000 * 60 * 60 * 24
TOP_VALUES_LIMIT = 5
SAMPLE_ROWS_LIMIT = 20
SAMPLE_VALUE_MAX_LEN = 30


# =========================
# Value rendering helpers
# =========================

def format_number(value: float) -> str:
    """Render a number the way it reads in the source data (100.0 -> '100')."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def display_value(value: Any) -> str:
    """Text form of a cell, used for grouping and previews."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _iso_utc(ts: pd.Timestamp) -> str:
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


# =========================
# Per-type aggregates
# =========================

def _numeric_stats(values: List[Any], row_count: int) -> Optional[Dict[str, Any]]:
    numbers = [n for n in (parse_number(v) for v in values) if n is not None]
    if not numbers:
        return None

    ordered = sorted(numbers)
    size = len(ordered)
    total = sum(numbers)
    if size % 2 == 0:
        median = (ordered[size // 2 - 1] + ordered[size // 2]) / 2
    else:
        median = ordered[size // 2]

    return {
        "count": size,
        "nullCount": row_count - size,
        "min": ordered[0],
        "max": ordered[-1],
        "sum": total,
        "mean": total / size,
        "median": median,
    }


def _categorical_stats(values: List[Any], row_count: int) -> Dict[str, Any]:
    # Counter keeps first-encountered order and sorted() is stable,
    # so equal counts stay in order of first appearance.
    counts = Counter(display_value(v).strip() for v in values)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    total = len(values)

    return {
        "uniqueValues": len(ranked),
        "totalCount": total,
        "nullCount": row_count - total,
        "topValues": [
            {
                "value": value,
                "count": count,
                "percentage": round(count / total * 100, 2),
            }
            for value, count in ranked[:TOP_VALUES_LIMIT]
        ],
        "mostFrequent": ranked[0][0] if ranked else None,
    }


def _date_stats(values: List[Any], row_count: int) -> Optional[Dict[str, Any]]:
    parsed = pd.to_datetime(
        pd.Series([display_value(v) for v in values], dtype="object"),
        errors="coerce",
        utc=True,
        format="mixed",
    ).dropna()
    if parsed.empty:
        return None

    earliest = parsed.min()
    latest = parsed.max()
    span_ms = (latest - earliest).total_seconds() * 1000

    return {
        "count": int(parsed.size),
        "nullCount": row_count - int(parsed.size),
        "earliest": _iso_utc(earliest),
        "latest": _iso_utc(latest),
        "span": _round_half_up(span_ms / MS_PER_DAY),
    }


# =========================
# Public API
# =========================

def empty_summary_stats(column_count: int = 0) -> Dict[str, Any]:
    return {
        "rowCount": 0,
        "columnCount": column_count,
        "columns": [],
        "numericStats": {},
        "categoricalStats": {},
        "dateStats": {},
    }


def generate_summary_stats(
    rows: Sequence[Dict[str, Any]],
    columns: Sequence[Dict[str, str]],
) -> Dict[str, Any]:
    """
    Compute per-column summary statistics over the full table.

    Numeric columns land in numericStats, string and boolean columns in
    categoricalStats, date columns in dateStats. A column left with no
    usable values is recorded as {"nullCount": rowCount} only.
    """
    if not rows:
        return empty_summary_stats(len(columns))

    row_count = len(rows)
    stats = {
        "rowCount": row_count,
        "columnCount": len(columns),
        "columns": [{"name": col["name"], "type": col["type"]} for col in columns],
        "numericStats": {},
        "categoricalStats": {},
        "dateStats": {},
    }

    for column in columns:
        name = column["name"]
        col_type = column["type"]
        values = [row.get(name) for row in rows if not is_empty(row.get(name))]

        if col_type == "number":
            target = stats["numericStats"]
            result = _numeric_stats(values, row_count) if values else None
        elif col_type == "date":
            target = stats["dateStats"]
            result = _date_stats(values, row_count) if values else None
        else:
            target = stats["categoricalStats"]
            result = _categorical_stats(values, row_count) if values else None

        target[name] = result if result is not None else {"nullCount": row_count}

    return stats


def format_stats_for_ai(summary_stats: Dict[str, Any]) -> str:
    """Render summary statistics as the fixed plain-text block used in prompts."""
    lines = [
        "Data Summary:",
        f"- Total Rows: {summary_stats['rowCount']}",
        f"- Total Columns: {summary_stats['columnCount']}",
        "",
        "Columns:",
    ]
    for col in summary_stats["columns"]:
        lines.append(f"- {col['name']} ({col['type']})")

    numeric = summary_stats.get("numericStats") or {}
    if numeric:
        lines.append("")
        lines.append("Numeric Statistics:")
        for name, s in numeric.items():
            lines.append(f"{name}:")
            if "count" not in s:
                lines.append(f"  No valid values (Missing: {s['nullCount']})")
                continue
            lines.append(
                f"  Min: {format_number(s['min'])}, Max: {format_number(s['max'])}, "
                f"Mean: {s['mean']:.2f}, Median: {s['median']:.2f}"
            )
            lines.append(f"  Count: {s['count']}, Missing: {s['nullCount']}")

    categorical = summary_stats.get("categoricalStats") or {}
    if categorical:
        lines.append("")
        lines.append("Categorical Statistics:")
        for name, s in categorical.items():
            lines.append(f"{name}:")
            if "uniqueValues" not in s:
                lines.append(f"  No valid values (Missing: {s['nullCount']})")
                continue
            lines.append(f"  Unique Values: {s['uniqueValues']}")
            if s.get("mostFrequent"):
                lines.append(f"  Most Frequent: \"{s['mostFrequent']}\"")
            if s.get("topValues"):
                lines.append("  Top Values:")
                for tv in s["topValues"]:
                    lines.append(f"    - \"{tv['value']}\": {tv['count']} ({tv['percentage']:.2f}%)")

    dates = summary_stats.get("dateStats") or {}
    if dates:
        lines.append("")
        lines.append("Date Statistics:")
        for name, s in dates.items():
            lines.append(f"{name}:")
            if "earliest" not in s:
                lines.append(f"  No valid values (Missing: {s['nullCount']})")
                continue
            lines.append(f"  Earliest: {s['earliest']}, Latest: {s['latest']}")
            lines.append(f"  Span: {s['span']} days")

    return "\n".join(lines) + "\n"


def format_sample_rows(
    rows: Sequence[Dict[str, Any]],
    columns: Sequence[Dict[str, str]],
    limit: int = SAMPLE_ROWS_LIMIT,
) -> str:
    """Pipe-delimited preview of the first rows, for chat prompts."""
    if not rows:
        return ""

    sample = rows[:limit]
    header = " | ".join(col["name"] for col in columns)
    lines = [
        f"Sample Data (first {len(sample)} rows):",
        header,
        "-" * min(len(header), 100),
    ]
    for row in sample:
        cells = []
        for col in columns:
            value = row.get(col["name"])
            cells.append("N/A" if value is None else display_value(value)[:SAMPLE_VALUE_MAX_LEN])
        lines.append(" | ".join(cells))

    text = "\n".join(lines) + "\n"
    if len(rows) > limit:
        text += f"\n... and {len(rows) - limit} more rows"
    return text
