"""
File ingestion - parses uploaded CSV / Excel files into row tables.

Every parser returns a ParsedTable: the rows in source order plus column
descriptors inferred from the first rows of the table.
"""

import io
import logging
import math
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import numpy as np
import pandas as pd

from tabular_insights.api.exceptions import (
    InvalidColumnSchemaError,
    ParseError,
    UnsupportedFormatError,
)
from tabular_insights.columns_analyzer import COLUMN_TYPES, describe_columns

logger = logging.getLogger(__name__)

SUPPORTED_FILE_TYPES = ("csv", "xlsx", "xls")
SPREADSHEET_FILE_TYPES = ("xlsx", "xls")


@dataclass
class ParsedTable:
    """One uploaded file's parsed content."""
    rows: List[Dict[str, Any]]
    columns: List[Dict[str, str]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_names(self) -> List[str]:
        return [col["name"] for col in self.columns]


def get_file_type(filename: str) -> str:
    """Lower-cased extension taken from the final dot-segment of a filename."""
    return (filename or "").rsplit(".", 1)[-1].lower()


def collect_columns(rows: Iterable[Dict[str, Any]]) -> List[str]:
    """Union of row keys in first-seen order."""
    seen: Dict[str, None] = {}
    for row in rows:
        for key in row:
            if key not in seen:
                seen[key] = None
    return list(seen)


def order_columns(header: List[str], rows: List[Dict[str, Any]]) -> List[str]:
    """
    Header names that occur in at least one row, in header order, followed
    by any other row keys in first-seen order.
    """
    present = collect_columns(rows)
    names = [name for name in dict.fromkeys(header) if name in present]
    return names + [name for name in present if name not in names]


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def _to_python_scalar(value: Any) -> Any:
    """Convert a spreadsheet cell to a JSON-friendly Python scalar."""
    if isinstance(value, (pd.Timestamp, datetime)):
        if value.hour == 0 and value.minute == 0 and value.second == 0 and value.microsecond == 0:
            return value.strftime("%Y-%m-%d")
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


# =========================
# Format-specific parsers
# =========================

def _max_field_count(content: bytes) -> int:
    """Upper bound on fields per physical line; quoted commas only over-count."""
    return max((line.count(b",") + 1 for line in content.splitlines()), default=0)


def _csv_header(cells: Iterable[Any]) -> List[str]:
    """
    Column names for every field position.

    Blank header cells become "Unnamed: N" like spreadsheet headers; positions
    past the end of the header line get "_N" so extra row fields keep a key.
    """
    header = []
    for index, cell in enumerate(cells):
        if _is_missing(cell):
            header.append(f"_{index}")
        elif not str(cell).strip():
            header.append(f"Unnamed: {index}")
        else:
            header.append(str(cell))
    return header


def parse_csv(content: bytes) -> ParsedTable:
    """
    Parse CSV bytes. Every cell is kept as text; the first line is the header.

    Duplicate header names keep the value of the last occurrence. Short rows
    simply omit the missing keys; fields beyond the header are stored under
    "_<position>" (the third field of a two-column file is "_2").
    """
    width = _max_field_count(content)
    if not width:
        return ParsedTable(rows=[], columns=[])

    try:
        df = pd.read_csv(
            io.BytesIO(content),
            header=None,
            names=list(range(width)),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        return ParsedTable(rows=[], columns=[])
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        raise ParseError(str(e)) from e

    if df.empty:
        return ParsedTable(rows=[], columns=[])

    header = _csv_header(df.iloc[0])
    rows: List[Dict[str, Any]] = []

    for values in df.iloc[1:].itertuples(index=False, name=None):
        record: Dict[str, Any] = {}
        for name, value in zip(header, values):
            if _is_missing(value):
                continue
            record[name] = value
        rows.append(record)

    columns = describe_columns(rows, order_columns(header, rows))
    return ParsedTable(rows=rows, columns=columns)


def parse_excel(content: bytes) -> ParsedTable:
    """Parse the first sheet of an xlsx/xls workbook."""
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0)
    except Exception as e:
        raise ParseError(f"Error processing Excel file: {e}") from e

    header = [str(col) for col in df.columns]
    rows: List[Dict[str, Any]] = []

    for values in df.itertuples(index=False, name=None):
        record = {
            name: _to_python_scalar(value)
            for name, value in zip(header, values)
            if not _is_missing(value)
        }
        if record:
            rows.append(record)

    if not rows:
        raise ParseError("Excel file is empty or has no data")

    columns = describe_columns(rows, order_columns(header, rows))
    return ParsedTable(rows=rows, columns=columns)


def parse_file(content: bytes, file_type: str) -> ParsedTable:
    """Parse raw upload bytes according to the declared extension."""
    file_type = (file_type or "").lower()
    if file_type not in SUPPORTED_FILE_TYPES:
        raise UnsupportedFormatError(file_type)

    if file_type == "csv":
        logger.info("Processing CSV file...")
        table = parse_csv(content)
    else:
        logger.info("Processing Excel file...")
        table = parse_excel(content)

    logger.info(
        f"File processed successfully: {table.row_count} rows, {len(table.columns)} columns"
    )
    return table


def parse_path(path: Union[str, Path], file_type: str) -> ParsedTable:
    """Parse a file on disk."""
    file_type = (file_type or "").lower()
    if file_type not in SUPPORTED_FILE_TYPES:
        raise UnsupportedFormatError(file_type)

    path = Path(path)
    logger.info(f"Processing file at path: {path}")
    try:
        content = path.read_bytes()
    except FileNotFoundError as e:
        logger.error(f"File does not exist: {path}")
        raise ParseError(f"File does not exist: {path}") from e
    except OSError as e:
        raise ParseError(str(e)) from e

    return parse_file(content, file_type)


# =========================
# Schema check / temp files
# =========================

def validate_columns(columns: Any) -> List[Dict[str, str]]:
    """
    Check that columns is a list of {name, type} pairs before persistence.

    Returns a detached copy of the descriptors.
    """
    if not isinstance(columns, list):
        raise InvalidColumnSchemaError("Columns must be an array")

    validated = []
    for i, col in enumerate(columns):
        if (
            not isinstance(col, dict)
            or not isinstance(col.get("name"), str)
            or not col.get("name")
            or col.get("type") not in COLUMN_TYPES
        ):
            raise InvalidColumnSchemaError(
                f"Invalid column structure at index {i}: {col!r}", index=i
            )
        validated.append({"name": col["name"], "type": col["type"]})
    return validated


def cleanup_file(path: Union[str, Path]) -> None:
    """Remove a temporary upload; failures are logged, never raised."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Error cleaning up file {path}: {e}")


@contextmanager
def temporary_upload(
    content: bytes,
    filename: str,
    directory: Optional[str] = None,
) -> Iterator[Path]:
    """
    Write upload bytes to a temp file for the duration of the block.

    The file is removed on both the success and the failure path.
    """
    if directory:
        Path(directory).mkdir(parents=True, exist_ok=True)

    suffix = Path(filename or "").suffix
    fd, tmp_name = tempfile.mkstemp(prefix="file-", suffix=suffix, dir=directory)
    path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        yield path
    finally:
        cleanup_file(path)
