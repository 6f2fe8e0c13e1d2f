"""
Tabular Reader

Extracts ordered field-value rows from a roster file, in either of the two
layouts carriers export:

- Delimited text (CSV), decoded as UTF-8 with a BOM tolerated and a latin-1
  fallback for legacy exports
- Spreadsheet workbooks, read through pandas/openpyxl

Key behaviour:
- Fully blank rows are dropped before anything else, so `header_row` counts
  non-blank rows (0 = first non-blank row)
- The header row may sit below report title rows; rows above it are ignored
- Multi-sheet workbooks: the first sheet whose name contains the carrier's
  keyword (case-insensitive) wins, else the first sheet
- Carrier-specific text pre-processing (e.g. formula escaping) is supplied
  by the caller, never applied by default
- Rows are yielded lazily as dicts keyed by the header labels, with every
  value a stripped string ("" for empty cells)

Failures:
- Unreadable bytes or a missing header row raise MalformedFileError naming
  the carrier and file
- A header with no data rows yields nothing (not an error)
"""

import csv
import io
import logging
from typing import Callable, Dict, Iterator, List, Optional

import pandas as pd

from persistency.models.enums import FileFormat


logger = logging.getLogger(__name__)

RawRow = Dict[str, str]

TextPreprocessor = Callable[[str], str]


class MalformedFileError(Exception):
    """A roster file that cannot be read at all."""

    def __init__(self, carrier: str, file_name: Optional[str], reason: str):
        self.carrier = carrier
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"{carrier}: cannot read '{file_name or '<upload>'}': {reason}")


# =============================================================================
# DECODING AND GRID LOADING
# =============================================================================

def decode_text(content: bytes) -> str:
    """Decode delimited text, tolerating a UTF-8 BOM and falling back to latin-1."""
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        return content.decode('latin-1')


def select_sheet(sheet_names: List[str], keyword: Optional[str]) -> str:
    """
    Pick the sheet to read from a workbook.

    Args:
        sheet_names: Sheet names in workbook order
        keyword: Carrier-declared keyword, matched case-insensitively

    Returns:
        The first sheet containing the keyword, else the first sheet
    """
    if keyword:
        lowered = keyword.lower()
        for name in sheet_names:
            if lowered in str(name).lower():
                return name
    return sheet_names[0]


def _load_delimited_grid(content: bytes, preprocess: Optional[TextPreprocessor]) -> pd.DataFrame:
    text = decode_text(content)
    if preprocess is not None:
        text = preprocess(text)

    # Ragged exports (title rows, trailing commas) need a frame as wide as the widest row
    width = max((len(row) for row in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        return pd.DataFrame()

    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )


def _load_spreadsheet_grid(content: bytes, sheet_keyword: Optional[str]) -> pd.DataFrame:
    workbook = pd.ExcelFile(io.BytesIO(content))
    if not workbook.sheet_names:
        return pd.DataFrame()
    sheet_name = select_sheet(workbook.sheet_names, sheet_keyword)
    logger.debug(f"Reading sheet '{sheet_name}' of {workbook.sheet_names}")
    return pd.read_excel(workbook, sheet_name=sheet_name, header=None, dtype=str)


def _clean_grid(grid: pd.DataFrame) -> pd.DataFrame:
    """Stringify cells, strip whitespace and drop rows with no content."""
    if grid.empty:
        return grid
    cleaned = grid.fillna('').astype(str).apply(lambda column: column.str.strip())
    cleaned = cleaned.replace({'nan': '', 'NaT': ''})
    non_blank = (cleaned != '').any(axis=1)
    return cleaned[non_blank].reset_index(drop=True)


def _header_labels(values: List[str]) -> List[str]:
    labels = []
    for index, value in enumerate(values):
        label = str(value).strip()
        labels.append(label if label else f"COL_{index}")
    return labels


# =============================================================================
# PUBLIC API
# =============================================================================

def read_rows(
    content: bytes,
    file_format: FileFormat,
    header_row: int = 0,
    sheet_keyword: Optional[str] = None,
    preprocess: Optional[TextPreprocessor] = None,
    carrier: str = 'unknown',
    file_name: Optional[str] = None,
) -> Iterator[RawRow]:
    """
    Lazily read a roster into header-keyed rows.

    Args:
        content: Raw file bytes
        file_format: Delimited text or spreadsheet
        header_row: Index of the header among non-blank rows
        sheet_keyword: Preferred sheet keyword for workbooks
        preprocess: Carrier-declared text transform applied before CSV splitting
        carrier: Carrier name attached to errors
        file_name: File name attached to errors

    Yields:
        Dict of header label -> stripped cell text, one per non-blank data row

    Raises:
        MalformedFileError: If the bytes cannot be parsed or the header row is absent
    """
    try:
        if file_format == FileFormat.SPREADSHEET:
            grid = _load_spreadsheet_grid(content, sheet_keyword)
        else:
            grid = _load_delimited_grid(content, preprocess)
    except Exception as e:
        raise MalformedFileError(carrier, file_name, str(e)) from e

    grid = _clean_grid(grid)
    if len(grid) <= header_row:
        raise MalformedFileError(
            carrier,
            file_name,
            f"header row {header_row + 1} not found ({len(grid)} non-blank rows)",
        )

    labels = _header_labels(grid.iloc[header_row].tolist())
    data = grid.iloc[header_row + 1:]
    logger.debug(f"{carrier}: header {labels}, {len(data)} data rows")

    for values in data.itertuples(index=False, name=None):
        # Later duplicates of a label never overwrite a filled earlier column
        row: RawRow = {}
        for label, value in zip(labels, values):
            if label not in row or not row[label]:
                row[label] = value
        yield row


__all__ = [
    'RawRow',
    'TextPreprocessor',
    'MalformedFileError',
    'decode_text',
    'select_sheet',
    'read_rows',
]
