"""
Grid Module
===========
In-memory table of string cells with named, ordered columns.  One Grid
represents one worksheet or one CSV file.

Columns are addressed either by name (``str``) or by zero-based position
(``int``).  Reads are strict: an unknown name, a row index past the end
and a column position past the end of the row are reported as distinct
errors.  Writes grow the grid as needed.
"""

import logging
from typing import List, Optional, Union

from . import binder, csv_io, excel_io
from .errors import ColumnNotFoundError, OutOfRangeError, UnsupportedTypeError

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = excel_io.DEFAULT_SHEET_NAME

# Joins cells into the dedup key of unique_rows; ASCII unit separator.
UNIT_SEPARATOR = "\x1f"

ColumnRef = Union[str, int]


class Grid:
    """A single sheet of string cells."""

    def __init__(self, name: Optional[str] = None,
                 columns: Optional[List[str]] = None,
                 rows: Optional[List[List[str]]] = None):
        self.name = name or None
        self._columns: List[str] = []
        self._column_index: dict = {}
        self._rows: List[List[str]] = []
        self.set_columns(columns if columns is not None else [])
        self.set_rows(rows if rows is not None else [])

    def __repr__(self):
        return (f"Grid(name={self.name!r}, columns={len(self._columns)}, "
                f"rows={len(self._rows)})")

    def __len__(self):
        return self.get_length()

    # ------------------------------------------------------------------
    # Schema / raw access
    # ------------------------------------------------------------------

    @property
    def sheet_name(self) -> str:
        """The sheet name, or ``Sheet1`` when none was set."""
        return self.name or DEFAULT_SHEET_NAME

    @property
    def columns(self) -> List[str]:
        """A copy of the column names; change them with :meth:`set_columns`."""
        return list(self._columns)

    @property
    def rows(self) -> List[List[str]]:
        return self._rows

    def _rebuild_column_index(self):
        # Last occurrence wins for repeated names.
        self._column_index = {name: i for i, name in enumerate(self._columns)}

    def set_columns(self, columns: List[str]) -> None:
        """Replace the column list.  Existing rows are left as they are."""
        self._columns = list(columns)
        self._rebuild_column_index()

    def set_rows(self, rows: List[List[str]]) -> None:
        """Replace the rows with copies of *rows*."""
        self._rows = [list(row) for row in rows]

    def column_position(self, name: str) -> int:
        """Return the position of column *name*."""
        try:
            return self._column_index[name]
        except KeyError:
            raise ColumnNotFoundError(f"Cannot find column '{name}'") from None

    def get_length(self) -> int:
        return len(self._rows)

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    @staticmethod
    def _check_ref(column: ColumnRef):
        if isinstance(column, bool) or not isinstance(column, (str, int)):
            raise UnsupportedTypeError(
                f"Column reference of type {type(column).__name__} not supported")

    def get_value(self, row_index: int, column: ColumnRef) -> str:
        """Return the cell at *row_index* / *column*.

        Raises:
            ColumnNotFoundError: *column* is a name that is not a column.
            OutOfRangeError: the row, or the column position within the
                row, does not exist.
        """
        self._check_ref(column)
        if isinstance(column, str):
            position = self.column_position(column)
        else:
            position = column

        if row_index < 0 or row_index >= len(self._rows):
            raise OutOfRangeError(f"Row index {row_index} out of range")
        row = self._rows[row_index]
        if position < 0 or position >= len(row):
            raise OutOfRangeError(f"Column index {position} out of range")
        return row[position]

    def set_value(self, row_index: int, column: ColumnRef, value: str) -> None:
        """Write *value* at *row_index* / *column*, growing the grid as needed.

        An unknown column name is appended to the columns.  Missing rows
        up to *row_index* are created with one empty cell per column, and
        a row shorter than the target position is padded with ``""``.
        """
        self._check_ref(column)
        if row_index < 0 or (isinstance(column, int) and column < 0):
            raise OutOfRangeError(
                f"Negative index ({row_index}, {column!r}) not supported")

        if isinstance(column, str):
            if column not in self._column_index:
                self._columns.append(column)
                self._rebuild_column_index()
            position = self._column_index[column]
        else:
            position = column

        while len(self._rows) <= row_index:
            self._rows.append([""] * len(self._columns))

        row = self._rows[row_index]
        if position >= len(row):
            row.extend([""] * (position + 1 - len(row)))
        row[position] = value

    def unique_rows(self) -> None:
        """Drop duplicate rows, keeping the first occurrence of each."""
        seen = set()
        unique = []
        for row in self._rows:
            key = UNIT_SEPARATOR.join(row)
            if key in seen:
                continue
            seen.add(key)
            unique.append(row)
        dropped = len(self._rows) - len(unique)
        if dropped:
            logger.debug(f"unique_rows dropped {dropped} duplicate row(s)")
        self._rows = unique

    # ------------------------------------------------------------------
    # Format adapters
    # ------------------------------------------------------------------

    def read_csv(self, src: str, encoding: str = csv_io.DEFAULT_ENCODING) -> "Grid":
        return csv_io.read_csv(self, src, encoding=encoding)

    def save_csv(self, dst: str, encoding: str = csv_io.DEFAULT_ENCODING) -> str:
        return csv_io.save_csv(self, dst, encoding=encoding)

    def read_excel(self, src: str) -> "Grid":
        return excel_io.read_excel(self, src)

    def save_excel(self, dst: str) -> str:
        return excel_io.save_excel(self, dst)

    # ------------------------------------------------------------------
    # Record binding
    # ------------------------------------------------------------------

    def fill_records(self, record_type, into=None,
                     separator: str = binder.NESTED_SEPARATOR) -> list:
        """Build one *record_type* instance per row.  See :mod:`sheetframe.binder`."""
        return binder.fill_records(self, record_type, into=into, separator=separator)

    def fill_sheet(self, records, separator: str = binder.NESTED_SEPARATOR) -> None:
        """Replace the grid content with *records*.  See :mod:`sheetframe.binder`."""
        binder.fill_sheet(self, records, separator=separator)
