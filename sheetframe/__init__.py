"""sheetframe – string-cell tables backed by CSV and Excel files.

  * :class:`Grid` – one sheet: ordered column names plus rows of text
    cells, addressed by row index and column name or position.
  * :class:`Workbook` – named Grids saved to / loaded from one ``.xlsx``.
  * :mod:`binder` – fills dataclass records from Grid rows and back,
    driven by ``column("name")`` field metadata.

A companion :class:`SyncGrid` guards every accessor with a lock, and
:mod:`frames` converts Grids to and from ``pandas.DataFrame``.
"""

from .binder import CellValue, UInt, column, embed, fill_records, fill_sheet, trim_strings
from .errors import (
    ColumnNotFoundError,
    EmptyInputError,
    EmptySheetError,
    InvalidShapeError,
    NotFoundError,
    OutOfRangeError,
    SheetFrameError,
    SheetNotFoundError,
    UnsupportedTypeError,
)
from .grid import DEFAULT_SHEET_NAME, Grid
from .sync_grid import SyncGrid
from .workbook import Workbook, read_workbook

__all__ = [
    "Grid",
    "SyncGrid",
    "Workbook",
    "read_workbook",
    "DEFAULT_SHEET_NAME",
    "column",
    "embed",
    "fill_records",
    "fill_sheet",
    "trim_strings",
    "CellValue",
    "UInt",
    "SheetFrameError",
    "NotFoundError",
    "ColumnNotFoundError",
    "SheetNotFoundError",
    "OutOfRangeError",
    "InvalidShapeError",
    "UnsupportedTypeError",
    "EmptyInputError",
    "EmptySheetError",
]
