"""
Excel Adapter Module
====================
Reads worksheets into Grids and writes Grids back to ``.xlsx`` files
using openpyxl.

Conventions shared by the single-sheet and the multi-sheet paths:

* Cell coordinates are 1-indexed ``(column, row)``; row 1 holds the
  column names and data rows start at row 2.
* Every cell comes back as text (see :func:`sheetframe.cells.cell_text`);
  trailing empty cells of a row and trailing empty rows are dropped.
* Text starting with ``=`` is written as a string, never as a formula.
"""

import logging

import openpyxl
from openpyxl import Workbook

from .cells import trim_row
from .errors import EmptySheetError, SheetNotFoundError
from .fileutils import ensure_parent_dir

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Sheet1"


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _sheet_rows(ws) -> list:
    """Return every row of *ws* as a list of cell strings."""
    rows = [trim_row(values) for values in ws.iter_rows(values_only=True)]
    while rows and not rows[-1]:
        rows.pop()
    return rows


def _open(src: str):
    return openpyxl.load_workbook(src, read_only=True, data_only=True)


def sheet_names(src: str) -> list:
    """Return the sheet names of the workbook at *src* in workbook order."""
    wb = _open(src)
    try:
        return list(wb.sheetnames)
    finally:
        wb.close()


def load_sheet_rows(src: str, sheet_name: str = None):
    """Load one worksheet.

    Returns ``(sheet_name, rows)``; when *sheet_name* is ``None`` the first
    sheet of the workbook is used.
    """
    wb = _open(src)
    try:
        if sheet_name is None:
            sheet_name = wb.sheetnames[0]
        if sheet_name not in wb.sheetnames:
            raise SheetNotFoundError(f"Sheet '{sheet_name}' not found in {src}")
        return sheet_name, _sheet_rows(wb[sheet_name])
    finally:
        wb.close()


def load_workbook_rows(src: str) -> list:
    """Load every worksheet as ``(sheet_name, rows)`` pairs in workbook order."""
    wb = _open(src)
    try:
        return [(name, _sheet_rows(wb[name])) for name in wb.sheetnames]
    finally:
        wb.close()


def read_excel(grid, src: str):
    """Populate *grid* from one sheet of the workbook at *src*.

    The sheet is ``grid.name`` when set, otherwise the first sheet, whose
    name is then recorded on the grid.
    """
    sheet_name, rows = load_sheet_rows(src, grid.name)
    if not rows:
        raise EmptySheetError(f"Sheet '{sheet_name}' is empty")

    grid.name = sheet_name
    grid.set_columns(rows[0])
    grid.set_rows(rows[1:])
    logger.info(f"Read sheet '{sheet_name}' from '{src}': "
                f"{len(rows[0])} columns, {len(rows) - 1} rows")
    return grid


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def _set_text(ws, row: int, column: int, value: str):
    cell = ws.cell(row=row, column=column, value=value)
    if isinstance(value, str) and value.startswith("="):
        cell.data_type = "s"
    return cell


def write_sheet(ws, columns, rows) -> None:
    """Write a header row and the data rows into worksheet *ws*."""
    for ci, name in enumerate(columns, 1):
        _set_text(ws, 1, ci, name)
    for ri, row in enumerate(rows, 2):
        for ci, value in enumerate(row, 1):
            _set_text(ws, ri, ci, value)


def save_sheets(dst: str, grids) -> str:
    """Save ``(sheet_name, grid)`` pairs to *dst* as one workbook.

    Sheets keep the given order.  The implicit ``Sheet1`` of a new
    workbook is removed unless one of the pairs uses that name; a
    workbook with no pairs at all keeps it.
    """
    grids = list(grids)
    ensure_parent_dir(dst)

    wb = Workbook()
    default_ws = wb.active
    default_ws.title = DEFAULT_SHEET_NAME
    names = [sheet_name for sheet_name, _ in grids]
    default_position = (names.index(DEFAULT_SHEET_NAME)
                        if DEFAULT_SHEET_NAME in names else None)

    # create_sheet compares titles case-insensitively, so the placeholder
    # has to go before "sheet1" or "SHEET1" can be created.
    if grids and default_position is None:
        wb.remove(default_ws)

    for position, (sheet_name, grid) in enumerate(grids):
        if position == default_position:
            ws = default_ws
        else:
            ws = wb.create_sheet(title=sheet_name)
        write_sheet(ws, grid.columns, grid.rows)
        logger.debug(f"  Sheet '{sheet_name}': {len(grid.rows)} rows")

    if grids:
        if default_position:
            wb.move_sheet(default_ws, offset=default_position)
        wb.active = 0

    wb.save(dst)
    wb.close()
    logger.info(f"Saved workbook '{dst}' with {len(wb.sheetnames)} sheet(s)")
    return dst


def save_excel(grid, dst: str) -> str:
    """Save a single grid as a one-sheet workbook titled ``grid.sheet_name``."""
    return save_sheets(dst, [(grid.sheet_name, grid)])
