"""
Workbook Module
===============
An ordered collection of named Grids, read from and saved to a
multi-sheet ``.xlsx`` file.
"""

import logging
from typing import Dict, Iterator, List

from . import excel_io
from .errors import SheetNotFoundError
from .grid import Grid

logger = logging.getLogger(__name__)


class Workbook:
    """Sheets keyed by name, kept in registration order."""

    def __init__(self, *grids: Grid):
        self.sheet_names: List[str] = []
        self.sheets: Dict[str, Grid] = {}
        self.append_sheet(*grids)

    def __repr__(self):
        return f"Workbook(sheets={self.sheet_names!r})"

    def __len__(self):
        return len(self.sheet_names)

    def __iter__(self) -> Iterator[Grid]:
        return (self.sheets[name] for name in self.sheet_names)

    def __contains__(self, sheet_name):
        return sheet_name in self.sheets

    def append_sheet(self, *grids: Grid) -> None:
        """Register each grid under its sheet name.

        A name seen before keeps its position and its grid is replaced.
        """
        for grid in grids:
            sheet_name = grid.sheet_name
            if sheet_name not in self.sheets:
                self.sheet_names.append(sheet_name)
            self.sheets[sheet_name] = grid

    def get_sheet(self, sheet_name: str) -> Grid:
        try:
            return self.sheets[sheet_name]
        except KeyError:
            raise SheetNotFoundError(f"Sheet '{sheet_name}' not found") from None

    def read(self, src: str) -> "Workbook":
        """Replace the content with every sheet of the workbook at *src*.

        The first row of a sheet holds the column names; an empty sheet
        becomes an empty Grid.
        """
        self.sheet_names = []
        self.sheets = {}
        for sheet_name, rows in excel_io.load_workbook_rows(src):
            grid = Grid(sheet_name)
            if rows:
                grid.set_columns(rows[0])
                grid.set_rows(rows[1:])
            self.append_sheet(grid)
        logger.info(f"Read workbook '{src}': {len(self.sheet_names)} sheet(s)")
        return self

    def save(self, dst: str) -> str:
        """Write every sheet to *dst* in registration order."""
        return excel_io.save_sheets(
            dst, [(name, self.sheets[name]) for name in self.sheet_names])


def read_workbook(src: str) -> Workbook:
    return Workbook().read(src)
