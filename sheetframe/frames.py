"""
pandas interop — convert Grids to and from ``pandas.DataFrame``.
"""

from typing import Optional

import pandas as pd

from .cells import cell_text
from .grid import Grid


def to_frame(grid: Grid) -> pd.DataFrame:
    """Return the grid as a DataFrame of strings.

    Short rows are padded with ``""``.  Cells past the last named column
    get their position as column label.
    """
    columns = list(grid.columns)
    rows = grid.rows
    width = max([len(columns)] + [len(row) for row in rows])
    labels = columns + list(range(len(columns), width))
    data = [list(row) + [""] * (width - len(row)) for row in rows]
    return pd.DataFrame(data, columns=labels, dtype=object)


def from_frame(df: pd.DataFrame, name: Optional[str] = None) -> Grid:
    """Build a Grid from *df*; missing values become ``""``."""
    columns = [cell_text(c) for c in df.columns]
    rows = []
    for values in df.itertuples(index=False, name=None):
        rows.append(["" if _is_missing(v) else cell_text(v) for v in values])
    return Grid(name, columns=columns, rows=rows)


def _is_missing(value) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
