"""
CSV adapter: load a comma-separated file into a Grid and write one back.

The first record is the header row; every following record becomes a
data row as-is (no padding, no trimming).
"""

import csv
import logging

from .errors import EmptyInputError
from .fileutils import ensure_parent_dir

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"


def read_csv(grid, src: str, encoding: str = DEFAULT_ENCODING):
    """Populate *grid* from the CSV file at *src* and return it."""
    with open(src, "r", encoding=encoding, newline="") as f:
        records = list(csv.reader(f))

    if not records:
        raise EmptyInputError(f"CSV file is empty: {src}")

    grid.set_columns(records[0])
    grid.set_rows(records[1:])
    logger.info(f"Read CSV '{src}': {len(records[0])} columns, "
                f"{len(records) - 1} rows")
    return grid


def save_csv(grid, dst: str, encoding: str = DEFAULT_ENCODING) -> str:
    """Write *grid* to *dst*: header first, then every row in order."""
    ensure_parent_dir(dst)
    columns = grid.columns
    rows = grid.rows
    with open(dst, "w", encoding=encoding, newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(columns)
        writer.writerows(rows)
    logger.info(f"Saved CSV '{dst}': {len(columns)} columns, {len(rows)} rows")
    return dst
