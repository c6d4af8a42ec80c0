#!/usr/bin/env python
"""
sheetframe – CLI entry point.

Usage:
    # Convert between CSV and Excel (or copy a whole workbook)
    python -m sheetframe.main convert <src> <dst> [--sheet NAME] [--unique]

    # List the sheets of a workbook with their sizes
    python -m sheetframe.main sheets <excel_file>

    # Print the first rows of a CSV file or worksheet
    python -m sheetframe.main preview <src> [--sheet NAME] [--rows N]

Global options ``--config`` (YAML, see :mod:`sheetframe.config`) and
``--log-level`` go before the sub-command.
"""

import argparse
import logging
import os
import sys
import zipfile

from openpyxl.utils.exceptions import InvalidFileException

from sheetframe.config import load_config
from sheetframe.fileutils import file_exists
from sheetframe.frames import to_frame
from sheetframe.grid import Grid
from sheetframe.workbook import Workbook

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")


def setup_logging(level_str: str = "INFO"):
    """Configure logging."""
    level = getattr(logging, level_str.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def _is_excel(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in EXCEL_EXTENSIONS


def load_grid(path: str, sheet: str = None, encoding: str = "utf-8") -> Grid:
    """Load a single Grid from a CSV file or one sheet of a workbook."""
    grid = Grid(sheet)
    if _is_excel(path):
        return grid.read_excel(path)
    return grid.read_csv(path, encoding=encoding)


def save_grid(grid: Grid, path: str, encoding: str = "utf-8") -> str:
    if _is_excel(path):
        return grid.save_excel(path)
    return grid.save_csv(path, encoding=encoding)


def convert(src: str, dst: str, sheet: str = None, unique: bool = False,
            encoding: str = "utf-8") -> str:
    """Convert *src* to *dst*; the formats follow the file extensions.

    Excel to Excel without *sheet* copies every sheet.
    """
    if _is_excel(src) and _is_excel(dst) and sheet is None:
        workbook = Workbook().read(src)
        if unique:
            for grid in workbook:
                grid.unique_rows()
        return workbook.save(dst)

    grid = load_grid(src, sheet, encoding)
    if unique:
        grid.unique_rows()
    return save_grid(grid, dst, encoding)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Read, convert and inspect CSV / Excel tables"
    )
    parser.add_argument("--config", default="sheetframe.yaml",
                        help="Path to config YAML file (default: sheetframe.yaml)")
    parser.add_argument("--log-level", default=None,
                        help="Logging level: DEBUG, INFO, WARNING, ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    # ---- convert ----
    p_conv = sub.add_parser("convert", help="Convert between CSV and Excel")
    p_conv.add_argument("src", help="Source .csv or .xlsx file")
    p_conv.add_argument("dst", help="Destination .csv or .xlsx file")
    p_conv.add_argument("--sheet", default=None,
                        help="Sheet to read (default: first sheet)")
    p_conv.add_argument("--unique", action="store_true", default=None,
                        help="Drop duplicate rows before writing")

    # ---- sheets ----
    p_sheets = sub.add_parser("sheets", help="List the sheets of a workbook")
    p_sheets.add_argument("src", help="Workbook (.xlsx)")

    # ---- preview ----
    p_prev = sub.add_parser("preview", help="Print the first rows of a table")
    p_prev.add_argument("src", help="Source .csv or .xlsx file")
    p_prev.add_argument("--sheet", default=None,
                        help="Sheet to read (default: first sheet)")
    p_prev.add_argument("--rows", type=int, default=None,
                        help="Number of rows to print (overrides config)")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(args.log_level or config["log_level"])
    encoding = config["csv_encoding"]

    if not file_exists(args.src):
        logger.error(f"File not found: {args.src}")
        sys.exit(1)

    if args.command == "convert":
        unique = config["unique_rows"] if args.unique is None else args.unique
        out = convert(args.src, args.dst, sheet=args.sheet, unique=unique,
                      encoding=encoding)
        logger.info(f"Wrote {out}")

    elif args.command == "sheets":
        try:
            workbook = Workbook().read(args.src)
        except (InvalidFileException, zipfile.BadZipFile) as exc:
            logger.error(f"Not an Excel workbook: {args.src} ({exc})")
            sys.exit(1)
        for grid in workbook:
            print(f"{grid.sheet_name}\t{len(grid.columns)} columns\t"
                  f"{len(grid)} rows")

    elif args.command == "preview":
        grid = load_grid(args.src, args.sheet, encoding)
        n = args.rows if args.rows is not None else config["preview_rows"]
        print(to_frame(grid).head(n).to_string(index=False))


if __name__ == "__main__":
    main()
