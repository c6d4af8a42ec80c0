"""
Cell text helpers shared by the format adapters, the binder and the
pandas interop layer.
"""

import datetime
import math

import numpy as np


def format_float(value: float) -> str:
    """Shortest round-trip text for *value*, never in exponent notation.

    ``1.0`` -> ``"1"``, ``0.1`` -> ``"0.1"``, ``1e21`` -> ``"1000000000000000000000"``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return np.format_float_positional(value, unique=True, trim="-")


def cell_text(value) -> str:
    """Convert a raw spreadsheet / frame value to the text stored in a Grid."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, np.bool_)):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return format_float(float(value))
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def trim_row(values) -> list:
    """Return *values* as cell text with trailing empty cells removed."""
    row = [cell_text(v) for v in values]
    while row and row[-1] == "":
        row.pop()
    return row
