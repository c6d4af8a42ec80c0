"""
Error types raised by sheetframe.

Each error also derives from the closest built-in exception so callers
that only know about ``KeyError`` / ``IndexError`` / ``TypeError`` /
``ValueError`` keep working.
"""


class SheetFrameError(Exception):
    """Base class for every sheetframe error."""


class NotFoundError(SheetFrameError, KeyError):
    """A named column or sheet does not exist."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class ColumnNotFoundError(NotFoundError):
    pass


class SheetNotFoundError(NotFoundError):
    pass


class OutOfRangeError(SheetFrameError, IndexError):
    """A row index or column position lies outside the grid."""


class InvalidShapeError(SheetFrameError, TypeError):
    """The container or record type handed to the binder has the wrong shape."""


class UnsupportedTypeError(SheetFrameError, TypeError):
    """A value kind has no defined cell-text conversion."""


class EmptyInputError(SheetFrameError, ValueError):
    """A CSV source holds no records at all."""


class EmptySheetError(SheetFrameError, ValueError):
    """A worksheet holds no rows at all."""
