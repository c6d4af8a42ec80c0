"""Thread-safe Grid: one re-entrant lock guards the whole table."""

import functools
import threading
from contextlib import contextmanager

from .grid import Grid


def _locked(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class SyncGrid(Grid):
    """A Grid whose accessors may be called from several threads.

    Columns, rows and name share a single lock, so a reader never sees
    columns and rows from different writes.  Use :meth:`locked` to make a
    sequence of calls atomic.
    """

    def __init__(self, *args, **kwargs):
        self._lock = threading.RLock()
        super().__init__(*args, **kwargs)

    @contextmanager
    def locked(self):
        with self._lock:
            yield self

    @property
    def columns(self):
        with self._lock:
            return list(self._columns)

    @property
    def rows(self):
        with self._lock:
            return [list(row) for row in self._rows]

    set_columns = _locked(Grid.set_columns)
    set_rows = _locked(Grid.set_rows)
    column_position = _locked(Grid.column_position)
    get_length = _locked(Grid.get_length)
    get_value = _locked(Grid.get_value)
    set_value = _locked(Grid.set_value)
    unique_rows = _locked(Grid.unique_rows)
    read_csv = _locked(Grid.read_csv)
    save_csv = _locked(Grid.save_csv)
    read_excel = _locked(Grid.read_excel)
    save_excel = _locked(Grid.save_excel)
    fill_records = _locked(Grid.fill_records)
    fill_sheet = _locked(Grid.fill_sheet)
