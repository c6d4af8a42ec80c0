"""
Record Binder
=============
Maps Grid rows to and from dataclass records.

A dataclass field is bound to a column when its metadata carries a
column name, most easily via :func:`column`::

    @dataclass
    class Address:
        city: str = column("city")

    @dataclass
    class Person:
        id: int = column("id")
        name: str = column("name")
        home: Address = column("home", default_factory=Address)
        born: Optional[datetime] = column("born", default=None)

Nested dataclass fields use the composed column name
``outer + separator + inner`` (``home_city`` above).  Fields marked with
:func:`embed`, and fields inherited from a base dataclass, are bound
without a prefix.

Every supported annotation maps to one format/parse pair in
``_CONVERTERS``; types that implement :class:`CellValue` bring their own.
Writing is strict (unsupported kinds raise).  Reading is lenient per
field: a missing column, a short row or unparsable text leaves the field
at its default so a partly malformed sheet still yields every record.
"""

import dataclasses
import datetime
import logging
import re
import types
import typing
from typing import Any, Callable, List, NewType, Optional, Protocol, runtime_checkable

from .cells import format_float
from .errors import InvalidShapeError, SheetFrameError, UnsupportedTypeError

logger = logging.getLogger(__name__)

COLUMN_KEY = "column"
EMBED_KEY = "embed"
NESTED_SEPARATOR = "_"

UInt = NewType("UInt", int)


def column(name: str, **kwargs):
    """A dataclass field bound to column *name*."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[COLUMN_KEY] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def embed(**kwargs):
    """A dataclass-typed field whose columns are bound without a prefix."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[EMBED_KEY] = True
    return dataclasses.field(metadata=metadata, **kwargs)


@runtime_checkable
class CellValue(Protocol):
    """A type that converts itself to and from cell text."""

    def to_cell(self) -> str:
        ...

    @classmethod
    def from_cell(cls, text: str) -> Any:
        ...


# ---------------------------------------------------------------------------
# Scalar converters
# ---------------------------------------------------------------------------

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_UINT_RE = re.compile(r"^\+?[0-9]+$")
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}
_TIMESTAMP_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?"
    r"([Zz]|[+-]\d{2}:\d{2})?$"
)

ZERO_TIME = datetime.datetime(1, 1, 1, tzinfo=datetime.timezone.utc)


def _parse_int(text: str) -> int:
    if not _INT_RE.match(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _parse_uint(text: str) -> int:
    if not _UINT_RE.match(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    return int(text)


def _parse_float(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid float: {text!r}")
    return float(text)


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean: {text!r}")


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def format_timestamp(value: datetime.datetime) -> str:
    """RFC 3339 text with whole seconds (``Z`` for UTC).

    A naive value is written without an offset
    (``2024-01-02T03:04:05``) and reads back naive.
    """
    text = value.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def parse_timestamp(text: str) -> datetime.datetime:
    """Parse :func:`format_timestamp` output, or any RFC 3339 timestamp."""
    match = _TIMESTAMP_RE.match(text)
    if not match:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}")
    date_part, clock, fraction, offset = match.groups()
    if fraction:
        # fromisoformat wants at most microsecond precision
        clock = f"{clock}.{(fraction + '000000')[:6]}"
    if offset in ("Z", "z"):
        offset = "+00:00"
    return datetime.datetime.fromisoformat(f"{date_part}T{clock}{offset or ''}")


@dataclasses.dataclass(frozen=True)
class _Converter:
    format: Callable[[Any], str]
    parse: Callable[[str], Any]
    zero: Any


_CONVERTERS = {
    str: _Converter(str, str, ""),
    int: _Converter(lambda v: str(int(v)), _parse_int, 0),
    UInt: _Converter(lambda v: str(int(v)), _parse_uint, 0),
    float: _Converter(lambda v: format_float(float(v)), _parse_float, 0.0),
    bool: _Converter(_format_bool, _parse_bool, False),
    datetime.datetime: _Converter(format_timestamp, parse_timestamp, ZERO_TIME),
}


def _cell_value_converter(tp) -> _Converter:
    return _Converter(lambda v: v.to_cell(), tp.from_cell, None)


def _implements_cell_value(tp) -> bool:
    return isinstance(tp, type) and issubclass(tp, CellValue)


# ---------------------------------------------------------------------------
# Binding plan
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class _Binding:
    """How one dataclass field maps onto the grid."""
    field: dataclasses.Field
    column: Optional[str] = None
    converter: Optional[_Converter] = None
    nested: Optional[List["_Binding"]] = None
    nested_type: Any = None
    optional: bool = False

    @property
    def name(self) -> str:
        return self.field.name


def _unwrap_optional(tp):
    """Return ``(inner_type, is_optional)`` for ``Optional[X]`` / ``X | None``."""
    origin = typing.get_origin(tp)
    if origin is typing.Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1 and len(typing.get_args(tp)) == 2:
            return args[0], True
    return tp, False


def _is_record_type(tp) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _type_name(tp) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def build_plan(record_type, prefix: str = "",
               separator: str = NESTED_SEPARATOR) -> List[_Binding]:
    """Resolve the bindings of *record_type*'s fields.

    Raises:
        UnsupportedTypeError: a bound field has a type with no conversion.
    """
    hints = typing.get_type_hints(record_type)
    plan = []
    for f in dataclasses.fields(record_type):
        tp, optional = _unwrap_optional(hints.get(f.name, f.type))

        if f.metadata.get(EMBED_KEY):
            if not _is_record_type(tp):
                raise UnsupportedTypeError(
                    f"Embedded field '{f.name}' must be a dataclass, "
                    f"got {_type_name(tp)}")
            plan.append(_Binding(
                field=f, nested=build_plan(tp, prefix, separator),
                nested_type=tp, optional=optional))
            continue

        name = f.metadata.get(COLUMN_KEY)
        if not name:
            continue
        if prefix:
            name = prefix + separator + name

        if tp in _CONVERTERS:
            plan.append(_Binding(field=f, column=name, converter=_CONVERTERS[tp],
                                 optional=optional))
        elif _implements_cell_value(tp):
            plan.append(_Binding(field=f, column=name,
                                 converter=_cell_value_converter(tp),
                                 optional=optional))
        elif _is_record_type(tp):
            plan.append(_Binding(
                field=f, nested=build_plan(tp, name, separator),
                nested_type=tp, optional=optional))
        else:
            raise UnsupportedTypeError(
                f"Unsupported type {_type_name(tp)} for field "
                f"'{record_type.__name__}.{f.name}'")
    return plan


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

def _field_default(f: dataclasses.Field, zero):
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return zero


def _zero_for(f: dataclasses.Field, record_type):
    """Default for a field the grid says nothing about."""
    hints = typing.get_type_hints(record_type)
    tp, optional = _unwrap_optional(hints.get(f.name, f.type))
    if optional:
        zero = None
    elif tp in _CONVERTERS:
        zero = _CONVERTERS[tp].zero
    elif _is_record_type(tp):
        zero = None
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            return zero_record(tp)
    else:
        zero = None
    return _field_default(f, zero)


def zero_record(record_type):
    """An instance of *record_type* with every field at its default."""
    kwargs = {f.name: _zero_for(f, record_type)
              for f in dataclasses.fields(record_type) if f.init}
    return record_type(**kwargs)


# ---------------------------------------------------------------------------
# Rows -> records
# ---------------------------------------------------------------------------

def _read_record(grid, row_index: int, record_type, plan: List[_Binding]):
    bound = {b.name: b for b in plan}
    kwargs = {}
    for f in dataclasses.fields(record_type):
        if not f.init:
            continue
        binding = bound.get(f.name)
        if binding is None:
            kwargs[f.name] = _zero_for(f, record_type)
        elif binding.nested is not None:
            kwargs[f.name] = _read_record(grid, row_index, binding.nested_type,
                                          binding.nested)
        else:
            kwargs[f.name] = _read_scalar(grid, row_index, record_type, binding)
    return record_type(**kwargs)


def _read_scalar(grid, row_index: int, record_type, binding: _Binding):
    try:
        text = grid.get_value(row_index, binding.column)
        return binding.converter.parse(text)
    except (SheetFrameError, ValueError, TypeError) as exc:
        logger.debug(f"Row {row_index}, column '{binding.column}': {exc}; "
                     f"using default")
        return _zero_for(binding.field, record_type)


def fill_records(grid, record_type, into: Optional[list] = None,
                 separator: str = NESTED_SEPARATOR) -> list:
    """Build one *record_type* instance per grid row.

    Args:
        grid: Source grid.
        record_type: A dataclass type.
        into: Optional list the new records are appended to.
        separator: Joins outer and inner column names of nested records.

    Returns:
        The list of records (``into`` when given).

    Raises:
        InvalidShapeError: *record_type* is not a dataclass type, or
            *into* is not a list.
        UnsupportedTypeError: a bound field has no conversion.
    """
    if not _is_record_type(record_type):
        raise InvalidShapeError(
            f"record_type must be a dataclass type, got {record_type!r}")
    if into is not None and not isinstance(into, list):
        raise InvalidShapeError(
            f"into must be a list, got {type(into).__name__}")

    plan = build_plan(record_type, separator=separator)
    records = into if into is not None else []
    for row_index in range(grid.get_length()):
        records.append(_read_record(grid, row_index, record_type, plan))
    logger.debug(f"Built {grid.get_length()} {record_type.__name__} record(s)")
    return records


# ---------------------------------------------------------------------------
# Records -> rows
# ---------------------------------------------------------------------------

def _write_record(grid, row_index: int, record, plan: List[_Binding]):
    for binding in plan:
        value = getattr(record, binding.name)
        if binding.nested is not None:
            if value is None:
                value = zero_record(binding.nested_type)
            _write_record(grid, row_index, value, binding.nested)
            continue
        text = "" if value is None else binding.converter.format(value)
        grid.set_value(row_index, binding.column, text)


def _check_records(records):
    if isinstance(records, (str, bytes)) or not isinstance(records, (list, tuple)):
        raise InvalidShapeError(
            f"records must be a list or tuple, got {type(records).__name__}")
    if not records:
        return None
    record_type = type(records[0])
    for record in records:
        if isinstance(record, type) or not dataclasses.is_dataclass(record):
            raise InvalidShapeError(
                f"records must hold dataclass instances, got {record!r}")
        if type(record) is not record_type:
            raise InvalidShapeError(
                f"records must share one type: {record_type.__name__} "
                f"and {type(record).__name__}")
    return record_type


def fill_sheet(grid, records, separator: str = NESTED_SEPARATOR) -> None:
    """Replace *grid*'s columns and rows with the bound fields of *records*.

    Raises:
        InvalidShapeError: *records* is not a list/tuple of instances of
            one dataclass type.  Nothing is changed in that case.
        UnsupportedTypeError: a bound field has no conversion.
    """
    record_type = _check_records(records)
    plan = build_plan(record_type, separator=separator) if record_type else []

    grid.set_rows([])
    grid.set_columns([])
    for row_index, record in enumerate(records):
        _write_record(grid, row_index, record, plan)
    logger.debug(f"Wrote {len(records)} record(s) into {grid!r}")


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------

def trim_strings(record) -> None:
    """Strip surrounding whitespace from every ``str`` field of *record*."""
    if isinstance(record, type) or not dataclasses.is_dataclass(record):
        raise InvalidShapeError(
            f"trim_strings expects a dataclass instance, got {record!r}")
    for f in dataclasses.fields(record):
        value = getattr(record, f.name)
        if isinstance(value, str):
            setattr(record, f.name, value.strip())
