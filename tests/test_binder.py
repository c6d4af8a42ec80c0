"""Tests for the record binder (dataclass <-> Grid rows)."""

import datetime
import os
import sys
from dataclasses import dataclass
from typing import List, Optional

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sheetframe.binder import (
    ZERO_TIME,
    UInt,
    build_plan,
    column,
    embed,
    fill_records,
    fill_sheet,
    format_timestamp,
    parse_timestamp,
    trim_strings,
)
from sheetframe.errors import InvalidShapeError, UnsupportedTypeError
from sheetframe.grid import Grid

UTC = datetime.timezone.utc


# ---------------------------------------------------------------------------
# Record types
# ---------------------------------------------------------------------------

@dataclass
class Address:
    city: str = column("city", default="")
    zip: int = column("zip", default=0)


@dataclass
class Audit:
    created_by: str = column("created_by", default="")


@dataclass
class Person:
    id: int = column("id")
    name: str = column("name")
    height: float = column("height", default=0.0)
    active: bool = column("active", default=False)
    visits: UInt = column("visits", default=0)
    joined: datetime.datetime = column("joined", default=ZERO_TIME)
    home: Address = column("home", default_factory=Address)
    work: Optional[Address] = column("work", default=None)
    audit: Audit = embed(default_factory=Audit)
    note: str = "untagged"


@dataclass
class Base:
    id: int = column("id", default=0)


@dataclass
class Child(Base):
    label: str = column("label", default="")


class Money:
    """Amount in cents written as ``12.34``."""

    def __init__(self, cents: int):
        self.cents = cents

    def __eq__(self, other):
        return isinstance(other, Money) and other.cents == self.cents

    def to_cell(self) -> str:
        return f"{self.cents // 100}.{self.cents % 100:02d}"

    @classmethod
    def from_cell(cls, text: str) -> "Money":
        whole, _, frac = text.partition(".")
        return cls(int(whole) * 100 + int(frac or 0))


@dataclass
class Invoice:
    number: str = column("number", default="")
    total: Optional[Money] = column("total", default=None)


@dataclass
class Bad:
    tags: List[str] = column("tags", default_factory=list)


def _alice():
    return Person(
        id=1, name="Alice", height=1.68, active=True, visits=UInt(12),
        joined=datetime.datetime(2024, 5, 6, 7, 8, 9, tzinfo=UTC),
        home=Address("Paris", 75001),
        work=Address("Lyon", 69001),
        audit=Audit("admin"),
    )


def _bob():
    return Person(id=2, name="Bob", work=None)


# ---------------------------------------------------------------------------
# Records -> rows
# ---------------------------------------------------------------------------

class TestFillSheet:

    def test_columns_in_declaration_order(self):
        grid = Grid()
        fill_sheet(grid, [_alice()])
        assert grid.columns == [
            "id", "name", "height", "active", "visits", "joined",
            "home_city", "home_zip", "work_city", "work_zip", "created_by",
        ]

    def test_canonical_text(self):
        grid = Grid()
        fill_sheet(grid, [_alice()])
        assert grid.rows[0] == [
            "1", "Alice", "1.68", "true", "12", "2024-05-06T07:08:09Z",
            "Paris", "75001", "Lyon", "69001", "admin",
        ]

    def test_none_nested_writes_zero_values(self):
        grid = Grid()
        bob = _bob()
        fill_sheet(grid, [bob])
        assert grid.get_value(0, "work_city") == ""
        assert grid.get_value(0, "work_zip") == "0"
        assert grid.get_value(0, "joined") == "0001-01-01T00:00:00Z"
        assert bob.work is None

    def test_float_text(self):
        @dataclass
        class F:
            x: float = column("x")

        grid = Grid()
        fill_sheet(grid, [F(1.0), F(0.1), F(1e21), F(-2.5)])
        assert [r[0] for r in grid.rows] == ["1", "0.1", "1000000000000000000000", "-2.5"]

    def test_clears_previous_content(self):
        grid = Grid(columns=["old"], rows=[["x"], ["y"], ["z"]])
        fill_sheet(grid, [_bob()])
        assert "old" not in grid.columns
        assert grid.get_length() == 1

    def test_empty_sequence_clears_grid(self):
        grid = Grid(columns=["old"], rows=[["x"]])
        fill_sheet(grid, [])
        assert grid.columns == []
        assert grid.rows == []

    def test_inherited_fields_have_no_prefix(self):
        grid = Grid()
        fill_sheet(grid, [Child(id=5, label="five")])
        assert grid.columns == ["id", "label"]
        assert grid.rows == [["5", "five"]]

    def test_custom_separator(self):
        grid = Grid()
        fill_sheet(grid, [_alice()], separator=".")
        assert "home.city" in grid.columns

    def test_cell_value_protocol(self):
        grid = Grid()
        fill_sheet(grid, [Invoice("A-1", Money(1234)), Invoice("A-2", None)])
        assert grid.rows == [["A-1", "12.34"], ["A-2", ""]]

    def test_naive_datetime_has_no_offset(self):
        assert format_timestamp(datetime.datetime(2020, 1, 2, 3, 4, 5)) == "2020-01-02T03:04:05"
        assert format_timestamp(datetime.datetime(2020, 1, 2, tzinfo=UTC)) == "2020-01-02T00:00:00Z"

    def test_offset_datetime(self):
        tz = datetime.timezone(datetime.timedelta(hours=2))
        value = datetime.datetime(2020, 1, 2, 3, 4, 5, 999, tzinfo=tz)
        assert format_timestamp(value) == "2020-01-02T03:04:05+02:00"


class TestFillSheetShape:

    @pytest.mark.parametrize("records", [
        _alice(),            # a single record, not a sequence
        "abc",
        {"a": 1},
        [Person],            # a type, not an instance
        [1, 2],
        [_alice(), Address()],
    ])
    def test_invalid_shape_leaves_grid_untouched(self, records):
        grid = Grid(columns=["keep"], rows=[["me"]])
        with pytest.raises(InvalidShapeError):
            fill_sheet(grid, records)
        assert grid.columns == ["keep"]
        assert grid.rows == [["me"]]

    def test_unsupported_type(self):
        with pytest.raises(UnsupportedTypeError):
            fill_sheet(Grid(), [Bad()])

    def test_tuple_accepted(self):
        grid = Grid()
        fill_sheet(grid, (_alice(), _bob()))
        assert grid.get_length() == 2


# ---------------------------------------------------------------------------
# Rows -> records
# ---------------------------------------------------------------------------

class TestFillRecords:

    def test_round_trip(self):
        grid = Grid()
        people = [_alice(), _bob()]
        fill_sheet(grid, people)
        back = fill_records(grid, Person)
        assert back[0] == people[0]
        # Bob's missing work address comes back allocated with zero values
        assert back[1].work == Address("", 0)
        assert back[1].name == "Bob"
        assert back[1].joined == ZERO_TIME

    def test_naive_timestamp_round_trip(self):
        @dataclass
        class Event:
            at: datetime.datetime = column("at", default=ZERO_TIME)

        events = [Event(datetime.datetime(2024, 1, 2, 3, 4, 5)),
                  Event(datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))]
        grid = Grid()
        fill_sheet(grid, events)
        back = fill_records(grid, Event)
        assert back == events
        assert back[0].at.tzinfo is None
        assert back[1].at.tzinfo is not None

    def test_grid_method_round_trip(self):
        grid = Grid()
        grid.fill_sheet([_alice()])
        assert grid.fill_records(Person) == [_alice()]

    def test_malformed_cells_become_defaults(self):
        grid = Grid(columns=["id", "name", "height", "active", "visits", "joined"],
                    rows=[["x1", "Eve", "tall", "maybe", "-3", "yesterday"]])
        (eve,) = fill_records(grid, Person)
        assert eve.id == 0
        assert eve.name == "Eve"
        assert eve.height == 0.0
        assert eve.active is False
        assert eve.visits == 0
        assert eve.joined == ZERO_TIME

    def test_missing_columns_and_short_rows(self):
        grid = Grid(columns=["id", "name", "home_city"],
                    rows=[["7"], ["8", "Zed", "Oslo"]])
        first, second = fill_records(grid, Person)
        assert first.id == 7
        assert first.name == ""
        assert first.home == Address("", 0)
        assert second.home.city == "Oslo"
        assert second.note == "untagged"

    def test_untagged_field_keeps_default(self):
        grid = Grid(columns=["id", "note"], rows=[["1", "from sheet"]])
        (p,) = fill_records(grid, Person)
        assert p.note == "untagged"

    def test_embedded_and_inherited(self):
        grid = Grid(columns=["id", "label", "created_by"],
                    rows=[["3", "three", "ops"]])
        assert fill_records(grid, Child) == [Child(id=3, label="three")]
        assert fill_records(grid, Person)[0].audit == Audit("ops")

    def test_boolean_spellings(self):
        @dataclass
        class B:
            flag: bool = column("flag")

        values = ["1", "t", "T", "TRUE", "true", "True",
                  "0", "f", "F", "FALSE", "false", "False", "yes"]
        grid = Grid(columns=["flag"], rows=[[v] for v in values])
        flags = [r.flag for r in fill_records(grid, B)]
        assert flags == [True] * 6 + [False] * 7

    def test_strict_integers(self):
        @dataclass
        class I:
            n: int = column("n")

        grid = Grid(columns=["n"], rows=[["42"], ["-7"], ["+3"], [" 5"], ["1_000"], ["4.0"]])
        assert [r.n for r in fill_records(grid, I)] == [42, -7, 3, 0, 0, 0]

    def test_cell_value_protocol(self):
        grid = Grid(columns=["number", "total"], rows=[["A-1", "12.34"], ["A-2", "oops"]])
        first, second = fill_records(grid, Invoice)
        assert first.total == Money(1234)
        assert second.total is None

    def test_appends_into_list(self):
        grid = Grid(columns=["id"], rows=[["1"], ["2"]])
        out = [Child(id=0)]
        result = fill_records(grid, Child, into=out)
        assert result is out
        assert [c.id for c in out] == [0, 1, 2]

    def test_empty_grid(self):
        assert fill_records(Grid(), Person) == []

    def test_timestamp_fraction_and_offset(self):
        value = parse_timestamp("2021-02-03T04:05:06.5+01:00")
        assert value.microsecond == 500000
        assert value.utcoffset() == datetime.timedelta(hours=1)
        assert parse_timestamp("2021-02-03t04:05:06z").tzinfo is not None
        assert parse_timestamp("2021-02-03T04:05:06").tzinfo is None
        with pytest.raises(ValueError):
            parse_timestamp("2021-02-03 04:05:06")


class TestFillRecordsShape:

    @pytest.mark.parametrize("record_type", [_alice(), int, "Person", None])
    def test_invalid_record_type(self, record_type):
        with pytest.raises(InvalidShapeError):
            fill_records(Grid(columns=["id"], rows=[["1"]]), record_type)

    def test_invalid_into(self):
        with pytest.raises(InvalidShapeError):
            fill_records(Grid(), Person, into=())

    def test_unsupported_type_fails_before_rows(self):
        with pytest.raises(UnsupportedTypeError):
            fill_records(Grid(), Bad)

    def test_plan_skips_untagged(self):
        names = [b.name for b in build_plan(Person)]
        assert "note" not in names
        assert "audit" in names


# ---------------------------------------------------------------------------
# trim_strings
# ---------------------------------------------------------------------------

def test_trim_strings():
    person = Person(id=1, name="  Alice \t", note=" x ")
    trim_strings(person)
    assert person.name == "Alice"
    assert person.note == "x"
    assert person.id == 1


def test_trim_strings_rejects_non_records():
    with pytest.raises(InvalidShapeError):
        trim_strings({"name": " a "})
