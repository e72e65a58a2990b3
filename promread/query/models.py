"""Query result models.

A result set is a list of column names, a parallel list of declared value
kinds and rows of typed cells. Cells are a closed set of variants; consumers
match on the variant instead of inspecting raw Python values.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Sequence, Union


class ValueKind(str, Enum):
    """Declared value kind of a result column."""

    INT = "Int"
    FLOAT64 = "Float64"
    NULLABLE_FLOAT64 = "NullableFloat64"
    DATETIME = "DateTime"
    STRING = "String"


@dataclass(frozen=True)
class IntCell:
    value: int


@dataclass(frozen=True)
class FloatCell:
    value: float


@dataclass(frozen=True)
class StringCell:
    value: str


@dataclass(frozen=True)
class TimestampCell:
    value: datetime


@dataclass(frozen=True)
class NullableFloatCell:
    value: float | None


Cell = Union[IntCell, FloatCell, StringCell, TimestampCell, NullableFloatCell]

CELL_TYPES: dict[ValueKind, type] = {
    ValueKind.INT: IntCell,
    ValueKind.FLOAT64: FloatCell,
    ValueKind.NULLABLE_FLOAT64: NullableFloatCell,
    ValueKind.DATETIME: TimestampCell,
    ValueKind.STRING: StringCell,
}


def value_kind_for(clickhouse_type: str) -> ValueKind:
    """Map a ClickHouse column type to a value kind.

    ``LowCardinality`` wrappers are ignored. Only nullable floats keep their
    nullability; other nullable types are read as strings.
    """
    type_name = clickhouse_type.strip()
    if type_name.startswith("LowCardinality(") and type_name.endswith(")"):
        type_name = type_name[len("LowCardinality(") : -1]

    if type_name.startswith("Nullable(") and type_name.endswith(")"):
        inner = type_name[len("Nullable(") : -1]
        if inner.startswith("Float"):
            return ValueKind.NULLABLE_FLOAT64
        return ValueKind.STRING

    if type_name.startswith(("Int", "UInt")):
        return ValueKind.INT
    if type_name.startswith("Float"):
        return ValueKind.FLOAT64
    if type_name.startswith("DateTime"):
        return ValueKind.DATETIME
    return ValueKind.STRING


def make_cell(value: Any, kind: ValueKind) -> Cell:
    """Build a typed cell from a raw value according to its column kind."""
    if kind is ValueKind.INT:
        return IntCell(int(value))
    if kind is ValueKind.FLOAT64:
        # ClickHouse writes null for NaN and infinities unless they are quoted
        return FloatCell(math.nan if value is None else float(value))
    if kind is ValueKind.NULLABLE_FLOAT64:
        return NullableFloatCell(None if value is None else float(value))
    if kind is ValueKind.DATETIME:
        if isinstance(value, datetime):
            return TimestampCell(value)
        return TimestampCell(datetime.fromisoformat(str(value)))
    if value is None:
        return StringCell("")
    if isinstance(value, str):
        return StringCell(value)
    if isinstance(value, (dict, list)):
        return StringCell(json.dumps(value, separators=(",", ":"), ensure_ascii=False))
    return StringCell(str(value))


@dataclass
class ResultSet:
    """
    Tabular query result.

    Attributes:
        columns: Column names in select order
        schemas: Declared value kind of each column
        values: Rows of cells, each row parallel to ``columns``
        query: SQL that produced the result
    """

    columns: list[str]
    schemas: list[ValueKind]
    values: list[list[Cell]] = field(default_factory=list)
    query: str = ""

    @property
    def row_count(self) -> int:
        return len(self.values)

    @classmethod
    def from_rows(
        cls,
        columns: Sequence[str],
        schemas: Sequence[ValueKind | str],
        rows: Sequence[Sequence[Any]],
        query: str = "",
    ) -> "ResultSet":
        """Build a result set from raw Python rows, typing each cell by its column kind."""
        kinds = [ValueKind(kind) for kind in schemas]
        if len(kinds) != len(columns):
            raise ValueError(
                f"Got {len(kinds)} schemas for {len(columns)} columns"
            )
        values = [
            [make_cell(value, kind) for value, kind in zip(row, kinds)] for row in rows
        ]
        return cls(columns=list(columns), schemas=kinds, values=values, query=query)
