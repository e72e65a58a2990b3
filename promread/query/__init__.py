"""ClickHouse query execution and result models."""

from promread.query.executor import ClickHouseExecutor, QueryExecutor, hash_query
from promread.query.models import (
    Cell,
    FloatCell,
    IntCell,
    NullableFloatCell,
    ResultSet,
    StringCell,
    TimestampCell,
    ValueKind,
    make_cell,
    value_kind_for,
)

__all__ = [
    "ClickHouseExecutor",
    "QueryExecutor",
    "hash_query",
    "Cell",
    "FloatCell",
    "IntCell",
    "NullableFloatCell",
    "ResultSet",
    "StringCell",
    "TimestampCell",
    "ValueKind",
    "make_cell",
    "value_kind_for",
]
