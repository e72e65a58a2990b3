"""Value types shared by the forward and reverse translation paths."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from promread.config import DEFAULT_DATABASES, DEFAULT_EDGE_TABLES, Settings


@dataclass(frozen=True)
class TranslatorConfig:
    """
    Immutable translation settings, passed explicitly into every call.

    Attributes:
        row_limit: LIMIT applied to every generated statement
        series_limit: Maximum number of series admitted while decoding
        databases: Registry of database keys usable as metric-name prefixes
        edge_tables: Tables with separate client-side and server-side tag columns
        system_database: Database whose tags live in the generic tag column
        virtual_namespace: Namespace of the views backing unprefixed metric names
    """

    row_limit: int = 10000
    series_limit: int = 100
    databases: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(
            {k: tuple(v) for k, v in DEFAULT_DATABASES.items()}
        )
    )
    edge_tables: frozenset[str] = frozenset(DEFAULT_EDGE_TABLES)
    system_database: str = "deepflow_system"
    virtual_namespace: str = "prometheus"

    def __post_init__(self) -> None:
        if self.row_limit < 1:
            raise ValueError(f"row_limit must be positive, got {self.row_limit}")
        if self.series_limit < 1:
            raise ValueError(f"series_limit must be positive, got {self.series_limit}")
        if not isinstance(self.databases, MappingProxyType):
            object.__setattr__(
                self,
                "databases",
                MappingProxyType({k: tuple(v) for k, v in self.databases.items()}),
            )
        if not isinstance(self.edge_tables, frozenset):
            object.__setattr__(self, "edge_tables", frozenset(self.edge_tables))

    @classmethod
    def from_settings(cls, settings: Settings) -> "TranslatorConfig":
        return cls(
            row_limit=settings.query_limit,
            series_limit=settings.series_limit,
            databases=settings.databases,
            edge_tables=frozenset(settings.edge_tables),
            system_database=settings.system_database,
            virtual_namespace=settings.virtual_namespace,
        )


@dataclass(frozen=True)
class MetricIdentifier:
    """Physical reference decoded from a ``__name__`` value.

    An empty ``database`` means the name did not resolve and ``metric_name``
    is the name of a view in the virtual namespace.
    """

    metric_name: str
    database: str = ""
    table: str = ""
    data_source: str = ""

    @property
    def is_resolved(self) -> bool:
        return self.database != ""

    @property
    def source_table(self) -> str:
        """Table to read from; a data source selects the table of that interval."""
        if self.data_source:
            return f"`{self.table}.{self.data_source}`"
        return self.table

    def selection(self) -> str:
        """Column expression selecting the metric value."""
        if self.is_resolved:
            return f"{self.metric_name} as `metrics.{self.metric_name}`"
        return f"metrics.{self.metric_name}"


def _truncate_seconds(millis: int) -> int:
    if millis < 0:
        return -(-millis // 1000)
    return millis // 1000


@dataclass(frozen=True)
class TimeRange:
    """Inclusive query time range in whole seconds."""

    start: int
    end: int

    @classmethod
    def from_millis(cls, start_ms: int, end_ms: int) -> "TimeRange":
        """Convert a millisecond range.

        Both bounds truncate toward zero; a positive end with a fractional
        second is then rounded up.
        """
        end = _truncate_seconds(end_ms)
        if end_ms > 0 and end_ms % 1000:
            end += 1
        return cls(start=_truncate_seconds(start_ms), end=end)

    def predicate(self) -> str:
        return f"(time >= {self.start} AND time <= {self.end})"


@dataclass(frozen=True)
class CompiledQuery:
    """SQL produced for one read query plus routing information for its execution."""

    sql: str
    database: str
    data_source: str
    metric: MetricIdentifier
    time_range: TimeRange
