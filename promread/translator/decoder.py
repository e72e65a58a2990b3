"""Decoding of tabular query results into remote read time series."""

from dataclasses import dataclass, field

from promread.exceptions import MissingColumnError
from promread.logging_config import get_logger
from promread.prometheus import METRIC_NAME_LABEL
from promread.prometheus.remote_pb2 import QueryResult, ReadResponse
from promread.prometheus.types_pb2 import Label, TimeSeries
from promread.query.models import Cell, ResultSet
from promread.translator.formatter import (
    cell_to_float,
    cell_to_seconds,
    format_cell,
    format_tag_name,
    tags_to_label_pairs,
    value_is_nil,
)
from promread.translator.sql import TIME_COLUMN_ALIAS
from promread.translator.tags import TAG_BLOB_COLUMN

logger = get_logger(__name__)

METRICS_COLUMN_PREFIX = "metrics."


@dataclass(frozen=True)
class ColumnLayout:
    """Positions of the special columns of a result set."""

    metric_name: str
    metrics_index: int
    time_index: int
    tag_index: int = -1
    tag_indexes: tuple[int, ...] = field(default_factory=tuple)

    @property
    def has_tag_blob(self) -> bool:
        return self.tag_index > -1

    @classmethod
    def locate(cls, columns: list[str]) -> "ColumnLayout":
        """
        Find the tag blob, metric and time columns.

        Every other column is a bare tag column.

        Raises:
            MissingColumnError: If the metric or time column is absent
        """
        tag_index = metrics_index = time_index = -1
        metric_name = ""
        for i, column in enumerate(columns):
            if column == TAG_BLOB_COLUMN:
                tag_index = i
            elif column.startswith(METRICS_COLUMN_PREFIX):
                metrics_index = i
                metric_name = column[len(METRICS_COLUMN_PREFIX) :]
            elif column == TIME_COLUMN_ALIAS:
                time_index = i

        if metrics_index < 0 or time_index < 0:
            raise MissingColumnError(metrics_index, time_index, list(columns))

        special = {tag_index, metrics_index, time_index}
        return cls(
            metric_name=metric_name,
            metrics_index=metrics_index,
            time_index=time_index,
            tag_index=tag_index,
            tag_indexes=tuple(i for i in range(len(columns)) if i not in special),
        )


class SeriesAccumulator:
    """
    Groups samples by series key under a series cap.

    Keys are admitted first-come up to ``series_limit``. Once full, new keys
    are rejected while admitted keys keep accumulating samples.
    """

    def __init__(self, series_limit: int) -> None:
        self.series_limit = series_limit
        self.rejected_rows = 0
        self._series: dict[str, TimeSeries] = {}

    def __len__(self) -> int:
        return len(self._series)

    def admit(self, key: str) -> tuple[TimeSeries | None, bool]:
        """
        Look up or admit the series for ``key``.

        Returns:
            (series, created): ``series`` is None when the key was rejected;
            ``created`` is True only on the call that admitted the key
        """
        series = self._series.get(key)
        if series is not None:
            return series, False
        if len(self._series) >= self.series_limit:
            self.rejected_rows += 1
            return None, False
        series = TimeSeries()
        self._series[key] = series
        return series, True

    def to_query_result(self) -> QueryResult:
        return QueryResult(timeseries=list(self._series.values()))


def series_key(row: list[Cell], layout: ColumnLayout) -> str:
    """Fingerprint of the series a row belongs to."""
    if layout.has_tag_blob:
        return format_cell(row[layout.tag_index])
    parts = []
    for i in layout.tag_indexes:
        if value_is_nil(row[i]):
            continue
        parts.append(str(i))
        parts.append(format_cell(row[i]))
    return "-".join(parts)


def series_labels(
    row: list[Cell], layout: ColumnLayout, columns: list[str], key: str
) -> list[Label]:
    labels = [Label(name=METRIC_NAME_LABEL, value=layout.metric_name)]
    if layout.has_tag_blob:
        labels.extend(tags_to_label_pairs(key))
        return labels
    for i in layout.tag_indexes:
        if value_is_nil(row[i]):
            continue
        labels.append(Label(name=format_tag_name(columns[i]), value=format_cell(row[i])))
    return labels


def decode_result_set(result: ResultSet, series_limit: int) -> ReadResponse:
    """
    Group result rows into labeled time series.

    Samples keep row order. Series order in the response is not meaningful.

    Raises:
        MissingColumnError: If the metric or time column is absent
        CellCoercionError: If a cell cannot be read as its expected type
    """
    layout = ColumnLayout.locate(result.columns)
    metrics_kind = result.schemas[layout.metrics_index]
    accumulator = SeriesAccumulator(series_limit)

    for row in result.values:
        key = series_key(row, layout)
        series, created = accumulator.admit(key)
        if series is None:
            continue
        if created:
            series.labels.extend(series_labels(row, layout, result.columns, key))
        series.samples.add(
            value=cell_to_float(row[layout.metrics_index], metrics_kind),
            timestamp=cell_to_seconds(row[layout.time_index]) * 1000,
        )

    if accumulator.rejected_rows:
        logger.info(
            "series_limit_reached",
            series_limit=series_limit,
            rejected_rows=accumulator.rejected_rows,
        )
    logger.debug(
        "result_decoded",
        metric=layout.metric_name,
        rows=result.row_count,
        series=len(accumulator),
    )
    return ReadResponse(results=[accumulator.to_query_result()])
