"""Tests for decoding result sets into time series."""

import math

import pytest

from promread.exceptions import CellCoercionError, MissingColumnError
from promread.query.models import IntCell, ResultSet, StringCell, ValueKind
from promread.translator.decoder import ColumnLayout, SeriesAccumulator, decode_result_set


def labels_of(series):
    return {label.name: label.value for label in series.labels}


def samples_of(series):
    return [(sample.value, sample.timestamp) for sample in series.samples]


class TestColumnLayout:
    """Test location of the special columns."""

    def test_locate_with_tag_blob(self):
        layout = ColumnLayout.locate(["timestamp", "metrics.up", "tag"])
        assert layout.metric_name == "up"
        assert (layout.time_index, layout.metrics_index, layout.tag_index) == (0, 1, 2)
        assert layout.has_tag_blob
        assert layout.tag_indexes == ()

    def test_locate_bare_tags(self):
        layout = ColumnLayout.locate(["timestamp", "metrics.request", "ip_0", "pod"])
        assert not layout.has_tag_blob
        assert layout.tag_indexes == (2, 3)

    @pytest.mark.parametrize(
        "columns",
        [["timestamp", "tag"], ["metrics.up", "tag"], []],
    )
    def test_missing_required_column(self, columns):
        with pytest.raises(MissingColumnError):
            ColumnLayout.locate(columns)


class TestSeriesAccumulator:
    """Test the series cap policy."""

    def test_first_seen_wins(self):
        accumulator = SeriesAccumulator(series_limit=1)
        first, created = accumulator.admit("a")
        assert first is not None and created
        again, created = accumulator.admit("a")
        assert again is first and not created
        rejected, created = accumulator.admit("b")
        assert rejected is None and not created
        assert len(accumulator) == 1
        assert accumulator.rejected_rows == 1


class TestDecodeResultSet:
    """Test grouping rows into series."""

    def test_identical_tag_blobs_share_a_series(self):
        """Test that two rows with one blob give one series with samples in row order."""
        result = ResultSet.from_rows(
            ["timestamp", "metrics.up", "tag"],
            [ValueKind.INT, ValueKind.FLOAT64, ValueKind.STRING],
            [
                [20, 1.0, '{"job":"api"}'],
                [10, 0.0, '{"job":"api"}'],
            ],
        )
        response = decode_result_set(result, series_limit=10)

        assert len(response.results) == 1
        series = list(response.results[0].timeseries)
        assert len(series) == 1
        assert labels_of(series[0]) == {"__name__": "up", "job": "api"}
        assert samples_of(series[0]) == [(1.0, 20000), (0.0, 10000)]

    def test_bare_tag_columns(self):
        """Test labels from sanitized bare columns, skipping nil values."""
        result = ResultSet.from_rows(
            ["timestamp", "metrics.request", "k8s.label/app-name", "pod", "vtap_id"],
            [ValueKind.INT, ValueKind.INT, ValueKind.STRING, ValueKind.STRING, ValueKind.INT],
            [
                [5, 3, "shop", "", 0],
                [6, 4, "shop", "", 0],
                [6, 9, "cart", "web-1", 2],
            ],
        )
        response = decode_result_set(result, series_limit=10)
        by_app = {
            labels_of(series)["k8s_label_app_name"]: series
            for series in response.results[0].timeseries
        }

        assert set(by_app) == {"shop", "cart"}
        assert labels_of(by_app["shop"]) == {"__name__": "request", "k8s_label_app_name": "shop"}
        assert samples_of(by_app["shop"]) == [(3.0, 5000), (4.0, 6000)]
        assert labels_of(by_app["cart"]) == {
            "__name__": "request",
            "k8s_label_app_name": "cart",
            "pod": "web-1",
            "vtap_id": "2",
        }

    def test_zero_valued_tag_merges_with_missing_tag(self):
        """Test that an integer zero tag is treated as absent when grouping."""
        result = ResultSet.from_rows(
            ["timestamp", "metrics.request", "server_port"],
            [ValueKind.INT, ValueKind.INT, ValueKind.INT],
            [[1, 1, 0], [2, 2, 0]],
        )
        series = list(decode_result_set(result, series_limit=10).results[0].timeseries)
        assert len(series) == 1
        assert labels_of(series[0]) == {"__name__": "request"}

    def test_series_cap(self):
        """Test that only the first N keys are kept and later keys add nothing."""
        limit = 3
        rows = [[i, float(i), f'{{"k":"{i}"}}'] for i in range(limit + 5)]
        rows.append([100, 100.0, '{"k":"0"}'])
        rows.append([101, 101.0, '{"k":"7"}'])
        result = ResultSet.from_rows(
            ["timestamp", "metrics.m", "tag"],
            [ValueKind.INT, ValueKind.FLOAT64, ValueKind.STRING],
            rows,
        )
        series = list(decode_result_set(result, series_limit=limit).results[0].timeseries)

        assert len(series) == limit
        by_key = {labels_of(s)["k"]: samples_of(s) for s in series}
        assert set(by_key) == {"0", "1", "2"}
        assert by_key["0"] == [(0.0, 0), (100.0, 100000)]

    def test_null_metric_decodes_as_nan(self):
        result = ResultSet.from_rows(
            ["timestamp", "metrics.m", "tag"],
            [ValueKind.INT, ValueKind.NULLABLE_FLOAT64, ValueKind.STRING],
            [[1, None, "{}"]],
        )
        series = list(decode_result_set(result, series_limit=10).results[0].timeseries)
        assert math.isnan(series[0].samples[0].value)

    def test_empty_result(self):
        result = ResultSet.from_rows(
            ["timestamp", "metrics.m", "tag"],
            [ValueKind.INT, ValueKind.FLOAT64, ValueKind.STRING],
            [],
        )
        response = decode_result_set(result, series_limit=10)
        assert len(response.results) == 1
        assert len(response.results[0].timeseries) == 0

    def test_missing_metric_column(self):
        result = ResultSet.from_rows(["timestamp", "tag"], [ValueKind.INT, ValueKind.STRING], [])
        with pytest.raises(MissingColumnError):
            decode_result_set(result, series_limit=10)

    def test_string_metric_is_rejected(self):
        result = ResultSet.from_rows(
            ["timestamp", "metrics.m", "tag"],
            [ValueKind.INT, ValueKind.STRING, ValueKind.STRING],
            [[1, "oops", "{}"]],
        )
        with pytest.raises(CellCoercionError):
            decode_result_set(result, series_limit=10)

    def test_metric_cell_must_match_declared_kind(self):
        """Test that a cell disagreeing with its column's declared kind is rejected."""
        result = ResultSet(
            columns=["timestamp", "metrics.m", "tag"],
            schemas=[ValueKind.INT, ValueKind.FLOAT64, ValueKind.STRING],
            values=[[IntCell(1), IntCell(5), StringCell("{}")]],
        )
        with pytest.raises(CellCoercionError) as exc_info:
            decode_result_set(result, series_limit=10)
        assert exc_info.value.context["target"] == "float from Float64"

    def test_int_metric_column_decodes(self):
        result = ResultSet.from_rows(
            ["timestamp", "metrics.m", "tag"],
            [ValueKind.INT, ValueKind.INT, ValueKind.STRING],
            [[1, 5, "{}"]],
        )
        response = decode_result_set(result, series_limit=10)
        assert samples_of(response.results[0].timeseries[0]) == [(5.0, 1000)]
