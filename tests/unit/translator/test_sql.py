"""Tests for time ranges and statement assembly."""

import pytest

from promread.translator.models import MetricIdentifier, TimeRange, TranslatorConfig
from promread.translator.sql import TIME_SELECTION, assemble_sql


class TestTimeRange:
    """Test millisecond to second conversion."""

    def test_fractional_end_rounds_up(self):
        time_range = TimeRange.from_millis(1000, 2500)
        assert (time_range.start, time_range.end) == (1, 3)
        assert time_range.predicate() == "(time >= 1 AND time <= 3)"

    def test_whole_end_is_kept(self):
        assert TimeRange.from_millis(1000, 2000).end == 2

    def test_start_rounds_down(self):
        assert TimeRange.from_millis(1999, 5000).start == 1

    def test_negative_bounds_truncate_toward_zero(self):
        """Test that pre-epoch bounds truncate toward zero and are never rounded up."""
        time_range = TimeRange.from_millis(-1500, -500)
        assert (time_range.start, time_range.end) == (-1, 0)
        assert TimeRange.from_millis(-2000, -1000).end == -1


class TestTranslatorConfig:
    """Test config validation and immutability."""

    def test_registry_is_read_only(self):
        config = TranslatorConfig(databases={"df": ["t"]})
        assert config.databases["df"] == ("t",)
        with pytest.raises(TypeError):
            config.databases["other"] = ("x",)

    def test_limits_must_be_positive(self):
        with pytest.raises(ValueError):
            TranslatorConfig(row_limit=0)
        with pytest.raises(ValueError):
            TranslatorConfig(series_limit=0)


class TestAssembleSql:
    """Test the two statement shapes."""

    def test_resolved_statement(self):
        """Test that physical tables are read newest first."""
        config = TranslatorConfig(row_limit=50)
        metric = MetricIdentifier("request", database="flow_log", table="l7_flow_log")
        sql = assemble_sql(
            metric,
            [TIME_SELECTION, metric.selection(), "`pod`"],
            ["(time >= 1 AND time <= 3)", "pod='web'"],
            config,
        )
        assert sql == (
            "SELECT toUnixTimestamp(time) AS timestamp,request as `metrics.request`,`pod` "
            "FROM l7_flow_log WHERE (time >= 1 AND time <= 3) AND pod='web' "
            "ORDER BY time desc LIMIT 50"
        )

    def test_unresolved_statement(self):
        """Test that views are addressed through the virtual namespace without ordering."""
        config = TranslatorConfig(row_limit=50, virtual_namespace="promviews")
        metric = MetricIdentifier("up")
        sql = assemble_sql(
            metric, [TIME_SELECTION, metric.selection(), "tag"], ["(time >= 1 AND time <= 3)"], config
        )
        assert sql == (
            "SELECT toUnixTimestamp(time) AS timestamp,metrics.up,tag "
            "FROM promviews.up WHERE (time >= 1 AND time <= 3) LIMIT 50"
        )
        assert "ORDER BY" not in sql

    def test_data_source_selects_interval_table(self):
        """Test that a data source reads the table of that interval."""
        config = TranslatorConfig(row_limit=50)
        metric = MetricIdentifier(
            "byte", database="flow_metrics", table="vtap_flow_port", data_source="1m"
        )
        sql = assemble_sql(
            metric, [TIME_SELECTION, metric.selection()], ["(time >= 1 AND time <= 3)"], config
        )
        assert "FROM `vtap_flow_port.1m` WHERE" in sql
