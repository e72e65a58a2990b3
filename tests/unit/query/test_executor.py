"""Tests for the ClickHouse HTTP executor."""

import json
import math

import httpx
import pytest

from promread.config import Settings
from promread.exceptions import QueryExecutionError
from promread.query.executor import ClickHouseExecutor, hash_query
from promread.query.models import FloatCell, IntCell, StringCell, ValueKind

PAYLOAD = {
    "meta": [
        {"name": "timestamp", "type": "UInt32"},
        {"name": "metrics.request", "type": "Float64"},
        {"name": "tag", "type": "Map(String, String)"},
    ],
    "data": [
        [10, 1.5, {"job": "api"}],
        [20, 2, {"job": "api"}],
    ],
    "rows": 2,
}


def make_executor(handler):
    client = httpx.Client(base_url="http://clickhouse:8123", transport=httpx.MockTransport(handler))
    return ClickHouseExecutor("http://clickhouse:8123", client=client)


class TestExecute:
    """Test query execution over HTTP."""

    def test_request_shape(self):
        """Test that SQL goes in the body and routing goes in the parameters."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["params"] = dict(request.url.params)
            captured["body"] = request.content.decode()
            captured["method"] = request.method
            return httpx.Response(200, json=PAYLOAD)

        executor = make_executor(handler)
        executor.execute("SELECT 1", database="flow_log", data_source="1m")

        assert captured["method"] == "POST"
        assert captured["body"] == "SELECT 1"
        assert captured["params"] == {
            "default_format": "JSONCompact",
            "output_format_json_quote_64bit_integers": "0",
            "output_format_json_quote_denormals": "1",
            "database": "flow_log",
            "log_comment": "1m",
        }

    def test_optional_params_are_omitted(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["params"] = dict(request.url.params)
            return httpx.Response(200, json=PAYLOAD)

        make_executor(handler).execute("SELECT 1")
        assert "database" not in captured["params"]
        assert "log_comment" not in captured["params"]

    def test_result_conversion(self):
        """Test that meta types drive cell construction."""
        executor = make_executor(lambda request: httpx.Response(200, json=PAYLOAD))
        result = executor.execute("SELECT 1")

        assert result.columns == ["timestamp", "metrics.request", "tag"]
        assert result.schemas == [ValueKind.INT, ValueKind.FLOAT64, ValueKind.STRING]
        assert result.values[0] == [IntCell(10), FloatCell(1.5), StringCell('{"job":"api"}')]
        assert result.values[1][1] == FloatCell(2.0)
        assert result.query == "SELECT 1"

    def test_non_finite_floats(self):
        """Test that null, quoted nan and infinities in Float64 columns become floats."""
        payload = dict(PAYLOAD, data=[[1, None, {}], [2, "inf", {}], [3, "-inf", {}], [4, "nan", {}]])
        executor = make_executor(lambda request: httpx.Response(200, json=payload))
        result = executor.execute("SELECT 1")

        assert math.isnan(result.values[0][1].value)
        assert result.values[1][1] == FloatCell(math.inf)
        assert result.values[2][1] == FloatCell(-math.inf)
        assert math.isnan(result.values[3][1].value)

    def test_server_error(self):
        executor = make_executor(
            lambda request: httpx.Response(500, text="Code: 60. DB::Exception: Table doesn't exist")
        )
        with pytest.raises(QueryExecutionError) as exc_info:
            executor.execute("SELECT * FROM missing")
        assert "HTTP 500" in exc_info.value.message
        assert exc_info.value.context["query"] == "SELECT * FROM missing"

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(QueryExecutionError):
            make_executor(handler).execute("SELECT 1")

    def test_invalid_json(self):
        executor = make_executor(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(QueryExecutionError):
            executor.execute("SELECT 1")

    def test_row_width_mismatch(self):
        payload = dict(PAYLOAD, data=[[1, 2.0]])
        executor = make_executor(lambda request: httpx.Response(200, content=json.dumps(payload)))
        with pytest.raises(QueryExecutionError):
            executor.execute("SELECT 1")

    def test_bad_value(self):
        payload = dict(PAYLOAD, data=[["soon", 1.0, {}]])
        executor = make_executor(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(QueryExecutionError):
            executor.execute("SELECT 1")


class TestLifecycle:
    """Test client ownership."""

    def test_injected_client_is_not_closed(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        with ClickHouseExecutor("http://clickhouse:8123", client=client):
            pass
        assert not client.is_closed

    def test_from_settings(self):
        settings = Settings(clickhouse_url="https://ch.example:8443/", clickhouse_timeout_seconds=5)
        executor = ClickHouseExecutor.from_settings(settings)
        try:
            assert executor.base_url == "https://ch.example:8443"
            assert executor.timeout_seconds == 5
        finally:
            executor.close()


def test_hash_query_is_stable():
    assert hash_query("SELECT 1") == hash_query("SELECT 1")
    assert len(hash_query("SELECT 1")) == 16
