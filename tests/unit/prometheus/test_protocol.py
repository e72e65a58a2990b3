"""Tests for the remote read wire codec."""

import pytest
import snappy

from promread.exceptions import InvalidReadRequestError, InvalidReadResponseError
from promread.prometheus import PrometheusRemoteRead
from promread.prometheus.remote_pb2 import QueryResult, ReadResponse
from promread.prometheus.types_pb2 import LabelMatcher, TimeSeries


@pytest.fixture
def read_request():
    return PrometheusRemoteRead.build_read_request(
        0,
        60_000,
        [
            ("__name__", LabelMatcher.EQ, "up"),
            ("job", LabelMatcher.RE, "api.*"),
        ],
    )


class TestDecodeReadRequest:
    """Test decoding of snappy-compressed requests."""

    def test_decode(self, read_request):
        """Test that a compressed request decodes to the same message."""
        body = PrometheusRemoteRead.encode_read_request(read_request)
        decoded = PrometheusRemoteRead.decode_read_request(body)

        assert decoded == read_request
        query = decoded.queries[0]
        assert query.end_timestamp_ms == 60_000
        assert [(m.name, m.type, m.value) for m in query.matchers] == [
            ("__name__", LabelMatcher.EQ, "up"),
            ("job", LabelMatcher.RE, "api.*"),
        ]

    def test_invalid_snappy(self):
        with pytest.raises(InvalidReadRequestError):
            PrometheusRemoteRead.decode_read_request(b"definitely not snappy")

    def test_invalid_protobuf(self):
        with pytest.raises(InvalidReadRequestError):
            PrometheusRemoteRead.decode_read_request(snappy.compress(b"\xff\xff\xff\xff"))


class TestEncodeReadResponse:
    """Test encoding of responses."""

    def test_encoded_response_is_snappy_protobuf(self):
        series = TimeSeries()
        series.labels.add(name="__name__", value="up")
        series.samples.add(value=1.0, timestamp=1000)
        response = ReadResponse(results=[QueryResult(timeseries=[series])])

        body = PrometheusRemoteRead.encode_read_response(response)
        decoded = ReadResponse()
        decoded.ParseFromString(snappy.decompress(body))

        assert decoded == response
        assert PrometheusRemoteRead.decode_read_response(body) == response

    def test_invalid_response_body(self):
        with pytest.raises(InvalidReadResponseError):
            PrometheusRemoteRead.decode_read_response(b"definitely not snappy")


class TestStatistics:
    """Test request and response statistics."""

    def test_request_statistics(self, read_request):
        stats = PrometheusRemoteRead.get_statistics(read_request)
        assert stats["total_queries"] == 1
        assert stats["total_matchers"] == 2
        assert stats["metric_names"] == ["up"]
        assert stats["min_timestamp_ms"] == 0
        assert stats["max_timestamp_ms"] == 60_000

    def test_response_statistics(self):
        series = TimeSeries()
        series.samples.add(value=1.0, timestamp=1)
        series.samples.add(value=2.0, timestamp=2)
        response = ReadResponse(results=[QueryResult(timeseries=[series, TimeSeries()])])
        assert PrometheusRemoteRead.get_response_statistics(response) == {
            "total_results": 1,
            "total_time_series": 2,
            "total_samples": 2,
        }
