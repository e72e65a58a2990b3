"""Prometheus remote read protocol handler.

This module provides support for decoding Prometheus remote read requests and
encoding read responses, including Snappy (de)compression and Protobuf
(de)serialization.
"""

import logging
from typing import Any, Dict, Iterable, Tuple

import snappy
from google.protobuf.message import DecodeError

from promread.exceptions import InvalidReadRequestError, InvalidReadResponseError
from promread.prometheus import remote_pb2

logger = logging.getLogger(__name__)

METRIC_NAME_LABEL = "__name__"


class PrometheusRemoteRead:
    """Handler for Prometheus remote read protocol.

    This class provides methods to decode Prometheus remote read requests
    that are sent via HTTP POST with Snappy compression and Protobuf encoding,
    and to encode the matching responses.

    Protocol details:
    - Content-Type: application/x-protobuf
    - Content-Encoding: snappy
    - Body: Snappy-compressed Protobuf ReadRequest / ReadResponse message

    Example:
        handler = PrometheusRemoteRead()

        read_request = handler.decode_read_request(compressed_data)

        response = translate_and_execute(read_request)

        body = handler.encode_read_response(response)
    """

    @staticmethod
    def decode_read_request(
        compressed_data: bytes,
    ) -> remote_pb2.ReadRequest:
        """Decode Prometheus remote read request.

        Takes Snappy-compressed Protobuf data and returns a decoded ReadRequest
        message containing queries with their time ranges and label matchers.

        Args:
            compressed_data: Snappy-compressed Protobuf data

        Returns:
            ReadRequest: Decoded read request

        Raises:
            InvalidReadRequestError: If decompression or decoding fails

        Example:
            >>> handler = PrometheusRemoteRead()
            >>> read_request = handler.decode_read_request(request_body)
            >>> print(f"Received {len(read_request.queries)} queries")
        """
        try:
            logger.debug(f"Decompressing {len(compressed_data)} bytes with Snappy")
            decompressed = snappy.decompress(compressed_data)
            logger.debug(f"Decompressed to {len(decompressed)} bytes")
        except snappy.UncompressError as e:
            logger.error(f"Failed to decompress Snappy data: {e}")
            raise InvalidReadRequestError(f"snappy decompression failed: {e}") from e

        read_request = remote_pb2.ReadRequest()
        try:
            read_request.ParseFromString(decompressed)
        except DecodeError as e:
            logger.error(f"Failed to decode Prometheus read request: {e}")
            raise InvalidReadRequestError(f"protobuf decoding failed: {e}") from e

        logger.info(f"Decoded ReadRequest with {len(read_request.queries)} queries")

        return read_request

    @staticmethod
    def encode_read_request(read_request: remote_pb2.ReadRequest) -> bytes:
        """Serialize and Snappy-compress a ReadRequest into a request body."""
        return snappy.compress(read_request.SerializeToString())

    @staticmethod
    def encode_read_response(read_response: remote_pb2.ReadResponse) -> bytes:
        """Encode Prometheus remote read response.

        Args:
            read_response: Response holding one QueryResult per processed query

        Returns:
            bytes: Snappy-compressed Protobuf data

        Example:
            >>> handler = PrometheusRemoteRead()
            >>> body = handler.encode_read_response(response)
        """
        serialized = read_response.SerializeToString()
        compressed = snappy.compress(serialized)
        logger.debug(
            f"Encoded ReadResponse: {len(serialized)} bytes, "
            f"{len(compressed)} bytes compressed"
        )
        return compressed

    @staticmethod
    def decode_read_response(compressed_data: bytes) -> remote_pb2.ReadResponse:
        """Decompress and parse a ReadResponse body.

        Raises:
            InvalidReadResponseError: If decompression or decoding fails
        """
        read_response = remote_pb2.ReadResponse()
        try:
            read_response.ParseFromString(snappy.decompress(compressed_data))
        except (snappy.UncompressError, DecodeError) as e:
            raise InvalidReadResponseError(str(e)) from e
        return read_response

    @staticmethod
    def build_read_request(
        start_timestamp_ms: int,
        end_timestamp_ms: int,
        matchers: Iterable[Tuple[str, int, str]],
    ) -> remote_pb2.ReadRequest:
        """Build a single-query ReadRequest.

        Args:
            start_timestamp_ms: Query start in milliseconds since epoch
            end_timestamp_ms: Query end in milliseconds since epoch
            matchers: (name, type, value) triples, type being a LabelMatcher.Type value

        Returns:
            ReadRequest: Request with exactly one query

        Example:
            >>> request = PrometheusRemoteRead.build_read_request(
            ...     0, 60_000, [("__name__", types_pb2.LabelMatcher.EQ, "up")]
            ... )
        """
        query = remote_pb2.Query(
            start_timestamp_ms=start_timestamp_ms,
            end_timestamp_ms=end_timestamp_ms,
        )
        for name, matcher_type, value in matchers:
            query.matchers.add(name=name, type=matcher_type, value=value)
        return remote_pb2.ReadRequest(queries=[query])

    @staticmethod
    def get_statistics(
        read_request: remote_pb2.ReadRequest,
    ) -> Dict[str, Any]:
        """Get statistics about the read request.

        Args:
            read_request: Decoded read request

        Returns:
            dict: Query count, matcher count, metric names and overall time range
        """
        stats = {
            "total_queries": len(read_request.queries),
            "total_matchers": 0,
            "metric_names": [],
            "min_timestamp_ms": None,
            "max_timestamp_ms": None,
        }

        for query in read_request.queries:
            stats["total_matchers"] += len(query.matchers)

            for matcher in query.matchers:
                if matcher.name == METRIC_NAME_LABEL:
                    stats["metric_names"].append(matcher.value)

            if (
                stats["min_timestamp_ms"] is None
                or query.start_timestamp_ms < stats["min_timestamp_ms"]
            ):
                stats["min_timestamp_ms"] = query.start_timestamp_ms
            if (
                stats["max_timestamp_ms"] is None
                or query.end_timestamp_ms > stats["max_timestamp_ms"]
            ):
                stats["max_timestamp_ms"] = query.end_timestamp_ms

        return stats

    @staticmethod
    def get_response_statistics(
        read_response: remote_pb2.ReadResponse,
    ) -> Dict[str, int]:
        """Count series and samples in a ReadResponse."""
        series = [ts for result in read_response.results for ts in result.timeseries]
        return {
            "total_results": len(read_response.results),
            "total_time_series": len(series),
            "total_samples": sum(len(ts.samples) for ts in series),
        }
