"""Prometheus parser for HTTP request handling.

This module provides utilities for parsing Prometheus remote read HTTP requests,
including validation of headers, request size, and response header creation.
"""

import logging
from typing import Any, Dict, Optional

from promread.exceptions import InvalidReadRequestError

logger = logging.getLogger(__name__)


class PrometheusParser:
    """Parser for Prometheus remote read HTTP requests.

    This class provides methods to parse and validate HTTP requests sent by
    Prometheus servers using the remote read protocol.

    Expected request format:
    - Method: POST
    - Content-Type: application/x-protobuf
    - Content-Encoding: snappy
    - X-Prometheus-Remote-Read-Version: 0.1.0 (optional)
    - Body: Snappy-compressed Protobuf ReadRequest

    Example:
        parser = PrometheusParser()

        info = parser.parse_request(headers, body)
        print(f"Received {info['body_size']} bytes")
    """

    EXPECTED_CONTENT_TYPE = "application/x-protobuf"
    EXPECTED_CONTENT_ENCODING = "snappy"
    SUPPORTED_VERSIONS = ["0.1.0"]
    VERSION_HEADER = "x-prometheus-remote-read-version"

    @staticmethod
    def validate_headers(headers: Dict[str, str]) -> tuple[bool, Optional[str]]:
        """Validate HTTP headers for Prometheus remote read request.

        Content-Type and Content-Encoding are checked only when present;
        some clients omit them on read requests.

        Args:
            headers: HTTP request headers (case-insensitive dict recommended)

        Returns:
            tuple: (is_valid, error_message)
                - is_valid: True if headers are valid
                - error_message: None if valid, error description if invalid

        Example:
            >>> parser = PrometheusParser()
            >>> headers = {
            ...     'Content-Type': 'application/x-protobuf',
            ...     'Content-Encoding': 'snappy'
            ... }
            >>> is_valid, error = parser.validate_headers(headers)
            >>> assert is_valid
        """
        normalized_headers = {k.lower(): v for k, v in headers.items()}

        content_type = normalized_headers.get("content-type", "")
        if content_type and PrometheusParser.EXPECTED_CONTENT_TYPE not in content_type:
            return (
                False,
                f"Invalid Content-Type: expected '{PrometheusParser.EXPECTED_CONTENT_TYPE}', "
                f"got '{content_type}'",
            )

        content_encoding = normalized_headers.get("content-encoding", "")
        if (
            content_encoding
            and PrometheusParser.EXPECTED_CONTENT_ENCODING not in content_encoding.lower()
        ):
            return (
                False,
                f"Invalid Content-Encoding: expected '{PrometheusParser.EXPECTED_CONTENT_ENCODING}', "
                f"got '{content_encoding}'",
            )

        version = normalized_headers.get(PrometheusParser.VERSION_HEADER, "")
        if version and version not in PrometheusParser.SUPPORTED_VERSIONS:
            logger.warning(
                f"Unsupported Prometheus remote read version: {version}. "
                f"Supported versions: {PrometheusParser.SUPPORTED_VERSIONS}"
            )

        return True, None

    @staticmethod
    def parse_request(headers: Dict[str, str], body: bytes) -> Dict[str, Any]:
        """Parse Prometheus remote read HTTP request.

        Validates headers and body size and extracts basic information about
        the request without decoding the payload.

        Args:
            headers: HTTP request headers
            body: Request body (compressed Protobuf data)

        Returns:
            dict: Request information including:
                - body_size: Size of compressed body in bytes
                - content_type: Content type from headers
                - content_encoding: Content encoding from headers
                - version: Prometheus remote read version (if present)
                - user_agent: Client User-Agent (if present)

        Raises:
            InvalidReadRequestError: If headers or body size are invalid
        """
        is_valid, error = PrometheusParser.validate_headers(headers)
        if not is_valid:
            raise InvalidReadRequestError(error)

        is_valid, error = PrometheusParser.validate_request_size(len(body))
        if not is_valid:
            raise InvalidReadRequestError(error)

        normalized_headers = {k.lower(): v for k, v in headers.items()}

        info = {
            "body_size": len(body),
            "content_type": normalized_headers.get("content-type", ""),
            "content_encoding": normalized_headers.get("content-encoding", ""),
            "version": normalized_headers.get(PrometheusParser.VERSION_HEADER, "unknown"),
            "user_agent": normalized_headers.get("user-agent"),
        }

        logger.debug(
            f"Parsed Prometheus request: {info['body_size']} bytes, version {info['version']}"
        )

        return info

    @staticmethod
    def validate_request_size(
        body_size: int, max_size: int = 10 * 1024 * 1024
    ) -> tuple[bool, Optional[str]]:
        """Validate that request size is within acceptable limits.

        Args:
            body_size: Size of request body in bytes
            max_size: Maximum allowed size in bytes (default: 10 MB)

        Returns:
            tuple: (is_valid, error_message)
        """
        if body_size <= 0:
            return False, "Request body is empty"

        if body_size > max_size:
            return (
                False,
                f"Request body too large: {body_size} bytes "
                f"(max: {max_size} bytes, {max_size / (1024 * 1024):.1f} MB)",
            )

        return True, None

    @staticmethod
    def create_response_headers() -> Dict[str, str]:
        """Create response headers for a Prometheus remote read response.

        Returns:
            dict: Response headers
        """
        return {
            "Content-Type": PrometheusParser.EXPECTED_CONTENT_TYPE,
            "Content-Encoding": PrometheusParser.EXPECTED_CONTENT_ENCODING,
        }
