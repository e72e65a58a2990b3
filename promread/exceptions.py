"""Custom exceptions for promread."""

from typing import Any


class PromReadError(Exception):
    """Base exception for all promread errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(PromReadError):
    """Configuration-related errors."""

    pass


class InvalidReadRequestError(PromReadError):
    """Remote read request could not be decoded or is malformed."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Invalid read request: {details}", details=details)


class InvalidReadResponseError(PromReadError):
    """Captured remote read response could not be decoded."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Invalid read response: {details}", details=details)


class TranslationError(PromReadError):
    """Base class for errors raised while translating a read request to SQL."""

    pass


class UnknownMetricError(TranslationError):
    """Metric name does not decode to a registered database and table."""

    def __init__(self, metric_name: str) -> None:
        super().__init__(f"Unknown metrics {metric_name}", metric_name=metric_name)


class UnsupportedMatcherTypeError(TranslationError):
    """Label matcher type is not one of EQ, NEQ, RE, NRE."""

    def __init__(self, matcher_type: int, label: str) -> None:
        super().__init__(
            f"Unknown match type {matcher_type} for label {label}",
            matcher_type=matcher_type,
            label=label,
        )


class InvalidLabelNameError(TranslationError):
    """Label name is not a valid column identifier."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Invalid label name {label!r}", label=label)


class NoMetricSelectedError(TranslationError):
    """No metric column was selected by the request matchers."""

    def __init__(self) -> None:
        super().__init__("Finding metrics by labels alone is not supported")


class InvalidTimeRangeError(TranslationError):
    """Query time range is inverted."""

    def __init__(self, start: int, end: int) -> None:
        super().__init__(
            f"Invalid time range: start {start} is after end {end}",
            start=start,
            end=end,
        )


class DecodeError(PromReadError):
    """Base class for errors raised while decoding a result set."""

    pass


class MissingColumnError(DecodeError):
    """Metric or time column is absent from the result set."""

    def __init__(self, metrics_index: int, time_index: int, columns: list[str]) -> None:
        super().__init__(
            f"metricsIndex({metrics_index}), timeIndex({time_index}) get failed",
            metrics_index=metrics_index,
            time_index=time_index,
            columns=columns,
        )


class CellCoercionError(DecodeError):
    """Result cell cannot be converted to the requested representation."""

    def __init__(self, cell: Any, target: str) -> None:
        super().__init__(
            f"Cannot convert {type(cell).__name__} to {target}",
            cell=repr(cell),
            target=target,
        )


class QueryError(PromReadError):
    """Query execution errors."""

    pass


class QueryExecutionError(QueryError):
    """Query execution failed."""

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(
            message,
            query=query,
        )


def get_http_status(error: Exception) -> int:
    """Map exception to HTTP status code."""
    status_map = {
        InvalidReadRequestError: 400,
        UnknownMetricError: 400,
        UnsupportedMatcherTypeError: 400,
        InvalidLabelNameError: 400,
        NoMetricSelectedError: 400,
        InvalidTimeRangeError: 400,
        MissingColumnError: 500,
        CellCoercionError: 500,
        ConfigurationError: 500,
        QueryExecutionError: 502,
    }

    for exc_type, status in status_map.items():
        if isinstance(error, exc_type):
            return status

    return 500
