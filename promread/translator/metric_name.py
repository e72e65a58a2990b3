"""Decoding of the ``__name__`` matcher into a physical metric reference.

Metric names take one of two shapes:

- ``<metric>``: no delimiter; the metric is read from a view of the same name
  in the virtual namespace.
- ``<database>__<table>__<metric>[__<data_source>]``: the metric is a column
  of a physical table. ``<database>`` must be a registered database key and
  ``<table>`` one of its tables when the registry lists any.

Every segment ends up verbatim in generated SQL, so each must be a plain
identifier.
"""

import re
from typing import Collection, Mapping

from promread.exceptions import UnknownMetricError
from promread.logging_config import get_logger
from promread.translator.models import MetricIdentifier

logger = get_logger(__name__)

METRIC_NAME_DELIMITER = "__"

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
DATA_SOURCE_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def parse_metric_name(
    name: str, databases: Mapping[str, Collection[str]]
) -> MetricIdentifier:
    """
    Decode a metric name into a MetricIdentifier.

    Args:
        name: Value of the ``__name__`` matcher
        databases: Registry of valid database keys and their tables

    Returns:
        MetricIdentifier, unresolved when the name carries no delimiter

    Raises:
        UnknownMetricError: If the name is delimited but its database or
            table is not registered, it has fewer than three segments, or
            any segment is not a plain identifier
    """
    if METRIC_NAME_DELIMITER not in name:
        if not IDENTIFIER_PATTERN.match(name):
            raise UnknownMetricError(name)
        return MetricIdentifier(metric_name=name)

    segments = name.split(METRIC_NAME_DELIMITER)
    if segments[0] not in databases or len(segments) < 3:
        raise UnknownMetricError(name)

    table, metric_name = segments[1], segments[2]
    data_source = segments[3] if len(segments) > 3 else ""
    if not (IDENTIFIER_PATTERN.match(table) and IDENTIFIER_PATTERN.match(metric_name)):
        raise UnknownMetricError(name)
    if data_source and not DATA_SOURCE_PATTERN.match(data_source):
        raise UnknownMetricError(name)

    tables = databases[segments[0]]
    if tables and table not in tables:
        raise UnknownMetricError(name)

    identifier = MetricIdentifier(
        database=segments[0],
        table=table,
        metric_name=metric_name,
        data_source=data_source,
    )
    logger.debug(
        "metric_name_parsed",
        name=name,
        database=identifier.database,
        table=identifier.table,
        metric=identifier.metric_name,
        data_source=identifier.data_source,
    )
    return identifier
