"""Remote read request to SQL, and SQL result to remote read response."""

from promread.exceptions import (
    InvalidReadRequestError,
    InvalidTimeRangeError,
    NoMetricSelectedError,
)
from promread.logging_config import get_logger
from promread.prometheus import METRIC_NAME_LABEL
from promread.prometheus.remote_pb2 import Query, ReadRequest, ReadResponse
from promread.query.models import ResultSet
from promread.translator.decoder import decode_result_set
from promread.translator.matchers import compile_matchers
from promread.translator.metric_name import parse_metric_name
from promread.translator.models import CompiledQuery, TimeRange, TranslatorConfig
from promread.translator.sql import TIME_SELECTION, assemble_sql
from promread.translator.tags import TagCatalog, expand_tags

logger = get_logger(__name__)


class RemoteReadTranslator:
    """
    Translates Prometheus remote read requests for a ClickHouse store.

    The translator holds only immutable configuration and a read-only tag
    catalog, so one instance can serve concurrent requests.

    Example:
        translator = RemoteReadTranslator(TranslatorConfig(), catalog)
        compiled = translator.compile(read_request)
        result = executor.execute(compiled.sql, compiled.database, compiled.data_source)
        response = translator.decode(result)
    """

    def __init__(self, config: TranslatorConfig, tag_catalog: TagCatalog | None = None) -> None:
        self.config = config
        self.tag_catalog = tag_catalog

    def compile(self, request: ReadRequest) -> CompiledQuery:
        """
        Compile the first query of a read request into SQL.

        Raises:
            InvalidReadRequestError: If the request has no queries
            InvalidTimeRangeError: If the query ends before it starts
            UnknownMetricError: If the metric name names an unknown database
            UnsupportedMatcherTypeError: If a matcher type is unknown
            NoMetricSelectedError: If there is no ``__name__`` matcher
        """
        if not request.queries:
            raise InvalidReadRequestError("request contains no queries")
        if len(request.queries) > 1:
            logger.warning(
                "extra_queries_ignored", queries=len(request.queries)
            )
        return self.compile_query(request.queries[0])

    def compile_query(self, query: Query) -> CompiledQuery:
        time_range = TimeRange.from_millis(query.start_timestamp_ms, query.end_timestamp_ms)
        if time_range.start > time_range.end:
            raise InvalidTimeRangeError(time_range.start, time_range.end)

        columns = [TIME_SELECTION]
        metric = None
        for matcher in query.matchers:
            if matcher.name == METRIC_NAME_LABEL:
                metric = parse_metric_name(matcher.value, self.config.databases)
                columns.append(metric.selection())
                break

        predicates = [time_range.predicate()]
        predicates.extend(
            compile_matchers(query.matchers, metric, self.config.system_database)
        )

        if metric is None:
            raise NoMetricSelectedError()

        columns.extend(expand_tags(metric, time_range, self.config, self.tag_catalog))
        sql = assemble_sql(metric, columns, predicates, self.config)

        logger.info(
            "query_compiled",
            metric=metric.metric_name,
            database=metric.database,
            table=metric.table,
            data_source=metric.data_source,
            start=time_range.start,
            end=time_range.end,
            columns=len(columns),
        )
        return CompiledQuery(
            sql=sql,
            database=metric.database,
            data_source=metric.data_source,
            metric=metric,
            time_range=time_range,
        )

    def decode(self, result: ResultSet) -> ReadResponse:
        """
        Decode a query result into a read response with one query result.

        Raises:
            MissingColumnError: If the metric or time column is absent
            CellCoercionError: If a cell cannot be read as its expected type
        """
        return decode_result_set(result, self.config.series_limit)
