"""Remote read service: request in, ClickHouse in the middle, response out."""

import time

from promread.config import Settings
from promread.exceptions import PromReadError, TranslationError
from promread.logging_config import get_logger, log_error
from promread.prometheus import PrometheusRemoteRead
from promread.prometheus.remote_pb2 import ReadRequest, ReadResponse
from promread.query.executor import ClickHouseExecutor, QueryExecutor
from promread.translator import RemoteReadTranslator, StaticTagCatalog, TranslatorConfig
from promread.translator.tags import TagCatalog

logger = get_logger(__name__)


class RemoteReadService:
    """
    Serves remote read requests against a ClickHouse store.

    Every stage runs synchronously in the caller's thread and keeps no state
    between requests.

    Usage:
        service = RemoteReadService.from_settings(get_settings())
        body = service.read_raw(request_body)
    """

    def __init__(
        self,
        translator: RemoteReadTranslator,
        executor: QueryExecutor,
        protocol: PrometheusRemoteRead | None = None,
    ) -> None:
        self.translator = translator
        self.executor = executor
        self.protocol = protocol or PrometheusRemoteRead()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteReadService":
        catalog: TagCatalog | None = None
        if settings.tag_catalog_path is not None:
            catalog = StaticTagCatalog.from_file(settings.tag_catalog_path)
        translator = RemoteReadTranslator(TranslatorConfig.from_settings(settings), catalog)
        return cls(translator, ClickHouseExecutor.from_settings(settings))

    def read(self, request: ReadRequest) -> ReadResponse:
        """
        Answer a decoded read request.

        Raises:
            PromReadError: Any translation, execution or decoding failure;
                unexpected exceptions are wrapped in TranslationError
        """
        start_time = time.time()
        logger.info("remote_read_started", queries=len(request.queries))
        try:
            compiled = self.translator.compile(request)
            result = self.executor.execute(
                compiled.sql,
                database=compiled.database,
                data_source=compiled.data_source,
            )
            response = self.translator.decode(result)
        except PromReadError as e:
            log_error(logger, e, "remote_read")
            raise
        except Exception as e:
            log_error(logger, e, "remote_read")
            raise TranslationError(f"Remote read failed: {e}") from e

        stats = self.protocol.get_response_statistics(response)
        logger.info(
            "remote_read_completed",
            metric=compiled.metric.metric_name,
            database=compiled.database,
            rows=result.row_count,
            series=stats["total_time_series"],
            samples=stats["total_samples"],
            duration_seconds=time.time() - start_time,
        )
        return response

    def read_raw(self, body: bytes) -> bytes:
        """Decode a snappy-compressed request body and return the encoded response."""
        request = self.protocol.decode_read_request(body)
        return self.protocol.encode_read_response(self.read(request))

    def close(self) -> None:
        close = getattr(self.executor, "close", None)
        if close is not None:
            close()
