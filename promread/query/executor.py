"""Query executor for ClickHouse over its HTTP interface."""

import hashlib
import logging
import time
from typing import Protocol

import httpx

from promread.config import Settings
from promread.exceptions import QueryExecutionError
from promread.query.models import ResultSet, make_cell, value_kind_for

logger = logging.getLogger(__name__)


def hash_query(sql: str) -> str:
    """Short stable hash of a query, for log correlation."""
    return hashlib.sha256(sql.encode("utf-8")).hexdigest()[:16]


class QueryExecutor(Protocol):
    """Anything that can run translated SQL and return a ResultSet."""

    def execute(self, sql: str, database: str = "", data_source: str = "") -> ResultSet: ...


class ClickHouseExecutor:
    """
    Execute SQL queries against ClickHouse's HTTP interface.

    Results are requested as ``JSONCompact`` so column types come back in
    ``meta`` and every row is a positional list. The statement already reads
    the interval table of a data source; the qualifier is also attached as
    the query's ``log_comment`` so it shows up in ``system.query_log``.

    Usage:
        with ClickHouseExecutor("http://localhost:8123") as executor:
            result = executor.execute("SELECT 1 AS x", database="flow_log")
    """

    def __init__(
        self,
        base_url: str,
        user: str = "default",
        password: str = "",
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize query executor.

        Args:
            base_url: ClickHouse HTTP URL, e.g. http://localhost:8123
            user: ClickHouse user
            password: ClickHouse password
            timeout_seconds: Per-query timeout
            client: Optional preconfigured httpx client (tests inject a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=self.base_url,
            timeout=timeout_seconds,
            auth=(user, password),
        )

        logger.debug(f"Initialized ClickHouseExecutor for {self.base_url}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClickHouseExecutor":
        return cls(
            base_url=settings.clickhouse_url,
            user=settings.clickhouse_user,
            password=settings.clickhouse_password,
            timeout_seconds=settings.clickhouse_timeout_seconds,
        )

    def execute(self, sql: str, database: str = "", data_source: str = "") -> ResultSet:
        """
        Execute SQL query and return a typed result set.

        Args:
            sql: SQL query string
            database: Database the query runs in (empty for the server default)
            data_source: Optional data source qualifier from the metric name

        Returns:
            ResultSet with one typed cell per value

        Raises:
            QueryExecutionError: If the request fails or ClickHouse returns an error
        """
        start_time = time.time()
        query_hash = hash_query(sql)
        params = {
            "default_format": "JSONCompact",
            "output_format_json_quote_64bit_integers": "0",
            "output_format_json_quote_denormals": "1",
        }
        if database:
            params["database"] = database
        if data_source:
            params["log_comment"] = data_source

        logger.info(
            "Executing query",
            extra={
                "query_hash": query_hash,
                "database": database,
                "data_source": data_source,
            },
        )

        try:
            response = self._client.post(
                "/", params=params, content=sql.encode("utf-8")
            )
        except httpx.HTTPError as e:
            logger.error(f"Query execution error: {e}")
            raise QueryExecutionError(f"Query failed: {e}", query=sql) from e

        if response.status_code != 200:
            detail = response.text.strip()
            logger.error(
                f"ClickHouse returned HTTP {response.status_code}",
                extra={"query_hash": query_hash, "error": detail},
            )
            raise QueryExecutionError(
                f"Query failed with HTTP {response.status_code}: {detail}", query=sql
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise QueryExecutionError(f"Invalid JSON in query response: {e}", query=sql) from e

        result = self._convert_result(payload, sql)

        logger.info(
            "Query executed successfully",
            extra={
                "query_hash": query_hash,
                "row_count": result.row_count,
                "execution_time": time.time() - start_time,
            },
        )

        return result

    @staticmethod
    def _convert_result(payload: dict, sql: str) -> ResultSet:
        """
        Convert a JSONCompact payload to a ResultSet.

        Raises:
            QueryExecutionError: If the payload does not match its own metadata
        """
        meta = payload.get("meta", [])
        columns = [column["name"] for column in meta]
        kinds = [value_kind_for(column["type"]) for column in meta]

        values = []
        for row in payload.get("data", []):
            if len(row) != len(kinds):
                raise QueryExecutionError(
                    f"Row has {len(row)} values for {len(kinds)} columns", query=sql
                )
            try:
                values.append([make_cell(value, kind) for value, kind in zip(row, kinds)])
            except (TypeError, ValueError) as e:
                raise QueryExecutionError(f"Unexpected value in query response: {e}", query=sql) from e

        return ResultSet(columns=columns, schemas=kinds, values=values, query=sql)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ClickHouseExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
