"""Tag column discovery for resolved metrics.

Physical tables store each tag as its own column, but which tags exist depends
on the table and the time range. The tag catalog answers that question; the
expander turns its answer into select-list columns.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Protocol, Sequence

import yaml

from promread.exceptions import ConfigurationError
from promread.logging_config import get_logger
from promread.translator.models import MetricIdentifier, TimeRange, TranslatorConfig

logger = get_logger(__name__)

TAG_BLOB_COLUMN = "tag"

# Listener and ingress tags aggregate many series and never identify one.
IGNORED_TAGS = frozenset({"lb_listener", "pod_ingress"})


@dataclass(frozen=True)
class TagDescription:
    """One catalog row: a logical tag and its client/server column names."""

    name: str
    client_name: str
    server_name: str

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "TagDescription":
        """Build from a catalog row of (name, client_name, server_name, ...)."""
        return cls(name=str(row[0]), client_name=str(row[1]), server_name=str(row[2]))


class TagCatalog(Protocol):
    """Lists the tag columns materialized for a table."""

    def get_tag_descriptions(
        self,
        database: str,
        table: str,
        statement: str,
        time_range: TimeRange,
    ) -> list[TagDescription]: ...


class StaticTagCatalog:
    """
    Tag catalog backed by a fixed mapping, usually loaded from YAML.

    The YAML layout is ``{database: {table: [tag, ...]}}`` where each tag is
    either a plain name or a mapping with ``name``, ``client_name`` and
    ``server_name``::

        flow_log:
          l7_flow_log:
            - name: ip
              client_name: ip_0
              server_name: ip_1
            - request_domain
    """

    def __init__(self, tables: Mapping[str, Mapping[str, Sequence[Any]]] | None = None) -> None:
        self._tables: dict[tuple[str, str], list[TagDescription]] = {}
        for database, table_map in (tables or {}).items():
            for table, entries in (table_map or {}).items():
                self._tables[(database, table)] = [
                    self._parse_entry(database, table, entry) for entry in entries or []
                ]

    @staticmethod
    def _parse_entry(database: str, table: str, entry: Any) -> TagDescription:
        if isinstance(entry, str):
            return TagDescription(name=entry, client_name=entry, server_name=entry)
        if isinstance(entry, Mapping) and "name" in entry:
            name = str(entry["name"])
            return TagDescription(
                name=name,
                client_name=str(entry.get("client_name", name)),
                server_name=str(entry.get("server_name", name)),
            )
        if isinstance(entry, (list, tuple)) and len(entry) >= 3:
            return TagDescription.from_row(entry)
        raise ConfigurationError(
            f"Invalid tag entry for {database}.{table}: {entry!r}",
            database=database,
            table=table,
        )

    @classmethod
    def from_file(cls, path: Path) -> "StaticTagCatalog":
        """
        Load a catalog from a YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or has the wrong shape
        """
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load tag catalog from {path}: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Tag catalog {path} must be a mapping of databases")

        catalog = cls(data)
        logger.info("tag_catalog_loaded", path=str(path), tables=len(catalog._tables))
        return catalog

    def get_tag_descriptions(
        self,
        database: str,
        table: str,
        statement: str,
        time_range: TimeRange,
    ) -> list[TagDescription]:
        return list(self._tables.get((database, table), []))


def show_tags_statement(table: str, time_range: TimeRange) -> str:
    return f"SHOW tags FROM {table} WHERE time >= {time_range.start} AND time <= {time_range.end}"


def expand_tags(
    metric: MetricIdentifier,
    time_range: TimeRange,
    config: TranslatorConfig,
    catalog: TagCatalog | None,
) -> list[str]:
    """
    Select the tag columns a query returns.

    Unresolved metrics and the system database carry all tags in the generic
    tag column. Otherwise the catalog is asked once for the table's tags; edge
    tables get both the client-side and server-side column of a directional
    tag. A failing or missing catalog yields no tag columns.

    Returns:
        Column expressions in catalog order
    """
    if not metric.is_resolved or metric.database == config.system_database:
        return [TAG_BLOB_COLUMN]

    if catalog is None:
        logger.warning(
            "tag_catalog_missing", database=metric.database, table=metric.table
        )
        return []

    statement = show_tags_statement(metric.table, time_range)
    try:
        descriptions = catalog.get_tag_descriptions(
            metric.database, metric.table, statement, time_range
        )
    except Exception as e:
        logger.warning(
            "tag_catalog_failed",
            database=metric.database,
            table=metric.table,
            error=str(e),
            exc_info=True,
        )
        return []

    is_edge_table = metric.table in config.edge_tables
    columns = []
    for description in descriptions:
        if description.name in IGNORED_TAGS:
            continue
        if is_edge_table and description.name != description.client_name:
            columns.append(f"`{description.client_name}`")
            columns.append(f"`{description.server_name}`")
        else:
            columns.append(f"`{description.name}`")

    logger.debug(
        "tags_expanded",
        database=metric.database,
        table=metric.table,
        tags=len(descriptions),
        columns=len(columns),
    )
    return columns
