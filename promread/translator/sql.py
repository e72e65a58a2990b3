"""Assembly of the final SELECT statement."""

from typing import Sequence

from promread.translator.models import MetricIdentifier, TranslatorConfig

TIME_COLUMN_ALIAS = "timestamp"
TIME_SELECTION = f"toUnixTimestamp(time) AS {TIME_COLUMN_ALIAS}"


def assemble_sql(
    metric: MetricIdentifier,
    columns: Sequence[str],
    predicates: Sequence[str],
    config: TranslatorConfig,
) -> str:
    """
    Build the statement for one read query.

    Resolved metrics read their physical table newest first, or the table
    of the requested data source interval. Unresolved
    metrics read a view in the virtual namespace, which owns the ordering.
    """
    select_list = ",".join(columns)
    where = " AND ".join(predicates)
    if metric.is_resolved:
        return (
            f"SELECT {select_list} FROM {metric.source_table} WHERE {where} "
            f"ORDER BY time desc LIMIT {config.row_limit}"
        )
    return (
        f"SELECT {select_list} FROM {config.virtual_namespace}.{metric.metric_name} "
        f"WHERE {where} LIMIT {config.row_limit}"
    )
