"""Translation between Prometheus remote read and ClickHouse SQL."""

from promread.translator.decoder import (
    ColumnLayout,
    SeriesAccumulator,
    decode_result_set,
)
from promread.translator.metric_name import parse_metric_name
from promread.translator.models import (
    CompiledQuery,
    MetricIdentifier,
    TimeRange,
    TranslatorConfig,
)
from promread.translator.tags import (
    StaticTagCatalog,
    TagCatalog,
    TagDescription,
)
from promread.translator.translator import RemoteReadTranslator

__all__ = [
    "ColumnLayout",
    "SeriesAccumulator",
    "decode_result_set",
    "parse_metric_name",
    "CompiledQuery",
    "MetricIdentifier",
    "TimeRange",
    "TranslatorConfig",
    "StaticTagCatalog",
    "TagCatalog",
    "TagDescription",
    "RemoteReadTranslator",
]
