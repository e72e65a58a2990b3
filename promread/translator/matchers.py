"""Compilation of label matchers into SQL predicates."""

import re
from typing import Iterable

from promread.exceptions import InvalidLabelNameError, UnsupportedMatcherTypeError
from promread.prometheus import METRIC_NAME_LABEL
from promread.prometheus.types_pb2 import LabelMatcher
from promread.translator.models import MetricIdentifier

LABEL_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

MATCHER_OPERATORS = {
    LabelMatcher.EQ: "=",
    LabelMatcher.NEQ: "!=",
    LabelMatcher.RE: " regexp ",
    LabelMatcher.NRE: " not regexp ",
}


def quote_literal(value: str) -> str:
    """Render a value as a single-quoted SQL string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def column_reference(label: str, metric: MetricIdentifier | None, system_database: str) -> str:
    """
    Pick the column a label refers to.

    Tables of a resolved, non-system database expose tags as plain columns.
    Virtual views and the system database keep tags in the ``tag`` map, which
    is addressed as ``tag.<label>``.
    """
    if metric is not None and metric.is_resolved and metric.database != system_database:
        return label
    return f"`tag.{label}`"


def compile_matcher(
    matcher: LabelMatcher, metric: MetricIdentifier | None, system_database: str
) -> str:
    """
    Compile one matcher into a predicate.

    Raises:
        UnsupportedMatcherTypeError: If the matcher type is not EQ, NEQ, RE or NRE
        InvalidLabelNameError: If the label name is not a plain identifier
    """
    operator = MATCHER_OPERATORS.get(matcher.type)
    if operator is None:
        raise UnsupportedMatcherTypeError(matcher.type, matcher.name)
    if not LABEL_NAME_PATTERN.match(matcher.name):
        raise InvalidLabelNameError(matcher.name)
    column = column_reference(matcher.name, metric, system_database)
    return f"{column}{operator}{quote_literal(matcher.value)}"


def compile_matchers(
    matchers: Iterable[LabelMatcher],
    metric: MetricIdentifier | None,
    system_database: str,
) -> list[str]:
    """Compile every matcher except ``__name__``, keeping request order."""
    return [
        compile_matcher(matcher, metric, system_database)
        for matcher in matchers
        if matcher.name != METRIC_NAME_LABEL
    ]
