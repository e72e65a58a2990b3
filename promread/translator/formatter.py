"""Canonical text and number forms of result cells and tag names."""

import json
import math
from decimal import Decimal

from promread.exceptions import CellCoercionError
from promread.logging_config import get_logger
from promread.prometheus.types_pb2 import Label
from promread.query.models import (
    CELL_TYPES,
    Cell,
    FloatCell,
    IntCell,
    NullableFloatCell,
    StringCell,
    TimestampCell,
    ValueKind,
)

logger = get_logger(__name__)


def format_float(value: float) -> str:
    """Shortest decimal that round-trips to ``value``, never in exponent form."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_cell(cell: Cell) -> str:
    """
    Render a cell as a label value.

    Raises:
        CellCoercionError: For cells with no text form
    """
    if isinstance(cell, IntCell):
        return str(cell.value)
    if isinstance(cell, FloatCell):
        return format_float(cell.value)
    if isinstance(cell, TimestampCell):
        return str(cell.value)
    if isinstance(cell, StringCell):
        return cell.value
    raise CellCoercionError(cell, "string")


def cell_to_float(cell: Cell, kind: ValueKind | None = None) -> float:
    """
    Read a metric value cell as a float.

    A null nullable float reads as NaN. When the column's declared kind is
    given, the cell must be of the variant that kind produces.

    Raises:
        CellCoercionError: For non-numeric cells or cells that disagree with
            the declared kind
    """
    if kind is not None and not isinstance(cell, CELL_TYPES[kind]):
        raise CellCoercionError(cell, f"float from {kind.value}")
    if isinstance(cell, IntCell):
        return float(cell.value)
    if isinstance(cell, FloatCell):
        return cell.value
    if isinstance(cell, NullableFloatCell):
        return math.nan if cell.value is None else cell.value
    raise CellCoercionError(cell, "float")


def cell_to_seconds(cell: Cell) -> int:
    """
    Read a time column cell as whole seconds since the epoch.

    Raises:
        CellCoercionError: For cells that do not hold a time
    """
    if isinstance(cell, IntCell):
        return cell.value
    if isinstance(cell, FloatCell):
        return int(cell.value)
    if isinstance(cell, TimestampCell):
        return int(cell.value.timestamp())
    raise CellCoercionError(cell, "timestamp")


def value_is_nil(cell: Cell) -> bool:
    """
    Whether a bare tag cell counts as absent.

    Empty strings, empty JSON objects and integer zero are absent. A tag whose
    real value is integer zero is therefore dropped as well.
    """
    if isinstance(cell, StringCell):
        return cell.value == "" or cell.value == "{}"
    if isinstance(cell, IntCell):
        return cell.value == 0
    return False


def format_tag_name(tag_name: str) -> str:
    """Make a column name usable as a Prometheus label name."""
    return tag_name.replace(".", "_").replace("-", "_").replace("/", "_")


def tags_to_label_pairs(tags_json: str) -> list[Label]:
    """
    Parse a serialized tag map into labels.

    Anything other than a flat JSON object of strings yields no labels.
    """
    try:
        tags = json.loads(tags_json)
    except json.JSONDecodeError:
        logger.debug("tag_blob_unparsable", tags=tags_json)
        return []

    if not isinstance(tags, dict) or not all(isinstance(v, str) for v in tags.values()):
        logger.debug("tag_blob_not_flat", tags=tags_json)
        return []

    return [Label(name=name, value=value) for name, value in tags.items()]
