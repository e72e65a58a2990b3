"""Request inspection commands: compile to SQL and decode captured requests."""

import re
import time
from pathlib import Path
from typing import List, Optional

import typer
from google.protobuf.json_format import MessageToDict

from promread.cli.output import print_dict, print_info, print_json, print_panel, print_sql
from promread.config import get_settings
from promread.logging_config import get_logger
from promread.prometheus import METRIC_NAME_LABEL, PrometheusRemoteRead
from promread.prometheus.remote_pb2 import ReadRequest, ReadResponse
from promread.prometheus.types_pb2 import LabelMatcher
from promread.translator import RemoteReadTranslator, StaticTagCatalog, TranslatorConfig

logger = get_logger(__name__)

MATCHER_PATTERN = re.compile(r"^([^=!~]+?)(=~|!~|!=|=)(.*)$")

MATCHER_SYMBOLS = {
    "=": LabelMatcher.EQ,
    "!=": LabelMatcher.NEQ,
    "=~": LabelMatcher.RE,
    "!~": LabelMatcher.NRE,
}

DEFAULT_WINDOW_MS = 3600 * 1000


def parse_matcher(expression: str) -> tuple[str, int, str]:
    """
    Parse a PromQL-style matcher such as ``pod=~"web-.*"``.

    Surrounding double quotes on the value are optional.

    Raises:
        typer.BadParameter: If the expression has no operator or no name
    """
    match = MATCHER_PATTERN.match(expression.strip())
    if match is None:
        raise typer.BadParameter(f"Invalid matcher: {expression}")
    name, symbol, value = match.groups()
    name = name.strip()
    value = value.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1]
    return name, MATCHER_SYMBOLS[symbol], value


def load_request(path: Path) -> ReadRequest:
    return PrometheusRemoteRead.decode_read_request(path.read_bytes())


def translate(
    ctx: typer.Context,
    metric: Optional[str] = typer.Argument(
        None,
        help="Metric name, e.g. flow_log__l7_flow_log__request",
    ),
    matcher: Optional[List[str]] = typer.Option(
        None,
        "--matcher",
        "-m",
        help='Label matcher: name=value, name!=value, name=~regex or name!~regex',
    ),
    start: Optional[int] = typer.Option(
        None, "--start", "-s", help="Query start in milliseconds (default: end - 1h)"
    ),
    end: Optional[int] = typer.Option(
        None, "--end", "-e", help="Query end in milliseconds (default: now)"
    ),
    request_file: Optional[Path] = typer.Option(
        None,
        "--request",
        "-r",
        help="Snappy-compressed ReadRequest captured from Prometheus",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    catalog: Optional[Path] = typer.Option(
        None,
        "--catalog",
        help="Tag catalog YAML file (defaults to the configured catalog)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    save_request: Optional[Path] = typer.Option(
        None,
        "--save-request",
        help="Write the request as a snappy-compressed body, ready to POST or decode",
        dir_okay=False,
        writable=True,
    ),
) -> None:
    """
    Print the SQL a remote read request compiles to.

    Examples:
        promread translate flow_log__l7_flow_log__request -m 'pod=web-1'

        promread translate http_requests_total --start 0 --end 60000

        promread translate --request captured.bin

        promread translate up --save-request up.bin
    """
    settings = ctx.obj.settings if ctx.obj is not None else get_settings()

    if request_file is not None:
        request = load_request(request_file)
    else:
        if metric is None:
            raise typer.BadParameter("Provide a metric name or --request")
        end_ms = end if end is not None else int(time.time() * 1000)
        start_ms = start if start is not None else end_ms - DEFAULT_WINDOW_MS
        matchers = [(METRIC_NAME_LABEL, LabelMatcher.EQ, metric)]
        matchers.extend(parse_matcher(expression) for expression in matcher or [])
        request = PrometheusRemoteRead.build_read_request(start_ms, end_ms, matchers)

    if save_request is not None:
        save_request.write_bytes(PrometheusRemoteRead.encode_read_request(request))
        logger.debug("request_saved", path=str(save_request))

    catalog_path = catalog or settings.tag_catalog_path
    tag_catalog = StaticTagCatalog.from_file(catalog_path) if catalog_path else None
    translator = RemoteReadTranslator(TranslatorConfig.from_settings(settings), tag_catalog)
    compiled = translator.compile(request)

    result = {
        "sql": compiled.sql,
        "database": compiled.database,
        "data_source": compiled.data_source,
        "start": compiled.time_range.start,
        "end": compiled.time_range.end,
    }

    output_format = ctx.obj.output_format if ctx.obj is not None else "table"
    if output_format == "json":
        print_json(result)
        return

    print_sql(compiled.sql)
    print_dict(
        {
            "Database": compiled.database or "(virtual)",
            "Data source": compiled.data_source or "-",
            "Time range": f"{compiled.time_range.start} - {compiled.time_range.end}",
        },
        title="Compiled query",
    )


def load_response(path: Path) -> ReadResponse:
    return PrometheusRemoteRead.decode_read_response(path.read_bytes())


def decode(
    message_file: Path = typer.Argument(
        ...,
        help="Snappy-compressed ReadRequest or ReadResponse body",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    response: bool = typer.Option(
        False, "--response", help="Decode the file as a ReadResponse instead of a request"
    ),
    stats: bool = typer.Option(False, "--stats", help="Print message statistics as well"),
) -> None:
    """
    Decode a captured remote read request or response to JSON.

    Examples:
        promread decode captured.bin

        promread decode captured.bin --stats

        promread decode answer.bin --response
    """
    if response:
        message = load_response(message_file)
        logger.debug("response_decoded", path=str(message_file), results=len(message.results))
        statistics = PrometheusRemoteRead.get_response_statistics(message)
        empty = not statistics["total_time_series"]
        empty_note = "Response contains no series"
    else:
        message = load_request(message_file)
        logger.debug("request_decoded", path=str(message_file), queries=len(message.queries))
        statistics = PrometheusRemoteRead.get_statistics(message)
        empty = not message.queries
        empty_note = "Request contains no queries"

    if stats:
        print_panel(
            "\n".join(f"{key}: {value}" for key, value in statistics.items()),
            title="Response statistics" if response else "Request statistics",
        )
    if empty:
        print_info(empty_note)

    print_json(MessageToDict(message, preserving_proto_field_name=True))
