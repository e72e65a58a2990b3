"""Prometheus remote read router for promread API.

Prometheus is pointed at this endpoint with::

    remote_read:
      - url: http://promread:8000/api/v1/prom/read
        read_recent: true
"""

import logging

from fastapi import APIRouter, Request, Response, status
from starlette.concurrency import run_in_threadpool

from promread.api.dependencies import ReadService
from promread.prometheus import PrometheusParser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/prom", tags=["prometheus"])


@router.post(
    "/read",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    summary="Prometheus remote read",
    description="""
Answer a Prometheus remote read request from ClickHouse.

The body is a Snappy-compressed Protobuf ReadRequest. Only the first query of
the request is answered. The response is a Snappy-compressed Protobuf
ReadResponse holding a single query result.
""",
)
async def remote_read(request: Request, service: ReadService) -> Response:
    """Translate, execute and answer one remote read request.

    Raises:
        InvalidReadRequestError: If headers or body are malformed
        TranslationError: If the request cannot be translated to SQL
        QueryExecutionError: If ClickHouse fails
    """
    body = await request.body()
    info = PrometheusParser.parse_request(dict(request.headers), body)

    logger.debug(
        f"Remote read request: {info['body_size']} bytes",
        extra={"user_agent": info["user_agent"], "version": info["version"]},
    )

    payload = await run_in_threadpool(service.read_raw, body)

    return Response(
        content=payload,
        status_code=status.HTTP_200_OK,
        headers=PrometheusParser.create_response_headers(),
    )
