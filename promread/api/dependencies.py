"""FastAPI dependencies for promread API."""

from typing import Annotated

from fastapi import Depends, Request

from promread.exceptions import ConfigurationError
from promread.service import RemoteReadService


def get_read_service(request: Request) -> RemoteReadService:
    """Return the remote read service created at application start.

    Raises:
        ConfigurationError: If the application was started without one
    """
    service = getattr(request.app.state, "read_service", None)
    if service is None:
        raise ConfigurationError("Remote read service is not initialized")
    return service


ReadService = Annotated[RemoteReadService, Depends(get_read_service)]
