"""
Request dependencies shared by the v1 routers.
"""
from typing import NoReturn

from fastapi import HTTPException, Request

from hotrod.core.api_errors import APIError
from hotrod.services.container import ServiceContainer

UPSTREAM_ERROR = "Failed to reach FCC data source"


def get_services(request: Request) -> ServiceContainer:
    """The ServiceContainer created by the application lifespan."""
    return request.app.state.services


def raise_upstream_error(error: APIError) -> NoReturn:
    """Map an upstream failure to HTTP 502."""
    raise HTTPException(
        status_code=502,
        detail={"error": UPSTREAM_ERROR, "detail": error.message},
    ) from error
