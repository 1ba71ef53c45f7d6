"""
Dependency injection and error mapping for the HTTP API.

The registry lives on app.state; registry errors become JSON responses
with a status code per error category.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..core import (
    AuthorizationError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    URAuthError,
    URAuthRegistry,
)


ERROR_STATUS = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


def get_registry(request: Request) -> URAuthRegistry:
    """Get the registry from app state."""
    return request.app.state.registry


def status_for(error: URAuthError) -> int:
    for cls, code in ERROR_STATUS.items():
        if isinstance(error, cls):
            return code
    return status.HTTP_400_BAD_REQUEST


async def urauth_error_handler(request: Request, exc: URAuthError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={"code": exc.code.value, "detail": exc.message},
    )
