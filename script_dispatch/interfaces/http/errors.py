"""Translation of domain errors into HTTP responses."""

from fastapi import HTTPException, status

from script_dispatch.modules.common.exceptions import (
    DispatchError,
    IntegrityUnavailableError,
    NotFoundError,
    ScriptNotApprovedError,
    ValidationError,
)


def to_http_exception(exc: DispatchError) -> HTTPException:
    if isinstance(exc, ScriptNotApprovedError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, IntegrityUnavailableError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=str(exc))


__all__ = ["to_http_exception"]
