from datetime import datetime

from fastapi import Request, status
from fastapi.responses import JSONResponse

from liftlog.core.exceptions import (
    AuthenticationError,
    DecodeError,
    DomainError,
    NotFoundError,
    TransientDatastoreError,
    ValidationError,
)
from liftlog.core.logging import get_logger

logger = get_logger(__name__)


ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DecodeError: status.HTTP_400_BAD_REQUEST,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    TransientDatastoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_code_for(exc: DomainError) -> int:
    # Subclasses (OwnershipError, StuckJobError, ...) inherit their parent's status.
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_MAP:
            return ERROR_STATUS_MAP[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_code_for(exc)

    content = {
        "error": exc.message,
        "code": exc.code,
        "details": exc.details,
        "meta": {
            "request_id": getattr(request.state, "request_id", None),
            "timestamp": datetime.utcnow().isoformat() + "Z",
        },
    }
    if isinstance(exc, NotFoundError):
        content["status"] = "not_found"

    return JSONResponse(status_code=status_code, content=content)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
