from fastapi import HTTPException, status

from app.core.errors import (
    InsufficientStock,
    NotFound,
    StallError,
    SyncError,
    ValidationError,
)


def to_http_exception(err: StallError) -> HTTPException:
    """Translate a core error into the HTTPException the routers raise."""
    if isinstance(err, InsufficientStock):
        code = status.HTTP_409_CONFLICT
    elif isinstance(err, ValidationError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(err, NotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(err, SyncError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=err.message)
