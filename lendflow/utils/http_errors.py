from fastapi import HTTPException
from starlette import status

from lendflow.core.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    LendFlowError,
    NotFoundError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
    (InvalidArgumentError, status.HTTP_400_BAD_REQUEST),
)


def http_error(e: LendFlowError) -> HTTPException:
    """Client-facing translation of a ledger error."""
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            return HTTPException(status_code=code, detail=e.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
