from fastapi import HTTPException

from grocery.domain.errors import (
    AuthenticationError,
    ConstraintViolation,
    EmptyCartError,
    InvalidStatusTransition,
    ReferentialIntegrityError,
    StoreError,
    TransientStorageError,
)


def http_error(e: StoreError) -> HTTPException:
    """Map a core failure to the HTTP status the screens branch on."""
    if isinstance(e, TransientStorageError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, AuthenticationError):
        return HTTPException(status_code=401, detail=str(e))
    if isinstance(e, EmptyCartError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, (ConstraintViolation, ReferentialIntegrityError)):
        return HTTPException(status_code=409, detail={"reason": e.reason, "message": str(e)})
    if isinstance(e, InvalidStatusTransition):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))
