"""Mapping of component failures onto HTTP errors."""

from typing import NoReturn

from fastapi import HTTPException, status

from pumpwork.domain.errors import DUPLICATE, FORBIDDEN, INVALID, NOT_FOUND, OperationError

STATUS_BY_CODE = {
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FORBIDDEN: status.HTTP_403_FORBIDDEN,
    DUPLICATE: status.HTTP_409_CONFLICT,
    INVALID: status.HTTP_400_BAD_REQUEST,
}


def raise_for_error(error: OperationError | None) -> NoReturn:
    if error is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed")
    detail: dict[str, str] | str = error.message
    if error.field:
        detail = {"message": error.message, "field": error.field}
    raise HTTPException(
        status_code=STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST), detail=detail
    )
