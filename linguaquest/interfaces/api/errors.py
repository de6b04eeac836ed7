"""
Mapping of use-case error kinds to HTTP errors.
"""

from typing import NoReturn

from fastapi import HTTPException, status

from linguaquest.core.errors import ErrorKind

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERSISTENCE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.GENERATOR: status.HTTP_502_BAD_GATEWAY,
}


def raise_for_error(kind: ErrorKind | None, message: str) -> NoReturn:
    """Raise the HTTPException matching a failed use-case result."""
    status_code = STATUS_BY_KIND.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    raise HTTPException(status_code=status_code, detail=message or "Request failed")
