"""
Mapping from core error kinds to HTTP responses.

The routers catch ValueError (validation and domain errors)
and turn it into an HTTPException here. Storage faults are not
ValueErrors; the app-level handler in main.py answers them
with 503.
"""

from fastapi import HTTPException

from atm_system.exceptions import ATMError, ErrorKind

STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.MALFORMED_PIN: 422,
    ErrorKind.INVALID_LOGIN: 422,
    ErrorKind.INVALID_PIN: 422,
    ErrorKind.INVALID_AMOUNT: 422,
    ErrorKind.INVALID_BALANCE: 422,
    ErrorKind.INVALID_STATUS: 422,
    ErrorKind.INVALID_NAME: 422,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.INSUFFICIENT_FUNDS_OR_INACTIVE: 400,
    ErrorKind.INVALID_AMOUNT_OR_INACTIVE: 400,
    ErrorKind.DUPLICATE_LOGIN: 409,
    ErrorKind.ACCOUNT_NOT_FOUND: 404,
    ErrorKind.CONCURRENT_UPDATE: 409,
    ErrorKind.STORAGE_UNAVAILABLE: 503,
    ErrorKind.CONSTRAINT_VIOLATED: 503,
}


def error_detail(error: ATMError) -> dict:
    """Error kind plus its context, JSON-safe."""
    return {
        "kind": error.kind.value,
        "context": {k: str(v) for k, v in error.context.items()},
    }


def http_error(error: ATMError) -> HTTPException:
    return HTTPException(
        status_code=STATUS_CODES.get(error.kind, 400),
        detail=error_detail(error),
    )
