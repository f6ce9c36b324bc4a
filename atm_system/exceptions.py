"""
Error taxonomy for the ATM core.

Every error carries a stable ``kind`` and a small context dict
(account number, amount, login). None of them carry user-facing
text; the terminal and the HTTP layer decide what to show.

ValidationError and DomainError are ValueError subclasses so
callers that only care about "the request was rejected" can keep
catching ValueError. StorageFault is not: a database outage is
never a bad request.
"""

import enum


class ErrorKind(str, enum.Enum):
    # Validation
    MALFORMED_PIN = "malformed_pin"
    INVALID_LOGIN = "invalid_login"
    INVALID_PIN = "invalid_pin"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_BALANCE = "invalid_balance"
    INVALID_STATUS = "invalid_status"
    INVALID_NAME = "invalid_name"

    # Domain
    INVALID_CREDENTIALS = "invalid_credentials"
    INSUFFICIENT_FUNDS_OR_INACTIVE = "insufficient_funds_or_inactive"
    INVALID_AMOUNT_OR_INACTIVE = "invalid_amount_or_inactive"
    DUPLICATE_LOGIN = "duplicate_login"
    ACCOUNT_NOT_FOUND = "account_not_found"
    CONCURRENT_UPDATE = "concurrent_update"

    # Storage
    STORAGE_UNAVAILABLE = "storage_unavailable"
    CONSTRAINT_VIOLATED = "constraint_violated"


class ATMError(Exception):
    """Base class for every error raised by the ATM core."""

    kind: ErrorKind

    def __init__(self, **context):
        self.context = context
        if context:
            details = ", ".join(f"{k}={v}" for k, v in context.items())
            super().__init__(f"{self.kind.value} ({details})")
        else:
            super().__init__(self.kind.value)


# --- Validation errors ---
# Detected locally, before storage is touched.

class ValidationError(ATMError, ValueError):
    pass


class MalformedPinError(ValidationError):
    kind = ErrorKind.MALFORMED_PIN


class InvalidLoginError(ValidationError):
    kind = ErrorKind.INVALID_LOGIN


class InvalidPinError(ValidationError):
    kind = ErrorKind.INVALID_PIN


class InvalidAmountError(ValidationError):
    kind = ErrorKind.INVALID_AMOUNT


class InvalidBalanceError(ValidationError):
    kind = ErrorKind.INVALID_BALANCE


class InvalidStatusError(ValidationError):
    kind = ErrorKind.INVALID_STATUS


class InvalidNameError(ValidationError):
    kind = ErrorKind.INVALID_NAME


# --- Domain errors ---

class DomainError(ATMError, ValueError):
    pass


class InvalidCredentialsError(DomainError):
    """Unknown login or wrong PIN. The two are deliberately not told apart."""

    kind = ErrorKind.INVALID_CREDENTIALS


class InsufficientFundsOrInactiveError(DomainError):
    kind = ErrorKind.INSUFFICIENT_FUNDS_OR_INACTIVE


class InvalidAmountOrInactiveError(DomainError):
    kind = ErrorKind.INVALID_AMOUNT_OR_INACTIVE


class DuplicateLoginError(DomainError):
    kind = ErrorKind.DUPLICATE_LOGIN


class AccountNotFoundError(DomainError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND


class ConcurrentUpdateError(DomainError):
    kind = ErrorKind.CONCURRENT_UPDATE


# --- Storage faults ---

class StorageFault(ATMError):
    """The database could not be reached or the statement failed."""

    kind = ErrorKind.STORAGE_UNAVAILABLE


class ConstraintViolation(StorageFault):
    kind = ErrorKind.CONSTRAINT_VIOLATED
