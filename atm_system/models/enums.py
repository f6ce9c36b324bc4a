"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. The stored strings are the
enum values ('Active', 'Customer', ...), not the member names.
"""

import enum


class UserType(str, enum.Enum):
    """Which role a user logs in as."""
    CUSTOMER = "Customer"
    ADMINISTRATOR = "Administrator"


class AccountStatus(str, enum.Enum):
    """
    Account lifecycle flag.

    Only ACTIVE accounts accept withdrawals and deposits.
    CLOSED is reserved: no operation moves an account into it.
    """
    ACTIVE = "Active"
    DISABLED = "Disabled"
    CLOSED = "Closed"


class TransactionType(str, enum.Enum):
    WITHDRAWAL = "Withdrawal"
    DEPOSIT = "Deposit"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """values_callable for SQLAlchemy Enum columns."""
    return [member.value for member in enum_cls]
