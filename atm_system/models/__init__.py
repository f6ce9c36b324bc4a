"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from atm_system.models.base import Base
from atm_system.models.enums import (
    UserType,
    AccountStatus,
    TransactionType,
)
from atm_system.models.user import User
from atm_system.models.account import Account
from atm_system.models.customer_account import CustomerAccount
from atm_system.models.transaction import Transaction

__all__ = [
    "Base",
    "UserType",
    "AccountStatus",
    "TransactionType",
    "User",
    "Account",
    "CustomerAccount",
    "Transaction",
]
