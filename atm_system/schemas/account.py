"""
Pydantic schemas for accounts.

AccountRecord is the detached copy the repository hands out.
Changing one does nothing until it is passed back through
AccountRepository.update_account.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from atm_system.models.enums import AccountStatus


class AccountCreate(BaseModel):
    """Account half of the atomic customer+account insert."""
    holder_name: str
    balance: Decimal = Field(ge=0, decimal_places=2)
    status: AccountStatus = AccountStatus.ACTIVE


class AccountRecord(BaseModel):
    account_number: int
    holder_name: str
    balance: Decimal
    status: AccountStatus

    model_config = {"from_attributes": True}


# --- Request Schemas ---

class AccountOpenRequest(BaseModel):
    """Admin request to create a customer together with its account."""
    login: str
    pin: str
    holder_name: str = Field(max_length=100)
    starting_balance: Decimal = Decimal("0.00")
    status: AccountStatus = AccountStatus.ACTIVE


class AccountUpdateRequest(BaseModel):
    """
    Partial update. A field left out (or null) keeps its
    current value.
    """
    holder_name: str | None = Field(default=None, max_length=100)
    status: AccountStatus | None = None


class AmountRequest(BaseModel):
    """Withdrawal or deposit amount."""
    amount: Decimal


# --- Response Schemas ---

class AccountCreatedResponse(BaseModel):
    account_number: int


class BalanceResponse(BaseModel):
    account_number: int
    balance: Decimal
