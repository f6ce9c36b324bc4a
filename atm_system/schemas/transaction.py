"""
Pydantic schemas for transaction records.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from atm_system.models.enums import TransactionType


class TransactionCreate(BaseModel):
    account_number: int
    transaction_type: TransactionType
    amount: Decimal = Field(gt=0, decimal_places=2)
    balance_after: Decimal = Field(ge=0, decimal_places=2)


class TransactionRecord(BaseModel):
    id: int
    account_number: int
    transaction_type: TransactionType
    amount: Decimal
    balance_after: Decimal
    transaction_date: datetime

    model_config = {"from_attributes": True}
