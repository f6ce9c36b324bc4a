"""
Transaction model.

One row per successful withdrawal or deposit. Rows are
append-only: never updated, never deleted, not even when the
account they refer to is deleted. That is why account_number
is an indexed plain column rather than a foreign key.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, Enum as SAEnum, func
from sqlalchemy.orm import Mapped, mapped_column

from atm_system.models.base import Base
from atm_system.models.enums import TransactionType, enum_values


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_number: Mapped[int] = mapped_column(nullable=False, index=True)
    transaction_type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    balance_after: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction {self.transaction_type.value} "
            f"{self.amount} on {self.account_number}>"
        )
