"""
Customer account model.

Unlike a double-entry ledger, the balance is stored on the
row. It is only ever written with values computed in Python
(Decimal, two places), which keeps the compare-and-swap in
the repository exact on every backend.
"""

from decimal import Decimal

from sqlalchemy import String, Numeric, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from atm_system.models.base import Base
from atm_system.models.enums import AccountStatus, enum_values


# Admin updates may only move an account between these states.
# CLOSED is reachable in the type but not by any operation.
VALID_TRANSITIONS: dict[AccountStatus, set[AccountStatus]] = {
    AccountStatus.ACTIVE: {AccountStatus.ACTIVE, AccountStatus.DISABLED},
    AccountStatus.DISABLED: {AccountStatus.ACTIVE, AccountStatus.DISABLED},
    AccountStatus.CLOSED: set(),  # Terminal state, no transitions out
}


class Account(Base):
    __tablename__ = "accounts"

    account_number: Mapped[int] = mapped_column(
        primary_key=True, autoincrement=True
    )
    holder_name: Mapped[str] = mapped_column(String(100), nullable=False)
    balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )
    status: Mapped[AccountStatus] = mapped_column(
        SAEnum(
            AccountStatus,
            name="account_status_enum",
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )

    def __repr__(self) -> str:
        return f"<Account {self.account_number} ({self.status.value})>"
