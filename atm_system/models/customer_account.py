"""Link table between a customer user and their account (one-to-one)."""

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from atm_system.models.base import Base


class CustomerAccount(Base):
    __tablename__ = "customer_accounts"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), primary_key=True
    )
    account_number: Mapped[int] = mapped_column(
        ForeignKey("accounts.account_number"), unique=True, nullable=False
    )

    def __repr__(self) -> str:
        return f"<CustomerAccount user={self.user_id} account={self.account_number}>"
