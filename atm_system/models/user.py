"""
User model.

Customers and administrators share one table and are told
apart by user_type. A customer is linked to exactly one
account through the customer_accounts table.
"""

from sqlalchemy import String, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from atm_system.models.base import Base
from atm_system.models.enums import UserType, enum_values


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    login: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    # Stored as entered: exactly five ASCII digits, no hashing
    pin_code: Mapped[str] = mapped_column(String(5), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_type: Mapped[UserType] = mapped_column(
        SAEnum(
            UserType,
            name="user_type_enum",
            values_callable=enum_values,
            create_constraint=True,
        ),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.login} ({self.user_type.value})>"
