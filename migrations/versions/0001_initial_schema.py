"""initial schema: users, accounts, customer_accounts, transactions

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_type_enum = sa.Enum(
    "Customer", "Administrator", name="user_type_enum", create_constraint=True
)
account_status_enum = sa.Enum(
    "Active", "Disabled", "Closed", name="account_status_enum", create_constraint=True
)
transaction_type_enum = sa.Enum(
    "Withdrawal", "Deposit", name="transaction_type_enum", create_constraint=True
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("login", sa.String(length=50), nullable=False, unique=True),
        sa.Column("pin_code", sa.String(length=5), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("user_type", user_type_enum, nullable=False),
    )
    op.create_table(
        "accounts",
        sa.Column("account_number", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("holder_name", sa.String(length=100), nullable=False),
        sa.Column("balance", sa.Numeric(15, 2), nullable=False),
        sa.Column("status", account_status_enum, nullable=False),
    )
    op.create_table(
        "customer_accounts",
        sa.Column(
            "user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True
        ),
        sa.Column(
            "account_number",
            sa.Integer(),
            sa.ForeignKey("accounts.account_number"),
            nullable=False,
            unique=True,
        ),
    )
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("account_number", sa.Integer(), nullable=False),
        sa.Column("transaction_type", transaction_type_enum, nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), nullable=False),
        sa.Column(
            "transaction_date",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("balance_after", sa.Numeric(15, 2), nullable=False),
    )
    op.create_index(
        "ix_transactions_account_number", "transactions", ["account_number"]
    )


def downgrade() -> None:
    op.drop_index("ix_transactions_account_number", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("customer_accounts")
    op.drop_table("accounts")
    op.drop_table("users")
    # Postgres keeps enum types around after the tables go
    bind = op.get_bind()
    transaction_type_enum.drop(bind, checkfirst=True)
    account_status_enum.drop(bind, checkfirst=True)
    user_type_enum.drop(bind, checkfirst=True)
