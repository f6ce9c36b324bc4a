"""
Account repository: the persistence boundary.

Every public method is its own unit of work: it opens a
session, commits or rolls back, and closes the session before
returning. The only multi-row write, create_account, happens
inside a single database transaction, so a half-created
customer is never visible.

Rows never leave this module. Callers get pydantic copies
(AccountRecord, CustomerUser, ...) and must call update_account
to persist a change.

Storage failures surface as StorageFault / ConstraintViolation.
A missing row is None or False; a broken database is never
reported as "not found".
"""

import logging
from contextlib import contextmanager
from decimal import Decimal

from sqlalchemy import select, update, delete, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from atm_system.exceptions import (
    ConstraintViolation,
    DuplicateLoginError,
    StorageFault,
)
from atm_system.models.account import Account
from atm_system.models.customer_account import CustomerAccount
from atm_system.models.enums import AccountStatus, UserType
from atm_system.models.transaction import Transaction
from atm_system.models.user import User
from atm_system.schemas.account import AccountCreate, AccountRecord
from atm_system.schemas.transaction import TransactionCreate, TransactionRecord
from atm_system.schemas.user import (
    AdministratorUser,
    CustomerCreate,
    CustomerUser,
    user_adapter,
)

logger = logging.getLogger(__name__)


class AccountRepository:

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _unit_of_work(self, operation: str):
        """
        Provide a session for a single repository operation.

        Commits when the block finishes, rolls back on any error.
        SQLAlchemy errors are translated into storage faults; our
        own errors (DuplicateLoginError, ...) pass through after
        the rollback.
        """
        session: Session = self.session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            session.rollback()
            logger.exception("Constraint violated during %s", operation)
            raise ConstraintViolation(operation=operation) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Storage failure during %s", operation)
            raise StorageFault(operation=operation) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # --- Users ---

    def find_user_by_login(self, login: str) -> CustomerUser | AdministratorUser | None:
        """
        Look up a user by exact login.

        Comparison is case-sensitive even on backends whose
        default collation is not, so the match is re-checked
        in Python.
        """
        with self._unit_of_work("find_user_by_login") as db:
            row = db.execute(
                select(User, CustomerAccount.account_number)
                .outerjoin(CustomerAccount, CustomerAccount.user_id == User.id)
                .where(User.login == login)
            ).first()

            if row is None or row[0].login != login:
                return None

            user, account_number = row
            data = {
                "user_type": user.user_type,
                "id": user.id,
                "login": user.login,
                "pin_code": user.pin_code,
                "name": user.name,
            }
            if user.user_type == UserType.CUSTOMER:
                data["account_number"] = account_number
            return user_adapter.validate_python(data)

    def create_administrator(self, login: str, pin_code: str, name: str) -> int:
        """Provision an administrator. Returns the new user id."""
        with self._unit_of_work("create_administrator") as db:
            self._ensure_login_free(db, login)
            user = User(
                login=login,
                pin_code=pin_code,
                name=name,
                user_type=UserType.ADMINISTRATOR,
            )
            db.add(user)
            self._flush_new_user(db, login)
            logger.info("Administrator %s provisioned (id=%s)", login, user.id)
            return user.id

    def _ensure_login_free(self, db: Session, login: str) -> None:
        existing = db.execute(
            select(User.id).where(User.login == login)
        ).scalar_one_or_none()
        if existing is not None:
            raise DuplicateLoginError(login=login)

    def _flush_new_user(self, db: Session, login: str) -> None:
        # A concurrent insert can still win the race for the login
        try:
            db.flush()
        except IntegrityError as e:
            raise DuplicateLoginError(login=login) from e

    # --- Accounts ---

    def find_account(self, account_number: int) -> AccountRecord | None:
        with self._unit_of_work("find_account") as db:
            account = db.get(Account, account_number)
            if account is None:
                return None
            return AccountRecord.model_validate(account)

    def list_accounts(self) -> list[AccountRecord]:
        """Return every account, ordered by account number."""
        with self._unit_of_work("list_accounts") as db:
            accounts = db.execute(
                select(Account).order_by(Account.account_number)
            ).scalars().all()
            return [AccountRecord.model_validate(a) for a in accounts]

    def create_account(self, customer: CustomerCreate, account: AccountCreate) -> int:
        """
        Create a customer and their account as one atomic unit.

        Inserts the account, then the user, then the link row,
        and commits only after all three succeed. Any failure
        rolls back all of them. Returns the new account number.
        """
        with self._unit_of_work("create_account") as db:
            self._ensure_login_free(db, customer.login)

            account_row = Account(
                holder_name=account.holder_name,
                balance=account.balance,
                status=account.status,
            )
            db.add(account_row)
            db.flush()

            user = User(
                login=customer.login,
                pin_code=customer.pin_code,
                name=customer.name,
                user_type=UserType.CUSTOMER,
            )
            db.add(user)
            self._flush_new_user(db, customer.login)

            db.add(CustomerAccount(
                user_id=user.id,
                account_number=account_row.account_number,
            ))
            db.flush()

            logger.info(
                "Account %s created for %s",
                account_row.account_number, customer.login,
            )
            return account_row.account_number

    def update_account(self, account: AccountRecord) -> bool:
        """
        Overwrite holder name, balance and status.

        Returns False when no account has that number.
        """
        with self._unit_of_work("update_account") as db:
            result = db.execute(
                update(Account)
                .where(Account.account_number == account.account_number)
                .values(
                    holder_name=account.holder_name,
                    balance=account.balance,
                    status=account.status,
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    def update_account_details(
        self,
        account_number: int,
        holder_name: str,
        status: AccountStatus,
    ) -> bool:
        """
        Overwrite holder name and status only.

        The balance column is left alone, so a withdrawal or
        deposit committed since the caller's read still stands.
        Returns False when no account has that number.
        """
        with self._unit_of_work("update_account_details") as db:
            result = db.execute(
                update(Account)
                .where(Account.account_number == account_number)
                .values(holder_name=holder_name, status=status)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    def set_balance_if_unchanged(
        self,
        account_number: int,
        expected_balance: Decimal,
        new_balance: Decimal,
    ) -> bool:
        """
        Compare-and-swap the balance of an active account.

        The row is only written if it is still ACTIVE and still
        holds expected_balance. Returns False when nothing
        matched: the account is gone, no longer active, or
        someone else changed the balance first.
        """
        with self._unit_of_work("set_balance_if_unchanged") as db:
            result = db.execute(
                update(Account)
                .where(
                    Account.account_number == account_number,
                    Account.status == AccountStatus.ACTIVE,
                    Account.balance == expected_balance,
                )
                .values(balance=new_balance)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    def delete_account(self, account_number: int) -> bool:
        """
        Hard-delete an account and its customer link.

        The customer's user row is kept, now without an account.
        Transactions are kept as well.
        """
        with self._unit_of_work("delete_account") as db:
            db.execute(
                delete(CustomerAccount)
                .where(CustomerAccount.account_number == account_number)
                .execution_options(synchronize_session=False)
            )
            result = db.execute(
                delete(Account)
                .where(Account.account_number == account_number)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0

    # --- Transactions ---

    def add_transaction(self, transaction: TransactionCreate) -> int:
        """Append a transaction record. Returns its id."""
        with self._unit_of_work("add_transaction") as db:
            row = Transaction(
                account_number=transaction.account_number,
                transaction_type=transaction.transaction_type,
                amount=transaction.amount,
                balance_after=transaction.balance_after,
            )
            db.add(row)
            db.flush()
            return row.id

    def get_transactions(
        self, account_number: int, limit: int | None = None
    ) -> list[TransactionRecord]:
        """Return an account's transactions, newest first."""
        with self._unit_of_work("get_transactions") as db:
            query = (
                select(Transaction)
                .where(Transaction.account_number == account_number)
                .order_by(
                    Transaction.transaction_date.desc(),
                    Transaction.id.desc(),
                )
            )
            if limit is not None:
                query = query.limit(limit)

            rows = db.execute(query).scalars().all()
            return [TransactionRecord.model_validate(r) for r in rows]

    # --- Health ---

    def ping(self) -> bool:
        """Check that the database answers. Raises StorageFault if not."""
        with self._unit_of_work("ping") as db:
            db.execute(text("SELECT 1"))
            return True
