"""
Account service: the ledger operations behind every front end.

This service enforces the business rules:
1. PINs are exactly five ASCII digits
2. Only ACTIVE accounts accept withdrawals and deposits
3. A balance never goes below zero; such requests are rejected
4. The account change is committed before its transaction is logged

Results come back as detached pydantic records. Failures are
typed errors from atm_system.exceptions; this module never
formats text for the user and never reads input.
"""

import hmac
import logging
import re
from decimal import Decimal, InvalidOperation

from atm_system.exceptions import (
    AccountNotFoundError,
    ConcurrentUpdateError,
    DuplicateLoginError,
    InsufficientFundsOrInactiveError,
    InvalidAmountError,
    InvalidAmountOrInactiveError,
    InvalidBalanceError,
    InvalidCredentialsError,
    InvalidLoginError,
    InvalidNameError,
    InvalidPinError,
    InvalidStatusError,
    MalformedPinError,
    StorageFault,
)
from atm_system.models.account import VALID_TRANSITIONS
from atm_system.models.enums import AccountStatus, TransactionType
from atm_system.repositories.account_repository import AccountRepository
from atm_system.schemas.account import AccountCreate, AccountRecord
from atm_system.schemas.transaction import TransactionCreate, TransactionRecord
from atm_system.schemas.user import (
    AdministratorUser,
    CustomerCreate,
    CustomerUser,
)

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"[0-9]{5}")
CENT = Decimal("0.01")

# How many times withdraw/deposit re-read the account when
# another writer changed the balance between read and write.
MAX_BALANCE_ATTEMPTS = 3

# Largest value a Numeric(15, 2) column holds
MAX_MONEY = Decimal("9999999999999.99")

# Match users.login and accounts.holder_name / users.name
MAX_LOGIN_LENGTH = 50
MAX_NAME_LENGTH = 100


def is_valid_pin(pin) -> bool:
    """Five ASCII digits, nothing else."""
    return isinstance(pin, str) and PIN_PATTERN.fullmatch(pin) is not None


def to_money(value) -> Decimal | None:
    """
    Convert value to a two-place Decimal.

    Returns None for anything that is not a finite number with
    at most two decimal places, or whose magnitude exceeds
    MAX_MONEY. Floats go through str() so 0.1 stays 0.10
    instead of its binary expansion.
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not amount.is_finite():
            return None
        rounded = amount.quantize(CENT)
    except (InvalidOperation, ValueError):
        return None
    if amount != rounded or abs(rounded) > MAX_MONEY:
        return None
    return rounded


class AccountService:
    """
    All customer and administrator operations pass through this
    service. It holds no state of its own besides the repository.
    """

    def __init__(self, repository: AccountRepository):
        self.repository = repository

    # --- Authentication ---

    def authenticate(self, login: str, pin: str) -> CustomerUser | AdministratorUser:
        """
        Return the user for a login/PIN pair.

        A malformed PIN is rejected before the lookup. An unknown
        login and a wrong PIN raise the same error.
        """
        if not is_valid_pin(pin):
            raise MalformedPinError()

        user = self.repository.find_user_by_login(login)
        if user is None or not hmac.compare_digest(user.pin_code, pin):
            logger.warning("Failed login attempt for %r", login)
            raise InvalidCredentialsError()

        logger.info("User %s logged in as %s", login, user.user_type.value)
        return user

    # --- Customer operations ---

    def withdraw(self, account: AccountRecord | int, amount) -> AccountRecord:
        """
        Withdraw cash from an active account.

        The balance is checked against the stored account, not
        the caller's copy. Raises InvalidAmountError for a
        non-positive amount and InsufficientFundsOrInactiveError
        when the account is not active or holds too little.
        """
        value = to_money(amount)
        if value is None or value <= 0:
            raise InvalidAmountError(amount=amount)

        def check(current: AccountRecord) -> None:
            if current.status != AccountStatus.ACTIVE:
                raise InsufficientFundsOrInactiveError(
                    account_number=current.account_number,
                    amount=value,
                    reason="inactive",
                )
            if value > current.balance:
                raise InsufficientFundsOrInactiveError(
                    account_number=current.account_number,
                    amount=value,
                    reason="insufficient",
                )

        return self._post(
            _account_number(account), value, -value,
            TransactionType.WITHDRAWAL, check,
        )

    def deposit(self, account: AccountRecord | int, amount) -> AccountRecord:
        """
        Deposit cash into an active account.

        A non-positive amount and an inactive account raise the
        same InvalidAmountOrInactiveError.
        """
        account_number = _account_number(account)
        value = to_money(amount)
        if value is None or value <= 0:
            raise InvalidAmountOrInactiveError(
                account_number=account_number, amount=amount
            )

        def check(current: AccountRecord) -> None:
            if current.status != AccountStatus.ACTIVE:
                raise InvalidAmountOrInactiveError(
                    account_number=current.account_number, amount=value
                )
            if current.balance + value > MAX_MONEY:
                raise InvalidAmountOrInactiveError(
                    account_number=current.account_number,
                    amount=value,
                    reason="balance_limit",
                )

        return self._post(
            account_number, value, value,
            TransactionType.DEPOSIT, check,
        )

    def _post(self, account_number, amount, delta, transaction_type, check) -> AccountRecord:
        """
        Apply a balance change and log it.

        The new balance is written with a compare-and-swap on the
        balance we just read. Only after that commit is the
        transaction appended. A failed append is logged but does
        not undo the balance change.
        """
        for _ in range(MAX_BALANCE_ATTEMPTS):
            current = self.find_account(account_number)
            check(current)

            new_balance = current.balance + delta
            if self.repository.set_balance_if_unchanged(
                account_number, current.balance, new_balance
            ):
                break
            logger.info(
                "Balance of account %s changed during %s, retrying",
                account_number, transaction_type.value.lower(),
            )
        else:
            raise ConcurrentUpdateError(account_number=account_number)

        updated = current.model_copy(update={"balance": new_balance})
        logger.info(
            "%s of %s on account %s, balance now %s",
            transaction_type.value, amount, account_number, new_balance,
        )

        try:
            self.repository.add_transaction(TransactionCreate(
                account_number=account_number,
                transaction_type=transaction_type,
                amount=amount,
                balance_after=new_balance,
            ))
        except StorageFault:
            logger.error(
                "Could not record %s of %s on account %s; balance change stands",
                transaction_type.value.lower(), amount, account_number,
            )

        return updated

    def get_balance(self, account_number: int) -> Decimal:
        return self.find_account(account_number).balance

    def get_transactions(
        self, account_number: int, limit: int | None = None
    ) -> list[TransactionRecord]:
        """Transaction history, newest first."""
        self.find_account(account_number)
        return self.repository.get_transactions(account_number, limit=limit)

    # --- Administrator operations ---

    def create_customer_account(
        self,
        login: str,
        pin: str,
        holder_name: str,
        starting_balance,
        status: AccountStatus = AccountStatus.ACTIVE,
    ) -> int:
        """
        Create a customer and their account in one atomic step.

        Returns the new account number.
        """
        if not login or not login.strip() or len(login) > MAX_LOGIN_LENGTH:
            raise InvalidLoginError(login=login)

        if self.repository.find_user_by_login(login) is not None:
            raise DuplicateLoginError(login=login)

        if not is_valid_pin(pin):
            raise InvalidPinError(login=login)

        _check_name(holder_name)

        balance = to_money(starting_balance)
        if balance is None or balance < 0:
            raise InvalidBalanceError(amount=starting_balance)

        status = _to_status(status)
        if status == AccountStatus.CLOSED:
            raise InvalidStatusError(status=status.value)

        return self.repository.create_account(
            CustomerCreate(login=login, pin_code=pin, name=holder_name),
            AccountCreate(holder_name=holder_name, balance=balance, status=status),
        )

    def provision_administrator(self, login: str, pin: str, name: str) -> int:
        """Create an administrator user. Returns the new user id."""
        if not login or not login.strip() or len(login) > MAX_LOGIN_LENGTH:
            raise InvalidLoginError(login=login)
        if not is_valid_pin(pin):
            raise InvalidPinError(login=login)
        _check_name(name)
        return self.repository.create_administrator(login, pin, name)

    def update_account_info(
        self,
        account_number: int,
        new_holder_name: str | None = None,
        new_status: AccountStatus | None = None,
    ) -> AccountRecord:
        """
        Partially update an account.

        A None argument keeps the current value. Only
        ACTIVE <-> DISABLED status changes are allowed.
        """
        account = self.find_account(account_number)
        changes = {}

        if new_holder_name is not None and new_holder_name.strip():
            _check_name(new_holder_name)
            changes["holder_name"] = new_holder_name

        if new_status is not None:
            new_status = _to_status(new_status, account_number)
            if new_status not in VALID_TRANSITIONS.get(account.status, set()):
                raise InvalidStatusError(
                    account_number=account_number,
                    status=new_status.value,
                )
            changes["status"] = new_status

        # Only name and status are written, so a withdrawal or
        # deposit committed after our read is not rolled back
        updated = account.model_copy(update=changes)
        if not self.repository.update_account_details(
            account_number, updated.holder_name, updated.status
        ):
            # Deleted between the read and the write
            raise AccountNotFoundError(account_number=account_number)

        logger.info("Account %s updated: %s", account_number, sorted(changes))
        return self.find_account(account_number)

    def delete_account(self, account_number: int) -> None:
        if not self.repository.delete_account(account_number):
            raise AccountNotFoundError(account_number=account_number)
        logger.info("Account %s deleted", account_number)

    def find_account(self, account_number: int) -> AccountRecord:
        account = self.repository.find_account(account_number)
        if account is None:
            raise AccountNotFoundError(account_number=account_number)
        return account

    def list_accounts(self) -> list[AccountRecord]:
        return self.repository.list_accounts()


def _account_number(account: AccountRecord | int) -> int:
    if isinstance(account, AccountRecord):
        return account.account_number
    return account


def _check_name(name) -> None:
    if not isinstance(name, str) or not name.strip() or len(name) > MAX_NAME_LENGTH:
        raise InvalidNameError(name=name)


def _to_status(value, account_number: int | None = None) -> AccountStatus:
    try:
        return AccountStatus(value)
    except ValueError:
        raise InvalidStatusError(account_number=account_number, status=value) from None
