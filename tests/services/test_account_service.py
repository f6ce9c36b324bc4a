"""
Comprehensive tests for the AccountService ledger operations.
"""

from decimal import Decimal

import pytest

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
from atm_system.models.enums import AccountStatus, TransactionType, UserType
from atm_system.repositories.account_repository import AccountRepository
from atm_system.schemas.user import AdministratorUser, CustomerUser
from atm_system.services.account_service import MAX_MONEY, to_money


def make_account(service, login="u1", balance="1000.00", status=AccountStatus.ACTIVE):
    return service.create_customer_account(
        login, "12345", "Alice", Decimal(balance), status
    )


# --- Authentication ---

class TestAuthenticate:

    def test_customer_login(self, service, alice):
        user = service.authenticate("alice", "12345")

        assert isinstance(user, CustomerUser)
        assert user.account_number == alice
        assert user.name == "Alice"

    def test_administrator_login(self, service, admin):
        user = service.authenticate(*admin)

        assert isinstance(user, AdministratorUser)
        assert user.user_type == UserType.ADMINISTRATOR

    @pytest.mark.parametrize("pin", ["1234", "123456", "12a45", "", " 1234", "١٢٣٤٥"])
    def test_malformed_pin(self, service, alice, pin):
        with pytest.raises(MalformedPinError):
            service.authenticate("alice", pin)

    def test_wrong_pin_and_unknown_login_look_the_same(self, service, alice):
        with pytest.raises(InvalidCredentialsError) as wrong_pin:
            service.authenticate("alice", "99999")
        with pytest.raises(InvalidCredentialsError) as unknown:
            service.authenticate("nobody", "12345")

        assert str(wrong_pin.value) == str(unknown.value)
        assert wrong_pin.value.context == unknown.value.context == {}

    def test_malformed_pin_checked_before_lookup(self, service, monkeypatch):
        def fail(*args):
            raise AssertionError("repository should not be queried")

        monkeypatch.setattr(service.repository, "find_user_by_login", fail)
        with pytest.raises(MalformedPinError):
            service.authenticate("alice", "abc")


# --- Withdraw ---

class TestWithdraw:

    def test_reduces_balance_and_logs_transaction(self, service, alice):
        account = service.find_account(alice)

        updated = service.withdraw(account, Decimal("250.00"))

        assert updated.balance == Decimal("750.00")
        assert service.get_balance(alice) == Decimal("750.00")

        [txn] = service.get_transactions(alice)
        assert txn.transaction_type == TransactionType.WITHDRAWAL
        assert txn.amount == Decimal("250.00")
        assert txn.balance_after == Decimal("750.00")

    def test_withdraw_entire_balance(self, service, alice):
        updated = service.withdraw(alice, Decimal("1000.00"))
        assert updated.balance == Decimal("0.00")

    @pytest.mark.parametrize("amount", [
        Decimal("0"), Decimal("-5.00"), "abc", Decimal("1.001"),
        Decimal("10000000000000.00"),
    ])
    def test_invalid_amount(self, service, alice, amount):
        with pytest.raises(InvalidAmountError):
            service.withdraw(alice, amount)

        assert service.get_balance(alice) == Decimal("1000.00")
        assert service.get_transactions(alice) == []

    def test_insufficient_funds(self, service, alice):
        with pytest.raises(InsufficientFundsOrInactiveError) as exc:
            service.withdraw(alice, Decimal("1000.01"))

        assert exc.value.context["reason"] == "insufficient"
        assert service.get_balance(alice) == Decimal("1000.00")
        assert service.get_transactions(alice) == []

    @pytest.mark.parametrize("status", [AccountStatus.DISABLED, AccountStatus.CLOSED])
    def test_inactive_account_rejected(self, service, repository, alice, status):
        account = repository.find_account(alice)
        repository.update_account(account.model_copy(update={"status": status}))

        with pytest.raises(InsufficientFundsOrInactiveError) as exc:
            service.withdraw(alice, Decimal("1.00"))

        assert exc.value.context["reason"] == "inactive"
        assert service.get_balance(alice) == Decimal("1000.00")

    def test_checks_stored_balance_not_callers_copy(self, service, alice):
        stale = service.find_account(alice)
        stale.balance = Decimal("1000000.00")

        with pytest.raises(InsufficientFundsOrInactiveError):
            service.withdraw(stale, Decimal("5000.00"))

    def test_missing_account(self, service):
        with pytest.raises(AccountNotFoundError):
            service.withdraw(999, Decimal("1.00"))

    def test_failed_balance_write_logs_nothing(self, service, alice, monkeypatch):
        def broken(*args):
            raise StorageFault(operation="set_balance_if_unchanged")

        monkeypatch.setattr(service.repository, "set_balance_if_unchanged", broken)

        with pytest.raises(StorageFault):
            service.withdraw(alice, Decimal("100.00"))

        monkeypatch.undo()
        assert service.get_transactions(alice) == []
        assert service.get_balance(alice) == Decimal("1000.00")

    def test_failed_log_append_keeps_balance_change(self, service, alice, monkeypatch):
        def broken(*args):
            raise StorageFault(operation="add_transaction")

        monkeypatch.setattr(service.repository, "add_transaction", broken)

        updated = service.withdraw(alice, Decimal("100.00"))

        monkeypatch.undo()
        assert updated.balance == Decimal("900.00")
        assert service.get_balance(alice) == Decimal("900.00")
        assert service.get_transactions(alice) == []


class TestConcurrentBalanceChanges:

    def test_retries_after_concurrent_change(self, service, repository, alice, monkeypatch):
        real_swap = AccountRepository.set_balance_if_unchanged
        calls = []

        def racing_swap(account_number, expected, new):
            if not calls:
                # Another session withdraws 300 between our read and write
                current = repository.find_account(account_number)
                repository.update_account(
                    current.model_copy(update={"balance": current.balance - 300})
                )
            calls.append(expected)
            return real_swap(repository, account_number, expected, new)

        monkeypatch.setattr(repository, "set_balance_if_unchanged", racing_swap)

        updated = service.withdraw(alice, Decimal("500.00"))

        assert calls == [Decimal("1000.00"), Decimal("700.00")]
        assert updated.balance == Decimal("200.00")
        assert service.get_balance(alice) == Decimal("200.00")

    def test_race_cannot_overdraw(self, service, repository, alice, monkeypatch):
        real_swap = AccountRepository.set_balance_if_unchanged
        raced = []

        def racing_swap(account_number, expected, new):
            if not raced:
                raced.append(True)
                current = repository.find_account(account_number)
                repository.update_account(
                    current.model_copy(update={"balance": Decimal("100.00")})
                )
            return real_swap(repository, account_number, expected, new)

        monkeypatch.setattr(repository, "set_balance_if_unchanged", racing_swap)

        with pytest.raises(InsufficientFundsOrInactiveError):
            service.withdraw(alice, Decimal("800.00"))
        assert service.get_balance(alice) == Decimal("100.00")

    def test_gives_up_after_repeated_misses(self, service, alice, monkeypatch):
        monkeypatch.setattr(
            service.repository, "set_balance_if_unchanged", lambda *args: False
        )

        with pytest.raises(ConcurrentUpdateError):
            service.deposit(alice, Decimal("10.00"))
        monkeypatch.undo()
        assert service.get_transactions(alice) == []


# --- Deposit ---

class TestDeposit:

    def test_deposit_then_overdraw_scenario(self, service, alice):
        updated = service.deposit(alice, Decimal("500"))
        assert updated.balance == Decimal("1500.00")

        [txn] = service.get_transactions(alice)
        assert txn.transaction_type == TransactionType.DEPOSIT
        assert txn.amount == Decimal("500.00")
        assert txn.balance_after == Decimal("1500.00")

        with pytest.raises(InsufficientFundsOrInactiveError):
            service.withdraw(alice, Decimal("2000"))
        assert service.get_balance(alice) == Decimal("1500.00")
        assert len(service.get_transactions(alice)) == 1

    @pytest.mark.parametrize("amount", [0, -1, "-0.01", "NaN", None])
    def test_invalid_amount(self, service, alice, amount):
        with pytest.raises(InvalidAmountOrInactiveError):
            service.deposit(alice, amount)
        assert service.get_balance(alice) == Decimal("1000.00")
        assert service.get_transactions(alice) == []

    @pytest.mark.parametrize("status", [AccountStatus.DISABLED, AccountStatus.CLOSED])
    def test_inactive_account_rejected(self, service, repository, alice, status):
        account = repository.find_account(alice)
        repository.update_account(account.model_copy(update={"status": status}))

        with pytest.raises(InvalidAmountOrInactiveError):
            service.deposit(alice, Decimal("1.00"))
        assert service.get_transactions(alice) == []

    def test_accepts_int_and_float_amounts(self, service, alice):
        service.deposit(alice, 10)
        updated = service.deposit(alice, 0.1)
        assert updated.balance == Decimal("1010.10")

    def test_history_is_newest_first(self, service, alice):
        service.deposit(alice, Decimal("1.00"))
        service.withdraw(alice, Decimal("2.00"))
        service.deposit(alice, Decimal("3.00"))

        amounts = [t.amount for t in service.get_transactions(alice)]
        assert amounts == [Decimal("3.00"), Decimal("2.00"), Decimal("1.00")]

    def test_largest_balance_is_stored_exactly(self, service):
        number = make_account(service, balance="0")

        updated = service.deposit(number, MAX_MONEY)

        assert updated.balance == MAX_MONEY
        assert service.get_balance(number) == MAX_MONEY
        [txn] = service.get_transactions(number)
        assert txn.balance_after == MAX_MONEY

    def test_deposit_past_balance_limit(self, service, alice):
        with pytest.raises(InvalidAmountOrInactiveError) as exc:
            service.deposit(alice, MAX_MONEY - Decimal("999.99"))

        assert exc.value.context["reason"] == "balance_limit"
        assert service.get_balance(alice) == Decimal("1000.00")
        assert service.get_transactions(alice) == []

    def test_oversized_amount(self, service, alice):
        with pytest.raises(InvalidAmountOrInactiveError):
            service.deposit(alice, Decimal("12345678901234567.89"))
        assert service.get_balance(alice) == Decimal("1000.00")


# --- Account creation ---

class TestCreateCustomerAccount:

    def test_round_trip(self, service):
        number = service.create_customer_account("u1", "12345", "Alice", 100)

        account = service.find_account(number)
        assert account.holder_name == "Alice"
        assert account.balance == Decimal("100")
        assert account.status == AccountStatus.ACTIVE

    def test_created_customer_can_log_in(self, service):
        number = make_account(service, login="bob")
        user = service.authenticate("bob", "12345")
        assert user.account_number == number

    def test_disabled_at_creation(self, service):
        number = make_account(service, status=AccountStatus.DISABLED)
        assert service.find_account(number).status == AccountStatus.DISABLED

    def test_duplicate_login_leaves_original_untouched(self, service):
        original = make_account(service, login="u1", balance="100.00")

        with pytest.raises(DuplicateLoginError):
            service.create_customer_account("u1", "54321", "Mallory", Decimal("5"))

        assert len(service.list_accounts()) == 1
        assert service.find_account(original).holder_name == "Alice"
        assert service.authenticate("u1", "12345").account_number == original

    def test_duplicate_of_administrator_login(self, service, admin):
        with pytest.raises(DuplicateLoginError):
            make_account(service, login="admin")

    @pytest.mark.parametrize("pin", ["1234", "abcde", "123456"])
    def test_invalid_pin(self, service, pin):
        with pytest.raises(InvalidPinError):
            service.create_customer_account("u1", pin, "Alice", Decimal("0"))
        assert service.list_accounts() == []

    @pytest.mark.parametrize("balance", [Decimal("-0.01"), "ten", Decimal("1.005")])
    def test_invalid_starting_balance(self, service, balance):
        with pytest.raises(InvalidBalanceError):
            service.create_customer_account("u1", "12345", "Alice", balance)

    def test_zero_starting_balance_allowed(self, service):
        number = make_account(service, balance="0")
        assert service.get_balance(number) == Decimal("0")

    @pytest.mark.parametrize("login", ["", "   ", "x" * 51])
    def test_invalid_login(self, service, login):
        with pytest.raises(InvalidLoginError):
            service.create_customer_account(login, "12345", "Alice", Decimal("0"))

    def test_cannot_create_closed_account(self, service):
        with pytest.raises(InvalidStatusError):
            make_account(service, status=AccountStatus.CLOSED)

    @pytest.mark.parametrize("holder_name", ["", "   ", "x" * 101])
    def test_invalid_holder_name(self, service, holder_name):
        with pytest.raises(InvalidNameError):
            service.create_customer_account("u1", "12345", holder_name, Decimal("0"))
        assert service.list_accounts() == []

    def test_longest_holder_name(self, service):
        number = service.create_customer_account("u1", "12345", "x" * 100, Decimal("0"))
        assert service.find_account(number).holder_name == "x" * 100

    def test_largest_starting_balance(self, service):
        number = make_account(service, balance="9999999999999.99")
        assert service.get_balance(number) == MAX_MONEY

    def test_starting_balance_one_cent_too_large(self, service):
        with pytest.raises(InvalidBalanceError):
            make_account(service, balance="10000000000000.00")
        assert service.list_accounts() == []


# --- Update ---

class TestUpdateAccountInfo:

    def test_status_only_keeps_holder_name(self, service, alice):
        updated = service.update_account_info(
            alice, new_holder_name=None, new_status=AccountStatus.DISABLED
        )

        assert updated.status == AccountStatus.DISABLED
        assert updated.holder_name == "Alice"
        stored = service.find_account(alice)
        assert stored.status == AccountStatus.DISABLED
        assert stored.holder_name == "Alice"

    def test_name_only_keeps_status(self, service, alice):
        updated = service.update_account_info(alice, new_holder_name="Alice Smith")

        assert updated.holder_name == "Alice Smith"
        assert updated.status == AccountStatus.ACTIVE

    def test_blank_name_keeps_current(self, service, alice):
        updated = service.update_account_info(alice, new_holder_name="  ")
        assert updated.holder_name == "Alice"

    def test_reactivate(self, service, alice):
        service.update_account_info(alice, new_status=AccountStatus.DISABLED)
        updated = service.update_account_info(alice, new_status=AccountStatus.ACTIVE)
        assert updated.status == AccountStatus.ACTIVE

    def test_update_does_not_touch_balance(self, service, alice):
        service.update_account_info(alice, new_holder_name="Someone")
        assert service.get_balance(alice) == Decimal("1000.00")

    def test_cannot_close(self, service, alice):
        with pytest.raises(InvalidStatusError):
            service.update_account_info(alice, new_status=AccountStatus.CLOSED)
        assert service.find_account(alice).status == AccountStatus.ACTIVE

    def test_closed_account_stays_closed(self, service, repository, alice):
        account = repository.find_account(alice)
        repository.update_account(
            account.model_copy(update={"status": AccountStatus.CLOSED})
        )

        with pytest.raises(InvalidStatusError):
            service.update_account_info(alice, new_status=AccountStatus.ACTIVE)

    def test_unknown_status_string(self, service, alice):
        with pytest.raises(InvalidStatusError):
            service.update_account_info(alice, new_status="Frozen")

    def test_not_found(self, service):
        with pytest.raises(AccountNotFoundError):
            service.update_account_info(999, new_holder_name="Nobody")

    def test_name_change_keeps_concurrent_withdrawal(
        self, service, repository, alice, monkeypatch
    ):
        real_write = AccountRepository.update_account_details

        def racing_write(*args):
            # A withdrawal commits between our read and write
            service.withdraw(alice, Decimal("100.00"))
            return real_write(repository, *args)

        monkeypatch.setattr(repository, "update_account_details", racing_write)

        updated = service.update_account_info(alice, new_holder_name="Alice B")

        assert updated.holder_name == "Alice B"
        assert updated.balance == Decimal("900.00")
        assert service.get_balance(alice) == Decimal("900.00")
        [txn] = service.get_transactions(alice)
        assert txn.balance_after == service.get_balance(alice)

    def test_name_too_long(self, service, alice):
        with pytest.raises(InvalidNameError):
            service.update_account_info(alice, new_holder_name="x" * 101)
        assert service.find_account(alice).holder_name == "Alice"


# --- Delete / find ---

class TestDeleteAccount:

    def test_delete(self, service, alice):
        service.delete_account(alice)

        with pytest.raises(AccountNotFoundError):
            service.find_account(alice)

    def test_delete_missing(self, service):
        with pytest.raises(AccountNotFoundError):
            service.delete_account(999)

    def test_customer_without_account_after_delete(self, service, alice):
        service.delete_account(alice)
        assert service.authenticate("alice", "12345").account_number is None


class TestFindAccount:

    def test_find_is_read_only(self, service, alice):
        service.find_account(alice)
        service.find_account(alice)
        assert service.get_transactions(alice) == []
        assert service.get_balance(alice) == Decimal("1000.00")

    def test_not_found(self, service):
        with pytest.raises(AccountNotFoundError) as exc:
            service.find_account(42)
        assert exc.value.context == {"account_number": 42}

    def test_transactions_of_missing_account(self, service):
        with pytest.raises(AccountNotFoundError):
            service.get_transactions(42)


class TestProvisionAdministrator:

    def test_invalid_pin(self, service):
        with pytest.raises(InvalidPinError):
            service.provision_administrator("root", "1", "Root")

    def test_creates_admin(self, service):
        service.provision_administrator("root", "11111", "Root")
        assert isinstance(service.authenticate("root", "11111"), AdministratorUser)

    @pytest.mark.parametrize("name", ["", "  ", "x" * 101])
    def test_invalid_name(self, service, name):
        with pytest.raises(InvalidNameError):
            service.provision_administrator("root", "11111", name)


class TestToMoney:

    @pytest.mark.parametrize("value, expected", [
        (Decimal("10"), Decimal("10.00")),
        ("12.5", Decimal("12.50")),
        (7, Decimal("7.00")),
        (0.1, Decimal("0.10")),
        ("9999999999999.99", MAX_MONEY),
        ("-9999999999999.99", -MAX_MONEY),
    ])
    def test_valid(self, value, expected):
        assert to_money(value) == expected

    @pytest.mark.parametrize("value", [
        "1.234", "Infinity", "sNaN", "", None, True, "1e400",
        "10000000000000.00", "-10000000000000.00",
    ])
    def test_invalid(self, value):
        assert to_money(value) is None
