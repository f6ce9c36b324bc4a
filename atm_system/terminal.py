"""
Console ATM terminal.

The terminal only talks to AccountService. It reads input,
prints messages, and maps each error kind to the text the
user sees. Input and output are injectable so a session can
be scripted in tests.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation

from atm_system.exceptions import ATMError, ErrorKind
from atm_system.models.enums import AccountStatus, UserType
from atm_system.schemas.account import AccountRecord
from atm_system.services.account_service import AccountService

RECENT_TRANSACTIONS = 10

ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MALFORMED_PIN: "Error: Pin Code must be a 5-digit number.",
    ErrorKind.INVALID_CREDENTIALS: "Invalid login or pin code. Please try again.",
    ErrorKind.INVALID_LOGIN: "Error: Login must be between 1 and 50 characters.",
    ErrorKind.INVALID_PIN: "Error: Pin Code must be a 5-digit number.",
    ErrorKind.INVALID_AMOUNT: "Invalid amount. Please enter a positive number.",
    ErrorKind.INVALID_BALANCE: "Error: Starting Balance must be a non-negative number.",
    ErrorKind.INVALID_STATUS: "Error: Status must be Active or Disabled.",
    ErrorKind.INVALID_NAME: "Error: Name must be between 1 and 100 characters.",
    ErrorKind.INSUFFICIENT_FUNDS_OR_INACTIVE: (
        "Withdrawal failed. Please check your balance and try again."
    ),
    ErrorKind.INVALID_AMOUNT_OR_INACTIVE: "Deposit failed. Please try again.",
    ErrorKind.DUPLICATE_LOGIN: (
        "Error: Login already exists. Please choose a different login."
    ),
    ErrorKind.ACCOUNT_NOT_FOUND: "Error: Account not found.",
    ErrorKind.CONCURRENT_UPDATE: (
        "Error: The account is busy. Please try again."
    ),
    ErrorKind.STORAGE_UNAVAILABLE: (
        "Error: The service is currently unavailable. Please try again later."
    ),
    ErrorKind.CONSTRAINT_VIOLATED: (
        "Error: The service is currently unavailable. Please try again later."
    ),
}


def format_money(amount: Decimal) -> str:
    return f"{amount:,.2f}"


class ATMTerminal:

    def __init__(self, service: AccountService, input_func=input, output_func=print):
        self.service = service
        self._input = input_func
        self._output = output_func

    def say(self, message: str = "") -> None:
        self._output(message)

    def ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def report(self, error: ATMError) -> None:
        self.say(ERROR_MESSAGES.get(error.kind, "Error: Operation failed."))

    # --- Session loop ---

    def start(self) -> None:
        """Run login sessions until the user chooses to leave."""
        try:
            self._run()
        except (EOFError, KeyboardInterrupt):
            self.say()
        self.say("Thank you for using the ATM System. Goodbye!")

    def _run(self) -> None:
        while True:
            self.say("Welcome to the ATM System")
            self.say("------------------------")

            user = self.login()
            if user is None:
                if self.ask("Would you like to try again? (y/n) ").lower() != "y":
                    return
                continue

            if user.user_type == UserType.CUSTOMER:
                self.customer_menu(user)
            else:
                self.administrator_menu(user)

            # Logged out
            if self.ask("Start another session? (y/n) ").lower() != "y":
                return

    def login(self):
        login = self.ask("Enter login: ")
        pin = self.ask("Enter Pin code: ")
        try:
            return self.service.authenticate(login, pin)
        except ATMError as e:
            self.report(e)
            return None

    # --- Customer menu ---

    def customer_menu(self, customer) -> None:
        if customer.account_number is None:
            self.say("Error: Account not found. Please contact an administrator.")
            return
        try:
            account = self.service.find_account(customer.account_number)
        except ATMError as e:
            if e.kind == ErrorKind.ACCOUNT_NOT_FOUND:
                self.say("Error: Account not found. Please contact an administrator.")
            else:
                self.report(e)
            return

        actions = {
            "1": self.withdraw_cash,
            "2": self.show_transactions,
            "3": self.deposit_cash,
            "4": self.display_balance,
        }

        while True:
            self.say()
            self.say(f"Welcome, {customer.name}")
            self.say("------------------------")
            self.say("1----Withdraw Cash")
            self.say("2----Recent Transactions")
            self.say("3----Deposit Cash")
            self.say("4----Display Balance")
            self.say("5----Exit")
            choice = self.ask("Please select an option: ")

            if choice == "5":
                return
            action = actions.get(choice)
            if action is None:
                self.say("Invalid option. Please try again.")
                continue
            try:
                account = action(account) or account
            except ATMError as e:
                self.report(e)

    def _read_amount(self, prompt: str) -> Decimal | None:
        raw = self.ask(prompt)
        try:
            amount = Decimal(raw)
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite():
            self.say(ERROR_MESSAGES[ErrorKind.INVALID_AMOUNT])
            return None
        return amount

    def withdraw_cash(self, account: AccountRecord) -> AccountRecord | None:
        amount = self._read_amount("Enter the withdrawal amount: ")
        if amount is None:
            return None

        account = self.service.withdraw(account, amount)
        self.say("Cash Successfully Withdrawn")
        self._receipt(account, "Withdrawn", amount)
        return account

    def deposit_cash(self, account: AccountRecord) -> AccountRecord | None:
        amount = self._read_amount("Enter the cash amount to deposit: ")
        if amount is None:
            return None
        if amount <= 0:
            self.say(ERROR_MESSAGES[ErrorKind.INVALID_AMOUNT])
            return None

        account = self.service.deposit(account, amount)
        self.say("Cash Deposited Successfully.")
        self._receipt(account, "Deposited", amount)
        return account

    def _receipt(self, account: AccountRecord, label: str, amount: Decimal) -> None:
        self.say(f"Account #{account.account_number}")
        self.say(f"Date: {datetime.now():%m/%d/%Y}")
        self.say(f"{label}: {format_money(amount)}")
        self.say(f"Balance: {format_money(account.balance)}")

    def display_balance(self, account: AccountRecord) -> None:
        balance = self.service.get_balance(account.account_number)
        self.say(f"Account #{account.account_number}")
        self.say(f"Date: {datetime.now():%m/%d/%Y}")
        self.say(f"Balance: {format_money(balance)}")

    def show_transactions(self, account: AccountRecord) -> None:
        transactions = self.service.get_transactions(
            account.account_number, limit=RECENT_TRANSACTIONS
        )
        if not transactions:
            self.say("No transactions yet.")
            return
        for txn in transactions:
            self.say(
                f"{txn.transaction_date:%m/%d/%Y %H:%M}  "
                f"{txn.transaction_type.value:<10}  "
                f"{format_money(txn.amount):>12}  "
                f"Balance: {format_money(txn.balance_after)}"
            )

    # --- Administrator menu ---

    def administrator_menu(self, admin) -> None:
        actions = {
            "1": self.create_new_account,
            "2": self.delete_existing_account,
            "3": self.update_account_information,
            "4": self.search_for_account,
            "5": self.list_all_accounts,
        }

        while True:
            self.say()
            self.say(f"Administrator Menu - {admin.name}")
            self.say("------------------------")
            self.say("1----Create New Account")
            self.say("2----Delete Existing Account")
            self.say("3----Update Account Information")
            self.say("4----Search for Account")
            self.say("5----List All Accounts")
            self.say("6----Exit")
            choice = self.ask("Please select an option: ")

            if choice == "6":
                return
            action = actions.get(choice)
            if action is None:
                self.say("Invalid option. Please try again.")
                continue
            try:
                action()
            except ATMError as e:
                self.report(e)

    def _read_account_number(self, prompt: str) -> int | None:
        raw = self.ask(prompt)
        try:
            return int(raw)
        except ValueError:
            self.say("Error: Invalid account number.")
            return None

    def _read_status(self, prompt: str, allow_blank: bool) -> AccountStatus | None:
        """
        Read Active/Disabled, case-insensitively.

        Returns None for blank input when allow_blank is set.
        Raises ValueError for anything else.
        """
        raw = self.ask(prompt).lower()
        if not raw:
            return None if allow_blank else AccountStatus.ACTIVE
        for status in (AccountStatus.ACTIVE, AccountStatus.DISABLED):
            if raw == status.value.lower():
                return status
        raise ValueError(raw)

    def create_new_account(self) -> None:
        self.say("Create New Account")
        self.say("-----------------")

        login = self.ask("Login: ")
        pin = self.ask("Pin Code: ")
        holder_name = self.ask("Holders Name: ")
        starting_balance = self.ask("Starting Balance: ")
        try:
            status = self._read_status("Status (Active/Disabled): ", allow_blank=False)
        except ValueError:
            self.say(ERROR_MESSAGES[ErrorKind.INVALID_STATUS])
            return

        account_number = self.service.create_customer_account(
            login, pin, holder_name, starting_balance, status
        )
        self.say(
            "Account Successfully Created -- the account number "
            f"assigned is: {account_number}"
        )

    def delete_existing_account(self) -> None:
        self.say("Delete Existing Account")
        self.say("----------------------")

        account_number = self._read_account_number(
            "Enter the account number to which you want to delete: "
        )
        if account_number is None:
            return
        account = self.service.find_account(account_number)

        confirm = self.ask(
            f"You wish to delete the account held by {account.holder_name}. "
            "If this information is correct, please re-enter the account number: "
        )
        if confirm != str(account_number):
            self.say("Account deletion cancelled.")
            return

        self.service.delete_account(account_number)
        self.say("Account Deleted Successfully")

    def update_account_information(self) -> None:
        self.say("Update Account Information")
        self.say("-------------------------")

        account_number = self._read_account_number("Enter the Account Number: ")
        if account_number is None:
            return
        account = self.service.find_account(account_number)
        self.display_account_information(account)

        holder_name = self.ask("New Holder Name (leave blank to keep current): ")
        try:
            status = self._read_status(
                "New Status (Active/Disabled, leave blank to keep current): ",
                allow_blank=True,
            )
        except ValueError:
            self.say(ERROR_MESSAGES[ErrorKind.INVALID_STATUS])
            return

        self.service.update_account_info(
            account_number,
            new_holder_name=holder_name or None,
            new_status=status,
        )
        self.say("Account Information Updated Successfully")

    def search_for_account(self) -> None:
        self.say("Search for Account")
        self.say("-----------------")

        account_number = self._read_account_number("Enter Account number: ")
        if account_number is None:
            return
        account = self.service.find_account(account_number)
        self.say("The account information is:")
        self.display_account_information(account)

    def list_all_accounts(self) -> None:
        accounts = self.service.list_accounts()
        if not accounts:
            self.say("No accounts.")
            return
        for account in accounts:
            self.say(
                f"#{account.account_number:<6} {account.holder_name:<30} "
                f"{format_money(account.balance):>14}  {account.status.value}"
            )

    def display_account_information(self, account: AccountRecord) -> None:
        self.say(f"Account # {account.account_number}")
        self.say(f"Holder: {account.holder_name}")
        self.say(f"Balance: {format_money(account.balance)}")
        self.say(f"Status: {account.status.value}")
