"""
Customer endpoints: the HTTP version of the ATM customer menu.

Every request is authenticated as a customer and works on
that customer's own account.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from atm_system.api.dependencies import get_service, require_customer
from atm_system.api.errors import http_error
from atm_system.schemas.account import AccountRecord, AmountRequest, BalanceResponse
from atm_system.schemas.transaction import TransactionRecord
from atm_system.schemas.user import CustomerUser
from atm_system.services.account_service import AccountService

router = APIRouter(prefix="/me", tags=["Customer"])


def _own_account_number(customer: CustomerUser) -> int:
    if customer.account_number is None:
        raise HTTPException(status_code=404, detail="No account linked to this user")
    return customer.account_number


@router.get("/account", response_model=BalanceResponse)
def get_balance(
    customer: CustomerUser = Depends(require_customer),
    service: AccountService = Depends(get_service),
):
    """Display balance."""
    account_number = _own_account_number(customer)
    try:
        balance = service.get_balance(account_number)
    except ValueError as e:
        raise http_error(e)
    return BalanceResponse(account_number=account_number, balance=balance)


@router.post("/withdraw", response_model=AccountRecord)
def withdraw(
    request: AmountRequest,
    customer: CustomerUser = Depends(require_customer),
    service: AccountService = Depends(get_service),
):
    """Withdraw cash."""
    account_number = _own_account_number(customer)
    try:
        return service.withdraw(account_number, request.amount)
    except ValueError as e:
        raise http_error(e)


@router.post("/deposit", response_model=AccountRecord)
def deposit(
    request: AmountRequest,
    customer: CustomerUser = Depends(require_customer),
    service: AccountService = Depends(get_service),
):
    """Deposit cash."""
    account_number = _own_account_number(customer)
    try:
        return service.deposit(account_number, request.amount)
    except ValueError as e:
        raise http_error(e)


@router.get("/transactions", response_model=list[TransactionRecord])
def get_transactions(
    limit: int | None = Query(default=None, ge=1),
    customer: CustomerUser = Depends(require_customer),
    service: AccountService = Depends(get_service),
):
    """Transaction history, newest first."""
    account_number = _own_account_number(customer)
    try:
        return service.get_transactions(account_number, limit=limit)
    except ValueError as e:
        raise http_error(e)
