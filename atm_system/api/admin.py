"""
Administrator endpoints for account management.
"""

from fastapi import APIRouter, Depends, Response

from atm_system.api.dependencies import get_service, require_admin
from atm_system.api.errors import http_error
from atm_system.schemas.account import (
    AccountCreatedResponse,
    AccountOpenRequest,
    AccountRecord,
    AccountUpdateRequest,
)
from atm_system.services.account_service import AccountService

router = APIRouter(
    prefix="/admin/accounts",
    tags=["Administration"],
    dependencies=[Depends(require_admin)],
)


@router.post("", response_model=AccountCreatedResponse, status_code=201)
def create_account(
    request: AccountOpenRequest,
    service: AccountService = Depends(get_service),
):
    """
    Create a customer together with their account.

    The user and account are inserted atomically; a duplicate
    login leaves nothing behind.
    """
    try:
        account_number = service.create_customer_account(
            request.login,
            request.pin,
            request.holder_name,
            request.starting_balance,
            request.status,
        )
    except ValueError as e:
        raise http_error(e)
    return AccountCreatedResponse(account_number=account_number)


@router.get("", response_model=list[AccountRecord])
def list_accounts(service: AccountService = Depends(get_service)):
    return service.list_accounts()


@router.get("/{account_number}", response_model=AccountRecord)
def get_account(
    account_number: int,
    service: AccountService = Depends(get_service),
):
    """Search for an account by number."""
    try:
        return service.find_account(account_number)
    except ValueError as e:
        raise http_error(e)


@router.patch("/{account_number}", response_model=AccountRecord)
def update_account(
    account_number: int,
    request: AccountUpdateRequest,
    service: AccountService = Depends(get_service),
):
    """Update holder name and/or status. Omitted fields are kept."""
    try:
        return service.update_account_info(
            account_number,
            new_holder_name=request.holder_name,
            new_status=request.status,
        )
    except ValueError as e:
        raise http_error(e)


@router.delete("/{account_number}", status_code=204)
def delete_account(
    account_number: int,
    service: AccountService = Depends(get_service),
):
    try:
        service.delete_account(account_number)
    except ValueError as e:
        raise http_error(e)
    return Response(status_code=204)
