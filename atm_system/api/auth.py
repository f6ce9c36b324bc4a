"""
Login endpoint.

Checks a login/PIN pair and returns who the user is. Other
endpoints authenticate every request with HTTP Basic, so this
is mostly for clients that want to check credentials up front.
"""

from fastapi import APIRouter, Depends, HTTPException

from atm_system.api.dependencies import get_service
from atm_system.exceptions import InvalidCredentialsError, MalformedPinError
from atm_system.schemas.user import LoginRequest, UserResponse
from atm_system.services.account_service import AccountService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=UserResponse)
def login(
    request: LoginRequest,
    service: AccountService = Depends(get_service),
):
    try:
        user = service.authenticate(request.login, request.pin)
    except MalformedPinError:
        raise HTTPException(
            status_code=422, detail="Pin Code must be a 5-digit number"
        )
    except InvalidCredentialsError:
        raise HTTPException(status_code=401, detail="Invalid login or pin code")
    return UserResponse.from_user(user)
