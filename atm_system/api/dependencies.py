"""
Shared FastAPI dependencies.

The service is built once from the cached settings. Tests
swap it out through app.dependency_overrides[get_service].
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from atm_system.config import get_settings
from atm_system.exceptions import InvalidCredentialsError, MalformedPinError
from atm_system.models.base import make_session_factory
from atm_system.models.enums import UserType
from atm_system.repositories.account_repository import AccountRepository
from atm_system.schemas.user import AdministratorUser, CustomerUser
from atm_system.services.account_service import AccountService

security = HTTPBasic()


@lru_cache()
def _default_service() -> AccountService:
    repository = AccountRepository(make_session_factory(get_settings()))
    return AccountService(repository)


def get_service() -> AccountService:
    return _default_service()


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(security),
    service: AccountService = Depends(get_service),
) -> CustomerUser | AdministratorUser:
    """Authenticate the request with HTTP Basic login:pin."""
    try:
        return service.authenticate(credentials.username, credentials.password)
    except (MalformedPinError, InvalidCredentialsError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid login or pin code",
            headers={"WWW-Authenticate": "Basic"},
        )


def require_customer(
    user: CustomerUser | AdministratorUser = Depends(get_current_user),
) -> CustomerUser:
    if user.user_type != UserType.CUSTOMER:
        raise HTTPException(status_code=403, detail="Customer access required")
    return user


def require_admin(
    user: CustomerUser | AdministratorUser = Depends(get_current_user),
) -> AdministratorUser:
    if user.user_type != UserType.ADMINISTRATOR:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user
