"""
Pydantic schemas for users.

A user is either a customer or an administrator. The two are
a tagged union on user_type rather than a class hierarchy:
callers check user_type (or isinstance) and get only the
fields that role actually has.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from atm_system.models.enums import UserType


class CustomerCreate(BaseModel):
    """User half of the atomic customer+account insert."""
    login: str = Field(min_length=1, max_length=50)
    pin_code: str = Field(min_length=5, max_length=5)
    name: str


class CustomerUser(BaseModel):
    user_type: Literal[UserType.CUSTOMER] = UserType.CUSTOMER
    id: int
    login: str
    pin_code: str
    name: str
    # None until the customer is linked to an account
    account_number: int | None = None


class AdministratorUser(BaseModel):
    user_type: Literal[UserType.ADMINISTRATOR] = UserType.ADMINISTRATOR
    id: int
    login: str
    pin_code: str
    name: str


User = Annotated[
    Union[CustomerUser, AdministratorUser],
    Field(discriminator="user_type"),
]

user_adapter: TypeAdapter[User] = TypeAdapter(User)


# --- API Schemas ---

class LoginRequest(BaseModel):
    login: str
    pin: str


class UserResponse(BaseModel):
    """A user as shown over HTTP. Never includes the PIN."""
    id: int
    login: str
    name: str
    user_type: UserType
    account_number: int | None = None

    @classmethod
    def from_user(cls, user: CustomerUser | AdministratorUser) -> "UserResponse":
        return cls(
            id=user.id,
            login=user.login,
            name=user.name,
            user_type=user.user_type,
            account_number=getattr(user, "account_number", None),
        )
