from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class UserRegister(BaseModel):
    """Registration body; presence and format are checked by the handler."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(UserRegister):
    pass


class PublicUser(BaseModel):
    """User fields safe to hand to any client."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str


class UserRead(PublicUser):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    created_at: datetime
    updated_at: datetime


def public_user(user) -> dict:
    return PublicUser.model_validate(user).model_dump()


def user_payload(user) -> dict:
    return UserRead.model_validate(user).model_dump(by_alias=True, mode="json")
