from enum import Enum

from pydantic import Field

from seatadmin.models.base import CamelModel


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1)
    role: UserRole = UserRole.USER


class User(CamelModel):
    id: int
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN
