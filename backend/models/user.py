from dataclasses import dataclass
from enum import Enum

from core.database import BaseModel


class UserRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


@dataclass(kw_only=True)
class User(BaseModel):
    email: str
    name: str
    hashed_password: str
    role: UserRole = UserRole.BUYER
    active: bool = True

    def public_dict(self) -> dict:
        """User fields safe to return over the API"""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "active": self.active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
