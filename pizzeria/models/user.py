"""User directory models."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class User(BaseModel):
    """User profile used for authorization and contact prefill."""

    id: UUID = Field(default_factory=uuid4)
    email: EmailStr
    first_name: str
    last_name: str = ""
    phone: str | None = None
    address: str | None = None
    role: UserRole = UserRole.CUSTOMER
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def public_profile(self) -> dict[str, str]:
        """Display fields embedded in order responses."""
        return {
            "id": str(self.id),
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
        }
