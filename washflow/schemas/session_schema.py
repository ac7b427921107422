"""User profile model and per-app session state."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    CUSTOMER = "customer"
    SERVICE_OWNER = "service-owner"


class UserProfile(BaseModel):
    """Serialized user profile owned by the auth/storage collaborator."""
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER


@dataclass
class SessionContext:
    """
    Session state injected into the router.

    Holds the authenticated flag, the user profile and the chosen role that
    gate which screens are reachable. ``clear()`` is the teardown used by
    logout; the theme flag is a device preference and survives it.
    """
    authenticated: bool = False
    user: Optional[UserProfile] = None
    role: Optional[UserRole] = None
    dark_mode: bool = False

    def start(self, user: UserProfile, role: Optional[UserRole] = None) -> None:
        self.authenticated = True
        self.user = user
        self.role = role or self.role or user.role

    def clear(self) -> None:
        self.authenticated = False
        self.user = None
        self.role = None

    def is_customer(self) -> bool:
        return self.authenticated and self.role == UserRole.CUSTOMER

    def is_owner(self) -> bool:
        return self.authenticated and self.role == UserRole.SERVICE_OWNER
