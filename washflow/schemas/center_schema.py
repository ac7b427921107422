"""Service center data models and broadcast rows."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Service(BaseModel):
    """A wash service offered by a center."""
    id: str
    name: str = "Car Wash"
    price: Optional[float] = None
    offer_price: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    @property
    def effective_price(self) -> Optional[float]:
        """Offer price when present, otherwise the list price."""
        return self.offer_price if self.offer_price is not None else self.price


class ServiceCenter(BaseModel):
    """Service center record from the backend directory."""
    id: str
    name: str = "Car Wash Center"
    rating: float = 4.5
    distance: Optional[str] = None
    address: str = "Address not available"
    services_offered: list[Service] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)


class BroadcastStatus(str, Enum):
    """Status of one center during a broadcast run."""
    WAITING = "waiting"
    NOT_AVAILABLE = "not-available"
    ACCEPTED = "accepted"


@dataclass
class BroadcastCenter:
    """
    One row on the broadcast screen.

    Created ``waiting`` when a run starts and updated exactly once, together
    with every other row of the run, when the run resolves.
    """
    id: str
    name: str
    distance: str
    status: BroadcastStatus = BroadcastStatus.WAITING
    rating: float = 4.5
    address: str = ""
