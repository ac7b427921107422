"""Service center directory helpers: fallback list, broadcast rows and pricing."""

import logging
from typing import Any, Optional

from washflow.config import settings
from washflow.schemas.center_schema import BroadcastCenter, BroadcastStatus, ServiceCenter

logger = logging.getLogger(__name__)

# Distance shown for centers the directory does not locate
DISTANCE_STEP_MILES = 0.5

FALLBACK_CENTERS: list[ServiceCenter] = [
    ServiceCenter(id="1", name="Sparkle Auto Spa", rating=4.8, distance="0.5 mi",
                  address="12 High Street"),
    ServiceCenter(id="2", name="Quick Shine Car Wash", rating=4.6, distance="1.0 mi",
                  address="48 Station Road"),
    ServiceCenter(id="3", name="Eco Wash Hub", rating=4.5, distance="1.5 mi",
                  address="3 Mill Lane"),
    ServiceCenter(id="4", name="Premium Detailing Centre", rating=4.9, distance="2.0 mi",
                  address="77 Church Road"),
]


def fallback_centers() -> list[ServiceCenter]:
    """Return a fresh copy of the built-in sample directory."""
    return [c.model_copy(deep=True) for c in FALLBACK_CENTERS]


def center_from_record(record: dict[str, Any], index: int) -> ServiceCenter:
    """Map a raw directory record to a ServiceCenter, filling display defaults."""
    distance = record.get("distance")
    return ServiceCenter(
        id=record.get("id") if record.get("id") is not None else index + 1,
        name=record.get("name") or record.get("service_centre_name") or "Car Wash Center",
        rating=float(record.get("rating") or 4.5),
        distance=str(distance) if distance else None,
        address=record.get("address") or record.get("location") or "Address not available",
        services_offered=record.get("services_offered") or [],
    )


def to_broadcast_center(center: ServiceCenter, index: int) -> BroadcastCenter:
    """Build the initial ``waiting`` broadcast row for a candidate center."""
    distance = center.distance or f"{(index + 1) * DISTANCE_STEP_MILES} mi"
    return BroadcastCenter(
        id=center.id,
        name=center.name,
        distance=distance,
        status=BroadcastStatus.WAITING,
        rating=center.rating,
        address=center.address,
    )


def price_for_service(center: Optional[ServiceCenter], service_id: Optional[str] = None) -> float:
    """
    Amount charged for a wash at a center.

    Uses the requested service when the center lists it, otherwise the first
    priced service, preferring offer prices over list prices. Falls back to
    the configured default price.
    """
    if center is not None:
        services = center.services_offered
        if service_id is not None:
            services = [s for s in services if s.id == str(service_id)] or services
        for service in services:
            if service.effective_price is not None:
                return float(service.effective_price)
    logger.debug("No listed price, using default %.2f", settings.booking.default_wash_price)
    return settings.booking.default_wash_price
