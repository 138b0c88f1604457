"""
Domain: Shipment tracking.

A Shipment is attached to a Purchase once it reaches the shipping status.
Carrier and tracking number identify the shipment and never change after it
is first set; status, location and events are updated as the vehicle moves.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .errors import PurchaseValidationError
from .time import require_utc_timestamp


class ShipmentStatus(str, Enum):
    PREPARING = "preparing"
    IN_TRANSIT = "in_transit"
    AT_PORT = "at_port"
    CUSTOMS_CLEARANCE = "customs_clearance"
    DELIVERED = "delivered"


@dataclass(frozen=True, slots=True)
class ShipmentEvent:
    date: datetime
    location: str
    status: str
    description: str

    def __post_init__(self) -> None:
        require_utc_timestamp("date", self.date)


@dataclass(frozen=True, slots=True)
class Shipment:
    carrier: str
    tracking_number: str
    status: ShipmentStatus
    current_location: str
    last_update: datetime
    estimated_delivery: Optional[datetime] = None
    events: Tuple[ShipmentEvent, ...] = ()

    def __post_init__(self) -> None:
        require_utc_timestamp("last_update", self.last_update)
        if self.estimated_delivery is not None:
            require_utc_timestamp("estimated_delivery", self.estimated_delivery)
        if not self.carrier:
            raise PurchaseValidationError("Shipment carrier is required")
        if not self.tracking_number:
            raise PurchaseValidationError("Shipment tracking number is required")

    def same_identity(self, other: "Shipment") -> bool:
        return self.carrier == other.carrier and self.tracking_number == other.tracking_number

    def delivered(self, *, at: datetime, location: str) -> "Shipment":
        """Return a copy marked delivered with a closing tracking event."""

        require_utc_timestamp("at", at)
        event = ShipmentEvent(
            date=at,
            location=location,
            status="Delivered",
            description="Vehicle delivered to customer",
        )
        return Shipment(
            carrier=self.carrier,
            tracking_number=self.tracking_number,
            status=ShipmentStatus.DELIVERED,
            current_location=location,
            last_update=at,
            estimated_delivery=self.estimated_delivery,
            events=self.events + (event,),
        )


__all__ = ["ShipmentStatus", "ShipmentEvent", "Shipment"]
