"""Notification events emitted by booking state changes.

Dispatch operations return events instead of sending anything; the
notification dispatcher consumes them off the request path.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


class EventType(str, enum.Enum):
    BOOKING_REQUESTED = "BookingRequested"
    DRIVER_ASSIGNED = "DriverAssigned"
    DRIVER_UNASSIGNED = "DriverUnassigned"
    FARE_SET = "FareSet"
    PAYMENT_LINK_ISSUED = "PaymentLinkIssued"
    PAYMENT_CONFIRMED = "PaymentConfirmed"
    STATUS_ADVANCED = "StatusAdvanced"
    BOOKING_CANCELLED = "BookingCancelled"


class Audience(str, enum.Enum):
    CLIENT = "client"
    DRIVER = "driver"
    OPERATOR = "operator"


@dataclass(frozen=True)
class NotificationEvent:
    type: EventType
    booking_id: str
    audience: Audience
    message: str
    phone: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_sms(self) -> bool:
        """Operator-facing events are logged only, never sent."""
        return self.audience is not Audience.OPERATOR and bool(self.phone)
