"""Domain models for delivery requests, quotes and group deliveries."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class _CoercibleEnum(str, enum.Enum):
    @classmethod
    def coerce(cls, value: object):
        """Return the member for ``value`` or ``None`` when it is not recognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class DeliveryType(_CoercibleEnum):
    direct = "direct"
    urgent = "urgent"
    store = "store"
    group = "group"

    @property
    def base_price(self) -> Decimal:
        return BASE_PRICES[self]


class PackageType(_CoercibleEnum):
    document = "document"
    small = "small"
    medium = "medium"
    large = "large"
    fragile = "fragile"

    @property
    def multiplier(self) -> Decimal:
        return PACKAGE_MULTIPLIERS[self]


class VehicleType(_CoercibleEnum):
    boda = "boda"
    pickup = "pickup"
    van = "van"
    truck = "truck"

    @property
    def multiplier(self) -> Decimal:
        return VEHICLE_MULTIPLIERS[self]


class GroupStatus(_CoercibleEnum):
    waiting = "waiting"
    confirmed = "confirmed"


class BookingStatus(_CoercibleEnum):
    pending = "pending"
    waiting = "waiting"
    confirmed = "confirmed"


# The store entry is the flat store-to-store rate; no multipliers apply to it.
BASE_PRICES: dict[DeliveryType, Decimal] = {
    DeliveryType.direct: Decimal("10000"),
    DeliveryType.urgent: Decimal("15000"),
    DeliveryType.store: Decimal("7000"),
    DeliveryType.group: Decimal("5000"),
}

PACKAGE_MULTIPLIERS: dict[PackageType, Decimal] = {
    PackageType.document: Decimal("1"),
    PackageType.small: Decimal("1.2"),
    PackageType.medium: Decimal("1.5"),
    PackageType.large: Decimal("2"),
    PackageType.fragile: Decimal("1.8"),
}

VEHICLE_MULTIPLIERS: dict[VehicleType, Decimal] = {
    VehicleType.boda: Decimal("1"),
    VehicleType.pickup: Decimal("1.3"),
    VehicleType.van: Decimal("1.5"),
    VehicleType.truck: Decimal("2"),
}


@dataclass(slots=True, frozen=True)
class Dimensions:
    """Package dimensions in centimetres. Not used by pricing."""

    length: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(slots=True, frozen=True)
class Location:
    latitude: float
    longitude: float


@dataclass(slots=True)
class DeliveryRequest:
    """Attributes collected for a single delivery.

    Enum-like fields accept either the enum member or its raw string value;
    unrecognised strings are priced with the default tier and multipliers.
    """

    delivery_type: DeliveryType | str = DeliveryType.direct
    package_type: PackageType | str = PackageType.document
    weight_kg: float = 0.0
    dimensions: Dimensions = field(default_factory=Dimensions)
    vehicle_type: VehicleType | str = VehicleType.boda
    distance_km: float = 0.0


@dataclass(slots=True, frozen=True)
class PriceBreakdown:
    """Quote for one request. ``total`` is always the sum of the components."""

    base_price: int
    weight_surcharge: int
    distance_cost: int
    total: int

    def as_dict(self) -> dict[str, int]:
        return {
            "base_price": self.base_price,
            "weight_surcharge": self.weight_surcharge,
            "distance_cost": self.distance_cost,
            "total": self.total,
        }


@dataclass(slots=True)
class GroupDelivery:
    """A cost-sharing delivery pooling senders on the same route and window."""

    id: str
    pickup_zone: str
    destination_zone: str
    delivery_window: str
    status: GroupStatus = GroupStatus.waiting
    members: list[str] = field(default_factory=list)
    total_price: int = 0
    distance_km: float = 0.0
    eta_minutes: int = 0
    created_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class JoinResult:
    group: GroupDelivery
    shared_price: int
    is_full: bool


@dataclass(slots=True, frozen=True)
class RouteEstimate:
    distance_km: float
    eta_minutes: int
    source: str = "haversine"


@dataclass(slots=True, frozen=True)
class CollectionPoint:
    """A named drop-off/pickup location served by the store tier."""

    id: str
    name: str
    address: str
    kind: str = "market"
