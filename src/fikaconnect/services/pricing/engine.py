"""Pricing engine for delivery quotes.

Amounts are whole currency units. Each breakdown component is rounded half-up
on its own and the total is the sum of the rounded components.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from ...models.domain import (
    BASE_PRICES,
    DeliveryRequest,
    DeliveryType,
    PackageType,
    PriceBreakdown,
    VehicleType,
)

STORE_FLAT_RATE = BASE_PRICES[DeliveryType.store]
FREE_WEIGHT_KG = Decimal("5")
PER_KG_RATE = Decimal("500")
PER_KM_RATE = Decimal("300")

logger = logging.getLogger(__name__)


def _to_units(amount: Decimal) -> int:
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _non_negative(value: float | int | None) -> Decimal:
    if value is None:
        return Decimal("0")
    # str() keeps float inputs like 12.3 exact instead of their binary expansion
    amount = Decimal(str(value))
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount


def weight_surcharge(weight_kg: float) -> Decimal:
    return max(Decimal("0"), _non_negative(weight_kg) - FREE_WEIGHT_KG) * PER_KG_RATE


def distance_cost(distance_km: float) -> Decimal:
    return _non_negative(distance_km) * PER_KM_RATE


class PricingEngine:
    """Stateless quote calculator. Construct once and share."""

    def __init__(self, store_flat_rate: Decimal = STORE_FLAT_RATE) -> None:
        self.store_flat_rate = store_flat_rate

    def quote(self, request: DeliveryRequest) -> PriceBreakdown:
        delivery_type = DeliveryType.coerce(request.delivery_type)
        if delivery_type is None:
            logger.debug("Unknown delivery type %r, pricing as direct", request.delivery_type)
            delivery_type = DeliveryType.direct

        if delivery_type is DeliveryType.store:
            flat = _to_units(self.store_flat_rate)
            return PriceBreakdown(base_price=flat, weight_surcharge=0, distance_cost=0, total=flat)

        base = BASE_PRICES[delivery_type]

        package = PackageType.coerce(request.package_type)
        if package is None:
            logger.debug("Unknown package type %r, using multiplier 1", request.package_type)
        base *= package.multiplier if package else Decimal("1")

        vehicle = VehicleType.coerce(request.vehicle_type)
        if vehicle is None:
            logger.debug("Unknown vehicle type %r, using multiplier 1", request.vehicle_type)
        base *= vehicle.multiplier if vehicle else Decimal("1")

        base_units = _to_units(base)
        weight_units = _to_units(weight_surcharge(request.weight_kg))
        distance_units = _to_units(distance_cost(request.distance_km))
        return PriceBreakdown(
            base_price=base_units,
            weight_surcharge=weight_units,
            distance_cost=distance_units,
            total=base_units + weight_units + distance_units,
        )


default_engine = PricingEngine()


def quote(request: DeliveryRequest) -> PriceBreakdown:
    return default_engine.quote(request)
