"""Utilities to render quotes and bookings for clients and storage."""

from __future__ import annotations

import secrets
import string
import time
from typing import Any

from ...config import settings
from ...models.domain import GroupDelivery, PriceBreakdown

_BASE36 = string.digits + string.ascii_uppercase


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_id(prefix: str = "FKC") -> str:
    """Build an identifier like ``FKC-LQ3X9A1B-7K2M9QX0P``."""
    timestamp = _base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{prefix}-{timestamp}-{suffix}".upper()


def format_currency(amount: int | float, currency: str | None = None) -> str:
    """Format an amount without minor units, e.g. ``UGX 30,000``."""
    return f"{currency or settings.currency} {round(amount):,}"


def breakdown_to_json(breakdown: PriceBreakdown) -> dict[str, Any]:
    payload: dict[str, Any] = breakdown.as_dict()
    payload["formatted_total"] = format_currency(breakdown.total)
    return payload


def group_to_record(group: GroupDelivery) -> dict[str, Any]:
    return {
        "id": group.id,
        "pickup_zone": group.pickup_zone,
        "destination_zone": group.destination_zone,
        "delivery_window": group.delivery_window,
        "status": group.status.value,
        "members": list(group.members),
        "total_price": group.total_price,
        "distance_km": group.distance_km,
        "eta_minutes": group.eta_minutes,
        "created_at": group.created_at.isoformat() if group.created_at else None,
    }
