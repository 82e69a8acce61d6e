"""Matching of group delivery requests against open groups.

The matcher only reads the snapshot of groups it is handed. Capacity is
checked here for the snapshot, but two callers can still race on the same
group: the booking store must append members with an atomic conditional
update (see ``BookingStore.atomic_join_group``).
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Optional

from ...config import settings
from ...errors import CapacityExceededError
from ...models.domain import GroupDelivery, GroupStatus, JoinResult, PriceBreakdown
from ..outputs.formatter import generate_id


class GroupMatcher:
    """Stateless join-or-create policy for group deliveries."""

    def __init__(self, capacity: int | None = None) -> None:
        self.capacity = capacity if capacity is not None else settings.group_capacity
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")

    def is_open(self, group: GroupDelivery) -> bool:
        return group.status is GroupStatus.waiting and len(group.members) < self.capacity

    def find_match(
        self,
        pools: Iterable[GroupDelivery],
        pickup_zone: str,
        destination_zone: str,
        window: str,
    ) -> Optional[GroupDelivery]:
        """Return the first open group on the same route and window, in list order."""
        if not (pickup_zone and destination_zone and window):
            return None
        for group in pools:
            if (
                group.pickup_zone == pickup_zone
                and group.destination_zone == destination_zone
                and group.delivery_window == window
                and self.is_open(group)
            ):
                return group
        return None

    def shared_price(self, group: GroupDelivery, quote: PriceBreakdown) -> int:
        return (group.total_price + quote.total) // (len(group.members) + 1)

    @staticmethod
    def member_share(group: GroupDelivery) -> int:
        """Per-member share of a group that already includes the newcomer."""
        return group.total_price // max(len(group.members), 1)

    def join(self, group: GroupDelivery, quote: PriceBreakdown, participant_id: str) -> JoinResult:
        """Add ``participant_id`` to a copy of ``group`` and split the running total.

        ``group`` must be open, as every group returned by ``find_match`` is;
        "no match" is reported by ``find_match`` returning None, never by this
        method. Passing a full or confirmed group is a caller bug and raises
        ``CapacityExceededError`` instead of returning a join result.
        """
        if not self.is_open(group):
            raise CapacityExceededError(group.id, self.capacity)

        shared = self.shared_price(group, quote)
        updated = replace(
            group,
            members=[*group.members, participant_id],
            total_price=group.total_price + quote.total,
        )
        return JoinResult(group=updated, shared_price=shared, is_full=len(updated.members) >= self.capacity)

    def create_group(
        self,
        participant_id: str,
        pickup_zone: str,
        destination_zone: str,
        window: str,
        quote: PriceBreakdown,
        *,
        group_id: str | None = None,
        distance_km: float = 0.0,
        eta_minutes: int = 0,
    ) -> GroupDelivery:
        return GroupDelivery(
            id=group_id or generate_id("GRP"),
            pickup_zone=pickup_zone,
            destination_zone=destination_zone,
            delivery_window=window,
            status=GroupStatus.waiting,
            members=[participant_id],
            total_price=quote.total,
            distance_km=distance_km,
            eta_minutes=eta_minutes,
            created_at=datetime.now(timezone.utc),
        )

    def estimate_savings(self, group: GroupDelivery, quote: PriceBreakdown) -> int:
        """How much a newcomer saves by joining instead of paying their own quote."""
        return max(0, quote.total - group.total_price // (len(group.members) + 1))
