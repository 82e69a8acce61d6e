"""Storage for bookings and group deliveries.

``atomic_join_group`` is the only write that touches group membership. It must
check capacity and append the member in one step so that two concurrent
joiners can never push a group past capacity.
"""

from __future__ import annotations

import copy
import enum
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any, Optional, Protocol

from ..db.supabase import get_supabase_client
from ..models.domain import GroupDelivery, GroupStatus
from ..services.outputs.formatter import generate_id, group_to_record

BOOKINGS_TABLE = "bookings"
GROUPS_TABLE = "group_deliveries"
JOIN_GROUP_FUNCTION = "join_group_delivery"


class JoinOutcome(str, enum.Enum):
    joined = "joined"
    capacity_exceeded = "capacity_exceeded"
    not_found = "not_found"


@dataclass(slots=True, frozen=True)
class JoinAttempt:
    """Outcome of ``atomic_join_group`` and the group as stored right after it.

    ``group`` is None only when the group does not exist.
    """

    outcome: JoinOutcome
    group: Optional[GroupDelivery] = None

    @property
    def joined(self) -> bool:
        return self.outcome is JoinOutcome.joined


class BookingStore(Protocol):
    def create_record(self, collection: str, data: dict[str, Any]) -> str:
        ...

    def get_record(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        ...

    def save_group(self, group: GroupDelivery) -> None:
        ...

    def get_group(self, group_id: str) -> Optional[GroupDelivery]:
        ...

    def query_open_groups(
        self, pickup_zone: str, destination_zone: str, window: str
    ) -> list[GroupDelivery]:
        ...

    def atomic_join_group(
        self, group_id: str, participant_id: str, price: int, *, capacity: int
    ) -> JoinAttempt:
        ...


def record_to_group(record: dict[str, Any]) -> GroupDelivery:
    created_at = record.get("created_at")
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    return GroupDelivery(
        id=str(record["id"]),
        pickup_zone=record.get("pickup_zone") or "",
        destination_zone=record.get("destination_zone") or "",
        delivery_window=record.get("delivery_window") or "",
        status=GroupStatus.coerce(record.get("status")) or GroupStatus.waiting,
        members=list(record.get("members") or []),
        total_price=int(record.get("total_price") or 0),
        distance_km=float(record.get("distance_km") or 0.0),
        eta_minutes=int(record.get("eta_minutes") or 0),
        created_at=created_at,
    )


class InMemoryBookingStore:
    """Process-local store; a lock serializes membership changes."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, dict[str, Any]]] = {}
        self._groups: dict[str, GroupDelivery] = {}
        self._lock = threading.Lock()

    def create_record(self, collection: str, data: dict[str, Any]) -> str:
        record_id = str(data.get("id") or generate_id())
        with self._lock:
            self._records.setdefault(collection, {})[record_id] = {**copy.deepcopy(data), "id": record_id}
        return record_id

    def get_record(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            record = self._records.get(collection, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def records(self, collection: str) -> list[dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(record) for record in self._records.get(collection, {}).values()]

    def save_group(self, group: GroupDelivery) -> None:
        with self._lock:
            self._groups[group.id] = copy.deepcopy(group)

    def get_group(self, group_id: str) -> Optional[GroupDelivery]:
        with self._lock:
            group = self._groups.get(group_id)
            return copy.deepcopy(group) if group is not None else None

    def query_open_groups(
        self, pickup_zone: str, destination_zone: str, window: str
    ) -> list[GroupDelivery]:
        with self._lock:
            return [
                copy.deepcopy(group)
                for group in self._groups.values()
                if group.status is GroupStatus.waiting
                and group.pickup_zone == pickup_zone
                and group.destination_zone == destination_zone
                and group.delivery_window == window
            ]

    def atomic_join_group(
        self, group_id: str, participant_id: str, price: int, *, capacity: int
    ) -> JoinAttempt:
        with self._lock:
            group = self._groups.get(group_id)
            if group is None:
                return JoinAttempt(JoinOutcome.not_found)
            if group.status is not GroupStatus.waiting or len(group.members) >= capacity:
                return JoinAttempt(JoinOutcome.capacity_exceeded, copy.deepcopy(group))
            group.members.append(participant_id)
            group.total_price += price
            if len(group.members) >= capacity:
                group.status = GroupStatus.confirmed
            return JoinAttempt(JoinOutcome.joined, copy.deepcopy(group))


class SupabaseBookingStore:
    """Bookings and groups kept in Supabase tables.

    Group joins go through the ``join_group_delivery`` Postgres function, which
    locks the group row for the capacity check and the append.
    """

    def __init__(self, client=None) -> None:
        self.client = client or get_supabase_client()
        if self.client is None:
            raise ValueError("Supabase is not configured.")

    def create_record(self, collection: str, data: dict[str, Any]) -> str:
        payload = {**data, "id": str(data.get("id") or generate_id())}
        response = self.client.table(collection).insert(payload).execute()
        rows = response.data or []
        return str(rows[0]["id"]) if rows else payload["id"]

    def get_record(self, collection: str, record_id: str) -> Optional[dict[str, Any]]:
        response = self.client.table(collection).select("*").eq("id", record_id).limit(1).execute()
        rows = response.data or []
        return rows[0] if rows else None

    def save_group(self, group: GroupDelivery) -> None:
        self.client.table(GROUPS_TABLE).upsert(group_to_record(group)).execute()

    def get_group(self, group_id: str) -> Optional[GroupDelivery]:
        record = self.get_record(GROUPS_TABLE, group_id)
        return record_to_group(record) if record else None

    def query_open_groups(
        self, pickup_zone: str, destination_zone: str, window: str
    ) -> list[GroupDelivery]:
        response = (
            self.client.table(GROUPS_TABLE)
            .select("*")
            .eq("pickup_zone", pickup_zone)
            .eq("destination_zone", destination_zone)
            .eq("delivery_window", window)
            .eq("status", GroupStatus.waiting.value)
            .order("created_at")
            .execute()
        )
        return [record_to_group(row) for row in (response.data or [])]

    def atomic_join_group(
        self, group_id: str, participant_id: str, price: int, *, capacity: int
    ) -> JoinAttempt:
        response = self.client.rpc(
            JOIN_GROUP_FUNCTION,
            {
                "p_group_id": group_id,
                "p_participant_id": participant_id,
                "p_price": price,
                "p_capacity": capacity,
            },
        ).execute()
        result = response.data
        if isinstance(result, list):
            result = result[0] if result else None
        if isinstance(result, dict) and JOIN_GROUP_FUNCTION in result:
            result = result[JOIN_GROUP_FUNCTION]
        if not isinstance(result, dict):
            logging.error(f"Unexpected {JOIN_GROUP_FUNCTION} result for group {group_id}: {result!r}")
            raise ValueError(f"{JOIN_GROUP_FUNCTION} returned {result!r}")
        try:
            outcome = JoinOutcome(result.get("outcome"))
        except ValueError:
            logging.error(f"Unexpected {JOIN_GROUP_FUNCTION} outcome for group {group_id}: {result!r}")
            raise
        row = result.get("group")
        if outcome is JoinOutcome.joined and not row:
            raise ValueError(f"{JOIN_GROUP_FUNCTION} joined group {group_id} but returned no row")
        return JoinAttempt(outcome, record_to_group(row) if row else None)


_memory_store = InMemoryBookingStore()


@lru_cache()
def get_booking_store() -> BookingStore:
    client = get_supabase_client()
    if client is None:
        logging.warning("Supabase not configured - bookings are kept in memory only")
        return _memory_store
    return SupabaseBookingStore(client)
