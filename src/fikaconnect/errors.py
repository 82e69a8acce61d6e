"""Exceptions raised by the booking and group delivery services."""

from __future__ import annotations


class FikaError(Exception):
    """Base class for application errors."""


class CapacityExceededError(FikaError):
    """A join lost the race for the last seat in a group.

    Retryable: the caller should re-run matching and either join another
    group or create a new one.
    """

    def __init__(self, group_id: str, capacity: int | None = None) -> None:
        self.group_id = group_id
        self.capacity = capacity
        detail = f"Group delivery '{group_id}' is full"
        if capacity is not None:
            detail += f" (capacity {capacity})"
        super().__init__(detail)


class GroupNotFoundError(FikaError):
    """The referenced group delivery does not exist in the store."""

    def __init__(self, group_id: str) -> None:
        self.group_id = group_id
        super().__init__(f"Group delivery '{group_id}' not found")
