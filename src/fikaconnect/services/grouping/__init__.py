"""Group delivery matching."""

from .matcher import GroupMatcher

__all__ = ["GroupMatcher"]
