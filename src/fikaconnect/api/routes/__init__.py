"""Route group exports."""

from . import bookings, collection_points, health, quotes

__all__ = ["bookings", "collection_points", "health", "quotes"]
