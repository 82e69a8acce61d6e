"""Dependency providers for route handlers."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, status

from ..services.booking.service import BookingService


@lru_cache()
def get_booking_service() -> BookingService:
    return BookingService()


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Caller identity as issued by the auth provider; treated as an opaque string."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to book a delivery.",
        )
    return x_user_id.strip()
