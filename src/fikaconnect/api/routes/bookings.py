"""Booking and group delivery endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...errors import CapacityExceededError, GroupNotFoundError
from ...schemas.bookings import (
    BookingRequest,
    BookingResponse,
    GroupPreviewRequest,
    GroupPreviewResponse,
    GroupSummary,
)
from ...services.booking.service import BookingService
from ..deps import get_booking_service, get_current_user_id

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingRequest,
    user_id: str = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return service.book(payload, user_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except CapacityExceededError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error creating booking: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create booking: {str(exc)}"
        ) from exc


@router.post("/groups/preview", response_model=GroupPreviewResponse, status_code=status.HTTP_200_OK)
def preview_group(
    payload: GroupPreviewRequest,
    service: BookingService = Depends(get_booking_service),
) -> GroupPreviewResponse:
    """Show whether an open group matches the request and what joining would cost."""
    try:
        return service.preview_group(payload)
    except Exception as exc:
        logging.exception(f"Error matching group delivery: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to match group delivery: {str(exc)}"
        ) from exc


@router.get("/groups/{group_id}", response_model=GroupSummary, status_code=status.HTTP_200_OK)
def get_group(group_id: str, service: BookingService = Depends(get_booking_service)) -> GroupSummary:
    try:
        return service.get_group(group_id)
    except GroupNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
