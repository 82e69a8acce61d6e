"""Quote endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.quotes import QuoteRequest, QuoteResponse
from ...services.booking.service import BookingService
from ..deps import get_booking_service

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def create_quote(payload: QuoteRequest, service: BookingService = Depends(get_booking_service)) -> QuoteResponse:
    try:
        return service.quote(payload)
    except Exception as exc:
        logging.exception(f"Error calculating quote: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to calculate quote: {str(exc)}"
        ) from exc
