"""Pydantic request/response models for booking and group endpoints."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..services.validation import format_phone_number, validate_email, validate_phone
from .quotes import PriceBreakdownModel, QuoteRequest


class Contact(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str
    email: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_uganda_phone(cls, value: str) -> str:
        if not validate_phone(value):
            raise ValueError("phone must be a valid Uganda phone number")
        return format_phone_number(value)

    @field_validator("email")
    @classmethod
    def validate_optional_email(cls, value: Optional[str]) -> Optional[str]:
        if value and not validate_email(value):
            raise ValueError("email is not a valid address")
        return value or None


class GroupDetails(BaseModel):
    pickup_zone: str = Field(..., min_length=1)
    destination_zone: str = Field(..., min_length=1)
    delivery_window: str = Field(..., min_length=1)


class StoreDetails(BaseModel):
    pickup_point: str = Field(..., min_length=1)
    dropoff_point: str = Field(..., min_length=1)


class BookingRequest(QuoteRequest):
    sender: Contact
    receiver: Contact
    pickup_location: str = ""
    delivery_location: str = ""
    pickup_date: Optional[str] = None
    delivery_time: Optional[str] = None
    package_value: int = Field(0, ge=0)
    payment_method: str = "cash"
    special_instructions: Optional[str] = None
    photos: List[str] = Field(default_factory=list, description="URLs of uploaded package photos.")
    group: Optional[GroupDetails] = None
    store: Optional[StoreDetails] = None


class GroupPreviewRequest(QuoteRequest):
    group: GroupDetails


class GroupSummary(BaseModel):
    id: str
    pickup_zone: str
    destination_zone: str
    delivery_window: str
    status: str
    member_count: int
    total_price: int


class GroupPreviewResponse(BaseModel):
    matched: bool
    group: Optional[GroupSummary] = None
    quote: PriceBreakdownModel
    shared_price: Optional[int] = None
    savings: int = 0


class BookingResponse(BaseModel):
    id: str
    user_id: str
    delivery_type: str
    status: str
    price: int
    formatted_price: str
    breakdown: PriceBreakdownModel
    distance_km: float
    eta_minutes: int
    group: Optional[GroupSummary] = None
