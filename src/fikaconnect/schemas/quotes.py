"""Pydantic request/response models for quote endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..models.domain import DeliveryRequest, Dimensions, Location


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_location(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude)


class PackageDimensions(BaseModel):
    length: float = Field(0.0, ge=0, description="Length in cm.")
    width: float = Field(0.0, ge=0, description="Width in cm.")
    height: float = Field(0.0, ge=0, description="Height in cm.")


class QuoteRequest(BaseModel):
    # Plain strings: unknown tiers and multipliers fall back to defaults when priced.
    delivery_type: str = Field("direct", description="direct, urgent, store or group.")
    package_type: str = Field("document", description="document, small, medium, large or fragile.")
    weight_kg: float = Field(0.0, ge=0)
    dimensions: PackageDimensions = Field(default_factory=PackageDimensions)
    vehicle_type: str = Field("boda", description="boda, pickup, van or truck.")
    distance_km: Optional[float] = Field(
        default=None,
        ge=0,
        description="Known route distance. Estimated from the coordinates when omitted.",
    )
    pickup: Optional[Coordinates] = None
    delivery: Optional[Coordinates] = None

    def to_domain(self, distance_km: float) -> DeliveryRequest:
        return DeliveryRequest(
            delivery_type=self.delivery_type,
            package_type=self.package_type,
            weight_kg=self.weight_kg,
            dimensions=Dimensions(**self.dimensions.model_dump()),
            vehicle_type=self.vehicle_type,
            distance_km=distance_km,
        )


class PriceBreakdownModel(BaseModel):
    base_price: int
    weight_surcharge: int
    distance_cost: int
    total: int
    formatted_total: str


class QuoteResponse(BaseModel):
    delivery_type: str
    breakdown: PriceBreakdownModel
    distance_km: float
    eta_minutes: int
    route_source: str
