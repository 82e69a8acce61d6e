"""High-level orchestration for quotes and bookings."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ...config import settings
from ...data.collection_points import get_collection_point
from ...errors import GroupNotFoundError
from ...models.domain import (
    BookingStatus,
    DeliveryRequest,
    DeliveryType,
    GroupDelivery,
    PriceBreakdown,
    RouteEstimate,
)
from ...persistence.store import BOOKINGS_TABLE, BookingStore, get_booking_store
from ...schemas.bookings import (
    BookingRequest,
    BookingResponse,
    GroupDetails,
    GroupPreviewRequest,
    GroupPreviewResponse,
    GroupSummary,
)
from ...schemas.quotes import PriceBreakdownModel, QuoteRequest, QuoteResponse
from ..grouping.matcher import GroupMatcher
from ..outputs.formatter import breakdown_to_json, format_currency, generate_id
from ..pricing.engine import PricingEngine
from ..routing.estimator import STORE_ROUTE, RouteEstimator, get_route_estimator
from ..validation import validate_package_weight


def _delivery_type(payload: QuoteRequest) -> DeliveryType:
    return DeliveryType.coerce(payload.delivery_type) or DeliveryType.direct


def _group_summary(group: GroupDelivery) -> GroupSummary:
    return GroupSummary(
        id=group.id,
        pickup_zone=group.pickup_zone,
        destination_zone=group.destination_zone,
        delivery_window=group.delivery_window,
        status=group.status.value,
        member_count=len(group.members),
        total_price=group.total_price,
    )


class BookingService:
    """Ties pricing, group matching, route estimation and storage together.

    All collaborators are injected; the defaults are the process-wide instances.
    """

    def __init__(
        self,
        pricing: PricingEngine | None = None,
        matcher: GroupMatcher | None = None,
        store: BookingStore | None = None,
        route_estimator: RouteEstimator | None = None,
        max_join_attempts: int | None = None,
    ) -> None:
        self.pricing = pricing or PricingEngine()
        self.matcher = matcher or GroupMatcher()
        self.store = store or get_booking_store()
        self.route_estimator = route_estimator or get_route_estimator()
        self.max_join_attempts = (
            max_join_attempts if max_join_attempts is not None else settings.max_join_attempts
        )
        if self.max_join_attempts < 1:
            raise ValueError("max_join_attempts must be >= 1")

    def resolve_route(self, payload: QuoteRequest) -> RouteEstimate:
        if _delivery_type(payload) is DeliveryType.store:
            return STORE_ROUTE
        if payload.distance_km is not None:
            return RouteEstimate(
                distance_km=payload.distance_km,
                eta_minutes=0,
                source="provided",
            )
        if payload.pickup and payload.delivery:
            return self.route_estimator.estimate_route(
                payload.pickup.to_location(), payload.delivery.to_location()
            )
        return RouteEstimate(distance_km=0.0, eta_minutes=0, source="unknown")

    def prepare_quote(self, payload: QuoteRequest) -> tuple[DeliveryRequest, PriceBreakdown, RouteEstimate]:
        route = self.resolve_route(payload)
        request = payload.to_domain(distance_km=route.distance_km)
        return request, self.pricing.quote(request), route

    def quote(self, payload: QuoteRequest) -> QuoteResponse:
        _, breakdown, route = self.prepare_quote(payload)
        return QuoteResponse(
            delivery_type=_delivery_type(payload).value,
            breakdown=PriceBreakdownModel(**breakdown_to_json(breakdown)),
            distance_km=route.distance_km,
            eta_minutes=route.eta_minutes,
            route_source=route.source,
        )

    def preview_group(self, payload: GroupPreviewRequest) -> GroupPreviewResponse:
        """Report the group a request would join right now, without writing anything."""
        group_payload = payload.model_copy(update={"delivery_type": DeliveryType.group.value})
        _, breakdown, _ = self.prepare_quote(group_payload)
        details = payload.group
        pools = self.store.query_open_groups(details.pickup_zone, details.destination_zone, details.delivery_window)
        match = self.matcher.find_match(pools, details.pickup_zone, details.destination_zone, details.delivery_window)
        quote_model = PriceBreakdownModel(**breakdown_to_json(breakdown))
        if match is None:
            return GroupPreviewResponse(matched=False, quote=quote_model)
        return GroupPreviewResponse(
            matched=True,
            group=_group_summary(match),
            quote=quote_model,
            shared_price=self.matcher.shared_price(match, breakdown),
            savings=self.matcher.estimate_savings(match, breakdown),
        )

    def get_group(self, group_id: str) -> GroupSummary:
        group = self.store.get_group(group_id)
        if group is None:
            raise GroupNotFoundError(group_id)
        return _group_summary(group)

    def book(self, payload: BookingRequest, user_id: str) -> BookingResponse:
        if not user_id:
            raise ValueError("A signed-in user is required to book a delivery.")
        delivery_type = _delivery_type(payload)
        self._validate(payload, delivery_type)

        _, breakdown, route = self.prepare_quote(payload)
        group: Optional[GroupDelivery] = None

        if delivery_type is DeliveryType.group:
            group, price, status = self._book_group(payload.group, breakdown, route, user_id)
            if status is BookingStatus.confirmed:
                # Joined members pay the shared price only
                breakdown = PriceBreakdown(base_price=price, weight_surcharge=0, distance_cost=0, total=price)
        else:
            price, status = breakdown.total, BookingStatus.pending

        record = self._booking_record(payload, user_id, delivery_type, status, breakdown, route, group)
        booking_id = self.store.create_record(BOOKINGS_TABLE, record)
        logging.info(f"Created {delivery_type.value} booking {booking_id} for user {user_id} at {price}")

        return BookingResponse(
            id=booking_id,
            user_id=user_id,
            delivery_type=delivery_type.value,
            status=status.value,
            price=price,
            formatted_price=format_currency(price),
            breakdown=PriceBreakdownModel(**breakdown_to_json(breakdown)),
            distance_km=route.distance_km,
            eta_minutes=route.eta_minutes,
            group=_group_summary(group) if group else None,
        )

    def _validate(self, payload: BookingRequest, delivery_type: DeliveryType) -> None:
        if delivery_type is DeliveryType.store:
            if payload.store is None:
                raise ValueError("Please select both pickup and drop-off points.")
            for point_id in (payload.store.pickup_point, payload.store.dropoff_point):
                if get_collection_point(point_id) is None:
                    raise ValueError(f"Unknown collection point '{point_id}'.")
        if delivery_type is DeliveryType.group and payload.group is None:
            raise ValueError("Group deliveries need a pickup zone, destination zone and delivery window.")
        if not validate_package_weight(payload.weight_kg):
            raise ValueError("Package weight must be greater than 0 and at most 1000 kg.")

    def _book_group(
        self,
        details: GroupDetails,
        breakdown: PriceBreakdown,
        route: RouteEstimate,
        user_id: str,
    ) -> tuple[GroupDelivery, int, BookingStatus]:
        for attempt in range(1, self.max_join_attempts + 1):
            pools = self.store.query_open_groups(
                details.pickup_zone, details.destination_zone, details.delivery_window
            )
            match = self.matcher.find_match(
                pools, details.pickup_zone, details.destination_zone, details.delivery_window
            )
            if match is None:
                break
            attempt_result = self.store.atomic_join_group(
                match.id, user_id, breakdown.total, capacity=self.matcher.capacity
            )
            if attempt_result.joined:
                # Price and status come from the stored group; others may have joined since the query
                group = attempt_result.group
                logging.info(
                    f"User {user_id} joined group {group.id} "
                    f"({len(group.members)} members, {group.status.value})"
                )
                return group, self.matcher.member_share(group), BookingStatus.confirmed
            logging.info(
                f"Join of group {match.id} returned {attempt_result.outcome.value} "
                f"(attempt {attempt}/{self.max_join_attempts}); re-running match"
            )

        group = self.matcher.create_group(
            user_id,
            details.pickup_zone,
            details.destination_zone,
            details.delivery_window,
            breakdown,
            distance_km=route.distance_km,
            eta_minutes=route.eta_minutes,
        )
        self.store.save_group(group)
        logging.info(f"Created group {group.id} for user {user_id}")
        return group, breakdown.total, BookingStatus.waiting

    def _booking_record(
        self,
        payload: BookingRequest,
        user_id: str,
        delivery_type: DeliveryType,
        status: BookingStatus,
        breakdown: PriceBreakdown,
        route: RouteEstimate,
        group: Optional[GroupDelivery],
    ) -> dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        record: dict[str, Any] = {
            "id": generate_id("FKC"),
            "user_id": user_id,
            "delivery_type": delivery_type.value,
            "status": status.value,
            "sender": payload.sender.model_dump(),
            "receiver": payload.receiver.model_dump(),
            "pickup_location": payload.pickup_location,
            "delivery_location": payload.delivery_location,
            "package_type": payload.package_type,
            "package_weight_kg": payload.weight_kg,
            "package_dimensions": payload.dimensions.model_dump(),
            "vehicle_type": payload.vehicle_type,
            "package_value": payload.package_value,
            "payment_method": payload.payment_method,
            "special_instructions": payload.special_instructions,
            "pickup_date": payload.pickup_date,
            "delivery_time": payload.delivery_time,
            "photos": list(payload.photos),
            "price": breakdown.total,
            "price_breakdown": breakdown.as_dict(),
            "distance_km": route.distance_km,
            "eta_minutes": route.eta_minutes,
            "created_at": now,
            "updated_at": now,
        }
        if payload.store is not None and delivery_type is DeliveryType.store:
            record["pickup_point"] = payload.store.pickup_point
            record["dropoff_point"] = payload.store.dropoff_point
        if group is not None:
            record.update(
                group_id=group.id,
                pickup_zone=group.pickup_zone,
                destination_zone=group.destination_zone,
                delivery_window=group.delivery_window,
            )
        return record
