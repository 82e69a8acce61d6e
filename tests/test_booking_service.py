import pytest

from fikaconnect.config import settings
from fikaconnect.models.domain import GroupDelivery, RouteEstimate
from fikaconnect.persistence.store import InMemoryBookingStore, JoinAttempt, JoinOutcome
from fikaconnect.schemas.bookings import BookingRequest, GroupPreviewRequest
from fikaconnect.schemas.quotes import QuoteRequest
from fikaconnect.services.booking.service import BookingService


class StubEstimator:
    def __init__(self, estimate: RouteEstimate):
        self.estimate = estimate
        self.calls = 0

    def estimate_route(self, pickup, delivery):
        self.calls += 1
        return self.estimate


def _booking(**overrides) -> BookingRequest:
    values = dict(
        delivery_type="direct",
        package_type="medium",
        vehicle_type="van",
        weight_kg=8,
        distance_km=20,
        sender={"name": "Amina", "phone": "0772123456"},
        receiver={"name": "Okello", "phone": "0701234567", "email": "okello@example.com"},
        pickup_location="Nakasero",
        delivery_location="Ntinda",
    )
    values.update(overrides)
    return BookingRequest(**values)


def _group_booking(distance_km: float, **overrides) -> BookingRequest:
    return _booking(
        delivery_type="group",
        package_type="document",
        vehicle_type="boda",
        weight_kg=2,
        distance_km=distance_km,
        group={"pickup_zone": "kampala", "destination_zone": "wakiso", "delivery_window": "morning"},
        **overrides,
    )


@pytest.fixture
def store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def service(store) -> BookingService:
    return BookingService(
        store=store,
        route_estimator=StubEstimator(RouteEstimate(distance_km=12.0, eta_minutes=18, source="stub")),
        max_join_attempts=3,
    )


def test_direct_booking_is_pending_at_quoted_price(service, store):
    response = service.book(_booking(), "user-1")

    assert response.status == "pending"
    assert response.price == 30000
    assert response.formatted_price == "UGX 30,000"
    record = store.get_record("bookings", response.id)
    assert record["user_id"] == "user-1"
    assert record["price_breakdown"] == {
        "base_price": 22500,
        "weight_surcharge": 1500,
        "distance_cost": 6000,
        "total": 30000,
    }
    assert record["sender"]["phone"] == "+256772123456"


def test_quote_uses_route_estimator_when_distance_missing(service):
    payload = QuoteRequest(
        delivery_type="direct",
        pickup={"latitude": 0.3136, "longitude": 32.5811},
        delivery={"latitude": 0.3476, "longitude": 32.59},
    )

    response = service.quote(payload)

    assert response.distance_km == 12.0
    assert response.eta_minutes == 18
    assert response.route_source == "stub"
    assert response.breakdown.total == 10000 + 12 * 300


def test_quote_without_distance_or_coordinates_prices_zero_distance(service):
    response = service.quote(QuoteRequest(delivery_type="urgent"))

    assert response.breakdown.total == 15000
    assert response.route_source == "unknown"


def test_store_booking_uses_flat_rate_and_fixed_route(service, store):
    response = service.book(
        _booking(delivery_type="store", distance_km=None, store={"pickup_point": "owino", "dropoff_point": "nakawa"}),
        "user-1",
    )

    assert response.price == 7000
    assert response.distance_km == 8.0
    assert response.eta_minutes == 15
    assert store.get_record("bookings", response.id)["dropoff_point"] == "nakawa"


def test_store_booking_rejects_unknown_collection_point(service):
    with pytest.raises(ValueError, match="Unknown collection point"):
        service.book(_booking(delivery_type="store", store={"pickup_point": "owino", "dropoff_point": "mars"}), "u")


def test_group_booking_requires_group_details(service):
    with pytest.raises(ValueError):
        service.book(_booking(delivery_type="group"), "user-1")


def test_booking_rejects_weightless_package(service):
    with pytest.raises(ValueError, match="weight"):
        service.book(_booking(weight_kg=0), "user-1")


def test_booking_requires_user(service):
    with pytest.raises(ValueError):
        service.book(_booking(), "")


def test_first_group_booking_creates_group_then_second_joins(service, store):
    first = service.book(_group_booking(distance_km=10), "user-1")

    assert first.status == "waiting"
    assert first.price == 8000
    assert first.group.member_count == 1

    second = service.book(_group_booking(distance_km=20), "user-2")

    assert second.status == "confirmed"
    assert second.group.id == first.group.id
    assert second.price == (8000 + 11000) // 2
    assert second.breakdown.base_price == second.price
    assert second.breakdown.distance_cost == 0

    stored = store.get_group(first.group.id)
    assert stored.members == ["user-1", "user-2"]
    assert stored.total_price == 19000


def test_group_fills_up_and_next_booking_starts_new_group(service, store):
    responses = [service.book(_group_booking(distance_km=10), f"user-{i}") for i in range(4)]
    fifth = service.book(_group_booking(distance_km=10), "user-5")

    group_ids = {response.group.id for response in responses}
    assert len(group_ids) == 1
    (full_id,) = group_ids
    assert store.get_group(full_id).status.value == "confirmed"
    fourth = responses[-1]
    assert fourth.group.status == "confirmed"
    assert fourth.group.member_count == 4
    assert fourth.group.total_price == 4 * 8000
    assert [response.group.status for response in responses[:3]] == ["waiting"] * 3
    assert fifth.status == "waiting"
    assert fifth.group.id != full_id


class InterleavingStore(InMemoryBookingStore):
    """Lets another booker join the group between the open-group query and our join."""

    def __init__(self, rival_price: int):
        super().__init__()
        self.rival_price = rival_price

    def atomic_join_group(self, group_id, participant_id, price, *, capacity):
        super().atomic_join_group(group_id, "rival", self.rival_price, capacity=capacity)
        return super().atomic_join_group(group_id, participant_id, price, capacity=capacity)


def test_joined_price_and_group_reflect_concurrent_joiner():
    store = InterleavingStore(rival_price=8000)
    store.save_group(GroupDelivery(id="GRP-1", pickup_zone="kampala", destination_zone="wakiso",
                                   delivery_window="morning", members=["a", "b"], total_price=15000))
    service = BookingService(store=store, route_estimator=StubEstimator(RouteEstimate(1, 2)), max_join_attempts=3)

    response = service.book(_group_booking(distance_km=20), "user-x")

    stored = store.get_group("GRP-1")
    assert stored.members == ["a", "b", "rival", "user-x"]
    assert stored.total_price == 15000 + 8000 + 11000
    assert response.status == "confirmed"
    assert response.price == 34000 // 4
    assert response.group.member_count == 4
    assert response.group.total_price == 34000
    assert response.group.status == "confirmed"
    assert store.get_record("bookings", response.id)["price"] == 8500


class RacingStore(InMemoryBookingStore):
    """Every join loses the race to another booker."""

    def __init__(self):
        super().__init__()
        self.join_attempts = 0

    def atomic_join_group(self, group_id, participant_id, price, *, capacity):
        self.join_attempts += 1
        return JoinAttempt(JoinOutcome.capacity_exceeded, self.get_group(group_id))


def test_lost_join_races_are_retried_then_new_group_created():
    store = RacingStore()
    store.save_group(GroupDelivery(id="GRP-OPEN", pickup_zone="kampala", destination_zone="wakiso",
                                   delivery_window="morning", members=["other"], total_price=9000))
    service = BookingService(store=store, route_estimator=StubEstimator(RouteEstimate(1, 2)), max_join_attempts=3)

    response = service.book(_group_booking(distance_km=10), "user-1")

    assert store.join_attempts == 3
    assert response.status == "waiting"
    assert response.group.id != "GRP-OPEN"
    assert response.price == 8000


def test_explicit_join_attempts_override_settings(monkeypatch):
    monkeypatch.setattr(settings, "max_join_attempts", 5)
    estimator = StubEstimator(RouteEstimate(1, 2))

    assert BookingService(store=InMemoryBookingStore(), route_estimator=estimator).max_join_attempts == 5
    assert BookingService(store=InMemoryBookingStore(), route_estimator=estimator,
                          max_join_attempts=1).max_join_attempts == 1


def test_zero_join_attempts_is_rejected():
    with pytest.raises(ValueError):
        BookingService(store=InMemoryBookingStore(), route_estimator=StubEstimator(RouteEstimate(1, 2)),
                       max_join_attempts=0)


def test_preview_group_reports_shared_price_and_savings(service, store):
    store.save_group(GroupDelivery(id="GRP-123", pickup_zone="kampala", destination_zone="wakiso",
                                   delivery_window="morning", members=["user1", "user2"], total_price=15000))
    payload = GroupPreviewRequest(
        distance_km=20,
        weight_kg=2,
        group={"pickup_zone": "kampala", "destination_zone": "wakiso", "delivery_window": "morning"},
    )

    preview = service.preview_group(payload)

    assert preview.matched is True
    assert preview.group.id == "GRP-123"
    assert preview.quote.total == 11000
    assert preview.shared_price == (15000 + 11000) // 3
    assert preview.savings == 11000 - 5000
    assert store.get_group("GRP-123").members == ["user1", "user2"]


def test_preview_group_without_match(service):
    payload = GroupPreviewRequest(
        distance_km=5,
        group={"pickup_zone": "kampala", "destination_zone": "mukono", "delivery_window": "evening"},
    )

    preview = service.preview_group(payload)

    assert preview.matched is False
    assert preview.group is None
    assert preview.shared_price is None
