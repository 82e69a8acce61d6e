import pytest

from fikaconnect.errors import CapacityExceededError
from fikaconnect.models.domain import GroupDelivery, GroupStatus, PriceBreakdown
from fikaconnect.services.grouping.matcher import GroupMatcher


def _group(gid: str, members: list[str], total: int = 15000, status: GroupStatus = GroupStatus.waiting,
           pickup: str = "kampala", destination: str = "wakiso", window: str = "morning") -> GroupDelivery:
    return GroupDelivery(
        id=gid,
        pickup_zone=pickup,
        destination_zone=destination,
        delivery_window=window,
        status=status,
        members=list(members),
        total_price=total,
    )


def _quote(total: int) -> PriceBreakdown:
    return PriceBreakdown(base_price=total, weight_surcharge=0, distance_cost=0, total=total)


@pytest.fixture
def matcher() -> GroupMatcher:
    return GroupMatcher(capacity=4)


def test_find_match_returns_first_open_group_in_order(matcher):
    pools = [
        _group("G0", ["a"], destination="entebbe"),
        _group("G1", ["a", "b"]),
        _group("G2", ["c"]),
    ]

    assert matcher.find_match(pools, "kampala", "wakiso", "morning").id == "G1"


def test_find_match_requires_all_three_keys(matcher):
    pools = [_group("G1", ["a"])]

    assert matcher.find_match(pools, "mukono", "wakiso", "morning") is None
    assert matcher.find_match(pools, "kampala", "entebbe", "morning") is None
    assert matcher.find_match(pools, "kampala", "wakiso", "evening") is None
    assert matcher.find_match(pools, "", "wakiso", "morning") is None


def test_find_match_skips_full_and_confirmed_groups(matcher):
    full = _group("FULL", ["a", "b", "c", "d"])
    confirmed = _group("DONE", ["e"], status=GroupStatus.confirmed)

    assert matcher.find_match([full], "kampala", "wakiso", "morning") is None
    assert matcher.find_match([full, confirmed], "kampala", "wakiso", "morning") is None
    assert matcher.find_match([full, confirmed, _group("OPEN", ["f"])], "kampala", "wakiso", "morning").id == "OPEN"


def test_join_splits_running_total(matcher):
    group = _group("G1", ["a", "b"], total=15000)

    result = matcher.join(group, _quote(9000), "c")

    assert result.shared_price == 8000
    assert result.group.members == ["a", "b", "c"]
    assert result.group.total_price == 24000
    assert result.is_full is False
    # the snapshot passed in is left untouched
    assert group.members == ["a", "b"]
    assert group.total_price == 15000


def test_join_floors_shared_price(matcher):
    result = matcher.join(_group("G1", ["a"], total=8000), _quote(11001), "b")

    assert result.shared_price == 9500


def test_join_reports_capacity_reached(matcher):
    result = matcher.join(_group("G1", ["a", "b", "c"], total=21000), _quote(7000), "d")

    assert result.is_full is True
    assert len(result.group.members) == 4


def test_member_share_splits_stored_total(matcher):
    assert matcher.member_share(_group("G1", ["a", "b", "rival", "x"], total=34000)) == 8500
    assert matcher.member_share(_group("G1", ["a", "b", "c"], total=20000)) == 6666


def test_join_on_full_group_raises(matcher):
    with pytest.raises(CapacityExceededError):
        matcher.join(_group("G1", ["a", "b", "c", "d"]), _quote(7000), "e")


def test_create_group_starts_with_requester(matcher):
    group = matcher.create_group("u1", "kampala", "wakiso", "morning", _quote(12000), distance_km=20, eta_minutes=30)

    assert group.id.startswith("GRP-")
    assert group.status is GroupStatus.waiting
    assert group.members == ["u1"]
    assert group.total_price == 12000
    assert group.created_at is not None


def test_estimate_savings(matcher):
    group = _group("G1", ["a", "b"], total=15000)

    assert matcher.estimate_savings(group, _quote(12000)) == 7000
    assert matcher.estimate_savings(group, _quote(3000)) == 0


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        GroupMatcher(capacity=0)
