"""Tests for the action-required worklist policy."""

from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from card_watch.analysis import analyze_customer, analyze_customers
from card_watch.analysis.action_required import (
    URGENCY_EXPIRED,
    URGENCY_EXPIRING_SOON,
    URGENCY_NO_CARDS,
    URGENCY_OTHER,
    ActionRequiredPolicy,
    sort_by_urgency,
    urgency_rank,
)
from card_watch.models import Customer


@pytest.fixture
def policy() -> ActionRequiredPolicy:
    return ActionRequiredPolicy()


class TestBusinessNameGate:
    """Walk-in customers never reach the worklist."""

    @pytest.mark.parametrize("business_name", [None, "", "   "])
    def test_walk_in_excluded(
        self,
        now: datetime,
        policy: ActionRequiredPolicy,
        make_customer: Callable[..., Customer],
        business_name: str | None,
    ) -> None:
        """Test missing or whitespace business names exclude the customer."""
        customer = make_customer(codes=["1126", "1026"], business_name=business_name, age_days=1)
        assert policy.requires_action(analyze_customer(customer, now), now) is False


class TestCardConditions:
    """Tests for expiring and recently expired cards."""

    def test_expiring_soon(
        self, now: datetime, policy: ActionRequiredPolicy, make_customer: Callable[..., Customer]
    ) -> None:
        """Test a card expiring within 30 days qualifies."""
        assert policy.requires_action(analyze_customer(make_customer(codes=["1126"]), now), now) is True

    def test_recently_expired(
        self, now: datetime, policy: ActionRequiredPolicy, make_customer: Callable[..., Customer]
    ) -> None:
        """Test a card expired 15 days ago qualifies."""
        assert policy.requires_action(analyze_customer(make_customer(codes=["1026"]), now), now) is True

    def test_long_expired_only(
        self, now: datetime, policy: ActionRequiredPolicy, make_customer: Callable[..., Customer]
    ) -> None:
        """Test an old customer whose only card expired long ago does not qualify."""
        analyzed = analyze_customer(make_customer(codes=["0425"]), now)

        assert analyzed.has_expired is True
        assert policy.requires_action(analyzed, now) is False

    def test_expiring_later_only(
        self, now: datetime, policy: ActionRequiredPolicy, make_customer: Callable[..., Customer]
    ) -> None:
        """Test cards expiring in 31-90 days do not qualify on their own."""
        assert policy.requires_action(analyze_customer(make_customer(codes=["1226"]), now), now) is False

    @pytest.mark.parametrize(
        "day,expected",
        [(27, True), (28, False)],
    )
    def test_recently_expired_boundary(
        self,
        policy: ActionRequiredPolicy,
        make_customer: Callable[..., Customer],
        day: int,
        expected: bool,
    ) -> None:
        """Test 180 days overdue still qualifies and 181 does not."""
        now = datetime(2026, 10, day, tzinfo=timezone.utc)
        customer = make_customer(codes=["0426"], age_days=None)

        assert policy.requires_action(analyze_customer(customer, now), now) is expected


class TestNewCustomer:
    """Tests for the new-customer rules."""

    @pytest.mark.parametrize(
        "since,expected",
        [
            (datetime(2025, 7, 21, tzinfo=timezone.utc), True),
            (datetime(2025, 7, 20, 23, 59, tzinfo=timezone.utc), False),
            (datetime(2026, 1, 1, tzinfo=timezone.utc), True),
        ],
    )
    def test_no_cards_uses_cutoff(
        self,
        now: datetime,
        policy: ActionRequiredPolicy,
        make_customer: Callable[..., Customer],
        since: datetime,
        expected: bool,
    ) -> None:
        """Test card-less customers are new from the fixed cutoff onwards."""
        customer = make_customer(codes=[], age_days=None)
        customer.customer_since = since

        assert policy.requires_action(analyze_customer(customer, now), now) is expected

    def test_custom_cutoff(self, now: datetime, make_customer: Callable[..., Customer]) -> None:
        """Test the cutoff is configurable."""
        policy = ActionRequiredPolicy(new_customer_cutoff=datetime(2026, 1, 1, tzinfo=timezone.utc))
        customer = make_customer(codes=[], age_days=None)
        customer.customer_since = datetime(2025, 12, 31, tzinfo=timezone.utc)

        assert policy.requires_action(analyze_customer(customer, now), now) is False

    @pytest.mark.parametrize("age_days,expected", [(89, True), (90, True), (91, False)])
    def test_with_cards_uses_window(
        self,
        now: datetime,
        policy: ActionRequiredPolicy,
        make_customer: Callable[..., Customer],
        age_days: int,
        expected: bool,
    ) -> None:
        """Test customers with healthy cards are new for 90 days."""
        customer = make_customer(codes=["1230"], age_days=age_days)
        assert policy.requires_action(analyze_customer(customer, now), now) is expected

    def test_missing_since_is_not_new(
        self, now: datetime, policy: ActionRequiredPolicy, make_customer: Callable[..., Customer]
    ) -> None:
        """Test an unknown creation time never counts as new."""
        for codes in ([], ["1230"]):
            analyzed = analyze_customer(make_customer(codes=codes, age_days=None), now)
            assert policy.is_new_customer(analyzed, now) is False
            assert policy.requires_action(analyzed, now) is False

    def test_naive_now_taken_as_utc(
        self, now: datetime, policy: ActionRequiredPolicy, make_customer: Callable[..., Customer]
    ) -> None:
        """Test a timezone-less reference instant is compared as UTC."""
        naive = now.replace(tzinfo=None)
        recent = make_customer(codes=["1230"], age_days=10)
        older = make_customer(codes=["1230"], age_days=100)

        assert policy.requires_action(analyze_customer(recent, naive), naive) is True
        assert policy.requires_action(analyze_customer(older, naive), naive) is False

    def test_naive_cutoff_taken_as_utc(self, now: datetime, make_customer: Callable[..., Customer]) -> None:
        """Test a timezone-less cutoff is compared as UTC."""
        policy = ActionRequiredPolicy(new_customer_cutoff=datetime(2026, 1, 1))

        assert policy.new_customer_cutoff.tzinfo is timezone.utc
        assert policy.requires_action(analyze_customer(make_customer(age_days=30), now), now) is True


class TestSelect:
    """Tests for ActionRequiredPolicy.select."""

    def test_keeps_input_order(
        self, now: datetime, policy: ActionRequiredPolicy, make_customer: Callable[..., Customer]
    ) -> None:
        """Test selection filters without reordering."""
        analyzed = analyze_customers(
            [
                make_customer(customer_id="A", codes=["1126"]),
                make_customer(customer_id="B", codes=["1230"]),
                make_customer(customer_id="C", codes=["1026"]),
                make_customer(customer_id="D", codes=["1126"], business_name=None),
            ],
            now,
        )

        assert [c.customer.id for c in policy.select(analyzed, now)] == ["A", "C"]


class TestUrgency:
    """Tests for urgency ranking and sorting."""

    def test_ranks(self, now: datetime, make_customer: Callable[..., Customer]) -> None:
        """Test the four urgency levels."""
        assert urgency_rank(analyze_customer(make_customer(codes=["1126", "1026"]), now)) == URGENCY_EXPIRED
        assert urgency_rank(analyze_customer(make_customer(codes=["1126"]), now)) == URGENCY_EXPIRING_SOON
        assert urgency_rank(analyze_customer(make_customer(codes=[]), now)) == URGENCY_NO_CARDS
        assert urgency_rank(analyze_customer(make_customer(codes=["1230"]), now)) == URGENCY_OTHER

    def test_sort_is_stable(self, now: datetime, make_customer: Callable[..., Customer]) -> None:
        """Test most urgent first with ties in their incoming order."""
        analyzed = analyze_customers(
            [
                make_customer(customer_id="ok-1", codes=["1230"]),
                make_customer(customer_id="none-1", codes=[]),
                make_customer(customer_id="soon-1", codes=["1126"]),
                make_customer(customer_id="expired-1", codes=["1026"]),
                make_customer(customer_id="soon-2", codes=["1126"]),
                make_customer(customer_id="expired-2", codes=["0926"]),
                make_customer(customer_id="none-2", codes=[]),
            ],
            now,
        )

        assert [c.customer.id for c in sort_by_urgency(analyzed)] == [
            "expired-1",
            "expired-2",
            "soon-1",
            "soon-2",
            "none-1",
            "none-2",
            "ok-1",
        ]
