"""
Tests for overdue / at-risk detection.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import days_ago, make_snapshot
from services.risk_service import days_since_created, is_at_risk, is_overdue, is_stale, risk_reasons

NOW = datetime(2024, 6, 15, 12, 0, 0)
TODAY = NOW.date()


class TestIsOverdue:

    @pytest.mark.unit
    def test_yesterday_is_overdue(self):
        order = make_snapshot(est_delivery=date.today() - timedelta(days=1))
        assert is_overdue(order) is True

    @pytest.mark.unit
    def test_today_is_not_overdue(self):
        order = make_snapshot(est_delivery=date.today())
        assert is_overdue(order) is False

    @pytest.mark.unit
    def test_future_is_not_overdue(self):
        order = make_snapshot(est_delivery=TODAY + timedelta(days=3))
        assert is_overdue(order, today=TODAY) is False

    @pytest.mark.unit
    def test_missing_delivery_date_is_never_overdue(self):
        assert is_overdue(make_snapshot(est_delivery=None), today=TODAY) is False

    @pytest.mark.unit
    def test_time_of_day_is_ignored(self):
        """An ISO datetime is truncated to its calendar date on input."""
        order = make_snapshot(est_delivery=f"{TODAY.isoformat()}T23:59:59Z")
        assert order.est_delivery == TODAY
        assert is_overdue(order, today=TODAY) is False

    @pytest.mark.unit
    def test_injected_today(self):
        order = make_snapshot(est_delivery=date(2024, 6, 14))
        assert is_overdue(order, today=date(2024, 6, 14)) is False
        assert is_overdue(order, today=date(2024, 6, 15)) is True


class TestStaleness:

    @pytest.mark.unit
    def test_days_since_created_floors(self):
        order = make_snapshot(created_at=NOW - timedelta(days=14, hours=23))
        assert days_since_created(order, NOW) == 14

    @pytest.mark.unit
    def test_aware_created_at_is_normalised(self):
        created = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert days_since_created(make_snapshot(created_at=created), NOW) == 14

    @pytest.mark.unit
    def test_exactly_fourteen_days_is_not_stale(self):
        order = make_snapshot(status="new", created_at=NOW - timedelta(days=14))
        assert is_stale(order, NOW) is False

    @pytest.mark.unit
    @pytest.mark.parametrize("status", ["new", "waiting_sizes", "design_created"])
    def test_fifteen_day_old_early_order_is_stale(self, status):
        order = make_snapshot(status=status, created_at=NOW - timedelta(days=15))
        assert is_stale(order, NOW) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("status", ["sizes_validated", "invoiced", "production", "shipped", "completed", "cancelled"])
    def test_later_statuses_never_stale(self, status):
        order = make_snapshot(status=status, created_at=NOW - timedelta(days=90))
        assert is_stale(order, NOW) is False


class TestIsAtRisk:

    @pytest.mark.unit
    def test_fresh_normal_order_not_at_risk(self):
        assert is_at_risk(make_snapshot(status="new", created_at=NOW), NOW) is False

    @pytest.mark.unit
    def test_high_priority_is_at_risk(self):
        """High priority alone is enough, even for a completed order."""
        order = make_snapshot(status="completed", priority="high", created_at=NOW)
        assert is_at_risk(order, NOW) is True

    @pytest.mark.unit
    def test_high_priority_with_future_delivery_is_at_risk(self):
        order = make_snapshot(
            status="production", priority="high", est_delivery=TODAY + timedelta(days=5), created_at=NOW
        )
        assert is_overdue(order, TODAY) is False
        assert is_at_risk(order, NOW) is True
        assert risk_reasons(order, NOW) == ["high_priority"]

    @pytest.mark.unit
    def test_overdue_is_at_risk(self):
        order = make_snapshot(status="production", est_delivery=TODAY - timedelta(days=1), created_at=NOW)
        assert is_at_risk(order, NOW) is True

    @pytest.mark.unit
    def test_fifteen_day_old_draft_is_at_risk(self):
        assert is_at_risk(make_snapshot(status="new", created_at=days_ago(15))) is True

    @pytest.mark.unit
    def test_old_cancelled_order_skips_staleness(self):
        order = make_snapshot(status="cancelled", created_at=days_ago(60))
        assert is_at_risk(order) is False

    @pytest.mark.unit
    def test_old_cancelled_but_overdue_is_at_risk(self):
        order = make_snapshot(
            status="cancelled", created_at=days_ago(60), est_delivery=date.today() - timedelta(days=5)
        )
        assert is_at_risk(order) is True

    @pytest.mark.unit
    def test_low_priority_is_not_a_risk_signal(self):
        assert is_at_risk(make_snapshot(status="invoiced", priority="low", created_at=NOW), NOW) is False


class TestRiskReasons:

    @pytest.mark.unit
    def test_no_reasons(self):
        assert risk_reasons(make_snapshot(created_at=NOW), NOW) == []

    @pytest.mark.unit
    def test_all_reasons_in_order(self):
        order = make_snapshot(
            status="waiting_sizes",
            priority="high",
            est_delivery=TODAY - timedelta(days=2),
            created_at=NOW - timedelta(days=30),
        )
        assert risk_reasons(order, NOW) == ["high_priority", "overdue", "stale"]

    @pytest.mark.unit
    def test_reasons_agree_with_is_at_risk(self):
        orders = [
            make_snapshot(created_at=NOW),
            make_snapshot(priority="high", created_at=NOW),
            make_snapshot(status="production", est_delivery=TODAY - timedelta(days=1), created_at=NOW),
            make_snapshot(status="design_created", created_at=NOW - timedelta(days=20)),
        ]
        for order in orders:
            assert bool(risk_reasons(order, NOW)) == is_at_risk(order, NOW)
