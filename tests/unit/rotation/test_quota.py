"""Tests for quota admission and run budget computation."""

from unittest.mock import MagicMock

import pytest

from codespace_rotator.config.rotation import QuotaSettings
from codespace_rotator.exceptions import TransportError
from codespace_rotator.github.billing import BillingClient
from codespace_rotator.github.models import BillingUsageReport, UsageItem
from codespace_rotator.rotation.quota import (
    QuotaOracle,
    QuotaSnapshot,
    compute_run_budget,
    included_base_minutes,
    item_base_minutes,
    saturating_sub,
)


def compute_item(hours: float, cores: int = 2) -> UsageItem:
    return UsageItem(product="Codespaces", sku=f"Codespaces compute {cores}-core", quantity=hours)


def oracle_with(items: list[UsageItem], **settings) -> QuotaOracle:
    billing = MagicMock(spec=BillingClient)
    billing.get_usage.return_value = BillingUsageReport(usage_items=items)
    return QuotaOracle(billing, QuotaSettings(**settings))


def snapshot(hours_remaining: float, admitted: bool = True) -> QuotaSnapshot:
    minutes = round(hours_remaining * 120)
    return QuotaSnapshot(
        minutes_used=3600 - minutes,
        minutes_included=3600,
        minutes_remaining=minutes,
        hours_remaining=hours_remaining,
        is_admitted=admitted,
    )


@pytest.mark.unit
class TestUsageArithmetic:
    def test_saturating_sub(self) -> None:
        assert saturating_sub(10, 3) == 7
        assert saturating_sub(3, 10) == 0
        assert saturating_sub(5, 5) == 0

    def test_included_allowance_in_base_minutes(self) -> None:
        assert included_base_minutes(120) == 3600
        assert included_base_minutes(0) == 0

    def test_larger_machines_cost_more_base_minutes(self) -> None:
        assert item_base_minutes(compute_item(1, cores=2)) == 60
        assert item_base_minutes(compute_item(1, cores=4)) == 120
        assert item_base_minutes(compute_item(1.5, cores=8)) == 360

    def test_non_compute_items_are_ignored(self) -> None:
        storage = UsageItem(product="Codespaces", sku="Codespaces storage", quantity=50)
        actions = UsageItem(product="Actions", sku="Actions Linux 2-core", quantity=50)

        assert item_base_minutes(storage) == 0
        assert item_base_minutes(actions) == 0


@pytest.mark.unit
class TestAdmission:
    def test_fresh_account_has_thirty_heavy_hours(self) -> None:
        result = oracle_with([]).check("ghp_abc", "octocat")

        assert result.minutes_remaining == 3600
        assert result.hours_remaining == 30.0
        assert result.is_admitted
        assert not result.is_fallback

    def test_exactly_twenty_hours_is_admitted(self) -> None:
        # 1200 base minutes used leaves 2400, i.e. 20h of the 4-core machine
        result = oracle_with([compute_item(20)]).check("ghp_abc", "octocat")

        assert result.minutes_remaining == 2400
        assert result.hours_remaining == 20.0
        assert result.is_admitted

    def test_one_minute_short_is_refused(self) -> None:
        result = oracle_with([compute_item(20), compute_item(1 / 60)]).check("ghp_abc", "octocat")

        assert result.minutes_remaining == 2399
        assert result.hours_remaining < 20
        assert not result.is_admitted

    def test_overuse_saturates_at_zero(self) -> None:
        result = oracle_with([compute_item(500, cores=4)]).check("ghp_abc", "octocat")

        assert result.minutes_used == 60000
        assert result.minutes_remaining == 0
        assert result.hours_remaining == 0.0
        assert not result.is_admitted


@pytest.mark.unit
class TestFallback:
    def _failing_oracle(self, **settings) -> QuotaOracle:
        billing = MagicMock(spec=BillingClient)
        billing.get_usage.side_effect = TransportError("billing unavailable")
        return QuotaOracle(billing, QuotaSettings(**settings))

    def test_fails_closed_by_default(self) -> None:
        result = self._failing_oracle().check("ghp_abc", "octocat")

        assert result.is_fallback
        assert not result.is_admitted
        assert result.hours_remaining == 0.0
        assert result.error == "billing unavailable"

    def test_fail_open_admits_with_fallback_hours(self) -> None:
        result = self._failing_oracle(fail_open=True, fallback_hours=30).check(
            "ghp_abc", "octocat"
        )

        assert result.is_fallback
        assert result.is_admitted
        assert result.hours_remaining == 30
        assert result.minutes_remaining == 3600


@pytest.mark.unit
class TestRunBudget:
    def test_capped_by_max_run_hours(self) -> None:
        budget = compute_run_budget(snapshot(30), max_run_hours=20, safety_buffer_minutes=30)

        assert budget.hours == 20
        assert budget.seconds == 72000

    def test_safety_buffer_is_subtracted(self) -> None:
        budget = compute_run_budget(snapshot(20), max_run_hours=20, safety_buffer_minutes=30)

        assert budget.hours == pytest.approx(19.5)

    @pytest.mark.parametrize("hours_remaining", [20.0, 25.0, 30.0, 100.0])
    def test_budget_never_exceeds_quota_or_cap(self, hours_remaining: float) -> None:
        budget = compute_run_budget(
            snapshot(hours_remaining), max_run_hours=20, safety_buffer_minutes=30
        )

        assert 0 < budget.hours <= 20
        assert budget.hours <= hours_remaining - 0.5

    def test_refuses_unadmitted_snapshot(self) -> None:
        with pytest.raises(ValueError, match="not admitted"):
            compute_run_budget(snapshot(30, admitted=False), 20, 30)

    def test_refuses_non_positive_budget(self) -> None:
        with pytest.raises(ValueError, match="not positive"):
            compute_run_budget(snapshot(0.25), max_run_hours=20, safety_buffer_minutes=30)
