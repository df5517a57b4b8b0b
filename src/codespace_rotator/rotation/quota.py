"""Quota oracle: billing usage to admission decision and run budget.

Usage is normalized to *base minutes*, minutes of a 2-core machine, with
integer arithmetic. Remaining runtime is expressed in hours of the heavier
secondary machine, which burns base minutes ``heavy_cost_multiplier`` times
faster.

Example:
    >>> oracle = QuotaOracle(billing, QuotaSettings())
    >>> snapshot = oracle.check(token, "octocat")
    >>> if snapshot.is_admitted:
    ...     budget = compute_run_budget(snapshot, max_run_hours=20, safety_buffer_minutes=30)
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from structlog import get_logger
from typing_extensions import TypedDict

from codespace_rotator.config.rotation import QuotaSettings
from codespace_rotator.exceptions import TransportError
from codespace_rotator.github.billing import BillingClient
from codespace_rotator.github.models import UsageItem
from codespace_rotator.rotation.constants import (
    BASE_MACHINE_CORES,
    CODESPACES_PRODUCT,
    MINUTES_PER_HOUR,
    QUOTA_FALLBACK_ADMITS,
    SECONDS_PER_HOUR,
)


logger = get_logger(__name__)

# e.g. "Codespaces compute 4-core"
COMPUTE_SKU_PATTERN = re.compile(r"compute\s+(\d+)-core", re.IGNORECASE)


class QuotaSnapshotDict(TypedDict):
    """Typed dictionary for QuotaSnapshot.to_dict() return value."""

    minutes_used: int
    minutes_included: int
    minutes_remaining: int
    hours_remaining: float
    is_admitted: bool
    is_fallback: bool
    error: str | None


@dataclass(frozen=True)
class QuotaSnapshot:
    """Usage of one account at the moment of a rotation visit."""

    minutes_used: int
    minutes_included: int
    minutes_remaining: int
    hours_remaining: float
    is_admitted: bool
    is_fallback: bool = False
    error: str | None = None

    def to_dict(self) -> QuotaSnapshotDict:
        """Convert to dictionary for logging and display."""
        return QuotaSnapshotDict(
            minutes_used=self.minutes_used,
            minutes_included=self.minutes_included,
            minutes_remaining=self.minutes_remaining,
            hours_remaining=self.hours_remaining,
            is_admitted=self.is_admitted,
            is_fallback=self.is_fallback,
            error=self.error,
        )


@dataclass(frozen=True)
class RunBudget:
    """How long one admitted account may keep its sessions running."""

    seconds: float

    @property
    def hours(self) -> float:
        return self.seconds / SECONDS_PER_HOUR


def saturating_sub(a: int, b: int) -> int:
    """``a - b`` floored at zero."""
    return a - b if a > b else 0


def item_base_minutes(item: UsageItem) -> int:
    """Base minutes consumed by one usage item; zero for non-compute items."""
    if item.product.lower() != CODESPACES_PRODUCT:
        return 0
    match = COMPUTE_SKU_PATTERN.search(item.sku)
    if match is None:
        return 0
    cores = int(match.group(1))
    return round(item.quantity * MINUTES_PER_HOUR * cores / BASE_MACHINE_CORES)


def usage_base_minutes(items: Iterable[UsageItem]) -> int:
    return sum(item_base_minutes(item) for item in items)


def included_base_minutes(included_core_hours: int) -> int:
    return included_core_hours * MINUTES_PER_HOUR // BASE_MACHINE_CORES


def remaining_hours(minutes_remaining: int, heavy_cost_multiplier: int) -> float:
    return minutes_remaining / MINUTES_PER_HOUR / heavy_cost_multiplier


def compute_run_budget(
    snapshot: QuotaSnapshot,
    max_run_hours: float,
    safety_buffer_minutes: float,
) -> RunBudget:
    """Run budget for an admitted snapshot.

    ``min(max_run_hours, hours_remaining - safety_buffer)``, fixed for the
    whole run.

    Raises:
        ValueError: The snapshot is not admitted, or leaves no positive budget
    """
    if not snapshot.is_admitted:
        raise ValueError("Cannot compute a run budget for an account that is not admitted")

    budget_hours = min(
        max_run_hours,
        snapshot.hours_remaining - safety_buffer_minutes / MINUTES_PER_HOUR,
    )
    if budget_hours <= 0:
        raise ValueError(
            f"Run budget is not positive ({budget_hours:.2f}h) for "
            f"{snapshot.hours_remaining:.2f}h remaining"
        )
    return RunBudget(seconds=budget_hours * SECONDS_PER_HOUR)


class QuotaOracle:
    """Turns billing usage into a ``QuotaSnapshot``.

    Never raises for billing failures: a fallback snapshot is returned instead,
    and the caller treats it as authoritative for the current cycle.
    """

    def __init__(self, billing: BillingClient, settings: QuotaSettings) -> None:
        self.billing = billing
        self.settings = settings

    @property
    def fallback_admits(self) -> bool:
        if self.settings.fail_open is None:
            return QUOTA_FALLBACK_ADMITS
        return self.settings.fail_open

    @property
    def minutes_included(self) -> int:
        return included_base_minutes(self.settings.included_core_hours)

    def snapshot_from_usage(self, items: Iterable[UsageItem]) -> QuotaSnapshot:
        minutes_used = usage_base_minutes(items)
        minutes_remaining = saturating_sub(self.minutes_included, minutes_used)
        hours = remaining_hours(minutes_remaining, self.settings.heavy_cost_multiplier)
        return QuotaSnapshot(
            minutes_used=minutes_used,
            minutes_included=self.minutes_included,
            minutes_remaining=minutes_remaining,
            hours_remaining=hours,
            is_admitted=hours >= self.settings.min_hours_required,
        )

    def fallback_snapshot(self, error: str) -> QuotaSnapshot:
        """Snapshot used when usage cannot be fetched, per the fallback policy."""
        if self.fallback_admits:
            hours = self.settings.fallback_hours
            minutes_remaining = round(
                hours * MINUTES_PER_HOUR * self.settings.heavy_cost_multiplier
            )
            return QuotaSnapshot(
                minutes_used=0,
                minutes_included=self.minutes_included,
                minutes_remaining=minutes_remaining,
                hours_remaining=hours,
                is_admitted=True,
                is_fallback=True,
                error=error,
            )

        return QuotaSnapshot(
            minutes_used=self.minutes_included,
            minutes_included=self.minutes_included,
            minutes_remaining=0,
            hours_remaining=0.0,
            is_admitted=False,
            is_fallback=True,
            error=error,
        )

    def check(self, token: str, identity: str) -> QuotaSnapshot:
        """Fetch usage for ``identity`` and derive the admission decision."""
        try:
            report = self.billing.get_usage(token, identity)
        except TransportError as e:
            snapshot = self.fallback_snapshot(e.message)
            logger.warning(
                "quota_check_failed",
                username=identity,
                error=e.message,
                error_type=e.error_type,
                fail_open=self.fallback_admits,
                admitted=snapshot.is_admitted,
            )
            return snapshot

        snapshot = self.snapshot_from_usage(report.usage_items)
        logger.info(
            "quota_checked",
            username=identity,
            minutes_used=snapshot.minutes_used,
            minutes_included=snapshot.minutes_included,
            hours_remaining=round(snapshot.hours_remaining, 2),
            admitted=snapshot.is_admitted,
        )
        return snapshot
