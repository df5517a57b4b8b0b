"""Tests for GitHub response schemas."""

import pytest

from codespace_rotator.github.models import (
    BillingUsageReport,
    Codespace,
    CodespaceList,
    CodespaceState,
)


@pytest.mark.unit
def test_unknown_state_is_coerced() -> None:
    codespace = Codespace.model_validate({"name": "cs-1", "state": "Hibernating"})
    assert codespace.state is CodespaceState.UNKNOWN
    assert not codespace.is_available


@pytest.mark.unit
def test_stopped_states() -> None:
    assert CodespaceState.SHUTDOWN.is_stopped
    assert CodespaceState.SHUTTING_DOWN.is_stopped
    assert not CodespaceState.STARTING.is_stopped


@pytest.mark.unit
def test_find_by_display_name_ignores_extra_fields() -> None:
    listing = CodespaceList.model_validate(
        {
            "total_count": 2,
            "codespaces": [
                {"name": "cs-a", "display_name": "primary-node", "state": "Available", "owner": {}},
                {"name": "cs-b", "display_name": "other", "state": "Shutdown"},
            ],
        }
    )

    found = listing.find_by_display_name("primary-node")
    assert found is not None
    assert found.name == "cs-a"
    assert found.is_available
    assert listing.find_by_display_name("secondary-node") is None


@pytest.mark.unit
def test_billing_report_uses_camel_case_aliases() -> None:
    report = BillingUsageReport.model_validate(
        {
            "usageItems": [
                {
                    "product": "Codespaces",
                    "sku": "Codespaces compute 2-core",
                    "quantity": 1.5,
                    "unitType": "hours",
                }
            ]
        }
    )

    assert report.usage_items[0].quantity == 1.5
    assert report.usage_items[0].unit_type == "hours"
