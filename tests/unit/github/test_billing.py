"""Tests for the billing usage collaborator."""

import httpx
import pytest

from codespace_rotator.exceptions import TransportError
from codespace_rotator.github.billing import BillingClient
from codespace_rotator.github.client import GitHubClient


def billing_for(settings, handler) -> BillingClient:
    return BillingClient(GitHubClient(settings, transport=httpx.MockTransport(handler)))


@pytest.mark.unit
def test_fetches_usage_for_user(github_settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/users/octocat/settings/billing/usage"
        return httpx.Response(
            200,
            json={
                "usageItems": [
                    {"product": "Codespaces", "sku": "Codespaces compute 4-core", "quantity": 2}
                ]
            },
        )

    report = billing_for(github_settings, handler).get_usage("ghp_abc", "octocat")

    assert len(report.usage_items) == 1
    assert report.usage_items[0].sku == "Codespaces compute 4-core"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("status", "body"),
    [
        (500, {"message": "Server Error"}),
        (403, {"message": "Resource not accessible"}),
        (200, {"usageItems": [{"product": "Codespaces"}]}),
    ],
)
def test_any_failure_is_a_transport_error(github_settings, status: int, body: dict) -> None:
    billing = billing_for(
        github_settings, lambda request: httpx.Response(status, json=body)
    )

    with pytest.raises(TransportError, match="octocat"):
        billing.get_usage("ghp_abc", "octocat")
