"""Billing usage collaborator for the quota oracle."""

from structlog import get_logger

from codespace_rotator.exceptions import GitHubError, TransportError
from codespace_rotator.github.client import GitHubClient
from codespace_rotator.github.models import BillingUsageReport


logger = get_logger(__name__)


class BillingClient:
    """Fetches the enhanced billing usage report for a user account."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def get_usage(self, token: str, username: str) -> BillingUsageReport:
        """Fetch and decode the usage report.

        Raises:
            TransportError: On any request, status or decode failure, including
                rejected credentials
        """
        path = f"/users/{username}/settings/billing/usage"
        try:
            report = self._client.get_model(token, path, BillingUsageReport)
        except GitHubError as e:
            raise TransportError(
                f"Billing usage unavailable for @{username}: {e.message}",
                details={"username": username, "status": e.status_code},
            ) from e

        logger.debug(
            "billing_usage_fetched",
            username=username,
            items=len(report.usage_items),
        )
        return report
