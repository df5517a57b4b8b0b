"""GitHub collaborators: REST client, billing usage and Codespaces provisioning."""

from codespace_rotator.github.billing import BillingClient
from codespace_rotator.github.client import GitHubClient
from codespace_rotator.github.codespaces import CodespacesProvisioner, SessionPair
from codespace_rotator.github.models import (
    BillingUsageReport,
    Codespace,
    CodespaceList,
    CodespaceState,
    UsageItem,
)
from codespace_rotator.github.remote import RemoteShell


__all__ = [
    "BillingClient",
    "BillingUsageReport",
    "Codespace",
    "CodespaceList",
    "CodespaceState",
    "CodespacesProvisioner",
    "GitHubClient",
    "RemoteShell",
    "SessionPair",
    "UsageItem",
]
