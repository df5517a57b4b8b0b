"""Response schemas for the GitHub REST endpoints the rotator consumes.

Decoded against REST API version ``2022-11-28`` (sent as
``X-GitHub-Api-Version``). Unknown fields are ignored so additive API changes
do not break decoding; missing required fields fail validation.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CodespaceState(StrEnum):
    """Observable codespace lifecycle states."""

    AVAILABLE = "Available"
    STARTING = "Starting"
    PROVISIONING = "Provisioning"
    QUEUED = "Queued"
    AWAITING = "Awaiting"
    REBUILDING = "Rebuilding"
    SHUTDOWN = "Shutdown"
    SHUTTING_DOWN = "ShuttingDown"
    FAILED = "Failed"
    UNAVAILABLE = "Unavailable"
    UNKNOWN = "Unknown"

    @property
    def is_stopped(self) -> bool:
        return self in (CodespaceState.SHUTDOWN, CodespaceState.SHUTTING_DOWN)


class GitHubModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GitHubUser(GitHubModel):
    """Subset of ``GET /user``."""

    login: str = Field(min_length=1)


class CodespaceMachine(GitHubModel):
    name: str
    display_name: str | None = None
    cpus: int | None = None


class Codespace(GitHubModel):
    """Subset of a codespace object."""

    name: str = Field(min_length=1)
    display_name: str | None = None
    state: CodespaceState = CodespaceState.UNKNOWN
    machine: CodespaceMachine | None = None

    @field_validator("state", mode="before")
    @classmethod
    def coerce_state(cls, v: Any) -> CodespaceState:
        try:
            return CodespaceState(v)
        except ValueError:
            return CodespaceState.UNKNOWN

    @property
    def is_available(self) -> bool:
        return self.state is CodespaceState.AVAILABLE


class CodespaceList(GitHubModel):
    """``GET /user/codespaces``."""

    total_count: int = 0
    codespaces: list[Codespace] = Field(default_factory=list)

    def find_by_display_name(self, display_name: str) -> Codespace | None:
        for codespace in self.codespaces:
            if codespace.display_name == display_name:
                return codespace
        return None


class UsageItem(GitHubModel):
    """One line of the enhanced billing usage report."""

    product: str
    sku: str
    quantity: float = Field(ge=0)
    unit_type: str | None = Field(default=None, alias="unitType")


class BillingUsageReport(GitHubModel):
    """``GET /users/{username}/settings/billing/usage``."""

    usage_items: list[UsageItem] = Field(default_factory=list, alias="usageItems")
