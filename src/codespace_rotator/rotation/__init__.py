"""Account rotation for codespace_rotator.

Rotates through GitHub accounts, admitting each by remaining Codespaces quota
and keeping its session pair alive for a bounded run budget.
"""

from codespace_rotator.rotation.accounts import (
    Credential,
    CredentialStore,
    load_credentials,
)
from codespace_rotator.rotation.controller import RotationController, VisitOutcome
from codespace_rotator.rotation.keepalive import KeepAliveReport, KeepAliveScheduler
from codespace_rotator.rotation.progress import ProgressRecord, ProgressStore
from codespace_rotator.rotation.quota import (
    QuotaOracle,
    QuotaSnapshot,
    RunBudget,
    compute_run_budget,
)
from codespace_rotator.rotation.startup import RotatorComponents, rotator_components


__all__ = [
    "Credential",
    "CredentialStore",
    "KeepAliveReport",
    "KeepAliveScheduler",
    "ProgressRecord",
    "ProgressStore",
    "QuotaOracle",
    "QuotaSnapshot",
    "RotationController",
    "RotatorComponents",
    "RunBudget",
    "VisitOutcome",
    "compute_run_budget",
    "load_credentials",
    "rotator_components",
]
