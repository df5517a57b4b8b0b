"""Wiring helpers that assemble the rotation components from settings."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from structlog import get_logger

from codespace_rotator.core.waits import Clock, InterruptibleSleeper, monotonic_clock
from codespace_rotator.github.billing import BillingClient
from codespace_rotator.github.client import GitHubClient
from codespace_rotator.github.codespaces import CodespacesProvisioner
from codespace_rotator.github.remote import RemoteShell
from codespace_rotator.rotation.accounts import CredentialStore
from codespace_rotator.rotation.controller import RotationController
from codespace_rotator.rotation.keepalive import KeepAliveScheduler
from codespace_rotator.rotation.progress import ProgressStore
from codespace_rotator.rotation.quota import QuotaOracle


if TYPE_CHECKING:
    from codespace_rotator.config.settings import Settings


logger = get_logger(__name__)


@dataclass
class RotatorComponents:
    """Everything the CLI needs for one process lifetime."""

    client: GitHubClient
    credentials: CredentialStore
    progress_store: ProgressStore
    provisioner: CodespacesProvisioner
    oracle: QuotaOracle
    keepalive: KeepAliveScheduler
    controller: RotationController
    sleeper: InterruptibleSleeper


def build_provisioner(
    settings: Settings,
    client: GitHubClient,
    sleeper: InterruptibleSleeper,
) -> CodespacesProvisioner:
    return CodespacesProvisioner(
        client=client,
        remote=RemoteShell(settings.github),
        settings=settings.github,
        sleep=sleeper,
    )


@contextmanager
def rotator_components(
    settings: Settings,
    sleeper: InterruptibleSleeper | None = None,
    transport: httpx.BaseTransport | None = None,
    clock: Clock = monotonic_clock,
) -> Iterator[RotatorComponents]:
    """Assemble the rotation components and close the HTTP client afterwards.

    Credentials are loaded eagerly so a bad tokens file fails before any
    component does work.

    Raises:
        ConfigError: If the tokens file is missing or invalid
    """
    sleeper = sleeper or InterruptibleSleeper()
    credentials = CredentialStore(settings.paths.tokens_file)
    credentials.load()

    with GitHubClient(settings.github, transport=transport) as client:
        provisioner = build_provisioner(settings, client, sleeper)
        oracle = QuotaOracle(BillingClient(client), settings.quota)
        keepalive = KeepAliveScheduler(
            provisioner,
            interval_seconds=settings.keepalive.interval_seconds,
            min_sleep_seconds=settings.keepalive.min_sleep_seconds,
            node_gap_seconds=settings.keepalive.node_gap_seconds,
            sleep=sleeper,
            clock=clock,
        )
        progress_store = ProgressStore(settings.paths.state_file)
        controller = RotationController(
            credentials=credentials,
            progress_store=progress_store,
            provisioner=provisioner,
            oracle=oracle,
            keepalive=keepalive,
            settings=settings.rotation,
            sleep=sleeper,
        )
        logger.debug(
            "rotator_components_ready",
            tokens_file=str(settings.paths.tokens_file),
            state_file=str(settings.paths.state_file),
        )
        yield RotatorComponents(
            client=client,
            credentials=credentials,
            progress_store=progress_store,
            provisioner=provisioner,
            oracle=oracle,
            keepalive=keepalive,
            controller=controller,
            sleeper=sleeper,
        )
