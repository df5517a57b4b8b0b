"""Shared fixtures for unit tests: a fake clock and a sleeper that advances it."""

from pathlib import Path

import orjson
import pytest

from codespace_rotator.config.github import GitHubSettings


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleeper:
    """Sleep stand-in that records requested waits and advances a fake clock."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.clock = clock
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper(fake_clock: FakeClock) -> RecordingSleeper:
    return RecordingSleeper(fake_clock)


@pytest.fixture
def github_settings() -> GitHubSettings:
    """GitHub settings with short readiness polling."""
    return GitHubSettings(
        api_url="https://api.github.test",
        ready_attempts=3,
        ready_delay_seconds=30,
        pair_start_gap_seconds=5,
    )


@pytest.fixture
def tokens_file(tmp_path: Path) -> Path:
    """tokens.json with three tokens."""
    path = tmp_path / "tokens.json"
    path.write_bytes(orjson.dumps({"tokens": ["ghp_token0000", "ghp_token1111", "ghp_token2222"]}))
    return path
