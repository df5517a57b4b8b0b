"""Tests for the fixed-delay retry policy."""

import pytest

from codespace_rotator.core.retry import RetryPolicy
from codespace_rotator.exceptions import AuthError, CommandError


class Flaky:
    """Callable failing with ``error`` a fixed number of times before succeeding."""

    def __init__(self, failures: int, error: Exception) -> None:
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self, value: str) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return value


@pytest.mark.unit
class TestRetryPolicy:
    def test_returns_after_transient_failures(self, sleeper) -> None:
        policy = RetryPolicy("identify", (CommandError,), max_attempts=3, delay_seconds=3)
        fn = Flaky(2, CommandError("boom"))

        assert policy.call(fn, "octocat", sleep=sleeper) == "octocat"
        assert fn.calls == 3
        assert sleeper.calls == [3, 3]

    def test_reraises_last_error_when_exhausted(self, sleeper) -> None:
        policy = RetryPolicy("identify", (CommandError,), max_attempts=2, delay_seconds=1)
        fn = Flaky(5, CommandError("still down"))

        with pytest.raises(CommandError, match="still down"):
            policy.call(fn, "x", sleep=sleeper)
        assert fn.calls == 2
        assert sleeper.calls == [1]

    def test_non_retryable_error_propagates_immediately(self, sleeper) -> None:
        policy = RetryPolicy("identify", (CommandError,), max_attempts=5)
        fn = Flaky(1, AuthError("bad credentials"))

        with pytest.raises(AuthError):
            policy.call(fn, "x", sleep=sleeper)
        assert fn.calls == 1
        assert sleeper.calls == []

    def test_unbounded_policy_keeps_retrying(self, sleeper) -> None:
        policy = RetryPolicy("provision", (CommandError,), max_attempts=None, delay_seconds=300)
        fn = Flaky(12, CommandError("busy"))

        assert policy.call(fn, "done", sleep=sleeper) == "done"
        assert len(sleeper.calls) == 12
        assert sleeper.total == 12 * 300

    @pytest.mark.parametrize(
        ("max_attempts", "delay"),
        [(0, 1.0), (3, -1.0)],
    )
    def test_rejects_invalid_parameters(self, max_attempts: int, delay: float) -> None:
        with pytest.raises(ValueError):
            RetryPolicy("x", (CommandError,), max_attempts=max_attempts, delay_seconds=delay)
