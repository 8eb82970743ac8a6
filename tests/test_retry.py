"""Tests for the fixed-delay retry policy."""

import pytest

from chase.retry import try_until


class TestTryUntil:
    """Tests for try_until."""

    def test_success_first_time(self) -> None:
        assert try_until(lambda: 1) == 1
        assert try_until(lambda: 1, max_attempts=1) == 1

    def test_single_attempt_raises_last_error(self) -> None:
        calls = []

        def failing():
            calls.append(1)
            raise OSError("nope")

        with pytest.raises(OSError, match="nope"):
            try_until(failing, max_attempts=1)
        assert len(calls) == 1

    def test_retries_until_success(self) -> None:
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 1000:
                raise FileNotFoundError("not yet")
            return "ok"

        assert try_until(flaky, max_attempts=1000) == "ok"
        assert len(calls) == 1000

    def test_budget_exhausted(self) -> None:
        calls = []

        def failing():
            calls.append(1)
            raise OSError(len(calls))

        with pytest.raises(OSError) as exc_info:
            try_until(failing, max_attempts=3)
        assert len(calls) == 3
        assert exc_info.value.args == (3,)

    def test_unbounded_keeps_trying(self) -> None:
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 50:
                raise OSError("not yet")
            return len(calls)

        assert try_until(flaky, max_attempts=None) == 50

    def test_other_exceptions_are_not_retried(self) -> None:
        calls = []

        def broken():
            calls.append(1)
            raise ValueError("bug")

        with pytest.raises(ValueError):
            try_until(broken, max_attempts=5)
        assert len(calls) == 1

    def test_custom_retry_on(self) -> None:
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise KeyError("missing")
            return "found"

        assert try_until(flaky, retry_on=(KeyError,)) == "found"

    def test_sleeps_between_attempts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sleeps = []
        monkeypatch.setattr("chase.retry.time.sleep", sleeps.append)

        def failing():
            raise OSError("nope")

        with pytest.raises(OSError):
            try_until(failing, max_attempts=3, delay=0.5)
        assert sleeps == [0.5, 0.5]
