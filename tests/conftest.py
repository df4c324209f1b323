"""Shared fixtures for eventcore tests."""

import time

import pytest

from eventcore.config.settings import Settings


@pytest.fixture
def settings():
    """Settings that never touch the real ``atexit`` and poll quickly."""
    return Settings(
        debug=False,
        register_exit_hook=False,
        offer_timeout_seconds=1.0,
        drain_poll_interval_seconds=0.01,
    )


@pytest.fixture
def wait_until():
    """Poll *predicate* until it is true or *timeout* seconds pass."""

    def _wait(predicate, timeout=2.0, interval=0.005):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait
