"""Process lifecycle integration.

Channels register their drain callback through a ``ShutdownHooks``
implementation.  ``AtexitShutdownHooks`` is the production one; tests
inject ``ManualShutdownHooks`` and trigger shutdown themselves.
"""

from __future__ import annotations

import atexit
import signal
import sys
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)


class AtexitShutdownHooks:
    """Run callbacks at interpreter exit via :mod:`atexit`."""

    def register(self, callback: Callable[[], Any]) -> None:
        atexit.register(callback)


class ManualShutdownHooks:
    """Collect callbacks and run them on demand (simulated process exit)."""

    def __init__(self) -> None:
        self.callbacks: list[Callable[[], Any]] = []

    def register(self, callback: Callable[[], Any]) -> None:
        self.callbacks.append(callback)

    def run(self) -> None:
        """Run callbacks in reverse registration order, like ``atexit``."""
        for callback in reversed(self.callbacks):
            callback()


def _signal_handler(sig: int, frame: Any) -> None:
    logger.info("lifecycle.signal.received", signal=signal.Signals(sig).name)
    sys.exit(0)


def install_signal_handlers(signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)) -> None:
    """Turn termination signals into ``SystemExit`` so exit hooks run.

    Must be called from the main thread.
    """
    for sig in signals:
        signal.signal(sig, _signal_handler)
