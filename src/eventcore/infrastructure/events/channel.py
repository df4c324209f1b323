"""Bounded asynchronous event channel.

Producers ``offer`` events into a bounded FIFO buffer; one or more
background consumer threads take them out and call a handler.  A full
buffer blocks producers for at most ``offer_timeout`` seconds, after
which the offer fails with ``OfferTimeoutError`` and the event is
dropped.  Implements the ``EventChannel`` port.

Consumer loops never die on a handler failure: the error is reported
through the diagnostic log (when ``debug`` is on) and the loop moves on
to the next event.

Starting the first consumer registers an exit hook that calls
``shutdown``: new offers are refused and process exit is held until the
buffer is empty.  Only removal from the buffer is awaited, not whatever
the handler does with the event afterwards.
"""

from __future__ import annotations

import queue
import threading
import time
from typing import Any, Callable, Generic, Iterator, TypeVar

import structlog

from eventcore.config.settings import Settings, get_settings
from eventcore.core.exceptions import (
    ChannelClosedError,
    ConfigurationError,
    OfferTimeoutError,
)
from eventcore.core.formatting import format_failure
from eventcore.domain.enums import ChannelState
from eventcore.domain.ports import ShutdownHooks
from eventcore.infrastructure.lifecycle import AtexitShutdownHooks

logger = structlog.get_logger(__name__)

T = TypeVar("T")

HANDLER_FAILED_MESSAGE = "Event handler failed"


class ConsumerWorker:
    """Handle on one background consumer thread.

    The loop checks the stop flag between takes, so ``stop`` takes
    effect within one poll interval once the current handler returns.
    """

    def __init__(self, name: str, loop: Callable[["ConsumerWorker"], None]) -> None:
        self.name = name
        self.processed = 0
        self.failed = 0
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=loop, args=(self,), name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not threading.current_thread() and self._thread.is_alive():
            self._thread.join(timeout=timeout)

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive() and not self._stop_event.is_set()

    def __repr__(self) -> str:
        return (
            f"ConsumerWorker(name={self.name!r}, processed={self.processed}, "
            f"failed={self.failed}, running={self.is_running})"
        )


class BoundedEventChannel(Generic[T]):
    """Capacity-bounded FIFO hand-off between producers and consumer threads."""

    def __init__(
        self,
        capacity: int,
        offer_timeout: float | None = None,
        *,
        name: str = "events",
        debug: bool | None = None,
        poll_interval: float | None = None,
        shutdown_hooks: ShutdownHooks | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Create a channel.

        Args:
            capacity: Maximum number of buffered, unconsumed events.
            offer_timeout: Seconds ``offer`` may block on a full buffer.
                Defaults to ``settings.offer_timeout_seconds``.
            name: Label used in thread names and log records.
            debug: Trace dequeued events and handler failures.  Defaults
                to ``settings.debug``.
            poll_interval: Upper bound on how long a consumer waits before
                re-checking its stop flag, and the drain progress interval.
            shutdown_hooks: Where the exit drain hook is registered.
                Defaults to ``atexit`` unless ``settings.register_exit_hook``
                is off.
            settings: Settings to read defaults from.
        """
        settings = settings or get_settings()

        if capacity < 1:
            raise ConfigurationError(
                "Channel capacity must be at least 1", {"capacity": capacity}
            )
        if offer_timeout is None:
            offer_timeout = settings.offer_timeout_seconds
        if offer_timeout < 0:
            raise ConfigurationError(
                "Offer timeout must not be negative", {"offer_timeout": offer_timeout}
            )

        poll_interval = (
            settings.drain_poll_interval_seconds if poll_interval is None else poll_interval
        )
        if poll_interval <= 0:
            raise ConfigurationError(
                "Poll interval must be positive", {"poll_interval": poll_interval}
            )

        if shutdown_hooks is None and settings.register_exit_hook:
            shutdown_hooks = AtexitShutdownHooks()

        self.name = name
        self._capacity = capacity
        self._offer_timeout = offer_timeout
        self._debug = settings.debug if debug is None else debug
        self._poll_interval = poll_interval
        self._drain_timeout = settings.drain_timeout_seconds
        self._shutdown_hooks = shutdown_hooks

        self._buffer: queue.Queue[T] = queue.Queue(maxsize=capacity)
        self._offered = threading.Condition()
        self._removed = threading.Condition()
        self._state_lock = threading.Lock()
        self._state = ChannelState.IDLE
        # Offers admitted before DRAINING that have not finished their put
        self._offers_in_flight = 0
        self._workers: list[ConsumerWorker] = []
        self._hook_registered = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def offer_timeout(self) -> float:
        return self._offer_timeout

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def workers(self) -> list[ConsumerWorker]:
        with self._state_lock:
            return list(self._workers)

    @property
    def size(self) -> int:
        return self._buffer.qsize()

    def __len__(self) -> int:
        return self._buffer.qsize()

    def is_empty(self) -> bool:
        return self._buffer.empty()

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def offer(self, event: T) -> None:
        """Buffer *event*, blocking while the buffer is full.

        Raises:
            OfferTimeoutError: No space freed up within ``offer_timeout``.
                The event is dropped.
            ChannelClosedError: The channel is shutting down.
        """
        with self._state_lock:
            if not self._state.accepts_offers:
                raise ChannelClosedError(
                    "Channel is shutting down",
                    {"channel": self.name, "state": self._state.value},
                )
            self._offers_in_flight += 1

        try:
            self._buffer.put(event, timeout=self._offer_timeout)
        except queue.Full:
            raise OfferTimeoutError(
                "Timed out waiting for buffer space",
                {
                    "channel": self.name,
                    "capacity": self._capacity,
                    "timeout": self._offer_timeout,
                },
            ) from None
        finally:
            with self._state_lock:
                self._offers_in_flight -= 1
            self._notify_removed()

        with self._offered:
            self._offered.notify_all()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def run_consumer(self, handler: Callable[[T], Any], name: str | None = None) -> ConsumerWorker:
        """Start a thread that calls *handler* with each event, oldest first."""

        def loop(worker: ConsumerWorker) -> None:
            while not worker.stopping:
                try:
                    event = self._buffer.get(timeout=self._poll_interval)
                except queue.Empty:
                    continue
                self._notify_removed()
                try:
                    handler(event)
                except Exception as exc:
                    worker.failed += 1
                    self._report_failure(worker, exc)
                else:
                    self._trace(worker, event)

        return self._start_worker(name, loop)

    def run_stream_consumer(
        self, handler: Callable[[Iterator[T]], Any], name: str | None = None
    ) -> ConsumerWorker:
        """Start a thread that hands *handler* one lazy batch per iteration.

        Each batch holds at most as many events as were buffered when the
        iteration began.  Events are only removed from the buffer as the
        handler iterates; those already taken by another consumer are
        skipped rather than failing the batch.
        """

        def loop(worker: ConsumerWorker) -> None:
            while not worker.stopping:
                with self._offered:
                    if self._buffer.empty():
                        self._offered.wait(self._poll_interval)
                size = self._buffer.qsize()
                if size == 0:
                    continue
                try:
                    handler(self._batch(worker, size))
                except Exception as exc:
                    worker.failed += 1
                    self._report_failure(worker, exc)

        return self._start_worker(name, loop)

    def _batch(self, worker: ConsumerWorker, size: int) -> Iterator[T]:
        for _ in range(size):
            try:
                event = self._buffer.get_nowait()
            except queue.Empty:
                if self._debug:
                    logger.debug("channel.batch.miss", channel=self.name, worker=worker.name)
                continue
            self._notify_removed()
            self._trace(worker, event)
            yield event

    def _start_worker(
        self, name: str | None, loop: Callable[[ConsumerWorker], None]
    ) -> ConsumerWorker:
        with self._state_lock:
            if not self._state.accepts_offers:
                raise ChannelClosedError(
                    "Cannot start a consumer on a closed channel",
                    {"channel": self.name, "state": self._state.value},
                )
            worker = ConsumerWorker(
                name or f"{self.name}-consumer-{len(self._workers) + 1}", loop
            )
            self._workers.append(worker)
            self._state = ChannelState.RUNNING
            register_hook = self._shutdown_hooks is not None and not self._hook_registered
            self._hook_registered = self._hook_registered or register_hook

        if register_hook:
            self._shutdown_hooks.register(self._on_exit)
        worker.start()
        logger.info("channel.consumer.started", channel=self.name, worker=worker.name)
        return worker

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def shutdown(self, timeout: float | None = None) -> bool:
        """Refuse new offers and wait until the buffer has been drained.

        Once empty, the consumer threads are stopped and joined.

        Args:
            timeout: Seconds to wait for the drain, ``None`` for no limit.

        Returns:
            True if the buffer was drained, False if *timeout* elapsed
            first.  Consumers keep running in that case.
        """
        with self._state_lock:
            if self._state is ChannelState.DRAINED:
                return True
            self._state = ChannelState.DRAINING

        logger.info("channel.drain.started", channel=self.name, pending=self.size)
        if not self._wait_until_empty(timeout):
            logger.warning("channel.drain.timeout", channel=self.name, pending=self.size)
            return False

        with self._state_lock:
            self._state = ChannelState.DRAINED
            workers = list(self._workers)
        for worker in workers:
            worker.stop()

        logger.info("channel.drain.completed", channel=self.name)
        return True

    def _on_exit(self) -> None:
        self.shutdown(self._drain_timeout)

    def _wait_until_empty(self, timeout: float | None) -> bool:
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._removed:
            while self._offers_in_flight or not self._buffer.empty():
                wait = self._poll_interval
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    wait = min(wait, remaining)
                if self._debug:
                    logger.debug("channel.drain.waiting", channel=self.name, pending=self.size)
                self._removed.wait(wait)
        return True

    def _notify_removed(self) -> None:
        with self._removed:
            self._removed.notify_all()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _trace(self, worker: ConsumerWorker, event: T) -> None:
        worker.processed += 1
        if self._debug:
            logger.debug(
                "channel.event.dispatched",
                channel=self.name,
                worker=worker.name,
                payload=repr(event),
            )

    def _report_failure(self, worker: ConsumerWorker, error: Exception) -> None:
        if not self._debug:
            return
        logger.error(
            "channel.handler.failed",
            channel=self.name,
            worker=worker.name,
            error=format_failure(HANDLER_FAILED_MESSAGE, error),
            exc_info=error,
        )
