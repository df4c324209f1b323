"""Tests for eventcore.infrastructure.events.registry."""

import threading
from dataclasses import dataclass

import pytest

from eventcore.core.exceptions import TypeResolutionError
from eventcore.domain.ports import EventBus
from eventcore.infrastructure.events.catalog import EventTypeCatalog, qualified_name
from eventcore.infrastructure.events.registry import EventRegistry


@dataclass(frozen=True)
class FakeEventA:
    value: str


@dataclass(frozen=True)
class FakeEventB:
    count: int


@dataclass(frozen=True)
class SpecialEventA(FakeEventA):
    pass


class TestEventRegistry:
    def test_publish_calls_handler(self):
        registry = EventRegistry()
        received = []
        registry.subscribe(FakeEventA, lambda e: received.append(e))

        registry.publish(FakeEventA(value="hello"))

        assert len(received) == 1
        assert received[0].value == "hello"

    def test_multiple_handlers(self):
        registry = EventRegistry()
        results_1 = []
        results_2 = []
        registry.subscribe(FakeEventA, lambda e: results_1.append(e.value))
        registry.subscribe(FakeEventA, lambda e: results_2.append(e.value.upper()))

        registry.publish(FakeEventA(value="test"))

        assert results_1 == ["test"]
        assert results_2 == ["TEST"]

    def test_different_event_types(self):
        registry = EventRegistry()
        a_events = []
        b_events = []
        registry.subscribe(FakeEventA, lambda e: a_events.append(e))
        registry.subscribe(FakeEventB, lambda e: b_events.append(e))

        registry.publish(FakeEventA(value="a"))
        registry.publish(FakeEventB(count=42))

        assert len(a_events) == 1
        assert len(b_events) == 1
        assert b_events[0].count == 42

    def test_no_handler_is_noop(self):
        registry = EventRegistry()
        # Should not raise
        registry.publish(FakeEventA(value="ignored"))

    def test_unsubscribed_type_is_noop_when_others_exist(self):
        registry = EventRegistry()
        registry.subscribe(FakeEventB, lambda e: pytest.fail("wrong type"))

        registry.publish(FakeEventA(value="ignored"))

    def test_handler_order_preserved(self):
        registry = EventRegistry()
        order = []
        registry.subscribe(FakeEventA, lambda e: order.append(1))
        registry.subscribe(FakeEventA, lambda e: order.append(2))
        registry.subscribe(FakeEventA, lambda e: order.append(3))

        registry.publish(FakeEventA(value="x"))

        assert order == [1, 2, 3]

    def test_duplicate_handler_invoked_each_time(self):
        registry = EventRegistry()
        calls = []

        def handler(event):
            calls.append(event.value)

        registry.subscribe(FakeEventA, handler)
        registry.subscribe(FakeEventA, handler)

        registry.publish(FakeEventA(value="dup"))

        assert calls == ["dup", "dup"]

    def test_subtype_does_not_match_supertype_handlers(self):
        registry = EventRegistry()
        received = []
        registry.subscribe(FakeEventA, received.append)

        registry.publish(SpecialEventA(value="sub"))

        assert received == []

    def test_handler_error_propagates_and_stops_fan_out(self):
        registry = EventRegistry()
        later = []

        def failing(event):
            raise RuntimeError("boom")

        registry.subscribe(FakeEventA, failing)
        registry.subscribe(FakeEventA, later.append)

        with pytest.raises(RuntimeError, match="boom"):
            registry.publish(FakeEventA(value="x"))
        assert later == []

    def test_handler_runs_on_publishing_thread(self):
        registry = EventRegistry()
        threads = []
        registry.subscribe(FakeEventA, lambda e: threads.append(threading.current_thread()))

        registry.publish(FakeEventA(value="x"))

        assert threads == [threading.current_thread()]

    def test_introspection(self):
        registry = EventRegistry()
        handler = lambda e: None  # noqa: E731
        registry.subscribe(FakeEventA, handler)

        assert registry.has_subscribers(FakeEventA)
        assert not registry.has_subscribers(FakeEventB)
        assert registry.handlers_for(FakeEventA) == (handler,)
        assert registry.handlers_for(FakeEventB) == ()
        assert registry.subscribed_types() == [FakeEventA]

    def test_satisfies_port(self):
        assert isinstance(EventRegistry(), EventBus)


class TestSubscribeByName:
    def test_resolves_registered_name(self):
        catalog = EventTypeCatalog()
        catalog.register(FakeEventA)
        registry = EventRegistry(catalog)
        received = []

        registry.subscribe(qualified_name(FakeEventA), received.append)
        registry.publish(FakeEventA(value="named"))

        assert [e.value for e in received] == ["named"]

    def test_resolves_alias(self):
        catalog = EventTypeCatalog()
        catalog.register(FakeEventB, "fake.b")
        registry = EventRegistry(catalog)
        received = []

        registry.subscribe("fake.b", received.append)
        registry.publish(FakeEventB(count=1))

        assert len(received) == 1

    def test_unknown_name_raises_and_subscribes_nothing(self):
        registry = EventRegistry(EventTypeCatalog())

        with pytest.raises(TypeResolutionError) as exc_info:
            registry.subscribe("no.such.Event", lambda e: None)

        assert exc_info.value.name == "no.such.Event"
        assert "no.such.Event" in str(exc_info.value)
        assert registry.subscribed_types() == []

    def test_name_without_catalog_raises(self):
        registry = EventRegistry()

        with pytest.raises(TypeResolutionError):
            registry.subscribe(qualified_name(FakeEventA), lambda e: None)


class TestConcurrency:
    def test_concurrent_subscribes_are_not_lost(self):
        registry = EventRegistry()
        counter = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def handler(event):
            with lock:
                counter.append(1)

        def subscriber():
            barrier.wait()
            for _ in range(100):
                registry.subscribe(FakeEventA, handler)

        threads = [threading.Thread(target=subscriber) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        registry.publish(FakeEventA(value="x"))

        assert len(registry.handlers_for(FakeEventA)) == 800
        assert len(counter) == 800

    def test_publish_sees_consistent_snapshot_during_subscribe(self):
        registry = EventRegistry()
        seen = []

        def subscribing_handler(event):
            # Registered mid-publish; must not be invoked for this event.
            registry.subscribe(FakeEventA, lambda e: seen.append("late"))
            seen.append("first")

        registry.subscribe(FakeEventA, subscribing_handler)

        registry.publish(FakeEventA(value="x"))

        assert seen == ["first"]
        assert len(registry.handlers_for(FakeEventA)) == 2
