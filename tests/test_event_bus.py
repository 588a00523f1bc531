"""Tests for the event bus and the events a pool publishes."""

from __future__ import annotations

import pytest

from stakedrewards.constants import ALL_EVENT_TYPES, EVENT_STAKED, EVENT_WITHDRAWN
from stakedrewards.events import Event, InMemoryEventBus


class TestEvent:
    """Tests for the Event dataclass."""

    def test_event_creation(self) -> None:
        """Event creates with required fields and sensible defaults."""
        event = Event(event_type=EVENT_STAKED, source="stakedrewards:pool")
        assert event.event_type == "pool.staked"
        assert event.source == "stakedrewards:pool"
        assert event.payload == {}
        assert event.timestamp is not None
        assert event.event_id.startswith("evt-")

    def test_event_with_payload(self) -> None:
        event = Event(
            event_type=EVENT_STAKED,
            source="stakedrewards:pool",
            payload={"account": "acct:alice", "amount": 100},
        )
        assert event.payload["amount"] == 100

    def test_event_types_share_namespace(self) -> None:
        assert all(t.startswith("pool.") for t in ALL_EVENT_TYPES)
        assert len(set(ALL_EVENT_TYPES)) == len(ALL_EVENT_TYPES)


class TestInMemoryEventBus:
    """Tests for the synchronous in-process event bus."""

    def test_emit_and_subscribe(self) -> None:
        """Subscribed handler receives emitted events."""
        bus = InMemoryEventBus()
        received: list[Event] = []
        bus.subscribe("pool.*", received.append)

        event = Event(event_type=EVENT_STAKED, source="a")
        bus.emit(event)

        assert len(received) == 1
        assert received[0] is event

    def test_pattern_matching_glob(self) -> None:
        bus = InMemoryEventBus()
        staked: list[Event] = []
        everything: list[Event] = []
        bus.subscribe(EVENT_STAKED, staked.append)
        bus.subscribe("*", everything.append)

        bus.emit(Event(event_type=EVENT_STAKED, source="a"))
        bus.emit(Event(event_type=EVENT_WITHDRAWN, source="a"))
        bus.emit(Event(event_type="other.thing", source="b"))

        assert len(staked) == 1
        assert len(everything) == 3

    def test_unsubscribe(self) -> None:
        """Unsubscribed handler stops receiving events."""
        bus = InMemoryEventBus()
        received: list[Event] = []
        handler = received.append
        bus.subscribe("*", handler)
        bus.emit(Event(event_type=EVENT_STAKED, source="a"))
        assert len(received) == 1

        bus.unsubscribe(handler)
        bus.emit(Event(event_type=EVENT_STAKED, source="b"))
        assert len(received) == 1

    def test_history(self) -> None:
        bus = InMemoryEventBus()
        bus.emit(Event(event_type=EVENT_STAKED, source="a"))
        bus.emit(Event(event_type=EVENT_WITHDRAWN, source="a"))
        assert [e.event_type for e in bus.history] == [EVENT_STAKED, EVENT_WITHDRAWN]
        assert len(bus.events_of("pool.*")) == 2
        assert len(bus.events_of(EVENT_WITHDRAWN)) == 1

    def test_history_disabled(self) -> None:
        bus = InMemoryEventBus(history_limit=0)
        received: list[Event] = []
        bus.subscribe("*", received.append)
        bus.emit(Event(event_type=EVENT_STAKED, source="a"))
        assert bus.history == []
        assert len(received) == 1

    def test_history_limit_keeps_latest(self) -> None:
        bus = InMemoryEventBus(history_limit=2)
        for i in range(3):
            bus.emit(Event(event_type=EVENT_STAKED, source="a", payload={"i": i}))
        assert [e.payload["i"] for e in bus.history] == [1, 2]

    def test_clear_keeps_subscriptions(self) -> None:
        bus = InMemoryEventBus()
        received: list[Event] = []
        bus.subscribe("*", received.append)
        bus.emit(Event(event_type=EVENT_STAKED, source="a"))
        bus.clear()
        assert bus.history == []
        bus.emit(Event(event_type=EVENT_STAKED, source="a"))
        assert len(received) == 2

    def test_invalid_arguments(self) -> None:
        with pytest.raises(ValueError):
            InMemoryEventBus(history_limit=-1)
        with pytest.raises(ValueError):
            InMemoryEventBus().subscribe("", print)


class TestPoolPublishing:
    """Pool events are published only after the operation commits."""

    def test_subscriber_sees_committed_state(self, pool, stake_for) -> None:
        seen: list[int] = []
        pool.event_bus.subscribe(EVENT_STAKED, lambda e: seen.append(pool.total_supply))
        stake_for("acct:alice", 100)
        assert seen == [100]

    def test_events_carry_pool_time(self, pool, stake_for, bus, clock) -> None:
        clock.advance(30)
        stake_for("acct:alice", 100)
        assert bus.history[0].timestamp == clock.now()
        assert bus.history[0].source == pool.address

    def test_events_in_operation_order(self, pool, stake_for, bus) -> None:
        stake_for("acct:alice", 100)
        pool.exit("acct:alice")
        assert [e.event_type for e in bus.history] == [EVENT_STAKED, EVENT_WITHDRAWN]
