"""Event bus for StakedRewards pools."""

from stakedrewards.constants import (
    ALL_EVENT_TYPES,
    EVENT_NEW_PERIOD_SET,
    EVENT_OWNERSHIP_TRANSFERRED,
    EVENT_PAUSED,
    EVENT_RECOVERED,
    EVENT_REWARD_ADDED,
    EVENT_REWARD_PAID,
    EVENT_STAKED,
    EVENT_UNPAUSED,
    EVENT_WITHDRAWN,
)

from .bus import Event, EventBus, EventHandler, InMemoryEventBus

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "InMemoryEventBus",
    "EVENT_STAKED",
    "EVENT_WITHDRAWN",
    "EVENT_REWARD_PAID",
    "EVENT_REWARD_ADDED",
    "EVENT_NEW_PERIOD_SET",
    "EVENT_RECOVERED",
    "EVENT_PAUSED",
    "EVENT_UNPAUSED",
    "EVENT_OWNERSHIP_TRANSFERRED",
    "ALL_EVENT_TYPES",
]
