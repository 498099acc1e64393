"""Game event notification."""

from .event_types import GameEventType, get_event_category, get_event_description
from .notifier import EventNotifier, GameEvent

__all__ = [
    "EventNotifier",
    "GameEvent",
    "GameEventType",
    "get_event_category",
    "get_event_description",
]
