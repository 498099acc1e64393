"""Event type definitions for game notifications.

These are the events a running game emits to its observers, covering the
game lifecycle, replication and round boundaries, the communication phase
and individual firm decisions.
"""

from enum import Enum
from typing import Any


class GameEventType(str, Enum):
    """Events emitted while a game is configured and played."""

    # Lifecycle
    GAME_STATE = "game_state"
    GAME_OVER = "game_over"
    ERROR = "error"

    # Replications
    REPLICATION_STARTED = "replication_started"
    REPLICATION_COMPLETE = "replication_complete"

    # Rounds
    ROUND_STARTED = "round_started"
    ROUND_COMPLETE = "round_complete"

    # Communication
    COMMUNICATION_STARTED = "communication_started"
    COMMUNICATION_MESSAGE = "communication_message"
    COMMUNICATION_COMPLETE = "communication_complete"

    # Decisions
    DECISION_PENDING = "decision_pending"
    FIRM_DECISION = "firm_decision"


def get_event_category(event_type: GameEventType) -> str:
    """Get the category for an event type.

    Args:
        event_type: The event type to categorize

    Returns:
        Category string for grouping events
    """
    category_map = {
        GameEventType.GAME_STATE: "lifecycle",
        GameEventType.GAME_OVER: "lifecycle",
        GameEventType.ERROR: "lifecycle",
        GameEventType.REPLICATION_STARTED: "replication",
        GameEventType.REPLICATION_COMPLETE: "replication",
        GameEventType.ROUND_STARTED: "round",
        GameEventType.ROUND_COMPLETE: "round",
        GameEventType.COMMUNICATION_STARTED: "communication",
        GameEventType.COMMUNICATION_MESSAGE: "communication",
        GameEventType.COMMUNICATION_COMPLETE: "communication",
        GameEventType.DECISION_PENDING: "decision",
        GameEventType.FIRM_DECISION: "decision",
    }

    return category_map.get(event_type, "other")


def get_event_description(event_type: GameEventType, **kwargs: Any) -> str:
    """Generate a human-readable description for an event.

    Args:
        event_type: The type of event
        **kwargs: Event payload used to fill in the description

    Returns:
        Human-readable event description
    """
    descriptions = {
        GameEventType.GAME_STATE: f"Game is {kwargs.get('status', 'unknown')}",
        GameEventType.GAME_OVER: "Game completed",
        GameEventType.ERROR: f"Error: {kwargs.get('message', 'unknown')}",
        GameEventType.REPLICATION_STARTED: f"Replication {kwargs.get('number', '?')} of {kwargs.get('total', '?')} started",
        GameEventType.REPLICATION_COMPLETE: f"Replication {kwargs.get('number', '?')} complete",
        GameEventType.ROUND_STARTED: f"Round {kwargs.get('number', '?')} started",
        GameEventType.ROUND_COMPLETE: f"Round {kwargs.get('number', '?')} complete",
        GameEventType.COMMUNICATION_STARTED: f"Communication phase of round {kwargs.get('round', '?')} started",
        GameEventType.COMMUNICATION_MESSAGE: f"Firm {kwargs.get('firm', 'unknown')} sent a message",
        GameEventType.COMMUNICATION_COMPLETE: "Communication phase complete",
        GameEventType.DECISION_PENDING: f"Waiting for firm {kwargs.get('firm', 'unknown')}",
        GameEventType.FIRM_DECISION: f"Firm {kwargs.get('firm', 'unknown')} chose {kwargs.get('value', '?')}",
    }

    return descriptions.get(event_type, f"Event of type {event_type.value}")
