"""Fire-and-forget delivery of game events to observers.

Listeners are plain callables or coroutine functions. A failing listener is
logged and never interrupts the game; coroutine listeners are scheduled on
the running event loop and not awaited.
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from ..logging import get_logger
from .event_types import GameEventType, get_event_description

logger = get_logger(__name__)


@dataclass
class GameEvent:
    """One notification emitted by a game."""

    event_type: GameEventType
    game_id: Optional[str]
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)

    @property
    def description(self) -> str:
        return get_event_description(self.event_type, **self.payload)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.event_type.value,
            "game_id": self.game_id,
            "payload": self.payload,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }


Listener = Callable[[GameEvent], Union[None, Awaitable[None]]]


class EventNotifier:
    """Broadcasts game events to subscribed listeners.

    The notifier also keeps the most recent events so late observers and
    tests can inspect what a game emitted.
    """

    def __init__(self, history_size: int = 1000):
        self._listeners: List[Listener] = []
        self._pending: Set["asyncio.Task[None]"] = set()
        self.history_size = history_size
        self.history: List[GameEvent] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(
        self, event_type: GameEventType, game_id: Optional[str] = None, **payload: Any
    ) -> GameEvent:
        """Deliver an event to every listener without waiting on them."""
        event = GameEvent(event_type=event_type, game_id=game_id, payload=payload)
        self.history.append(event)
        if len(self.history) > self.history_size:
            del self.history[: len(self.history) - self.history_size]

        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    self._schedule(result, event)
            except Exception as e:
                logger.error(f"Listener failed on {event_type.value} event: {e}")

        return event

    def _schedule(self, awaitable: Awaitable[None], event: GameEvent) -> None:
        async def deliver() -> None:
            await awaitable

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                f"No running event loop; dropped async delivery of {event.event_type.value}"
            )
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return

        task = loop.create_task(deliver())
        self._pending.add(task)
        task.add_done_callback(self._on_delivered)

    def _on_delivered(self, task: "asyncio.Task[None]") -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Async listener failed: {task.exception()}")

    def events_of(self, event_type: GameEventType) -> List[GameEvent]:
        """Recorded events of one type, oldest first."""
        return [e for e in self.history if e.event_type == event_type]

    def clear(self) -> None:
        self.history.clear()
