"""
Typed event bus for decoupled narration.

Event types are Enums so that publishers and subscribers agree on a
closed vocabulary instead of magic strings. The battle engine publishes
everything observable through a bus; presentation layers (console
narrator, tests, recorders) subscribe to the kinds they care about.

Usage:
    class BattleEvent(Enum):
        DAMAGE_DEALT = auto()

    bus.subscribe(BattleEvent.DAMAGE_DEALT, on_damage)
    bus.publish(BattleEvent.DAMAGE_DEALT, monster=target, amount=12)
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Iterable
from weakref import WeakMethod, ref

logger = logging.getLogger(__name__)


class EngineEvent(Enum):
    """Lifecycle events that are not tied to a single battle."""
    CONFIG_LOADED = auto()
    COMPETITION_RESET = auto()
    SHUTDOWN_REQUESTED = auto()


@dataclass
class Event:
    """
    One published occurrence.

    `data` holds the keyword payload given to `publish`. A handler that
    sets `consumed` keeps lower priority handlers from seeing the event.
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)
    consumed: bool = False

    def consume(self) -> None:
        self.consumed = True

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


@dataclass(eq=False)
class Subscription:
    """One handler registered for one event type."""
    priority: int
    target: Any
    one_shot: bool = False

    @classmethod
    def wrap(cls, handler: EventHandler, priority: int, one_shot: bool, weak: bool) -> Subscription:
        if not weak:
            return cls(priority, handler, one_shot)
        # Bound methods need WeakMethod, a plain ref to them dies at once
        target = WeakMethod(handler) if hasattr(handler, "__self__") else ref(handler)
        return cls(priority, target, one_shot)

    def resolve(self) -> EventHandler | None:
        """The live handler, or None once a weakly held handler was collected."""
        if isinstance(self.target, (ref, WeakMethod)):
            return self.target()
        return self.target


class EventBus:
    """
    Publish/subscribe hub.

    Handlers run in priority order (highest first, ties in subscription
    order). Events published while another event is being dispatched are
    queued, so narration always comes out in the order it was produced.
    """

    def __init__(self):
        self._handlers: dict[Enum, list[Subscription]] = {}
        self._pending: deque[Event] = deque()
        self._dispatching = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        priority: int = 0,
        one_shot: bool = False,
        weak: bool = True,
    ) -> None:
        """
        Register a handler for one event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            priority: Higher priority handlers are called first (default 0)
            one_shot: If True, handler is removed after first call
            weak: If True, hold only a weak reference to the handler
        """
        subscriptions = self._handlers.setdefault(event_type, [])
        position = next(
            (i for i, sub in enumerate(subscriptions) if priority > sub.priority),
            len(subscriptions),
        )
        subscriptions.insert(position, Subscription.wrap(handler, priority, one_shot, weak))

    def subscribe_all(
        self,
        event_types: Iterable[Enum],
        handler: EventHandler,
        priority: int = 0,
        weak: bool = True,
    ) -> None:
        """Subscribe one handler to several event types (e.g. a whole Enum)."""
        for event_type in event_types:
            self.subscribe(event_type, handler, priority=priority, weak=weak)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        subscriptions = self._handlers.get(event_type)
        if subscriptions is not None:
            subscriptions[:] = [sub for sub in subscriptions if sub.resolve() != handler]

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event built from keyword data.

        Returns the Event, so callers can check whether a handler consumed it.
        Nested publishes are delivered after the current event finishes.
        """
        event = Event(type=event_type, data=data)
        self._pending.append(event)
        if not self._dispatching:
            self._drain()
        return event

    def clear(self, event_type: Enum | None = None) -> None:
        """Clear all handlers, or only those of one event type."""
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)

    def _drain(self) -> None:
        self._dispatching = True
        try:
            while self._pending:
                self._deliver(self._pending.popleft())
        finally:
            self._dispatching = False
            self._pending.clear()

    def _deliver(self, event: Event) -> None:
        subscriptions = self._handlers.get(event.type)
        if not subscriptions:
            return

        finished: list[Subscription] = []
        for sub in list(subscriptions):
            handler = sub.resolve()
            if handler is None:
                finished.append(sub)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in event handler for {event.type}")

            if sub.one_shot:
                finished.append(sub)
            if event.consumed:
                break

        if finished:
            subscriptions[:] = [sub for sub in subscriptions if sub not in finished]
