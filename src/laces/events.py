"""Event bus — named events, ordered listeners, pause/resume.

Every laces container owns one EventBus and exposes it through the
Observable mixin. Listeners are called synchronously, in the order they were
bound, with an Event describing what happened. Nothing is batched: a listener
that writes back into a container re-enters the write path before fire()
returns.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)


class _Missing:
    """Marks an Event field that does not apply to the event."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass
class Event:
    """Payload handed to listeners.

    `name` is always set to the fired event name. The other fields depend on
    the event: maps report `key`, `value` and `old_value`; sequences report
    `elements` and, where it applies, `index`.
    """

    name: str = ""
    key: Any = MISSING
    index: Any = MISSING
    value: Any = MISSING
    old_value: Any = MISSING
    elements: Any = MISSING

    def has(self, attr: str) -> bool:
        return getattr(self, attr) is not MISSING

    def as_dict(self) -> dict[str, Any]:
        """Present fields only. Handy for comparing whole payloads."""
        return {f.name: getattr(self, f.name) for f in fields(self) if self.has(f.name)}


Listener = Callable[[Event], None]


class EventBus:
    """Per-instance registry of named-event listeners."""

    __slots__ = ("_listeners", "_paused")

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._paused = False

    @property
    def paused(self) -> bool:
        return self._paused

    def bind(self, event_name: str, listener: Listener) -> None:
        """Register listener under event_name. Binding twice means two calls."""
        self._listeners.setdefault(event_name, []).append(listener)

    def unbind(self, event_name: str, listener: Listener) -> bool:
        """Remove the first registration of listener. Returns whether one was found."""
        listeners = self._listeners.get(event_name)
        if not listeners:
            return False
        try:
            listeners.remove(listener)
        except ValueError:
            return False
        if not listeners:
            del self._listeners[event_name]
        return True

    def has_listeners(self, event_name: str) -> bool:
        return bool(self._listeners.get(event_name))

    def fire(self, event_name: str, event: Event | None = None) -> None:
        """Invoke every listener bound to event_name, unless paused.

        Listener exceptions are not caught; they abort the remaining
        listeners and propagate to the caller.
        """
        logger.debug("Firing %s", event_name)
        if self._paused:
            return
        listeners = self._listeners.get(event_name)
        if not listeners:
            return
        # Each fire gets its own copy so a captured payload keeps its name.
        event = replace(event, name=event_name) if event is not None else Event(event_name)
        # Snapshot: listeners may bind/unbind while we deliver.
        for listener in list(listeners):
            listener(event)

    def pause_events(self) -> None:
        """Stop delivering events. Mutations still happen.

        Resuming does not replay anything, so computed properties that
        depend on values written while paused stay stale until their
        dependencies change again.
        """
        self._paused = True

    def resume_events(self) -> None:
        self._paused = False


class Observable:
    """Mixin giving a container its own EventBus.

    The methods here only delegate; the bus itself is a plain component
    that could be used on its own.
    """

    _events: EventBus

    def _init_events(self) -> None:
        self._events = EventBus()

    def bind(self, event_name: str, listener: Listener) -> None:
        self._events.bind(event_name, listener)

    def unbind(self, event_name: str, listener: Listener) -> bool:
        return self._events.unbind(event_name, listener)

    def fire(self, event_name: str, event: Event | None = None) -> None:
        self._events.fire(event_name, event)

    def pause_events(self) -> None:
        self._events.pause_events()

    def resume_events(self) -> None:
        self._events.resume_events()

    @property
    def events_paused(self) -> bool:
        return self._events.paused

    @contextmanager
    def paused_events(self) -> Iterator[None]:
        """Context manager for silent mutations.

        Usage:
            with model.paused_events():
                model.set("x", 1)
                # no listener sees this write
        """
        was_paused = self._events.paused
        self._events.pause_events()
        try:
            yield
        finally:
            if not was_paused:
                self._events.resume_events()
