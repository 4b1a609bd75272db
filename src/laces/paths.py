"""Dotted paths — read, write and watch `a.b.c` through nested containers.

A view layer binds to paths rather than to single keys. resolve() walks the
path with repeated get() calls, assign() writes the last segment through the
owning container's set(), and watch_path() keeps one subscription per level
so the watcher keeps working when an intermediate container is replaced:

    watch = watch_path(model, "user.address.city", print)
    model.user.address.city = "Utrecht"         # prints "Utrecht"
    model.user = {"address": {"city": "Delft"}}  # prints "Delft"
    watch.dispose()

Numeric segments index sequences.
"""

from __future__ import annotations

import functools
from typing import Any, Callable

from laces.events import Event, Observable
from laces.map import ObservableMap
from laces.sequence import ObservableSequence
from laces.wrapping import is_observable

_NOTHING = object()


def split_path(path: str) -> list[str]:
    return path.split(".") if path else []


def _step(node: Any, segment: str) -> Any:
    if isinstance(node, ObservableSequence):
        try:
            return node.get(int(segment), _NOTHING)
        except ValueError:
            return _NOTHING
    if isinstance(node, ObservableMap):
        value = node.get(segment, _NOTHING)
        if value is _NOTHING and segment.lstrip("-").isdigit():
            value = node.get(int(segment), _NOTHING)
        return value
    return _NOTHING


def resolve(container: Any, path: str, default: Any = None) -> Any:
    """Value at path, or default when any link is missing."""
    node = container
    for segment in split_path(path):
        node = _step(node, segment)
        if node is _NOTHING:
            return default
    return node


def assign(container: Any, path: str, value: Any) -> bool:
    """Write value at path through the owning container. False if the parent is missing."""
    segments = split_path(path)
    if not segments:
        return False
    parent = resolve(container, ".".join(segments[:-1]), _NOTHING)
    last = segments[-1]
    if isinstance(parent, ObservableSequence):
        try:
            parent[int(last)] = value
        except (ValueError, IndexError):
            return False
        return True
    if isinstance(parent, ObservableMap):
        parent[last] = value
        return True
    return False


class PathWatch:
    """Live subscription to the value at a dotted path."""

    def __init__(self, root: Observable, path: str, listener: Callable[[Any], None], default: Any = None) -> None:
        self._root = root
        self._segments = split_path(path)
        self._listener = listener
        self._default = default
        self._links: list[tuple[Observable, str, Callable[[Event], None]]] = []
        self._value: Any = default
        self._disposed = False
        self._rebind()

    @property
    def path(self) -> str:
        return ".".join(self._segments)

    @property
    def value(self) -> Any:
        return self._value

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        self._unbind_all()
        self._disposed = True

    def _rebind(self) -> None:
        self._unbind_all()
        node: Any = self._root
        for segment in self._segments:
            if not is_observable(node):
                node = _NOTHING
                break
            event_name = "change" if isinstance(node, ObservableSequence) else f"change:{segment}"
            listener = functools.partial(self._on_change, len(self._links))
            node.bind(event_name, listener)
            self._links.append((node, event_name, listener))
            node = _step(node, segment)
        self._value = self._default if node is _NOTHING else node

    def _unbind_all(self) -> None:
        for node, event_name, listener in self._links:
            node.unbind(event_name, listener)
        self._links = []

    def _on_change(self, level: int, event: Event) -> None:
        if self._disposed:
            return
        node = self._links[level][0]
        if level < len(self._links) - 1:
            if _step(node, self._segments[level]) is self._links[level + 1][0]:
                # Forwarded from deeper down; the deeper level reports it.
                return
        previous = self._value
        self._rebind()
        if isinstance(node, ObservableSequence) and self._value is previous:
            # A sequence level hears every element. Only the watched one counts.
            if not is_observable(previous) or event.value is not previous:
                return
        self._listener(self._value)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"value={self._value!r}"
        return f"PathWatch({self.path!r}, {state})"


def watch_path(container: Observable, path: str, listener: Callable[[Any], None], *, default: Any = None) -> PathWatch:
    """Call listener(value) whenever the value at path changes.

    Returns the PathWatch (call .dispose() to stop).
    """
    return PathWatch(container, path, listener, default)
