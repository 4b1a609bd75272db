"""Value wrapping — plain nested structures become observable containers.

wrap() is idempotent: anything that already is an Observable comes back
unchanged, so a container can be moved between parents without being
copied.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable

from laces.events import Observable


def is_observable(value: Any) -> bool:
    return isinstance(value, Observable)


def wrap(value: Any, *, map_factory: Callable[[], Any] | None = None) -> Any:
    """Return value as something a container may store.

    - Observable          -> unchanged
    - list / tuple        -> new ObservableSequence, filled element by element
    - callable            -> unchanged (generator or function property)
    - Mapping             -> new map from map_factory, filled key by key
    - anything else       -> unchanged (primitives, str, bytes, sets...)

    map_factory defaults to ObservableMap; ComputedModel passes itself so
    nested mappings can hold computed properties too.
    """
    if is_observable(value):
        return value
    if isinstance(value, (list, tuple)):
        from laces.sequence import ObservableSequence

        sequence = ObservableSequence(map_factory=map_factory)
        for index, element in enumerate(value):
            sequence.set(index, element)
        return sequence
    if callable(value):
        return value
    if isinstance(value, Mapping):
        if map_factory is None:
            from laces.map import ObservableMap

            map_factory = ObservableMap
        wrapped = map_factory()
        for key, element in value.items():
            wrapped.set(key, element)
        return wrapped
    return value
