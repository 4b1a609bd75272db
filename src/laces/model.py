"""Computed models — maps whose callable properties are derived values.

Setting a callable on a ComputedModel registers it as a generator: it is
evaluated once, its result stored like any other value, and it is evaluated
again whenever one of its dependencies fires `change:<key>`.

    model = ComputedModel({"first_name": "Arend", "last_name": "van Beelen"})
    model.set("full_name", lambda m: f"{m.first_name} {m.last_name}")
    model.full_name         # "Arend van Beelen"
    model.first_name = "Arie"
    model.full_name         # "Arie van Beelen"

Dependencies are the keys of this model that the generator reads while it
runs, plus any listed explicitly with `dependencies=[...]` (needed for keys
only read on some branches). Keys first read on a later evaluation are
subscribed then. Each dependency is an ordinary event subscription; there is
no separate graph.

A generator that takes a positional parameter receives the model; a
zero-argument generator (a closure over the model) is called bare.

Re-evaluation is synchronous and depth-first. A listener may write a
dependency back while a result is delivered; the nested re-evaluation runs
and the value settles. A cycle that never settles raises
CircularDependencyError once a key re-enters MAX_REENTRY times.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Iterable

from laces._tracking import guard, tracking
from laces.events import Event
from laces.map import ObservableMap
from laces.wrapping import wrap

logger = logging.getLogger(__name__)

Generator = Callable[..., Any]

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


def _accepts_context(generator: Generator) -> bool:
    try:
        signature = inspect.signature(generator)
    except (TypeError, ValueError):
        return False
    return any(p.kind in _POSITIONAL for p in signature.parameters.values())


class ComputedModel(ObservableMap):
    """An ObservableMap with computed properties."""

    def __init__(self, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._generators: dict[Any, Generator] = {}
        self._evaluators: dict[Any, Callable[[], Any]] = {}
        self._dependencies: dict[Any, list[str]] = {}
        self._subscriptions: dict[Any, list[tuple[str, Callable[[Event], None]]]] = {}
        super().__init__(data, **kwargs)

    @property
    def generators(self) -> Mapping[Any, Generator]:
        return MappingProxyType(self._generators)

    def is_computed(self, key: Any) -> bool:
        return key in self._generators

    def dependencies_of(self, key: Any) -> tuple[str, ...]:
        return tuple(self._dependencies.get(key, ()))

    def set(
        self,
        key: Any,
        value: Any,
        *,
        dependencies: Iterable[str] | None = None,
        type: str | None = None,
    ) -> None:
        """Set a property; a callable value becomes a computed property.

        dependencies - Keys the generator depends on beyond those it reads on
                       its first evaluation. The iterable is copied, never
                       modified. Dotted paths subscribe to their first segment.
        type         - Coercion applied to every stored result (see
                       ObservableMap.set).
        """
        self._drop_generator(key)
        if not callable(value):
            super().set(key, value, type=type)
            return

        self._generators[key] = value
        if _accepts_context(value):
            self._evaluators[key] = functools.partial(value, self)
        else:
            self._evaluators[key] = value
        self._dependencies[key] = []
        self._subscriptions[key] = []

        for dependency in list(dependencies or ()):
            self._depend(key, dependency)

        with guard(self, key):
            result = self._evaluate(key)
            super().set(key, result, type=type)

    def remove(self, key: Any) -> bool:
        self._drop_generator(key)
        return super().remove(key)

    def reevaluate(self, key: Any) -> bool:
        """Run key's generator again and store the result. False if not computed."""
        if key not in self._generators:
            return False
        with guard(self, key):
            result = self._evaluate(key)
            coercer = self._coercers.get(key)
            if coercer is not None:
                result = coercer(result)
            self._apply_value(key, result)
        return True

    # --- Internals ---

    def _wrap(self, value: Any) -> Any:
        return wrap(value, map_factory=ComputedModel)

    def _evaluate(self, key: Any) -> Any:
        with tracking(self, key) as frame:
            result = self._evaluators[key]()
        for dependency in frame.reads:
            if dependency != key:
                self._depend(key, dependency)
        return result

    def _depend(self, key: Any, dependency: str) -> None:
        if dependency in self._dependencies[key]:
            return
        self._dependencies[key].append(dependency)

        event_name = f"change:{dependency.split('.', 1)[0]}"
        if any(name == event_name for name, _ in self._subscriptions[key]):
            return

        def _on_change(event: Event) -> None:
            self.reevaluate(key)

        self.bind(event_name, _on_change)
        self._subscriptions[key].append((event_name, _on_change))
        logger.debug("%r depends on %r", key, dependency)

    def _drop_generator(self, key: Any) -> None:
        if key not in self._generators:
            return
        for event_name, listener in self._subscriptions.pop(key, ()):
            self.unbind(event_name, listener)
        del self._generators[key]
        del self._evaluators[key]
        self._dependencies.pop(key, None)
