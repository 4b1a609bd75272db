"""Observable maps — named properties that fire events when written.

Properties are reachable three ways once set:

    m = ObservableMap({"first_name": "Arend"})
    m.first_name            # attribute access
    m["first_name"]         # item access
    m.get("first_name")     # for keys that clash with method names

Every write fires, in order, `add` (new keys only), `change:<key>` and
`change`. Nested dicts and lists are wrapped into observable containers and
their own `change` events are forwarded as `change:<key>` on the map.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterator

from laces._tracking import record_read
from laces.coercion import Coercer, get_coercer
from laces.events import Event, Observable
from laces.forwarding import ForwardingBinding, ForwardingRegistry
from laces.wrapping import is_observable, wrap

logger = logging.getLogger(__name__)


class ObservableMap(Observable):
    """A dict-like container of observable properties."""

    def __init__(self, data: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._init_events()
        self._forwarding = ForwardingRegistry(self._forward)
        self._values: dict[Any, Any] = {}
        self._coercers: dict[Any, Coercer] = {}
        self._function_keys: set[Any] = set()
        if data:
            for key, value in data.items():
                self.set(key, value)
        for key, value in kwargs.items():
            self.set(key, value)

    # --- Public API ---

    def get(self, key: Any, default: Any = None) -> Any:
        """Return the stored value (wrapped if complex), or default."""
        record_read(self, key)
        return self._values.get(key, default)

    def set(self, key: Any, value: Any, *, type: str | None = None) -> None:
        """Set a property.

        key   - Name of the property.
        value - Its value. A callable is stored as-is and can afterwards only
                be replaced through set(). Dicts and lists are wrapped.
        type  - Optional coercion applied to this write and to every later
                attribute/item write of the key: "boolean", "float",
                "number", "integer", "string", or a name added with
                register_type(). Unknown names mean untyped storage.
        """
        if key not in self._values and isinstance(key, str) and hasattr(self.__class__, key):
            logger.warning("Property %r is shadowed by %s.%s; read it with get() or []", key, self.__class__.__name__, key)
        self._coercers.pop(key, None)
        self._function_keys.discard(key)

        if callable(value):
            self._apply_value(key, value)
            self._function_keys.add(key)
            return

        coercer = get_coercer(type)
        if coercer is not None:
            self._coercers[key] = coercer
            value = coercer(value)
        self._apply_value(key, value)

    def remove(self, key: Any) -> bool:
        """Remove a property. Returns False (and fires nothing) if it is absent."""
        if key not in self._values:
            return False

        self._forwarding.teardown_key(key)
        old_value = self._values.pop(key)
        self._coercers.pop(key, None)
        self._function_keys.discard(key)

        event = Event(key=key, old_value=old_value)
        self.fire("remove", event)
        self.fire(f"change:{key}", event)
        self.fire("change", event)
        return True

    def update(self, other: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        if other:
            for key, value in other.items():
                self.set(key, value)
        for key, value in kwargs.items():
            self.set(key, value)

    def keys(self):
        return self._values.keys()

    def values(self):
        return self._values.values()

    def items(self):
        return self._values.items()

    # --- Write path ---

    def _wrap(self, value: Any) -> Any:
        return wrap(value)

    def _assign(self, key: Any, value: Any) -> None:
        """Attribute/item assignment. Honours the key's coercer."""
        if key not in self._values:
            self.set(key, value)
            return
        if key in self._function_keys:
            logger.warning("Function property %r cannot be assigned; use set() to replace it", key)
            return
        coercer = self._coercers.get(key)
        if coercer is not None:
            value = coercer(value)
        self._apply_value(key, value)

    def _apply_value(self, key: Any, value: Any) -> None:
        value = self._wrap(value)

        event = Event(key=key, value=value)
        is_new = key not in self._values
        if not is_new:
            self._forwarding.teardown_key(key)
            event.old_value = self._values[key]

        self._values[key] = value

        if is_observable(value):
            self._forwarding.install(key, value)

        if is_new:
            self.fire("add", event)
        self.fire(f"change:{key}", event)
        self.fire("change", event)

    def _forward(self, binding: ForwardingBinding, event: Event) -> None:
        forwarded = Event(key=binding.owner_key, value=binding.child)
        self.fire(f"change:{binding.owner_key}", forwarded)
        self.fire("change", forwarded)

    # --- Python protocols ---

    def __getattr__(self, name: str) -> Any:
        # Only called when normal lookup fails, i.e. for property names.
        if name.startswith("_"):
            raise AttributeError(name)
        record_read(self, name)
        try:
            return self._values[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no property {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
        else:
            self._assign(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith("_"):
            object.__delattr__(self, name)
        elif not self.remove(name):
            raise AttributeError(f"{type(self).__name__} has no property {name!r}")

    def __getitem__(self, key: Any) -> Any:
        record_read(self, key)
        return self._values[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._assign(key, value)

    def __delitem__(self, key: Any) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __contains__(self, key: Any) -> bool:
        record_read(self, key)
        return key in self._values

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __bool__(self) -> bool:
        return bool(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObservableMap):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        names.update(key for key in self._values if isinstance(key, str) and key.isidentifier())
        return sorted(names)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"
