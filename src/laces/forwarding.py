"""Forwarding bindings — re-emit a child's `change` on the owning container.

A container that stores an observable value subscribes to that value's
`change` event and re-fires it as its own `change:<key>` and `change`.
Each subscription is kept as an explicit record, so teardown finds it by
key or by child identity, never by position in a list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from laces.events import Event

if TYPE_CHECKING:
    from laces.events import Observable


class ForwardingBinding:
    """One parent-owned subscription on one child's `change` event."""

    __slots__ = ("owner_key", "child", "listener")

    def __init__(self, owner_key: Any, child: Observable, listener: Callable[[Event], None]) -> None:
        self.owner_key = owner_key
        self.child = child
        self.listener = listener

    def teardown(self) -> bool:
        return self.child.unbind("change", self.listener)

    def __repr__(self) -> str:
        return f"ForwardingBinding({self.owner_key!r}, {type(self.child).__name__})"


class ForwardingRegistry:
    """Forwarding bindings one container has installed on the values it owns.

    `on_forward(binding, event)` is called on the owner whenever a child
    fires `change`; the owner decides what to re-fire.
    """

    __slots__ = ("_on_forward", "_bindings")

    def __init__(self, on_forward: Callable[[ForwardingBinding, Event], None]) -> None:
        self._on_forward = on_forward
        self._bindings: list[ForwardingBinding] = []

    def __len__(self) -> int:
        return len(self._bindings)

    def install(self, owner_key: Any, child: Observable) -> ForwardingBinding:
        def _forward(event: Event) -> None:
            self._on_forward(binding, event)

        binding = ForwardingBinding(owner_key, child, _forward)
        child.bind("change", _forward)
        self._bindings.append(binding)
        return binding

    def teardown_key(self, owner_key: Any) -> bool:
        for binding in self._bindings:
            if binding.owner_key == owner_key:
                return self._teardown(binding)
        return False

    def teardown_child(self, child: Observable) -> bool:
        for binding in self._bindings:
            if binding.child is child:
                return self._teardown(binding)
        return False

    def teardown_all(self) -> None:
        for binding in list(self._bindings):
            self._teardown(binding)

    def _teardown(self, binding: ForwardingBinding) -> bool:
        self._bindings.remove(binding)
        return binding.teardown()
