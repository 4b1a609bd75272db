"""Observable sequences — an ordered list that fires events on mutation.

Mutators fire `add`, `remove` and `change` with the affected elements in
the payload:

    seq = ObservableSequence([1, 2, 3])
    seq.bind("add", lambda event: print(event.elements))
    seq.push(4)         # prints [4]

Elements that are themselves observable have their `change` forwarded as the
sequence's `change`. Forwarding is tracked per element identity, so it
survives the index shifts caused by inserts and removals.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

from laces.events import Event, Observable
from laces.forwarding import ForwardingBinding, ForwardingRegistry
from laces.wrapping import is_observable, wrap


class ObservableSequence(Observable):
    """A list-like container of wrapped values."""

    def __init__(self, items: Iterable[Any] | None = None, *, map_factory: Callable[[], Any] | None = None) -> None:
        self._init_events()
        self._forwarding = ForwardingRegistry(self._forward)
        self._items: list[Any] = []
        self._map_factory = map_factory
        if items is not None:
            for index, item in enumerate(items):
                self.set(index, item)

    # --- Reads ---

    def get(self, index: int, default: Any = None) -> Any:
        try:
            return self._items[index]
        except IndexError:
            return default

    def index(self, value: Any) -> int:
        return self._items.index(value)

    def count(self, value: Any) -> int:
        return self._items.count(value)

    # --- Mutators ---

    def set(self, index: int, value: Any) -> None:
        """Replace the element at index. index == len(self) appends."""
        length = len(self._items)
        if index < 0:
            index += length
        if index == length:
            self._insert(length, (value,))
            return
        if not 0 <= index < length:
            raise IndexError("sequence index out of range")

        old_value = self._items[index]
        self._release(old_value)
        value = self._wrap(value)
        self._items[index] = value
        self._install(value)

        self.fire("change", Event(index=index, value=value, old_value=old_value, elements=[value]))

    def push(self, *values: Any) -> int:
        """Append values. Returns the new length."""
        self._insert(len(self._items), values)
        return len(self._items)

    def unshift(self, *values: Any) -> int:
        """Prepend values, keeping their order. Returns the new length."""
        self._insert(0, values)
        return len(self._items)

    def pop(self) -> Any:
        """Remove and return the last element, or None when empty."""
        if not self._items:
            return None
        return self._remove_at(len(self._items) - 1)

    def shift(self) -> Any:
        """Remove and return the first element, or None when empty."""
        if not self._items:
            return None
        return self._remove_at(0)

    def remove(self, index: int) -> bool:
        """Remove the element at index. False (and no events) when out of range."""
        length = len(self._items)
        if index < 0:
            index += length
        if not 0 <= index < length:
            return False
        self._remove_at(index)
        return True

    def splice(self, index: int, remove_count: int | None = None, *insert: Any) -> list[Any]:
        """Remove remove_count elements at index and insert new ones there.

        Returns the removed elements. `remove` + `change` fire for the removed
        elements and then `add` + `change` for the inserted ones, each pair
        only when there is something to report.
        """
        length = len(self._items)
        start = max(length + index, 0) if index < 0 else min(index, length)
        if remove_count is None:
            remove_count = length - start
        remove_count = max(0, min(remove_count, length - start))

        removed = self._items[start:start + remove_count]
        added = [self._wrap(value) for value in insert]
        self._items[start:start + remove_count] = added
        for value in removed:
            self._release(value)
        for value in added:
            self._install(value)

        if removed:
            event = Event(index=start, elements=list(removed))
            self.fire("remove", event)
            self.fire("change", event)
        if added:
            event = Event(index=start, elements=list(added))
            self.fire("add", event)
            self.fire("change", event)
        return removed

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        """Sort in place. Without a key, elements that do not compare with each
        other (wrapped maps, mixed types) are ordered by their string form.
        """
        if key is not None:
            self._items.sort(key=key, reverse=reverse)
        else:
            try:
                self._items.sort(reverse=reverse)
            except TypeError:
                self._items.sort(key=str, reverse=reverse)
        self.fire("change", Event(elements=[]))

    def reverse(self) -> None:
        self._items.reverse()
        self.fire("change", Event(elements=[]))

    # list-style aliases

    def append(self, value: Any) -> None:
        self.push(value)

    def extend(self, values: Iterable[Any]) -> None:
        self.push(*values)

    def insert(self, index: int, value: Any) -> None:
        self.splice(index, 0, value)

    def clear(self) -> None:
        self.splice(0)

    # --- Internals ---

    def _wrap(self, value: Any) -> Any:
        return wrap(value, map_factory=self._map_factory)

    def _install(self, value: Any) -> None:
        if is_observable(value):
            # Sequence bindings carry no key; they are found by identity.
            self._forwarding.install(None, value)

    def _release(self, value: Any) -> None:
        if is_observable(value):
            self._forwarding.teardown_child(value)

    def _insert(self, index: int, values: Iterable[Any]) -> None:
        added = [self._wrap(value) for value in values]
        if not added:
            return
        self._items[index:index] = added
        for value in added:
            self._install(value)

        event = Event(index=index, elements=list(added))
        self.fire("add", event)
        self.fire("change", event)

    def _remove_at(self, index: int) -> Any:
        value = self._items.pop(index)
        self._release(value)

        event = Event(index=index, elements=[value])
        self.fire("remove", event)
        self.fire("change", event)
        return value

    def _position_of(self, child: Any) -> int | None:
        for position, value in enumerate(self._items):
            if value is child:
                return position
        return None

    def _forward(self, binding: ForwardingBinding, event: Event) -> None:
        index = self._position_of(binding.child)
        forwarded = Event(index=index, value=binding.child, elements=[binding.child])
        if index is not None:
            self.fire(f"change:{index}", forwarded)
        self.fire("change", forwarded)

    # --- Python protocols ---

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __contains__(self, value: Any) -> bool:
        return value in self._items

    def __bool__(self) -> bool:
        return bool(self._items)

    def __getitem__(self, index):
        # Slices come back as plain lists.
        return self._items[index]

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            start, stop = self._contiguous(index)
            self.splice(start, stop - start, *value)
        else:
            self.set(index, value)

    def __delitem__(self, index) -> None:
        if isinstance(index, slice):
            start, stop = self._contiguous(index)
            self.splice(start, stop - start)
        elif not self.remove(index):
            raise IndexError("sequence index out of range")

    def _contiguous(self, index: slice) -> tuple[int, int]:
        start, stop, step = index.indices(len(self._items))
        if step != 1:
            raise ValueError("extended slices are not supported")
        return start, max(start, stop)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ObservableSequence):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"
