"""Dependency tracking — which keys a generator reads, and who is evaluating.

Uses a contextvar to record the keys of a model that are read while one of
its generators runs. Those keys become the generator's inferred
dependencies. Reads on other containers (including nested ones) are not
recorded: nested changes reach the model through forwarding.

Re-entrancy guard: every running re-evaluation (generator call plus the
write of its result, which is where cascades happen) is pushed on a stack.
A listener may write a dependency back while the result is being delivered,
so a (model, key) pair is allowed on the stack more than once. Past
MAX_REENTRY occurrences it is a cycle and raises CircularDependencyError
instead of recursing until the interpreter gives up.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Any, Iterator

from laces.errors import CircularDependencyError


class Frame:
    """Reads collected during one generator call."""

    __slots__ = ("owner", "key", "reads")

    def __init__(self, owner: Any, key: str) -> None:
        self.owner = owner
        self.key = key
        self.reads: list[str] = []

    def record(self, key: str) -> None:
        if key not in self.reads:
            self.reads.append(key)


# The innermost running generator call. Container reads report to it.
current_frame: contextvars.ContextVar[Frame | None] = contextvars.ContextVar(
    "current_frame", default=None
)

# (owner, key) of every re-evaluation on the call stack, outermost first.
_evaluating: list[tuple[Any, str]] = []


# A (model, key) pair may re-enter this many times before it counts as a cycle.
# Listeners that write a dependency back settle well before it.
MAX_REENTRY = 32


def record_read(owner: Any, key: Any) -> None:
    """Called by containers on every keyed read."""
    frame = current_frame.get()
    if frame is not None and frame.owner is owner and isinstance(key, str):
        frame.record(key)


@contextmanager
def tracking(owner: Any, key: str) -> Iterator[Frame]:
    """Collect the keys of owner read inside the block."""
    frame = Frame(owner, key)
    token = current_frame.set(frame)
    try:
        yield frame
    finally:
        current_frame.reset(token)


@contextmanager
def guard(owner: Any, key: str) -> Iterator[None]:
    """Mark (owner, key) as evaluating. Raises once it re-enters too often."""
    positions = [
        position
        for position, (other, other_key) in enumerate(_evaluating)
        if other is owner and other_key == key
    ]
    if len(positions) >= MAX_REENTRY:
        chain = [k for _, k in _evaluating[positions[-1]:]] + [key]
        raise CircularDependencyError(chain)

    _evaluating.append((owner, key))
    try:
        yield
    finally:
        _evaluating.pop()


def evaluation_depth() -> int:
    """Number of re-evaluations on the stack. Useful for testing."""
    return len(_evaluating)
