"""Exceptions raised by laces.

Most operations prefer a falsy result over raising (removing a missing key,
unbinding an unknown listener). The exceptions below cover the cases where
carrying on would leave the graph in a broken state.
"""


class LacesError(Exception):
    """Base class for laces errors."""


class CircularDependencyError(LacesError, RuntimeError):
    """Raised when a computed property's re-evaluation re-enters itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = list(chain)
        super().__init__("Circular dependency: " + " -> ".join(self.chain))
