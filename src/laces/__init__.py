"""laces: observable maps, sequences and computed properties for Python."""

from importlib.metadata import version as _version

__version__ = _version("laces")

from laces.errors import LacesError, CircularDependencyError
from laces.events import MISSING, Event, EventBus, Observable
from laces.coercion import register_type, unregister_type
from laces.wrapping import wrap, is_observable
from laces.map import ObservableMap
from laces.sequence import ObservableSequence
from laces.model import ComputedModel
from laces.paths import PathWatch, assign, resolve, watch_path
# textual NOT auto-imported: opt-in only

__all__ = [
    "MISSING",
    "Event",
    "EventBus",
    "Observable",
    "ObservableMap",
    "ObservableSequence",
    "ComputedModel",
    "wrap",
    "is_observable",
    "register_type",
    "unregister_type",
    "resolve",
    "assign",
    "watch_path",
    "PathWatch",
    "LacesError",
    "CircularDependencyError",
]
