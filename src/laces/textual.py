"""Textual integration for laces. Opt-in — requires textual.

Ties a dotted path of a laces container to a widget update. The guard,
pause state, NoMatches handling and thread marshalling live here, not at
the call sites, and core laces stays unaware of Textual.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from laces.paths import PathWatch, watch_path

# Pause state is owned here, keyed by id(app) so several apps can coexist.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend ties during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def tie(app, container, path, effect, *, fire_immediately=True) -> PathWatch:
    """Run effect(value) whenever the value at path changes.

    Skips updates while the app is not running or paused, swallows
    NoMatches from widget queries, and marshals writes made on another
    thread through app.call_from_thread. Writes from the widget back into
    the model go through laces.paths.assign() or the container's set().

    Usage:
        tie(app, model, "user.name", lambda v: app.query_one("#name").update(v))
    """
    _main = threading.get_ident()

    def _guarded(value):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value):
        try:
            effect(value)
        except NoMatches:
            pass

    watch = watch_path(container, path, _guarded)
    if fire_immediately:
        _guarded(watch.value)
    return watch
