"""Fan the live viewport out to every view that displays it.

Consumers (main view, minimap, ruler, ...) subscribe a callback that receives
a :class:`ViewportSnapshot` whenever the grid, centre or zoom changes.  The
navigation controller is the only publisher.  A consumer that wants to move
the view calls :meth:`ViewportBroadcast.request_go_to`, which only reaches the
controller; the resulting snapshots come from the controller's own state
changes, never from the request itself.
"""

from collections import namedtuple


ViewportSnapshot = namedtuple('ViewportSnapshot', ['grid', 'center', 'zoom'])
ViewportSnapshot.__doc__ = """Read-only ``(grid, center, zoom)`` tuple.

``grid`` is shared by reference and must not be modified by consumers.
"""


def _same(a, b):
    if a is None or b is None:
        return a is b
    return a.grid is b.grid and a.center == b.center and a.zoom == b.zoom


class ViewportBroadcast:
    """Deliver viewport snapshots to subscribed consumers."""

    def __init__(self):
        self._subscribers = []
        self._latest = None
        self._publishing = False
        self._pending = None
        self._controller = None

    @property
    def latest(self):
        """Last published snapshot, or None."""
        return self._latest

    def attach(self, controller):
        """Route :meth:`request_go_to` calls to *controller*."""
        self._controller = controller

    def subscribe(self, callback, replay=True):
        """Register *callback(snapshot)*.

        With *replay* the latest snapshot, if any, is delivered immediately.
        Returns a function that unsubscribes the callback.
        """
        self._subscribers.append(callback)
        if replay and self._latest is not None:
            callback(self._latest)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, snapshot):
        """Send *snapshot* to every subscriber if it differs from the last one.

        A publish made from inside a subscriber callback is queued and
        delivered once the current fan-out finishes, so state changes a
        consumer triggers still reach every consumer.  Returns True if the
        snapshot was delivered or queued.
        """
        if self._publishing:
            self._pending = snapshot
            return True
        if _same(snapshot, self._latest):
            return False
        self._publishing = True
        try:
            while snapshot is not None:
                self._latest = snapshot
                self._pending = None
                for callback in list(self._subscribers):
                    callback(snapshot)
                snapshot = self._pending
                if _same(snapshot, self._latest):
                    snapshot = None
        finally:
            self._pending = None
            self._publishing = False
        return True

    def request_go_to(self, x, y):
        """Ask the controller to move to grid cell (x, y).

        Accepted only when a grid is loaded.  Nothing is published here; the
        controller publishes as its tween advances.
        """
        if self._controller is None or not self._controller.ready:
            return False
        return self._controller.go_to(x, y)
