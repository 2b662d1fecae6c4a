"""Pointer and keyboard driven navigation of the sampling window.

:class:`NavigationController` owns the :class:`~heightpan.viewport.ViewportState`
and is its only writer.  Input moves it through three sessions:

- ``Idle``: nothing in progress.
- ``Dragging``: pointer held down; the centre follows the pointer.
- ``Animating``: a tween (inertia, go-to, or keyboard pan) is moving the
  centre; advanced by :meth:`NavigationController.tick`.

Only one session exists at a time.  Starting a drag or a tween cancels the
current one, leaving the centre wherever it was at that moment.  Zoom changes
are immediate and never tweened.

Every handler is a no-op until :meth:`NavigationController.set_grid` has been
called with a loaded grid.
"""

import time
from collections import namedtuple

from .broadcast import ViewportSnapshot
from .easing import Tween
from .viewport import (
    Point,
    ViewportState,
    ZOOM_STEP,
    clamp_center,
    clamp_zoom,
)


# Pointer travel (screen px, per axis) at or below which a press is a click.
CLICK_TOLERANCE = 5

INERTIA_DURATION = 0.6
GO_TO_DURATION = 0.5
PAN_DURATION = 0.3

DRAG_SCALE_MIN = 0.5
DRAG_SCALE_DIVISOR = 512

PAN_STEP_MIN = 4
PAN_STEP_DIVISOR = 16

DIRECTIONS = {
    'left': (-1, 0),
    'right': (1, 0),
    'up': (0, -1),
    'down': (0, 1),
}


Idle = namedtuple('Idle', [])
Dragging = namedtuple('Dragging', ['drag_start', 'origin_center', 'last_position', 'last_delta'])
Animating = namedtuple('Animating', ['tween', 'kind'])

IDLE = Idle()


def drag_scale(zoom):
    """Grid cells moved per screen pixel of drag at *zoom*."""
    return max(DRAG_SCALE_MIN, zoom / DRAG_SCALE_DIVISOR)


def pan_step(zoom):
    """Grid cells moved per keyboard pan at *zoom*."""
    return max(PAN_STEP_MIN, zoom // PAN_STEP_DIVISOR)


class NavigationController:
    """State machine driving the viewport centre and zoom.

    Parameters
    ----------
    broadcast : ViewportBroadcast, optional
        Receives a snapshot after every viewport change.
    clock : callable
        Monotonic clock in seconds; injected so tweens can be tested.
    easing : str or callable
        Easing for go-to and keyboard pan tweens.
    inertia_easing : str or callable
        Easing for the tween that follows a released drag.

    Examples
    --------
    >>> nav = NavigationController()
    >>> nav.set_grid(grid)
    >>> nav.pointer_down(100, 100)
    >>> nav.pointer_move(140, 100)
    >>> nav.pointer_up()
    >>> while nav.tick():
    ...     pass
    """

    def __init__(self, broadcast=None, clock=time.monotonic,
                 easing='ease_out_cubic', inertia_easing='spring'):
        self.clock = clock
        self.easing = easing
        self.inertia_easing = inertia_easing
        self.grid = None
        self.viewport = None
        self._state = IDLE
        self.broadcast = broadcast
        if broadcast is not None:
            broadcast.attach(self)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self):
        """Current session: ``Idle``, ``Dragging`` or ``Animating``."""
        return self._state

    @property
    def ready(self):
        return self.grid is not None and self.viewport is not None

    @property
    def center(self):
        return None if self.viewport is None else self.viewport.center

    @property
    def zoom(self):
        return None if self.viewport is None else self.viewport.zoom

    def snapshot(self):
        return ViewportSnapshot(self.grid, self.center, self.zoom)

    def set_grid(self, grid):
        """Install a freshly loaded grid and reset to the default viewport.

        Passing ``None`` disables navigation again.
        """
        self._state = IDLE
        self.grid = grid
        self.viewport = None if grid is None else ViewportState.initial(grid)
        self._publish()

    def _publish(self):
        if self.broadcast is not None:
            self.broadcast.publish(self.snapshot())

    def _move_center(self, center):
        """Clamp and apply *center*; return True if it changed."""
        center = clamp_center(self.grid, center, self.viewport.zoom)
        if center == self.viewport.center:
            return False
        self.viewport.center = center
        return True

    def cancel(self):
        """End the current drag or tween where it is.

        The centre keeps the value it had at the moment of cancellation.
        Returns True if a session was cancelled.
        """
        if isinstance(self._state, Idle):
            return False
        self._state = IDLE
        return True

    def _start_tween(self, target, duration, kind, easing):
        self.cancel()
        tween = Tween(self.viewport.center, target, self.clock(), duration, easing)
        self._state = Animating(tween, kind)

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def pointer_down(self, x, y):
        """Begin a drag at screen position (x, y)."""
        if not self.ready:
            return False
        self.cancel()
        pos = Point(x, y)
        self._state = Dragging(pos, self.viewport.center, pos, Point(0, 0))
        return True

    def pointer_move(self, x, y):
        """Drag the window so the content follows the pointer."""
        state = self._state
        if not self.ready or not isinstance(state, Dragging):
            return False

        scale = drag_scale(self.viewport.zoom)
        pos = Point(x, y)
        self._state = state._replace(
            last_position=pos,
            last_delta=Point(x - state.last_position.x, y - state.last_position.y),
        )
        center = Point(
            state.origin_center.x - (x - state.drag_start.x) * scale,
            state.origin_center.y - (y - state.drag_start.y) * scale,
        )
        if self._move_center(center):
            self._publish()
            return True
        return False

    def pointer_up(self, x=None, y=None):
        """Finish a drag.

        A release within :data:`CLICK_TOLERANCE` pixels of the press on both
        axes is a click: the centre returns to where the drag began and no
        inertia follows.  Otherwise an inertia tween toward
        ``center - 2 * last_delta * scale`` starts.
        """
        if not self.ready or not isinstance(self._state, Dragging):
            return False
        if x is not None and y is not None and (x, y) != tuple(self._state.last_position):
            self.pointer_move(x, y)

        state = self._state
        dx = state.last_position.x - state.drag_start.x
        dy = state.last_position.y - state.drag_start.y

        if abs(dx) <= CLICK_TOLERANCE and abs(dy) <= CLICK_TOLERANCE:
            self._state = IDLE
            if self._move_center(state.origin_center):
                self._publish()
            return False

        scale = drag_scale(self.viewport.zoom)
        center = self.viewport.center
        target = clamp_center(self.grid, Point(
            center.x - 2 * state.last_delta.x * scale,
            center.y - 2 * state.last_delta.y * scale,
        ), self.viewport.zoom)
        self._start_tween(target, INERTIA_DURATION, 'inertia', self.inertia_easing)
        return True

    # ------------------------------------------------------------------
    # Programmatic and keyboard commands
    # ------------------------------------------------------------------

    def go_to(self, x, y):
        """Animate the centre to grid cell (x, y).

        Ignored while no grid is loaded, during a drag, or when the clamped
        target is already the centre.  Returns True if a tween started.
        """
        if not self.ready or isinstance(self._state, Dragging):
            return False
        target = clamp_center(self.grid, Point(x, y), self.viewport.zoom)
        if target == self.viewport.center:
            return False
        self._start_tween(target, GO_TO_DURATION, 'go_to', self.easing)
        return True

    def pan(self, direction):
        """Step the window one keyboard increment toward *direction*.

        *direction* is one of ``'left'``, ``'right'``, ``'up'``, ``'down'``.
        """
        try:
            sx, sy = DIRECTIONS[direction]
        except KeyError:
            raise ValueError(
                f"Unknown direction {direction!r}; use one of {sorted(DIRECTIONS)}"
            )
        if not self.ready or isinstance(self._state, Dragging):
            return False

        step = pan_step(self.viewport.zoom)
        center = self.viewport.center
        target = clamp_center(
            self.grid, Point(center.x + sx * step, center.y + sy * step),
            self.viewport.zoom,
        )
        if target == center:
            return False
        self._start_tween(target, PAN_DURATION, 'pan', self.easing)
        return True

    def step_zoom(self, steps):
        """Change the window size by ``steps * ZOOM_STEP`` cells immediately.

        The zoom is clamped to the grid and the centre re-clamped to the new
        window.  Returns True if the viewport changed.
        """
        if not self.ready:
            return False
        zoom = clamp_zoom(self.grid, self.viewport.zoom + steps * ZOOM_STEP)
        if zoom == self.viewport.zoom:
            return False
        self.viewport.zoom = zoom
        self._move_center(self.viewport.center)
        self._publish()
        return True

    def increase_zoom(self):
        """Widen the window (``+`` key)."""
        return self.step_zoom(1)

    def decrease_zoom(self):
        """Narrow the window (``-`` key)."""
        return self.step_zoom(-1)

    # ------------------------------------------------------------------
    # Frame callback
    # ------------------------------------------------------------------

    def tick(self, now=None):
        """Advance the active tween to *now* (defaults to the clock).

        Returns True while a tween is still running after this frame.
        """
        state = self._state
        if not self.ready or not isinstance(state, Animating):
            return False
        if now is None:
            now = self.clock()

        changed = self._move_center(state.tween.value_at(now))
        running = not state.tween.finished(now)
        if not running:
            self._state = IDLE
        if changed:
            self._publish()
        return running
