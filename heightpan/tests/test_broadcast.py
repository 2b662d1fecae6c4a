"""Tests for viewport fan-out to consumers."""

import numpy as np
import pytest

from heightpan.broadcast import ViewportBroadcast, ViewportSnapshot
from heightpan.grid import HeightmapGrid
from heightpan.navigation import Animating, NavigationController
from heightpan.viewport import Point


def _snapshot(grid, x=10, y=10, zoom=16):
    return ViewportSnapshot(grid, Point(x, y), zoom)


@pytest.fixture
def grid():
    return HeightmapGrid(np.zeros((64, 64)))


class TestPublish:
    def test_delivers_to_all(self, grid):
        broadcast = ViewportBroadcast()
        a, b = [], []
        broadcast.subscribe(a.append)
        broadcast.subscribe(b.append)
        snap = _snapshot(grid)
        assert broadcast.publish(snap) is True
        assert a == [snap]
        assert b == [snap]
        assert broadcast.latest is snap

    def test_duplicate_suppressed(self, grid):
        broadcast = ViewportBroadcast()
        received = []
        broadcast.subscribe(received.append)
        broadcast.publish(_snapshot(grid))
        assert broadcast.publish(_snapshot(grid)) is False
        assert len(received) == 1

    def test_new_grid_with_same_values_is_a_change(self, grid):
        broadcast = ViewportBroadcast()
        received = []
        broadcast.subscribe(received.append)
        broadcast.publish(_snapshot(grid))
        broadcast.publish(_snapshot(HeightmapGrid(np.zeros((64, 64)))))
        assert len(received) == 2

    def test_replay_on_subscribe(self, grid):
        broadcast = ViewportBroadcast()
        snap = _snapshot(grid)
        broadcast.publish(snap)
        received = []
        broadcast.subscribe(received.append)
        assert received == [snap]

    def test_unsubscribe(self, grid):
        broadcast = ViewportBroadcast()
        received = []
        unsubscribe = broadcast.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        broadcast.publish(_snapshot(grid))
        assert received == []

    def test_publish_from_consumer_delivered_after_fan_out(self, grid):
        broadcast = ViewportBroadcast()
        first, second = [], []

        def nudge(snapshot):
            first.append(snapshot)
            if snapshot.center.x == 10:
                broadcast.publish(_snapshot(grid, x=11))
                # Not delivered to anyone until the current fan-out is done
                assert second == []

        broadcast.subscribe(nudge)
        broadcast.subscribe(second.append)
        broadcast.publish(_snapshot(grid))
        assert [s.center.x for s in first] == [10, 11]
        assert [s.center.x for s in second] == [10, 11]
        assert broadcast.latest.center.x == 11

    def test_consumer_republishing_same_snapshot_stops(self, grid):
        broadcast = ViewportBroadcast()
        received = []

        def echo(snapshot):
            received.append(snapshot)
            broadcast.publish(_snapshot(grid))

        broadcast.subscribe(echo)
        broadcast.publish(_snapshot(grid))
        assert len(received) == 1

    def test_consumer_zoom_change_reaches_consumers(self):
        broadcast = ViewportBroadcast()
        nav = NavigationController(broadcast, clock=lambda: 0.0)
        received = []

        def narrow_once(snapshot):
            received.append(snapshot)
            if len(received) == 1:
                nav.decrease_zoom()

        broadcast.subscribe(narrow_once)
        nav.set_grid(HeightmapGrid(np.zeros((512, 512))))
        assert nav.zoom == 224
        assert broadcast.latest.zoom == nav.zoom
        assert [s.zoom for s in received] == [256, 224]

    def test_consumer_error_propagates(self, grid):
        broadcast = ViewportBroadcast()

        def broken(snapshot):
            raise RuntimeError("boom")

        broadcast.subscribe(broken)
        with pytest.raises(RuntimeError, match="boom"):
            broadcast.publish(_snapshot(grid))
        # The guard is released so later publishes still go out
        received = []
        broadcast.subscribe(received.append, replay=False)
        broadcast._subscribers.remove(broken)
        broadcast.publish(_snapshot(grid, x=20))
        assert len(received) == 1


class TestGoToRequests:
    def test_rejected_without_controller(self):
        assert ViewportBroadcast().request_go_to(1, 1) is False

    def test_rejected_without_grid(self):
        broadcast = ViewportBroadcast()
        NavigationController(broadcast)
        assert broadcast.request_go_to(1, 1) is False

    def test_consumer_go_to_does_not_echo(self):
        grid = HeightmapGrid(np.zeros((512, 512)))
        clock = [0.0]
        broadcast = ViewportBroadcast()
        nav = NavigationController(broadcast, clock=lambda: clock[0])
        nav.set_grid(grid)
        received = []

        def minimap(snapshot):
            received.append(snapshot)
            if len(received) == 1:
                broadcast.request_go_to(300, 300)

        broadcast.subscribe(minimap)
        # Replay triggered the request; the controller is animating but
        # nothing new was published.
        assert len(received) == 1
        assert isinstance(nav.state, Animating)

        clock[0] = 1.0
        nav.tick()
        assert len(received) == 2
        assert received[-1].center == Point(300, 300)
