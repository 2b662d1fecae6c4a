"""Tests for the matplotlib explorer (headless, Agg backend)."""

import numpy as np
import pytest

from heightpan.grid import HeightmapGrid
from heightpan.navigation import Animating, Dragging
from heightpan.providers import HeightmapProvider, MockHeightmapProvider
from heightpan.remote_data import NetworkError
from heightpan.viewport import Point


def has_matplotlib():
    """Check if matplotlib is available."""
    try:
        import matplotlib  # noqa: F401
        return True
    except ImportError:
        return False


pytestmark = pytest.mark.skipif(not has_matplotlib(), reason="matplotlib not available")


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FailingProvider(HeightmapProvider):
    def get_heightmap_tile(self, zoom, x, y):
        raise NetworkError("Heightmap relay error: 503", status=503)


class FakeEvent:
    def __init__(self, key=None, x=None, y=None, button=1, inaxes=None,
                 xdata=None, ydata=None):
        self.key = key
        self.x = x
        self.y = y
        self.button = button
        self.inaxes = inaxes
        self.xdata = xdata
        self.ydata = ydata


@pytest.fixture(autouse=True)
def agg_backend():
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    yield
    plt.close('all')


@pytest.fixture
def grid():
    H, W = 400, 600
    y = np.arange(H)[:, None]
    x = np.arange(W)[None, :]
    return HeightmapGrid((x + 1000 * y).astype(np.float64))


@pytest.fixture
def explorer(grid):
    from heightpan.engine import HeightmapExplorer
    clock = FakeClock()
    ex = HeightmapExplorer(grid, width=400, height=300, clock=clock, quiet=True)
    ex.clock = clock
    ex.build_figure()
    return ex


class TestExplorerViews:
    def test_main_view_shows_region(self, explorer, grid):
        region = explorer.region()
        assert region.width == 256
        np.testing.assert_array_equal(explorer.im.get_array(), region.data)

    def test_minimap_rectangle(self, explorer):
        rect = explorer._minimap_rect
        assert rect.get_xy() == (300 - 128 - 0.5, 200 - 128 - 0.5)
        assert rect.get_width() == 256
        np.testing.assert_allclose(explorer._minimap_cross.get_offsets(), [[300, 200]])

    def test_views_follow_zoom(self, explorer, grid):
        explorer.input.handle_key('-')
        assert explorer.controller.zoom == 224
        assert explorer.im.get_array().shape == (224, 224)
        assert explorer._minimap_rect.get_width() == 224
        assert explorer._ruler_zoom_text.get_text() == '×224'

    def test_minimap_click_flies_there(self, explorer):
        event = FakeEvent(x=1, y=1, inaxes=explorer._minimap_ax, xdata=199.7, ydata=150.2)
        explorer._handle_mouse_press(event)
        state = explorer.controller.state
        assert isinstance(state, Animating)
        assert state.tween.target == Point(200, 150)

        explorer.running = True
        explorer.clock.now = 1.0
        explorer._tick()
        assert explorer.controller.center == Point(200, 150)
        np.testing.assert_allclose(explorer._minimap_cross.get_offsets(), [[200, 150]])

    def test_drag_in_main_view(self, explorer):
        height = explorer.fig.bbox.height
        explorer._handle_mouse_press(FakeEvent(x=100, y=height - 100, inaxes=explorer.ax))
        explorer._handle_mouse_motion(FakeEvent(x=140, y=height - 100))
        assert explorer.controller.center == Point(300 - 40 * 0.5, 200)
        explorer._handle_mouse_release(FakeEvent(x=140, y=height - 100))
        assert isinstance(explorer.controller.state, Animating)

    def test_drag_outside_main_axes_ignored(self, explorer):
        explorer._handle_mouse_press(FakeEvent(x=100, y=100, inaxes=None))
        explorer._handle_mouse_motion(FakeEvent(x=200, y=100))
        assert explorer.controller.center == Point(300, 200)

    def test_leaving_figure_forgets_shift(self, explorer):
        explorer._handle_key_press(FakeEvent(key='shift'))
        assert explorer.input.shift_held
        explorer._handle_figure_leave(FakeEvent())
        height = explorer.fig.bbox.height
        explorer._handle_mouse_press(FakeEvent(x=100, y=height - 100, inaxes=explorer.ax))
        assert isinstance(explorer.controller.state, Dragging)

    def test_toggles(self, explorer):
        explorer._handle_key_press(FakeEvent(key='m'))
        assert not explorer.show_minimap
        assert not explorer._minimap_ax.get_visible()
        explorer._handle_key_press(FakeEvent(key='h'))
        assert not explorer.help_text.get_visible()


class TestExplorerLoading:
    def test_load_from_provider(self):
        from heightpan.engine import HeightmapExplorer
        ex = HeightmapExplorer(quiet=True)
        assert ex.region() is None
        ex.build_figure()
        grid = ex.load(MockHeightmapProvider(width=48, height=48), 4, 1, 1)
        assert ex.grid is grid
        assert ex.controller.zoom == 48
        np.testing.assert_array_equal(ex.im.get_array(), grid.data)

    def test_failed_load_keeps_navigation_disabled(self):
        from heightpan.engine import HeightmapExplorer
        ex = HeightmapExplorer(quiet=True)
        with pytest.raises(NetworkError):
            ex.load(FailingProvider(), 4, 1, 1)
        assert ex.grid is None
        assert not ex.controller.ready
        ex.input.handle_key('left')
        assert ex.controller.center is None
