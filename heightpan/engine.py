"""Interactive heightmap explorer using matplotlib for display.

Shows the sampling window of a heightmap in the main axes, the whole grid
with the window outline in a minimap inset, and a ruler strip along the
bottom.  All three are consumers of one :class:`ViewportBroadcast`; the
:class:`NavigationController` is driven by a canvas timer.
"""

import time
from typing import Optional, Tuple

import numpy as np

from .broadcast import ViewportBroadcast
from .grid import HeightmapGrid, ParseError
from .input import InputDispatcher
from .navigation import NavigationController
from .overlays import minimap_to_grid, normalize_heights, ruler_ticks, window_rect
from .providers import load_heightmap
from .remote_data import NetworkError
from .viewport import RegionCache


class HeightmapExplorer:
    """
    Interactive heightmap explorer using matplotlib.

    Controls
    --------
    - Click+Drag: Pan the sampling window (content follows the cursor)
    - Arrows: Step the window left/right/up/down
    - +/=: Widen the window (more terrain, coarser)
    - -: Narrow the window
    - Click on minimap: Fly to that point
    - M: Toggle minimap
    - H: Toggle help overlay
    - X/Esc: Exit

    Examples
    --------
    >>> explorer = HeightmapExplorer(grid)
    >>> explorer.run()
    """

    def __init__(self, grid: Optional[HeightmapGrid] = None,
                 width: int = 800, height: int = 600,
                 cmap: str = 'terrain', tick_interval: int = 16,
                 show_minimap: bool = True, title: str = None,
                 clock=time.monotonic, quiet: bool = False):
        """
        Initialize the explorer.

        Parameters
        ----------
        grid : HeightmapGrid, optional
            Heightmap to explore.  May be loaded later with :meth:`load`.
        width, height : int
            Window size in pixels.
        cmap : str
            Matplotlib colormap for the main view.
        tick_interval : int
            Milliseconds between animation frames.
        show_minimap : bool
            Show the minimap inset on start.
        clock : callable
            Monotonic clock in seconds, shared with the navigation tweens.
        quiet : bool
            Suppress console output.
        """
        self.width = width
        self.height = height
        self.cmap = cmap
        self.show_minimap = show_minimap
        self.show_help = True
        self.quiet = quiet
        self._title = title or 'heightmap'
        self._tick_interval = tick_interval

        self.broadcast = ViewportBroadcast()
        self.controller = NavigationController(self.broadcast, clock=clock)
        self.input = InputDispatcher(self.controller)
        self.input.add_key_handler('m', self._toggle_minimap)
        self.input.add_key_handler('h', self._toggle_help)
        self.input.add_key_handler('x', self.close)
        self.input.add_key_handler('escape', self.close)
        self._regions = RegionCache()

        # matplotlib state, created by build_figure()
        self.fig = None
        self.ax = None
        self.im = None
        self._minimap_ax = None
        self._minimap_im = None
        self._minimap_rect = None
        self._minimap_cross = None
        self._minimap_scale = (1.0, 1.0)
        self._ruler_ax = None
        self._ruler_lines = None
        self._ruler_labels = []
        self._ruler_zoom_text = None
        self._status_text = None
        self._clim_grid = None
        self.help_text = None
        self._timer = None
        self.running = False
        self.frame_count = 0
        self._dirty = False

        self._unsubscribe = [
            self.broadcast.subscribe(self._update_main_view),
            self.broadcast.subscribe(self._update_minimap),
            self.broadcast.subscribe(self._update_ruler),
        ]

        if grid is not None:
            self.controller.set_grid(grid)

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    @property
    def grid(self):
        return self.controller.grid

    def load(self, provider, zoom: int, x: int, y: int):
        """Load tile ``zoom/x/y`` from *provider* and make it the active grid.

        On ``NetworkError`` / ``ParseError`` the error is re-raised and the
        explorer keeps whatever grid it had (navigation stays disabled if
        there was none).
        """
        try:
            grid = load_heightmap(provider, zoom, x, y)
        except (NetworkError, ParseError) as e:
            if not self.quiet:
                print(f"Failed to load tile {zoom}/{x}/{y}: {e}")
            raise
        self._title = f'tile {zoom}/{x}/{y}'
        self._regions.clear()
        self.controller.set_grid(grid)
        if self.fig is not None:
            self._reset_minimap_background()
        return grid

    def region(self):
        """Sampling window for the current viewport, or None."""
        if not self.controller.ready:
            return None
        return self._regions.get(self.grid, self.controller.center, self.controller.zoom)

    # ------------------------------------------------------------------
    # Broadcast consumers
    # ------------------------------------------------------------------

    def _update_main_view(self, snapshot):
        self._dirty = True
        if self.im is None or snapshot.grid is None:
            return
        region = self._regions.get(snapshot.grid, snapshot.center, snapshot.zoom)
        self.im.set_data(region.data)
        if snapshot.grid is not self._clim_grid:
            self._clim_grid = snapshot.grid
            lo, hi = snapshot.grid.elevation_range()
            if not np.isnan(lo):
                self.im.set_clim(lo, hi if hi > lo else lo + 1)
        self._status_text.set_text(self._build_title(snapshot))

    def _update_minimap(self, snapshot):
        if self._minimap_ax is None or snapshot.grid is None:
            return
        self._minimap_ax.set_visible(self.show_minimap)
        sx, sy = self._minimap_scale
        start_x, start_y, size = window_rect(snapshot.grid, snapshot.center, snapshot.zoom)
        self._minimap_rect.set_xy((start_x * sx - 0.5, start_y * sy - 0.5))
        self._minimap_rect.set_width(size * sx)
        self._minimap_rect.set_height(size * sy)
        cx = snapshot.center.x * sx
        cy = snapshot.center.y * sy
        self._minimap_cross.set_offsets([[cx, cy]])

    def _update_ruler(self, snapshot):
        if self._ruler_ax is None or snapshot.grid is None:
            return
        ticks = ruler_ticks(snapshot.center.x, snapshot.zoom, 1.0 * self.width)
        segments = []
        for label in self._ruler_labels:
            label.remove()
        self._ruler_labels = []
        for x, degrees, is_major in ticks:
            top = 0.5 if is_major else 0.25
            segments.append([(x, 0.0), (x, top)])
            if is_major:
                self._ruler_labels.append(self._ruler_ax.text(
                    x, top + 0.05, f'{degrees}°', color='#9d4b4b',
                    fontsize=8, ha='center', va='bottom',
                ))
        self._ruler_lines.set_segments(segments)
        self._ruler_zoom_text.set_text(f'×{snapshot.zoom}')

    def _build_title(self, snapshot=None):
        snapshot = snapshot or self.controller.snapshot()
        if snapshot.grid is None:
            return f'{self._title} (loading)'
        grid = snapshot.grid
        return (f'{self._title}  {grid.width}×{grid.height}  '
                f'center ({snapshot.center.x:.0f}, {snapshot.center.y:.0f})  '
                f'window {snapshot.zoom}')

    # ------------------------------------------------------------------
    # Figure
    # ------------------------------------------------------------------

    def build_figure(self):
        """Create the figure, axes and persistent artists."""
        import matplotlib.pyplot as plt
        from matplotlib.collections import LineCollection
        from matplotlib.patches import Rectangle

        # Clear default keymaps so they don't fight our controls
        for param in list(plt.rcParams.keys()):
            if param.startswith('keymap.'):
                plt.rcParams[param] = []

        old_toolbar = plt.rcParams.get('toolbar', 'toolbar2')
        plt.rcParams['toolbar'] = 'None'
        self.fig = plt.figure(figsize=(self.width / 100, self.height / 100), dpi=100)
        plt.rcParams['toolbar'] = old_toolbar
        self.fig.patch.set_facecolor('black')

        self.ax = self.fig.add_axes([0, 0.08, 1, 0.86])
        self.ax.set_facecolor('black')
        self.ax.axis('off')
        self.im = self.ax.imshow(
            np.zeros((2, 2)), cmap=self.cmap, origin='upper',
            aspect='equal', interpolation='nearest',
        )
        self._status_text = self.fig.text(
            0.5, 0.97, self._build_title(), color='white', fontsize=11,
            fontweight='bold', ha='center', va='top',
        )

        # Ruler strip along the bottom
        self._ruler_ax = self.fig.add_axes([0.2, 0.0, 0.6, 0.07])
        self._ruler_ax.set_xlim(0, self.width)
        self._ruler_ax.set_ylim(0, 1)
        self._ruler_ax.axis('off')
        self._ruler_ax.axhline(0.0, color='#9d4b4b', linewidth=2)
        self._ruler_lines = LineCollection([], colors='#9d4b4b', linewidths=1.5)
        self._ruler_ax.add_collection(self._ruler_lines)
        self._ruler_zoom_text = self._ruler_ax.text(
            self.width - 8, 0.6, '', color='#9d4b4b', fontsize=9, ha='right',
        )

        # Minimap inset in the bottom-right corner (~20% of figure width)
        margin = 0.02
        ax_width = 0.2
        ax_height = ax_width * (self.width / self.height)
        self._minimap_ax = self.fig.add_axes(
            [1 - ax_width - margin, 0.08 + margin, ax_width, min(ax_height, 0.35)]
        )
        self._minimap_ax.set_xticks([])
        self._minimap_ax.set_yticks([])
        for spine in self._minimap_ax.spines.values():
            spine.set_edgecolor('#555555')
            spine.set_linewidth(0.6)
        self._minimap_im = self._minimap_ax.imshow(
            np.zeros((2, 2)), cmap='gray', origin='upper', aspect='auto',
            vmin=0, vmax=1,
        )
        self._minimap_rect = Rectangle(
            (0, 0), 1, 1, fill=False, edgecolor='red', linewidth=2, zorder=3,
        )
        self._minimap_ax.add_patch(self._minimap_rect)
        self._minimap_cross = self._minimap_ax.scatter(
            [], [], marker='+', c='yellow', s=60, zorder=4,
        )

        help_str = (
            "NAVIGATION\n"
            "  Drag     Pan window\n"
            "  Arrows   Step window\n"
            "  + / -    Widen / narrow window\n"
            "  Minimap  Click to fly there\n"
            "\n"
            "OTHER\n"
            "  M        Toggle minimap\n"
            "  H        Toggle this help\n"
            "  X / Esc  Exit"
        )
        self.help_text = self.ax.text(
            0.01, 0.98, help_str, transform=self.ax.transAxes, fontsize=10,
            color='white', alpha=0.9, verticalalignment='top',
            fontfamily='monospace',
            bbox=dict(boxstyle='round,pad=0.6', facecolor='black', alpha=0.6),
        )
        self.help_text.set_visible(self.show_help)

        canvas = self.fig.canvas
        canvas.mpl_connect('key_press_event', self._handle_key_press)
        canvas.mpl_connect('key_release_event', self._handle_key_release)
        canvas.mpl_connect('button_press_event', self._handle_mouse_press)
        canvas.mpl_connect('button_release_event', self._handle_mouse_release)
        canvas.mpl_connect('motion_notify_event', self._handle_mouse_motion)
        canvas.mpl_connect('figure_leave_event', self._handle_figure_leave)

        self._reset_minimap_background()
        return self.fig

    def _reset_minimap_background(self):
        grid = self.grid
        if self._minimap_im is None or grid is None:
            return
        background = np.full(grid.shape, np.nan)
        background[:grid.rows_present] = normalize_heights(grid.data)
        self._minimap_im.set_data(background)
        self._minimap_im.set_extent((-0.5, grid.width - 0.5, grid.height - 0.5, -0.5))
        self._minimap_ax.set_xlim(-0.5, grid.width - 0.5)
        self._minimap_ax.set_ylim(grid.height - 0.5, -0.5)
        self._minimap_scale = (1.0, 1.0)
        snapshot = self.broadcast.latest
        if snapshot is not None:
            self._update_main_view(snapshot)
            self._update_minimap(snapshot)
            self._update_ruler(snapshot)

    def _toggle_minimap(self):
        self.show_minimap = not self.show_minimap
        if self._minimap_ax is not None:
            self._minimap_ax.set_visible(self.show_minimap)
        self._dirty = True

    def _toggle_help(self):
        self.show_help = not self.show_help
        if self.help_text is not None:
            self.help_text.set_visible(self.show_help)
        self._dirty = True

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _screen_y(self, event):
        # matplotlib display coords grow upward; navigation expects screen-down
        return self.fig.bbox.height - event.y

    def _handle_key_press(self, event):
        self.input.handle_key(event.key or '')

    def _handle_key_release(self, event):
        self.input.handle_key_release(event.key or '')

    def _handle_figure_leave(self, event):
        self.input.release_modifiers()

    def _handle_mouse_press(self, event):
        if event.x is None or event.y is None:
            return
        if self.show_minimap and event.inaxes is self._minimap_ax:
            if event.button == 1 and self.grid is not None \
                    and event.xdata is not None and event.ydata is not None:
                sx, sy = self._minimap_scale
                cell = minimap_to_grid(self.grid, event.xdata + 0.5,
                                       event.ydata + 0.5, sx, sy)
                self.broadcast.request_go_to(*cell)
            return
        if event.inaxes is not self.ax:
            return
        self.input.press(event.x, self._screen_y(event), event.button)

    def _handle_mouse_release(self, event):
        if event.x is None or event.y is None:
            self.input.release()
        else:
            self.input.release(event.x, self._screen_y(event))

    def _handle_mouse_motion(self, event):
        if event.x is None or event.y is None:
            return
        self.input.motion(event.x, self._screen_y(event))

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def _tick(self):
        """Advance navigation and redraw if anything changed (timer callback)."""
        if not self.running:
            return
        self.controller.tick()
        if self._dirty:
            self._dirty = False
            self.frame_count += 1
            self.fig.canvas.draw_idle()

    def close(self):
        """Stop the loop and close the window."""
        self.running = False
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        if self.fig is not None:
            import matplotlib.pyplot as plt
            plt.close(self.fig)

    def run(self):
        """Open the window and block until it is closed."""
        import matplotlib.pyplot as plt

        backend = plt.get_backend().lower()
        if any(nb in backend for nb in ('agg', 'inline')):
            if not self.quiet:
                print("WARNING: Non-interactive matplotlib backend detected.")
                print("Keyboard and mouse controls will not work.")

        if self.fig is None:
            self.build_figure()

        self._timer = self.fig.canvas.new_timer(interval=self._tick_interval)
        self._timer.add_callback(self._tick)
        self._timer.start()

        if self.fig.canvas.manager is not None:
            self.fig.canvas.manager.set_window_title(f'heightpan: {self._title}')

        if not self.quiet:
            print("\nHeightmap Explorer Started")
            print(f"  Window: {self.width}x{self.height}")
            if self.grid is not None:
                lo, hi = self.grid.elevation_range()
                print(f"  Grid: {self.grid.width}x{self.grid.height}, "
                      f"elevation {lo:.0f}m - {hi:.0f}m")
            print("\nPress H for controls, X or Esc to exit\n")

        self.running = True
        plt.show(block=True)

        self.running = False
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        for unsubscribe in self._unsubscribe:
            unsubscribe()

        if not self.quiet:
            print(f"Explorer closed after {self.frame_count} frames")


def explore(source, tile: Optional[Tuple[int, int, int]] = None,
            width: int = 800, height: int = 600, cmap: str = 'terrain',
            quiet: bool = False):
    """
    Launch an interactive explorer for a heightmap.

    Parameters
    ----------
    source : HeightmapGrid, array-like, or HeightmapProvider
        The heightmap itself, a 2D array, or a provider to load *tile* from.
    tile : tuple of int, optional
        ``(zoom, x, y)`` tile index; required when *source* is a provider.
    width, height : int
        Window size in pixels.
    cmap : str
        Colormap for the main view.
    quiet : bool
        Suppress console output.

    Returns
    -------
    HeightmapExplorer
        The explorer after its window has been closed.

    Examples
    --------
    >>> from heightpan import explore, RelayHeightmapProvider
    >>> explore(RelayHeightmapProvider(), tile=(10, 163, 395))
    """
    explorer = HeightmapExplorer(width=width, height=height, cmap=cmap, quiet=quiet)
    if hasattr(source, 'get_heightmap_tile'):
        if tile is None:
            raise ValueError("tile=(zoom, x, y) is required when exploring a provider")
        explorer.load(source, *tile)
    elif isinstance(source, HeightmapGrid):
        explorer.controller.set_grid(source)
    else:
        explorer.controller.set_grid(HeightmapGrid.from_array(source))
    explorer.run()
    return explorer
