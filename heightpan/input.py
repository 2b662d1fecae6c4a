"""Single entry point for keyboard and pointer input.

Raw key names (matplotlib spelling: ``'left'``, ``'shift+up'``, ``'+'`` ...)
and pointer positions are normalized here and forwarded to the
:class:`~heightpan.navigation.NavigationController` as a small set of
semantic commands.  Views register their own handlers with the dispatcher
rather than with the window, so no two components ever react to the same
keystroke.
"""


PAN_KEYS = {
    'left': 'left',
    'right': 'right',
    'up': 'up',
    'down': 'down',
}

ZOOM_KEYS = {
    '+': 1,
    '=': 1,
    '-': -1,
    '_': -1,
}

MODIFIERS = ('shift', 'control', 'ctrl', 'alt', 'super', 'cmd')


def split_key(raw_key):
    """Split ``'shift+left'`` into ``({'shift'}, 'left')``.

    ``'+'`` on its own (and ``'shift++'``) is a key, not a separator.
    """
    if not raw_key:
        return set(), ''
    key = raw_key.lower()
    modifiers = set()
    while True:
        head, sep, rest = key.partition('+')
        if sep and head in MODIFIERS and rest:
            modifiers.add('ctrl' if head == 'control' else head)
            key = rest
        else:
            break
    return modifiers, key


class InputDispatcher:
    """Translate raw input into navigation commands.

    Parameters
    ----------
    controller : NavigationController
    text_inputs : list, optional
        Text-entry widgets (e.g. ``matplotlib.widgets.TextBox``).  While any
        of them is capturing keystrokes, keyboard input is ignored.
    """

    def __init__(self, controller, text_inputs=None):
        self.controller = controller
        self.text_inputs = list(text_inputs or [])
        self.text_input_active = False
        self.shift_held = False
        self._extra_keys = {}
        self._pointer_down = False

    def add_key_handler(self, key, handler):
        """Bind a non-navigation key (e.g. ``'m'``) to *handler()*."""
        self._extra_keys[key.lower()] = handler

    def _typing(self):
        if self.text_input_active:
            return True
        return any(getattr(w, 'capturekeystrokes', False) for w in self.text_inputs)

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def handle_key(self, raw_key):
        """Handle a key press; return the action name performed, or None."""
        modifiers, key = split_key(raw_key)
        if key == 'shift':
            self.shift_held = True
            return None
        # Any other key reports whether shift is down, which recovers from a
        # release that never reached the canvas.
        self.shift_held = 'shift' in modifiers or (
            len(raw_key) == 1 and raw_key.isupper())
        if self._typing():
            return None
        if 'shift' in modifiers:
            # Shift combinations belong to camera rotation, not navigation.
            return None

        if key in PAN_KEYS:
            self.controller.pan(PAN_KEYS[key])
            return 'pan_' + PAN_KEYS[key]
        if key in ZOOM_KEYS:
            if ZOOM_KEYS[key] > 0:
                self.controller.increase_zoom()
                return 'zoom_increase'
            self.controller.decrease_zoom()
            return 'zoom_decrease'
        if key in self._extra_keys:
            self._extra_keys[key]()
            return key
        return None

    def handle_key_release(self, raw_key):
        _, key = split_key(raw_key)
        if key == 'shift':
            self.shift_held = False

    def release_modifiers(self):
        """Forget held modifiers, e.g. when the pointer leaves the window."""
        self.shift_held = False

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def press(self, x, y, button=1):
        """Primary-button press starts a drag; shift-drag is left alone."""
        if button != 1 or self.shift_held:
            return False
        self._pointer_down = self.controller.pointer_down(x, y)
        return self._pointer_down

    def motion(self, x, y):
        if not self._pointer_down:
            return False
        return self.controller.pointer_move(x, y)

    def release(self, x=None, y=None):
        if not self._pointer_down:
            return False
        self._pointer_down = False
        return self.controller.pointer_up(x, y)
