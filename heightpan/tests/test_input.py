"""Tests for keyboard/pointer normalization."""

import numpy as np
import pytest

from heightpan.grid import HeightmapGrid
from heightpan.input import InputDispatcher, split_key
from heightpan.navigation import Animating, Dragging, Idle, NavigationController


class FakeTextBox:
    capturekeystrokes = False


@pytest.fixture
def dispatcher():
    nav = NavigationController(clock=lambda: 0.0)
    nav.set_grid(HeightmapGrid(np.zeros((512, 512))))
    return InputDispatcher(nav)


class TestSplitKey:
    @pytest.mark.parametrize("raw,expected", [
        ('left', (set(), 'left')),
        ('shift+left', ({'shift'}, 'left')),
        ('ctrl+shift+up', ({'ctrl', 'shift'}, 'up')),
        ('control+a', ({'ctrl'}, 'a')),
        ('+', (set(), '+')),
        ('shift++', ({'shift'}, '+')),
        ('', (set(), '')),
        (None, (set(), '')),
    ])
    def test_split(self, raw, expected):
        assert split_key(raw) == expected


class TestKeys:
    @pytest.mark.parametrize("key", ['left', 'right', 'up', 'down'])
    def test_arrows_pan(self, dispatcher, key):
        assert dispatcher.handle_key(key) == 'pan_' + key
        assert isinstance(dispatcher.controller.state, Animating)

    @pytest.mark.parametrize("key", ['+', '='])
    def test_zoom_increase(self, dispatcher, key):
        assert dispatcher.handle_key(key) == 'zoom_increase'
        assert dispatcher.controller.zoom == 288

    def test_zoom_decrease(self, dispatcher):
        assert dispatcher.handle_key('-') == 'zoom_decrease'
        assert dispatcher.controller.zoom == 224

    def test_shift_is_not_navigation(self, dispatcher):
        assert dispatcher.handle_key('shift') is None
        assert dispatcher.shift_held
        assert dispatcher.handle_key('shift+left') is None
        assert isinstance(dispatcher.controller.state, Idle)
        dispatcher.handle_key_release('shift')
        assert not dispatcher.shift_held

    def test_ignored_while_typing(self, dispatcher):
        box = FakeTextBox()
        dispatcher.text_inputs.append(box)
        box.capturekeystrokes = True
        assert dispatcher.handle_key('left') is None
        assert dispatcher.handle_key('+') is None
        assert dispatcher.controller.zoom == 256
        box.capturekeystrokes = False
        assert dispatcher.handle_key('+') == 'zoom_increase'

    def test_text_input_flag(self, dispatcher):
        dispatcher.text_input_active = True
        assert dispatcher.handle_key('down') is None
        assert isinstance(dispatcher.controller.state, Idle)

    def test_extra_handlers(self, dispatcher):
        hits = []
        dispatcher.add_key_handler('M', lambda: hits.append('m'))
        assert dispatcher.handle_key('m') == 'm'
        assert hits == ['m']
        assert dispatcher.handle_key('q') is None


class TestPointer:
    def test_drag_cycle(self, dispatcher):
        assert dispatcher.press(10, 10) is True
        assert isinstance(dispatcher.controller.state, Dragging)
        dispatcher.motion(50, 10)
        assert dispatcher.release(60, 10) is True
        assert isinstance(dispatcher.controller.state, Animating)

    def test_motion_without_press(self, dispatcher):
        assert dispatcher.motion(50, 50) is False
        assert dispatcher.release(50, 50) is False

    def test_secondary_button_ignored(self, dispatcher):
        assert dispatcher.press(10, 10, button=3) is False
        assert isinstance(dispatcher.controller.state, Idle)

    def test_shift_drag_reserved(self, dispatcher):
        dispatcher.handle_key('shift')
        assert dispatcher.press(10, 10) is False
        assert dispatcher.motion(80, 80) is False
        assert dispatcher.controller.center == (256, 256)

    def test_lost_shift_release_recovered_by_next_key(self, dispatcher):
        dispatcher.handle_key('shift')
        assert dispatcher.press(10, 10) is False
        dispatcher.handle_key('q')
        assert not dispatcher.shift_held
        assert dispatcher.press(10, 10) is True

    def test_uppercase_key_means_shift_down(self, dispatcher):
        dispatcher.handle_key('Q')
        assert dispatcher.shift_held

    def test_release_modifiers(self, dispatcher):
        dispatcher.handle_key('shift')
        dispatcher.release_modifiers()
        assert dispatcher.press(10, 10) is True
        assert isinstance(dispatcher.controller.state, Dragging)
