"""
Tests for the pyautogui-backed injector.
"""

from unittest.mock import MagicMock

import pytest

from remote_agent.playback.injection import MouseEventKind
from remote_agent.playback.os_controller import OSController, PYAUTOGUI_KEYS, scroll_units
from remote_agent.protocol.actions import MouseButton, Point
from remote_agent.protocol.errors import InjectionFailure
from remote_agent.protocol.keys import KeyCode


@pytest.fixture
def backend():
    pyautogui = MagicMock()
    pyautogui.isValidKey.side_effect = lambda key: len(key) == 1 and key.isascii()
    return pyautogui


@pytest.fixture
def controller(backend):
    """An OSController wired to a mocked pyautogui, without touching the display."""
    controller = object.__new__(OSController)
    controller._pyautogui = backend
    controller._pynput_keyboard = None
    controller._pynput_mouse = None
    controller.fail_safe = True
    return controller


class TestKeyTable:
    """Tests for the pyautogui key table."""

    def test_every_code_mapped(self):
        """Test that every KeyCode has a pyautogui name."""
        assert set(PYAUTOGUI_KEYS) == set(KeyCode)


class TestKeyboard:
    """Tests for keyboard events."""

    def test_key_down_up(self, controller, backend):
        """Test that key codes map to pyautogui names."""
        controller.post_key_event(KeyCode.COMMAND_LEFT, down=True)
        controller.post_key_event(KeyCode.A, down=False)
        backend.keyDown.assert_called_once_with("command")
        backend.keyUp.assert_called_once_with("a")

    def test_text_payload(self, controller, backend):
        """Test that typed text uses the character itself."""
        controller.post_key_event(None, down=True, text="x")
        backend.keyDown.assert_called_once_with("x")

    def test_unicode_without_pynput(self, controller):
        """Test that untypeable text fails when pynput is unavailable."""
        with pytest.raises(InjectionFailure):
            controller.post_key_event(None, down=True, text="✓")

    def test_unicode_with_pynput(self, controller):
        """Test that pynput types characters pyautogui has no key for."""
        keyboard = MagicMock()
        controller._pynput_keyboard = keyboard
        controller.post_key_event(None, down=False, text="✓")
        keyboard.release.assert_called_once_with("✓")

    def test_no_code_no_text(self, controller):
        """Test that an empty key event is refused."""
        with pytest.raises(InjectionFailure):
            controller.post_key_event(None, down=True)

    def test_backend_error_wrapped(self, controller, backend):
        """Test that backend exceptions become InjectionFailure."""
        backend.keyDown.side_effect = OSError("not trusted")
        with pytest.raises(InjectionFailure, match="not trusted"):
            controller.post_key_event(KeyCode.A, down=True)


class TestMouse:
    """Tests for mouse and scroll events."""

    def test_down_up(self, controller, backend):
        """Test button transitions at a rounded point."""
        controller.post_mouse_event(MouseEventKind.DOWN, Point(10.6, 20.2), MouseButton.RIGHT, 1)
        controller.post_mouse_event(MouseEventKind.UP, Point(10.6, 20.2), MouseButton.RIGHT, 1)
        backend.mouseDown.assert_called_once_with(x=11, y=20, button="right")
        backend.mouseUp.assert_called_once_with(x=11, y=20, button="right")

    def test_move_and_drag(self, controller, backend):
        """Test move and drag events."""
        controller.post_mouse_event(MouseEventKind.MOVE, Point(1, 2))
        controller.post_mouse_event(MouseEventKind.DRAG, Point(3, 4))
        backend.moveTo.assert_called_once_with(1, 2)
        backend.dragTo.assert_called_once_with(3, 4, button="left", mouseDownUp=False)

    def test_scroll(self, controller, backend):
        """Test scrolling with and without a point."""
        controller.post_scroll_event(-3)
        controller.post_scroll_event(300, Point(5, 6))
        assert backend.scroll.call_args_list[0].args == (-3,)
        assert backend.scroll.call_args_list[1].kwargs == {"x": 5, "y": 6}

    def test_position(self, controller, backend):
        """Test reading the cursor position."""
        backend.position.return_value = (7, 8)
        assert controller.get_mouse_position() == Point(7, 8)

    def test_fractional_scroll_rounds(self, controller, backend):
        """Test that fractional deltas round instead of truncating to zero."""
        controller.post_scroll_event(0.5)
        controller.post_scroll_event(2.6)
        controller.post_scroll_event(-0.2)
        assert [c.args for c in backend.scroll.call_args_list] == [(1,), (3,), (-1,)]


class TestScrollUnits:
    """Tests for scroll_units."""

    def test_values(self):
        """Test rounding, direction and zero."""
        assert scroll_units(0) == 0
        assert scroll_units(2.4) == 2
        assert scroll_units(-2.5) == -3
        assert scroll_units(0.01) == 1
        assert scroll_units(-300) == -300
