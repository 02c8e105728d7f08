"""
OS-level input injector for mouse and keyboard.

Uses pyautogui for cross-platform control, falling back to pynput when
pyautogui is not installed. Every call posts exactly one platform event;
sequencing and timing belong to the dispatcher.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import logging
import math

from remote_agent.playback.injection import InputInjector, MouseEventKind
from remote_agent.protocol.actions import MouseButton, Point
from remote_agent.protocol.errors import InjectionFailure
from remote_agent.protocol.keys import CANONICAL_NAMES, KeyCode

logger = logging.getLogger(__name__)


def scroll_units(delta: float) -> int:
    """Whole scroll units for a possibly fractional delta, keeping its direction."""
    units = int(math.floor(abs(delta) + 0.5))
    if units == 0 and delta != 0:
        units = 1
    return int(math.copysign(units, delta))


# pyautogui key names for every KeyCode.
PYAUTOGUI_KEYS: Dict[KeyCode, str] = {
    **{code: name.lower() for code, name in CANONICAL_NAMES.items() if len(name) == 1},
    **{KeyCode[f"F{n}"]: f"f{n}" for n in range(1, 21)},
    **{KeyCode[f"KEYPAD_{d}"]: f"num{d}" for d in "0123456789"},
    KeyCode.LEFT_ARROW: "left",
    KeyCode.RIGHT_ARROW: "right",
    KeyCode.UP_ARROW: "up",
    KeyCode.DOWN_ARROW: "down",
    KeyCode.HOME: "home",
    KeyCode.END: "end",
    KeyCode.PAGE_UP: "pageup",
    KeyCode.PAGE_DOWN: "pagedown",
    KeyCode.DELETE: "backspace",
    KeyCode.FORWARD_DELETE: "delete",
    KeyCode.RETURN: "return",
    KeyCode.TAB: "tab",
    KeyCode.SPACE: "space",
    KeyCode.ESCAPE: "esc",
    KeyCode.HELP: "help",
    KeyCode.KEYPAD_DECIMAL: "decimal",
    KeyCode.KEYPAD_MULTIPLY: "multiply",
    KeyCode.KEYPAD_PLUS: "add",
    KeyCode.KEYPAD_CLEAR: "clear",
    KeyCode.KEYPAD_DIVIDE: "divide",
    KeyCode.KEYPAD_ENTER: "enter",
    KeyCode.KEYPAD_MINUS: "subtract",
    KeyCode.KEYPAD_EQUALS: "=",
    KeyCode.SHIFT_LEFT: "shiftleft",
    KeyCode.SHIFT_RIGHT: "shiftright",
    KeyCode.CONTROL_LEFT: "ctrlleft",
    KeyCode.CONTROL_RIGHT: "ctrlright",
    KeyCode.OPTION_LEFT: "optionleft",
    KeyCode.OPTION_RIGHT: "optionright",
    KeyCode.COMMAND_LEFT: "command",
    KeyCode.COMMAND_RIGHT: "command",
    KeyCode.CAPS_LOCK: "capslock",
    KeyCode.FN: "fn",
}

# Keypad keys pynput can only send as their character.
_PYNPUT_KEYPAD_CHARS: Dict[KeyCode, str] = {
    KeyCode.KEYPAD_DECIMAL: ".",
    KeyCode.KEYPAD_MULTIPLY: "*",
    KeyCode.KEYPAD_PLUS: "+",
    KeyCode.KEYPAD_DIVIDE: "/",
    KeyCode.KEYPAD_MINUS: "-",
    KeyCode.KEYPAD_EQUALS: "=",
    **{KeyCode[f"KEYPAD_{d}"]: d for d in "0123456789"},
}


def _pynput_key(code: KeyCode) -> Any:
    """Translate a KeyCode into something pynput's keyboard controller accepts."""
    from pynput.keyboard import Key

    special = {
        KeyCode.LEFT_ARROW: Key.left,
        KeyCode.RIGHT_ARROW: Key.right,
        KeyCode.UP_ARROW: Key.up,
        KeyCode.DOWN_ARROW: Key.down,
        KeyCode.HOME: Key.home,
        KeyCode.END: Key.end,
        KeyCode.PAGE_UP: Key.page_up,
        KeyCode.PAGE_DOWN: Key.page_down,
        KeyCode.DELETE: Key.backspace,
        KeyCode.FORWARD_DELETE: Key.delete,
        KeyCode.RETURN: Key.enter,
        KeyCode.KEYPAD_ENTER: Key.enter,
        KeyCode.TAB: Key.tab,
        KeyCode.SPACE: Key.space,
        KeyCode.ESCAPE: Key.esc,
        KeyCode.SHIFT_LEFT: Key.shift,
        KeyCode.SHIFT_RIGHT: Key.shift_r,
        KeyCode.CONTROL_LEFT: Key.ctrl,
        KeyCode.CONTROL_RIGHT: Key.ctrl_r,
        KeyCode.OPTION_LEFT: Key.alt,
        KeyCode.OPTION_RIGHT: Key.alt_r,
        KeyCode.COMMAND_LEFT: Key.cmd,
        KeyCode.COMMAND_RIGHT: Key.cmd_r,
        KeyCode.CAPS_LOCK: Key.caps_lock,
    }
    if code in special:
        return special[code]
    if code in _PYNPUT_KEYPAD_CHARS:
        return _PYNPUT_KEYPAD_CHARS[code]
    if code.name.startswith("F") and code.name[1:].isdigit():
        return getattr(Key, code.name.lower())
    name = CANONICAL_NAMES[code]
    if len(name) == 1:
        return name.lower()
    raise InjectionFailure(f"pynput cannot post key {name!r}")


class OSController(InputInjector):
    """
    Controls the actual OS mouse and keyboard.

    Usage:
        controller = OSController()
        controller.post_mouse_event(MouseEventKind.MOVE, Point(500, 300))
        controller.post_key_event(KeyCode.RETURN, down=True)
        controller.post_key_event(KeyCode.RETURN, down=False)
    """

    def __init__(self, fail_safe: bool = True):
        """
        Initialize the OS controller.

        Args:
            fail_safe: If True, moving mouse to corner aborts (pyautogui safety feature)
        """
        self._pyautogui = None
        self._pynput_mouse = None
        self._pynput_keyboard = None
        self.fail_safe = fail_safe

        self._init_backends()

    def _init_backends(self) -> None:
        """Initialize input control backends."""
        # Try pyautogui first (easier API)
        try:
            import pyautogui
            pyautogui.FAILSAFE = self.fail_safe
            pyautogui.PAUSE = 0  # The dispatcher owns all pacing
            self._pyautogui = pyautogui
            logger.info("Using pyautogui for OS control")
        except ImportError:
            logger.warning("pyautogui not available, trying pynput")

        # pynput is the fallback, and also types characters pyautogui has no key for
        try:
            from pynput.mouse import Controller as MouseController
            from pynput.keyboard import Controller as KeyboardController
            self._pynput_keyboard = KeyboardController()
            if self._pyautogui is None:
                self._pynput_mouse = MouseController()
                logger.info("Using pynput for OS control")
        except ImportError:
            if self._pyautogui is None:
                raise RuntimeError(
                    "No input control library available. "
                    "Install with: pip install pyautogui pynput"
                )

    def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Invoke a backend function, converting its failures to InjectionFailure."""
        try:
            return fn(*args, **kwargs)
        except InjectionFailure:
            raise
        except Exception as e:
            raise InjectionFailure(f"{getattr(fn, '__name__', fn)} failed: {e}") from e

    # =========================================================================
    # Queries
    # =========================================================================

    def get_mouse_position(self) -> Point:
        """Get current mouse cursor position."""
        if self._pyautogui:
            pos = self._pyautogui.position()
        else:
            pos = self._pynput_mouse.position
        return Point(x=float(pos[0]), y=float(pos[1]))

    # =========================================================================
    # Keyboard
    # =========================================================================

    def post_key_event(
        self,
        code: Optional[KeyCode],
        down: bool,
        text: Optional[str] = None
    ) -> None:
        if text is not None:
            self._post_text(text, down)
            return
        if code is None:
            raise InjectionFailure("Key event needs a key code or a text payload")

        if self._pyautogui:
            name = PYAUTOGUI_KEYS[code]
            fn = self._pyautogui.keyDown if down else self._pyautogui.keyUp
            self._call(fn, name)
        else:
            key = _pynput_key(code)
            fn = self._pynput_keyboard.press if down else self._pynput_keyboard.release
            self._call(fn, key)

    def _post_text(self, char: str, down: bool) -> None:
        """Press or release the key that produces ``char``."""
        if self._pyautogui and self._pyautogui.isValidKey(char):
            fn = self._pyautogui.keyDown if down else self._pyautogui.keyUp
            self._call(fn, char)
        elif self._pynput_keyboard:
            fn = self._pynput_keyboard.press if down else self._pynput_keyboard.release
            self._call(fn, char)
        else:
            raise InjectionFailure(
                f"Cannot type {char!r} with pyautogui; install pynput for Unicode text"
            )

    # =========================================================================
    # Mouse
    # =========================================================================

    def post_mouse_event(
        self,
        kind: MouseEventKind,
        point: Point,
        button: MouseButton = MouseButton.LEFT,
        click_index: Optional[int] = None
    ) -> None:
        x, y = int(round(point.x)), int(round(point.y))
        if click_index and click_index > 1:
            # Neither backend exposes the click-state field; the OS groups the
            # clicks by timing instead.
            logger.debug(f"Click index {click_index} at ({x}, {y})")

        if self._pyautogui:
            if kind == MouseEventKind.DOWN:
                self._call(self._pyautogui.mouseDown, x=x, y=y, button=button.value)
            elif kind == MouseEventKind.UP:
                self._call(self._pyautogui.mouseUp, x=x, y=y, button=button.value)
            elif kind == MouseEventKind.MOVE:
                self._call(self._pyautogui.moveTo, x, y)
            elif kind == MouseEventKind.DRAG:
                self._call(
                    self._pyautogui.dragTo, x, y,
                    button=button.value, mouseDownUp=False
                )
        else:
            from pynput.mouse import Button
            btn = {
                MouseButton.LEFT: Button.left,
                MouseButton.RIGHT: Button.right,
                MouseButton.MIDDLE: Button.middle,
            }[button]

            def move() -> None:
                self._pynput_mouse.position = (x, y)

            self._call(move)
            if kind == MouseEventKind.DOWN:
                self._call(self._pynput_mouse.press, btn)
            elif kind == MouseEventKind.UP:
                self._call(self._pynput_mouse.release, btn)

    def post_scroll_event(self, delta: float, point: Optional[Point] = None) -> None:
        """
        Scroll the mouse wheel.

        Args:
            delta: Positive = up, negative = down. Backends scroll in whole
                units, so fractions round half away from zero and a non-zero
                delta always moves at least one unit.
            point: Optional position to scroll at
        """
        amount = scroll_units(delta)
        if self._pyautogui:
            if point is not None:
                self._call(
                    self._pyautogui.scroll, amount,
                    x=int(round(point.x)), y=int(round(point.y))
                )
            else:
                self._call(self._pyautogui.scroll, amount)
        else:
            if point is not None:
                self.post_mouse_event(MouseEventKind.MOVE, point)
            self._call(self._pynput_mouse.scroll, 0, amount)
