"""
Live input capture with pynput.

Keyboard and mouse callbacks are converted to typed telemetry events and
published to a ``TelemetryRecorder``. The listener threads are started and
stopped as a unit; use it as a context manager so they are always released.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from remote_agent.protocol.actions import MouseButton, Point
from remote_agent.protocol.keys import KeyCode, lookup
from remote_agent.telemetry import encoder
from remote_agent.telemetry.recorder import TelemetryRecorder

logger = logging.getLogger(__name__)


# pynput ``Key`` member names
PYNPUT_KEY_NAMES: Dict[str, KeyCode] = {
    "shift": KeyCode.SHIFT_LEFT,
    "shift_l": KeyCode.SHIFT_LEFT,
    "shift_r": KeyCode.SHIFT_RIGHT,
    "ctrl": KeyCode.CONTROL_LEFT,
    "ctrl_l": KeyCode.CONTROL_LEFT,
    "ctrl_r": KeyCode.CONTROL_RIGHT,
    "alt": KeyCode.OPTION_LEFT,
    "alt_l": KeyCode.OPTION_LEFT,
    "alt_r": KeyCode.OPTION_RIGHT,
    "alt_gr": KeyCode.OPTION_RIGHT,
    "cmd": KeyCode.COMMAND_LEFT,
    "cmd_l": KeyCode.COMMAND_LEFT,
    "cmd_r": KeyCode.COMMAND_RIGHT,
    "caps_lock": KeyCode.CAPS_LOCK,
    "enter": KeyCode.RETURN,
    "tab": KeyCode.TAB,
    "space": KeyCode.SPACE,
    "backspace": KeyCode.DELETE,
    "delete": KeyCode.FORWARD_DELETE,
    "esc": KeyCode.ESCAPE,
    "up": KeyCode.UP_ARROW,
    "down": KeyCode.DOWN_ARROW,
    "left": KeyCode.LEFT_ARROW,
    "right": KeyCode.RIGHT_ARROW,
    "home": KeyCode.HOME,
    "end": KeyCode.END,
    "page_up": KeyCode.PAGE_UP,
    "page_down": KeyCode.PAGE_DOWN,
    **{f"f{n}": KeyCode[f"F{n}"] for n in range(1, 21)},
}


def key_code_for(key: Any) -> Optional[KeyCode]:
    """
    Map a pynput key object to a KeyCode.

    Special keys are matched by their ``Key`` member name, character keys
    through the symbol table. Returns None for keys the table does not know.
    """
    name = getattr(key, "name", None)
    if name is not None:
        return PYNPUT_KEY_NAMES.get(name)
    char = getattr(key, "char", None)
    if char:
        return lookup(char)
    return None


class InputListener:
    """
    Captures real keyboard and mouse input into a recorder.

    Usage:
        recorder = TelemetryRecorder()
        with InputListener(recorder):
            time.sleep(5)
        events = recorder.drain()
    """

    def __init__(self, recorder: TelemetryRecorder):
        self.recorder = recorder
        self._keyboard = None
        self._mouse = None

    def __enter__(self) -> InputListener:
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    def start(self) -> None:
        from pynput import keyboard, mouse

        self._keyboard = keyboard.Listener(on_press=self._on_press, on_release=self._on_release)
        self._mouse = mouse.Listener(
            on_move=self._on_move, on_click=self._on_click, on_scroll=self._on_scroll
        )
        self._keyboard.start()
        self._mouse.start()
        logger.info("Input capture started")

    def stop(self) -> None:
        for listener in (self._keyboard, self._mouse):
            if listener is not None:
                listener.stop()
                listener.join()
        self._keyboard = None
        self._mouse = None
        logger.info(f"Input capture stopped ({self.recorder.dropped} events dropped)")

    # =========================================================================
    # pynput callbacks
    # =========================================================================

    def _on_key(self, key: Any, down: bool) -> None:
        code = key_code_for(key)
        if code is None:
            logger.debug(f"Unmapped key: {key}")
            return
        self.recorder.publish(encoder.key_event(code, down))

    def _on_press(self, key: Any) -> None:
        self._on_key(key, True)

    def _on_release(self, key: Any) -> None:
        self._on_key(key, False)

    def _on_move(self, x: float, y: float) -> None:
        self.recorder.publish(encoder.mouse_move_event(Point(x, y)))

    def _on_click(self, x: float, y: float, button: Any, pressed: bool) -> None:
        try:
            mouse_button = MouseButton(button.name)
        except ValueError:
            logger.debug(f"Unmapped mouse button: {button}")
            return
        self.recorder.publish(encoder.mouse_button_event(mouse_button, pressed, Point(x, y)))

    def _on_scroll(self, x: float, y: float, dx: int, dy: int) -> None:
        self.recorder.publish(encoder.scroll_event(int(dy)))
