"""
Gesture and window actions.

Each gesture is expressed as a modifier chord. ``KeyChordGestures`` posts the
chord through an input injector; ``ScriptedGestures`` asks System Events to
press it via ``osascript`` (macOS only).
"""

from __future__ import annotations
import logging
import shutil
import subprocess
from typing import Dict, Tuple

from remote_agent.playback.injection import GestureRunner, InputInjector, post_chord
from remote_agent.protocol.actions import GestureKind
from remote_agent.protocol.errors import GestureFailure
from remote_agent.protocol.keys import KeyCode, MODIFIERS

logger = logging.getLogger(__name__)


GESTURE_CHORDS: Dict[GestureKind, Tuple[KeyCode, ...]] = {
    # Spaces navigation and zoom
    GestureKind.SWIPE_LEFT: (KeyCode.CONTROL_LEFT, KeyCode.LEFT_ARROW),
    GestureKind.SWIPE_RIGHT: (KeyCode.CONTROL_LEFT, KeyCode.RIGHT_ARROW),
    GestureKind.SWIPE_UP: (KeyCode.CONTROL_LEFT, KeyCode.UP_ARROW),
    GestureKind.SWIPE_DOWN: (KeyCode.CONTROL_LEFT, KeyCode.DOWN_ARROW),
    GestureKind.ZOOM_IN: (KeyCode.CONTROL_LEFT, KeyCode.EQUAL),
    GestureKind.ZOOM_OUT: (KeyCode.CONTROL_LEFT, KeyCode.MINUS),
    GestureKind.ZOOM_RESET: (KeyCode.CONTROL_LEFT, KeyCode.DIGIT_0),
    # Window control
    GestureKind.ENTER_EXIT_FULL_SCREEN: (KeyCode.COMMAND_LEFT, KeyCode.CONTROL_LEFT, KeyCode.F),
    GestureKind.TOGGLE_FULL_SCREEN: (KeyCode.COMMAND_LEFT, KeyCode.CONTROL_LEFT, KeyCode.F),
    GestureKind.MINIMIZE_WINDOW: (KeyCode.COMMAND_LEFT, KeyCode.M),
    GestureKind.CLOSE_WINDOW: (KeyCode.COMMAND_LEFT, KeyCode.W),
}

_APPLESCRIPT_MODIFIERS: Dict[KeyCode, str] = {
    KeyCode.COMMAND_LEFT: "command down",
    KeyCode.COMMAND_RIGHT: "command down",
    KeyCode.CONTROL_LEFT: "control down",
    KeyCode.CONTROL_RIGHT: "control down",
    KeyCode.OPTION_LEFT: "option down",
    KeyCode.OPTION_RIGHT: "option down",
    KeyCode.SHIFT_LEFT: "shift down",
    KeyCode.SHIFT_RIGHT: "shift down",
}


class KeyChordGestures(GestureRunner):
    """Performs gestures by posting their key chord."""

    def __init__(self, injector: InputInjector):
        self.injector = injector

    def perform(self, kind: GestureKind) -> None:
        chord = GESTURE_CHORDS[kind]
        logger.debug(f"Gesture {kind.value!r} as chord {[c.name for c in chord]}")
        post_chord(self.injector, chord)


def build_applescript(chord: Tuple[KeyCode, ...]) -> str:
    """AppleScript that presses ``chord`` through System Events."""
    modifiers = [_APPLESCRIPT_MODIFIERS[c] for c in chord if c in _APPLESCRIPT_MODIFIERS]
    keys = [c for c in chord if c not in MODIFIERS]
    if len(keys) != 1:
        raise ValueError(f"Chord must contain exactly one non-modifier key: {chord}")

    using = f" using {{{', '.join(modifiers)}}}" if modifiers else ""
    return (
        'tell application "System Events"\n'
        f"    key code {int(keys[0])}{using}\n"
        "end tell"
    )


class ScriptedGestures(GestureRunner):
    """
    Performs gestures by running AppleScript through ``osascript``.

    Only available on macOS with accessibility permission granted to the
    calling process.
    """

    def __init__(self, osascript: str = "osascript", timeout: float = 10.0):
        self.osascript = osascript
        self.timeout = timeout

    @staticmethod
    def is_available() -> bool:
        return shutil.which("osascript") is not None

    def perform(self, kind: GestureKind) -> None:
        script = build_applescript(GESTURE_CHORDS[kind])
        try:
            result = subprocess.run(
                [self.osascript, "-e", script],
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise GestureFailure(f"Failed to run osascript for {kind.value!r}: {e}") from e

        if result.returncode != 0:
            raise GestureFailure(
                f"osascript exited with {result.returncode} for {kind.value!r}: "
                f"{result.stderr.strip()}"
            )
        logger.info(f"Successfully executed {kind.value} action")
