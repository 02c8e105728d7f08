"""
Typed actions produced by the command parser.

Each action is an immutable value built from one command string and
consumed once by the dispatcher.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union

from remote_agent.protocol.keys import KeyCode


class MouseButton(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"


class GestureKind(str, Enum):
    """Gestures and window actions understood by ``touchpad`` and ``special_gesture_mac``."""
    SWIPE_LEFT = "swipe left"
    SWIPE_RIGHT = "swipe right"
    SWIPE_UP = "swipe up"
    SWIPE_DOWN = "swipe down"
    ZOOM_IN = "zoom in"
    ZOOM_OUT = "zoom out"
    ZOOM_RESET = "zoom reset"
    ENTER_EXIT_FULL_SCREEN = "enter_exit_full_screen"
    TOGGLE_FULL_SCREEN = "toggle_full_screen"
    MINIMIZE_WINDOW = "minimize_window"
    CLOSE_WINDOW = "close_window"


TOUCHPAD_GESTURES = frozenset({
    GestureKind.SWIPE_LEFT,
    GestureKind.SWIPE_RIGHT,
    GestureKind.SWIPE_UP,
    GestureKind.SWIPE_DOWN,
    GestureKind.ZOOM_IN,
    GestureKind.ZOOM_OUT,
    GestureKind.ZOOM_RESET,
})

WINDOW_GESTURES = frozenset({
    GestureKind.ENTER_EXIT_FULL_SCREEN,
    GestureKind.TOGGLE_FULL_SCREEN,
    GestureKind.MINIMIZE_WINDOW,
    GestureKind.CLOSE_WINDOW,
})


@dataclass(frozen=True)
class Point:
    """Screen coordinate. Never clamped; the platform clips out-of-range values."""
    x: float
    y: float

    def lerp(self, other: Point, t: float) -> Point:
        """Point a fraction ``t`` of the way from this point to ``other``."""
        return Point(
            x=self.x + (other.x - self.x) * t,
            y=self.y + (other.y - self.y) * t,
        )


@dataclass(frozen=True)
class KeyEvent:
    code: KeyCode
    down: bool


@dataclass(frozen=True)
class KeyPress:
    code: KeyCode


@dataclass(frozen=True)
class TypeText:
    text: str


@dataclass(frozen=True)
class Click:
    point: Point
    button: MouseButton = MouseButton.LEFT
    count: int = 1


@dataclass(frozen=True)
class Move:
    point: Point


@dataclass(frozen=True)
class Drag:
    start: Point
    end: Point


@dataclass(frozen=True)
class Scroll:
    delta: float


@dataclass(frozen=True)
class ScrollTo:
    point: Point


@dataclass(frozen=True)
class Shortcut:
    """Keys in the order they are pressed; repeats are kept."""
    codes: Tuple[KeyCode, ...]


@dataclass(frozen=True)
class HoldClick:
    point: Point
    modifier: KeyCode
    count: int = 1


@dataclass(frozen=True)
class Autocomplete:
    prefix: str
    full_text: str

    @property
    def suffix(self) -> str:
        """
        Text typed after the prefix.

        Sliced by code point count, which can differ from what a user sees
        as characters for combining sequences.
        """
        return self.full_text[len(self.prefix):]


@dataclass(frozen=True)
class Gesture:
    kind: GestureKind


@dataclass(frozen=True)
class Batch:
    """Raw sub-commands, parsed and run in order by the dispatcher."""
    commands: Tuple[str, ...] = field(default_factory=tuple)


Action = Union[
    KeyEvent,
    KeyPress,
    TypeText,
    Click,
    Move,
    Drag,
    Scroll,
    ScrollTo,
    Shortcut,
    HoldClick,
    Autocomplete,
    Gesture,
    Batch,
]
