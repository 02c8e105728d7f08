"""
Input-injection surfaces consumed by the dispatcher.

The dispatcher only talks to these narrow interfaces; concrete backends
(pyautogui/pynput, osascript, or the in-memory recorder) are supplied by
the caller.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from remote_agent.protocol.actions import GestureKind, MouseButton, Point
from remote_agent.protocol.errors import InjectionFailure
from remote_agent.protocol.keys import KeyCode

logger = logging.getLogger(__name__)


class MouseEventKind(str, Enum):
    DOWN = "down"
    UP = "up"
    MOVE = "move"
    DRAG = "drag"


class InputInjector(ABC):
    """
    Delivers synthetic keyboard and mouse events to the host.

    Implementations raise ``InjectionFailure`` when the host refuses an
    event. They are not required to be thread-safe; callers must serialize
    access.
    """

    @abstractmethod
    def post_key_event(
        self,
        code: Optional[KeyCode],
        down: bool,
        text: Optional[str] = None
    ) -> None:
        """
        Post a single key transition.

        Args:
            code: Key to press or release, or None when ``text`` carries the character
            down: True for key-down, False for key-up
            text: Character payload for typed text
        """

    @abstractmethod
    def post_mouse_event(
        self,
        kind: MouseEventKind,
        point: Point,
        button: MouseButton = MouseButton.LEFT,
        click_index: Optional[int] = None
    ) -> None:
        """Post one mouse event at ``point``."""

    @abstractmethod
    def post_scroll_event(self, delta: float, point: Optional[Point] = None) -> None:
        """Post one scroll event on the primary axis."""


class GestureRunner(ABC):
    """Performs named OS-level gestures and window actions."""

    @abstractmethod
    def perform(self, kind: GestureKind) -> None:
        """Run the gesture, raising ``ExecutionError`` on failure."""


def post_chord(injector: InputInjector, codes: Sequence[KeyCode]) -> None:
    """
    Press every key in order, then release them last-pressed first.

    If a press fails, the keys already down are still released and the
    press failure is raised. Otherwise every release is attempted and the
    first release failure is raised after the last one.
    """
    pressed: List[KeyCode] = []
    try:
        for code in codes:
            injector.post_key_event(code, down=True)
            pressed.append(code)
    except BaseException:
        release_keys(injector, pressed)
        raise

    failure = release_keys(injector, pressed)
    if failure is not None:
        raise failure


def release_keys(injector: InputInjector, pressed: Sequence[KeyCode]) -> Optional[InjectionFailure]:
    """
    Release ``pressed`` last-pressed first, attempting every key.

    Returns:
        The first release failure, or None when every key went up
    """
    first: Optional[InjectionFailure] = None
    for code in reversed(pressed):
        try:
            injector.post_key_event(code, down=False)
        except InjectionFailure as e:
            logger.warning(f"Failed to release {code.name}: {e}")
            if first is None:
                first = e
    return first


@dataclass(frozen=True)
class PostedEvent:
    """One event captured by ``RecordingInjector``."""
    device: str
    code: Optional[KeyCode] = None
    down: Optional[bool] = None
    text: Optional[str] = None
    kind: Optional[MouseEventKind] = None
    point: Optional[Point] = None
    button: Optional[MouseButton] = None
    click_index: Optional[int] = None
    delta: Optional[float] = None


class RecordingInjector(InputInjector):
    """
    Injector that records events instead of posting them.

    Used for dry runs and tests.

    Usage:
        injector = RecordingInjector()
        Dispatcher(injector).run("shortcut:command+c")
        injector.events  # four key events
    """

    def __init__(self, refuse: Optional[Callable[[PostedEvent], bool]] = None):
        """
        Args:
            refuse: Optional predicate; matching events raise InjectionFailure
        """
        self.events: List[PostedEvent] = []
        self.refuse = refuse

    def _record(self, event: PostedEvent) -> None:
        if self.refuse and self.refuse(event):
            raise InjectionFailure(f"Host refused {event.device} event: {event}")
        logger.debug(f"[dry-run] {event}")
        self.events.append(event)

    def post_key_event(
        self,
        code: Optional[KeyCode],
        down: bool,
        text: Optional[str] = None
    ) -> None:
        self._record(PostedEvent("key", code=code, down=down, text=text))

    def post_mouse_event(
        self,
        kind: MouseEventKind,
        point: Point,
        button: MouseButton = MouseButton.LEFT,
        click_index: Optional[int] = None
    ) -> None:
        self._record(PostedEvent(
            "mouse", kind=kind, point=point, button=button, click_index=click_index
        ))

    def post_scroll_event(self, delta: float, point: Optional[Point] = None) -> None:
        self._record(PostedEvent("scroll", delta=delta, point=point))

    def clear(self) -> None:
        self.events.clear()
