"""
Action dispatcher.

Turns one validated action into the sequence of input events that performs
it, with the fixed delays each multi-step action needs. The dispatcher keeps
no state between actions; a batch only recurses on the call stack.
"""

from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from remote_agent.config import DispatcherConfig
from remote_agent.playback.gestures import KeyChordGestures
from remote_agent.playback.injection import (
    GestureRunner,
    InputInjector,
    MouseEventKind,
    post_chord,
    release_keys,
)
from remote_agent.protocol.actions import (
    Action,
    Autocomplete,
    Batch,
    Click,
    Drag,
    Gesture,
    HoldClick,
    KeyEvent,
    KeyPress,
    Move,
    MouseButton,
    Point,
    Scroll,
    ScrollTo,
    Shortcut,
    TypeText,
)
from remote_agent.protocol.errors import AgentError, InjectionFailure, ParseError
from remote_agent.protocol.parser import expand_batch, parse

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """
    Outcome of one command.

    A batch has one child per sub-command and is ``ok`` only when every
    child is.
    """
    command: str
    ok: bool
    error: Optional[AgentError] = None
    children: List[ExecutionResult] = field(default_factory=list)

    @property
    def failures(self) -> List[ExecutionResult]:
        """Failed leaf results, in execution order."""
        if not self.children:
            return [] if self.ok else [self]
        failed: List[ExecutionResult] = []
        for child in self.children:
            failed.extend(child.failures)
        return failed

    def describe(self) -> str:
        if self.ok:
            return f"{self.command}: ok"
        if self.error is not None:
            return f"{self.command}: {self.error}"
        failed = self.failures
        return (
            f"{self.command}: {len(failed)} of {len(self.children)} sub-commands failed "
            f"({'; '.join(str(f.error) for f in failed)})"
        )


class Dispatcher:
    """
    Executes actions against an input injector.

    Not safe for concurrent use: all calls must come from one thread at a
    time. Concurrent use from a second thread raises RuntimeError rather
    than interleaving events.

    Usage:
        dispatcher = Dispatcher(OSController())
        result = dispatcher.run("shortcut:command+c")
        if not result.ok:
            print(result.describe())
    """

    def __init__(
        self,
        injector: InputInjector,
        gestures: Optional[GestureRunner] = None,
        config: Optional[DispatcherConfig] = None
    ):
        self.injector = injector
        self.gestures = gestures or KeyChordGestures(injector)
        self.config = config or DispatcherConfig()
        self._owner = threading.RLock()

    # =========================================================================
    # Entry points
    # =========================================================================

    def run(self, command: str) -> ExecutionResult:
        """Parse and execute one command string."""
        try:
            action = parse(command)
        except ParseError as e:
            logger.warning(f"Rejected command {command!r}: {e}")
            return ExecutionResult(command=command, ok=False, error=e)
        return self.execute(action, command=command)

    def execute(self, action: Action, command: str = "") -> ExecutionResult:
        """
        Execute one action.

        Args:
            action: The validated action
            command: Raw command the action came from, used for reporting

        Returns:
            The outcome; execution errors are captured, never raised
        """
        label = command or type(action).__name__
        if not self._owner.acquire(blocking=False):
            raise RuntimeError("Dispatcher is already executing on another thread")
        try:
            if isinstance(action, Batch):
                return self._execute_batch(action, label)

            logger.debug(f"Executing {label}")
            try:
                self._execute(action)
            except AgentError as e:
                logger.warning(f"Command {label!r} failed: {e}")
                return ExecutionResult(command=label, ok=False, error=e)
            return ExecutionResult(command=label, ok=True)
        finally:
            self._owner.release()

    # =========================================================================
    # Action handlers
    # =========================================================================

    def _execute(self, action: Action) -> None:
        if isinstance(action, KeyEvent):
            self.injector.post_key_event(action.code, down=action.down)

        elif isinstance(action, KeyPress):
            self.injector.post_key_event(action.code, down=True)
            self.injector.post_key_event(action.code, down=False)

        elif isinstance(action, TypeText):
            self._type(action.text)

        elif isinstance(action, Click):
            self._click(action.point, action.button, action.count)

        elif isinstance(action, Move):
            self.injector.post_mouse_event(MouseEventKind.MOVE, action.point)

        elif isinstance(action, Drag):
            self._drag(action.start, action.end)

        elif isinstance(action, Scroll):
            self.injector.post_scroll_event(action.delta)

        elif isinstance(action, ScrollTo):
            self.injector.post_mouse_event(MouseEventKind.MOVE, action.point)
            self.injector.post_scroll_event(self.config.scroll_to_amount, action.point)

        elif isinstance(action, Shortcut):
            post_chord(self.injector, action.codes)

        elif isinstance(action, HoldClick):
            self._hold_click(action)

        elif isinstance(action, Autocomplete):
            self._type(action.prefix)
            self._wait(self.config.autocomplete_settle)
            self._type(action.suffix)

        elif isinstance(action, Gesture):
            self.gestures.perform(action.kind)

        else:
            raise TypeError(f"Unsupported action: {action!r}")

    def _execute_batch(self, batch: Batch, label: str) -> ExecutionResult:
        """Run every sub-command in order, continuing past failures."""
        logger.debug(f"Executing batch of {len(batch.commands)}: {label}")
        children: List[ExecutionResult] = []
        for command, parsed in expand_batch(batch):
            if isinstance(parsed, ParseError):
                logger.warning(f"Rejected batch sub-command {command!r}: {parsed}")
                children.append(ExecutionResult(command=command, ok=False, error=parsed))
            else:
                children.append(self.execute(parsed, command=command))

        ok = all(child.ok for child in children)
        if not ok:
            logger.warning(f"Batch {label!r}: {sum(not c.ok for c in children)} sub-commands failed")
        return ExecutionResult(command=label, ok=ok, children=children)

    def _type(self, text: str) -> None:
        """Type each code point as its own down/up pair, in order."""
        for char in text:
            self.injector.post_key_event(None, down=True, text=char)
            self.injector.post_key_event(None, down=False, text=char)

    def _click(self, point: Point, button: MouseButton, count: int) -> None:
        for index in range(1, count + 1):
            self.injector.post_mouse_event(MouseEventKind.DOWN, point, button, click_index=index)
            self.injector.post_mouse_event(MouseEventKind.UP, point, button, click_index=index)
            if index < count:
                # Keep repeated clicks from being coalesced
                self._wait(self.config.click_settle)

    def _drag(self, start: Point, end: Point) -> None:
        steps = self.config.drag_steps
        pause = self.config.drag_duration / steps

        self.injector.post_mouse_event(MouseEventKind.DOWN, start)
        try:
            for i in range(1, steps + 1):
                self.injector.post_mouse_event(MouseEventKind.DRAG, start.lerp(end, i / steps))
                self._wait(pause)
        except BaseException:
            # The step failure is the one reported
            try:
                self.injector.post_mouse_event(MouseEventKind.UP, end)
            except InjectionFailure as e:
                logger.warning(f"Failed to release the mouse after a failed drag: {e}")
            raise
        self.injector.post_mouse_event(MouseEventKind.UP, end)

    def _hold_click(self, action: HoldClick) -> None:
        self.injector.post_key_event(action.modifier, down=True)
        try:
            self.injector.post_mouse_event(MouseEventKind.MOVE, action.point)
            self._click(action.point, MouseButton.LEFT, action.count)
        except BaseException:
            release_keys(self.injector, [action.modifier])
            raise
        failure = release_keys(self.injector, [action.modifier])
        if failure is not None:
            raise failure

    def _wait(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
