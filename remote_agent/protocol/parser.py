"""
Command parsing.

A command is a single line ``action:argument``. The first ``:`` separates
the action tag from its argument; any later ``:`` belongs to the argument.
The argument grammar depends on the tag:

    key-down / key-up / press      key name
    type                           literal text
    click / double-click /
    right-click / move / scroll-to x,y
    Multi-click                    x,y,count
    hold-click                     x,y,keyName
    drag                           x1,y1,x2,y2
    scroll                         signed delta
    shortcut                       key+key+...
    autocomplete-text              prefix,fullText   (split at first comma)
    batch                          cmd;cmd;...
    touchpad / special_gesture_mac gesture name

Parsing either returns a fully validated action or raises a ``ParseError``.
"""

from __future__ import annotations
import logging
import math
import re
from typing import Callable, Dict, List, Tuple, Type, Union

from remote_agent.protocol import keys
from remote_agent.protocol.actions import (
    Action,
    Autocomplete,
    Batch,
    Click,
    Drag,
    Gesture,
    GestureKind,
    HoldClick,
    KeyEvent,
    KeyPress,
    Move,
    MouseButton,
    Point,
    Scroll,
    ScrollTo,
    Shortcut,
    TOUCHPAD_GESTURES,
    TypeText,
    WINDOW_GESTURES,
)
from remote_agent.protocol.errors import (
    BadArgumentCount,
    BadCoordinateCount,
    BadCoordinateNumber,
    BadNumber,
    MalformedCommand,
    ParseError,
    UnknownAction,
    UnknownGesture,
)

logger = logging.getLogger(__name__)

SEPARATOR = ":"
BATCH_SEPARATOR = ";"
SHORTCUT_SEPARATOR = "+"

# Plain ASCII decimals only: no underscores, whitespace, hex or inf/nan
DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
INTEGER = re.compile(r"[+-]?[0-9]+")


# =============================================================================
# Field helpers
# =============================================================================

def _number(tag: str, field: str, text: str, error: Type[BadNumber] = BadNumber) -> float:
    if not DECIMAL.fullmatch(text):
        raise error(tag, field, f"not a number: {text!r}")
    value = float(text)
    if not math.isfinite(value):
        raise error(tag, field, f"not a finite number: {text!r}")
    return value


def _coordinate(tag: str, field: str, text: str) -> float:
    return _number(tag, field, text, error=BadCoordinateNumber)


def _count(tag: str, field: str, text: str) -> int:
    if not INTEGER.fullmatch(text):
        raise BadNumber(tag, field, f"not an integer: {text!r}")
    value = int(text)
    if value < 1:
        raise BadNumber(tag, field, f"must be a positive integer: {value}")
    return value


def _split_fields(tag: str, argument: str, names: Tuple[str, ...]) -> List[str]:
    """Split a comma-separated argument into exactly ``len(names)`` fields."""
    parts = argument.split(",", len(names) - 1)
    if len(parts) != len(names) or "," in parts[-1]:
        raise BadArgumentCount(
            tag, ",".join(names), f"expected {len(names)} fields, got {argument.count(',') + 1}"
        )
    return parts


def _split_fields_keep_tail(tag: str, argument: str, names: Tuple[str, ...]) -> List[str]:
    """Like ``_split_fields`` but the last field may itself contain commas."""
    parts = argument.split(",", len(names) - 1)
    if len(parts) != len(names) or not parts[-1]:
        raise BadArgumentCount(
            tag, ",".join(names), f"expected {len(names)} fields in {argument!r}"
        )
    return parts


def _points(tag: str, argument: str, names: Tuple[str, ...]) -> List[Point]:
    """Parse pairs of comma-separated coordinates."""
    fields = argument.split(",")
    # Read every field as a number before judging the count, so that a
    # non-numeric payload reports the offending value.
    values = [
        _coordinate(tag, names[i] if i < len(names) else f"field {i + 1}", text)
        for i, text in enumerate(fields)
    ]
    if len(values) != len(names):
        raise BadCoordinateCount(
            tag, ",".join(names), f"expected {len(names)} fields, got {len(values)}"
        )
    return [Point(values[i], values[i + 1]) for i in range(0, len(values), 2)]


def _point_prefix(tag: str, x: str, y: str) -> Point:
    return Point(_coordinate(tag, "x", x), _coordinate(tag, "y", y))


# =============================================================================
# Per-tag grammars
# =============================================================================

def _parse_key_event(tag: str, argument: str) -> Action:
    code = keys.resolve(argument, tag)
    if tag == "press":
        return KeyPress(code)
    return KeyEvent(code, down=(tag == "key-down"))


def _parse_type(tag: str, argument: str) -> Action:
    return TypeText(argument)


_CLICK_VARIANTS: Dict[str, Tuple[MouseButton, int]] = {
    "click": (MouseButton.LEFT, 1),
    "double-click": (MouseButton.LEFT, 2),
    "right-click": (MouseButton.RIGHT, 1),
}


def _parse_click(tag: str, argument: str) -> Action:
    (point,) = _points(tag, argument, ("x", "y"))
    button, count = _CLICK_VARIANTS[tag]
    return Click(point, button=button, count=count)


def _parse_multi_click(tag: str, argument: str) -> Action:
    x, y, count = _split_fields(tag, argument, ("x", "y", "count"))
    return Click(_point_prefix(tag, x, y), count=_count(tag, "count", count))


def _parse_scroll(tag: str, argument: str) -> Action:
    return Scroll(_number(tag, "delta", argument))


def _parse_move(tag: str, argument: str) -> Action:
    (point,) = _points(tag, argument, ("x", "y"))
    return Move(point) if tag == "move" else ScrollTo(point)


def _parse_hold_click(tag: str, argument: str) -> Action:
    x, y, key_name = _split_fields_keep_tail(tag, argument, ("x", "y", "keyName"))
    point = _point_prefix(tag, x, y)
    return HoldClick(point, modifier=keys.resolve(key_name, tag))


def _parse_drag(tag: str, argument: str) -> Action:
    start, end = _points(tag, argument, ("x1", "y1", "x2", "y2"))
    return Drag(start, end)


def _parse_shortcut(tag: str, argument: str) -> Action:
    codes = tuple(
        keys.resolve(token, tag) for token in argument.split(SHORTCUT_SEPARATOR)
    )
    return Shortcut(codes)


def _parse_autocomplete(tag: str, argument: str) -> Action:
    prefix, sep, full_text = argument.partition(",")
    if not sep:
        raise BadArgumentCount(tag, "prefix,fullText", "missing ',' between prefix and full text")
    return Autocomplete(prefix, full_text)


def _parse_batch(tag: str, argument: str) -> Action:
    commands = tuple(c for c in argument.split(BATCH_SEPARATOR) if c)
    if not commands:
        raise BadArgumentCount(tag, "commands", "no sub-commands")
    return Batch(commands)


def _parse_gesture(tag: str, argument: str) -> Action:
    allowed = TOUCHPAD_GESTURES if tag == "touchpad" else WINDOW_GESTURES
    try:
        kind = GestureKind(argument)
    except ValueError:
        raise UnknownGesture(argument, tag) from None
    if kind not in allowed:
        raise UnknownGesture(argument, tag)
    return Gesture(kind)


_PARSERS: Dict[str, Callable[[str, str], Action]] = {
    "key-down": _parse_key_event,
    "key-up": _parse_key_event,
    "press": _parse_key_event,
    "type": _parse_type,
    "click": _parse_click,
    "double-click": _parse_click,
    "right-click": _parse_click,
    "Multi-click": _parse_multi_click,
    "scroll": _parse_scroll,
    "move": _parse_move,
    "scroll-to": _parse_move,
    "hold-click": _parse_hold_click,
    "drag": _parse_drag,
    "shortcut": _parse_shortcut,
    "autocomplete-text": _parse_autocomplete,
    "batch": _parse_batch,
    "touchpad": _parse_gesture,
    "special_gesture_mac": _parse_gesture,
}

ACTION_TAGS = frozenset(_PARSERS)


# =============================================================================
# Public API
# =============================================================================

def split_command(raw: str) -> Tuple[str, str]:
    """
    Split a command at its first ``:``.

    Raises:
        MalformedCommand: if there is no separator
    """
    tag, sep, argument = raw.partition(SEPARATOR)
    if not sep:
        raise MalformedCommand(f"Invalid command format, expected 'action:argument': {raw!r}")
    return tag, argument


def parse(raw: str) -> Action:
    """
    Parse one command string into a validated action.

    Args:
        raw: Command of the form ``action:argument``

    Returns:
        The typed action

    Raises:
        ParseError: on any malformed or unknown input; no default is ever guessed
    """
    raw = raw.rstrip("\r\n")
    tag, argument = split_command(raw)

    handler = _PARSERS.get(tag)
    if handler is None:
        raise UnknownAction(tag)
    if not argument:
        raise BadArgumentCount(tag, "argument", "empty argument")

    action = handler(tag, argument)
    logger.debug(f"Parsed {tag!r} -> {action}")
    return action


def expand_batch(batch: Batch) -> List[Tuple[str, Union[Action, ParseError]]]:
    """
    Parse every sub-command of a batch.

    A sub-command that fails to parse is returned with its error in place of
    an action so that its siblings can still run.
    """
    expanded: List[Tuple[str, Union[Action, ParseError]]] = []
    for command in batch.commands:
        try:
            expanded.append((command, parse(command)))
        except ParseError as e:
            expanded.append((command, e))
    return expanded
