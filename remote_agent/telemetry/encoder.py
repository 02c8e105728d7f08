"""
Telemetry encoder.

Builds typed event records from observed input and serializes them, either
as JSON for upload or as commands in the same vocabulary the dispatcher
accepts. Key names come from the shared symbol table, so an encoded key
event decodes back to the key it was built from.
"""

from __future__ import annotations
import json
from typing import Dict, Optional

from remote_agent.protocol.actions import MouseButton, Point
from remote_agent.protocol.keys import KeyCode, is_special, name_for
from remote_agent.telemetry.events import (
    KeyPressEvent,
    MouseButtonEvent,
    MouseMoveEvent,
    ScrollWheelEvent,
    TelemetryEvent,
)

BUTTON_NUMBERS: Dict[MouseButton, int] = {
    MouseButton.LEFT: 0,
    MouseButton.RIGHT: 1,
    MouseButton.MIDDLE: 2,
}


def _action(down: bool) -> str:
    return "press" if down else "release"


def key_event(code: KeyCode, down: bool) -> KeyPressEvent:
    return KeyPressEvent(key=name_for(code), special=is_special(code), action=_action(down))


def mouse_button_event(button: MouseButton, down: bool, point: Point) -> MouseButtonEvent:
    return MouseButtonEvent(
        action=_action(down),
        button=BUTTON_NUMBERS[button],
        x=int(point.x),
        y=int(point.y),
    )


def mouse_move_event(point: Point) -> MouseMoveEvent:
    return MouseMoveEvent(x=int(point.x), y=int(point.y))


def scroll_event(delta_y: int) -> ScrollWheelEvent:
    return ScrollWheelEvent(delta_y=delta_y)


def to_json(event: TelemetryEvent) -> str:
    """Serialize an event with its keys in declaration order."""
    return json.dumps(event.model_dump(by_alias=True), ensure_ascii=False)


def to_command(event: TelemetryEvent) -> Optional[str]:
    """
    Express an observed event as a command, if the vocabulary has one.

    Button presses have no command of their own; the matching release is
    reported as the click.
    """
    if isinstance(event, KeyPressEvent):
        tag = "key-down" if event.action == "press" else "key-up"
        return f"{tag}:{event.key}"

    if isinstance(event, MouseButtonEvent):
        if event.action != "release":
            return None
        if event.button == BUTTON_NUMBERS[MouseButton.LEFT]:
            return f"click:{event.x},{event.y}"
        if event.button == BUTTON_NUMBERS[MouseButton.RIGHT]:
            return f"right-click:{event.x},{event.y}"
        return None

    if isinstance(event, MouseMoveEvent):
        return f"move:{event.x},{event.y}"

    if isinstance(event, ScrollWheelEvent):
        return f"scroll:{event.delta_y}"

    return None
