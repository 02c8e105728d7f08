"""
Telemetry: observed input encoded in the agent's command vocabulary.
"""

from remote_agent.telemetry.events import (
    KeyPressEvent,
    MouseButtonEvent,
    MouseMoveEvent,
    ScrollWheelEvent,
    TelemetryEvent,
)
from remote_agent.telemetry.recorder import TelemetryRecorder, RecordedEvent
from remote_agent.telemetry.listener import InputListener

__all__ = [
    "KeyPressEvent",
    "MouseButtonEvent",
    "MouseMoveEvent",
    "ScrollWheelEvent",
    "TelemetryEvent",
    "TelemetryRecorder",
    "RecordedEvent",
    "InputListener",
]
