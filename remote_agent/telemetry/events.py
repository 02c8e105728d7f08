"""
Typed records for observed input events.

Field order is the JSON key order on the wire.
"""

from __future__ import annotations
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class KeyPressEvent(BaseModel):
    """A physical key went down or up."""

    model_config = ConfigDict(frozen=True)

    type: Literal["key_press"] = "key_press"
    key: str = Field(description="Canonical key name from the symbol table")
    special: bool = Field(description="True for non-printing keys")
    action: Literal["press", "release"]


class MouseButtonEvent(BaseModel):
    """A mouse button went down or up."""

    model_config = ConfigDict(frozen=True)

    type: Literal["mouse_event"] = "mouse_event"
    action: Literal["press", "release"]
    button: int = Field(description="0 = left, 1 = right, 2 = middle")
    x: int
    y: int


class MouseMoveEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["mouse_move"] = "mouse_move"
    x: int
    y: int


class ScrollWheelEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["scroll_wheel"] = "scroll_wheel"
    delta_y: int = Field(alias="deltaY")


TelemetryEvent = Union[KeyPressEvent, MouseButtonEvent, MouseMoveEvent, ScrollWheelEvent]
