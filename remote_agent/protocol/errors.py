"""
Exceptions raised while parsing and executing agent commands.
"""

from __future__ import annotations
from typing import Optional


class AgentError(Exception):
    """Base class for every recoverable agent error."""


# =============================================================================
# Parse errors
# =============================================================================

class ParseError(AgentError):
    """A command string could not be turned into an action."""


class MalformedCommand(ParseError):
    """The command has no ``action:argument`` separator."""


class UnknownAction(ParseError):
    """The action tag is not part of the vocabulary."""

    def __init__(self, tag: str):
        super().__init__(f"Unknown action: {tag!r}")
        self.tag = tag


class UnknownKey(ParseError):
    """A key name is absent from the symbol table."""

    def __init__(self, token: str, tag: Optional[str] = None):
        where = f" in {tag!r}" if tag else ""
        super().__init__(f"Unknown key{where}: {token!r}")
        self.token = token
        self.tag = tag


class UnknownGesture(ParseError):
    """A gesture name is not one of the supported gestures."""

    def __init__(self, value: str, tag: str):
        super().__init__(f"Unknown gesture for {tag!r}: {value!r}")
        self.value = value
        self.tag = tag


class ArgumentError(ParseError):
    """Field-level validation failure for a known action."""

    def __init__(self, tag: str, field: str, message: str):
        super().__init__(f"{tag}: {field}: {message}")
        self.tag = tag
        self.field = field


class BadArgumentCount(ArgumentError):
    """Wrong number of fields, or an empty argument."""


class BadNumber(ArgumentError):
    """A field that must be numeric could not be read as a number."""


class BadCoordinates(ArgumentError):
    """A coordinate payload is malformed."""


class BadCoordinateCount(BadCoordinates, BadArgumentCount):
    """A coordinate payload has the wrong number of fields."""


class BadCoordinateNumber(BadCoordinates, BadNumber):
    """A coordinate field is not a number."""


# =============================================================================
# Execution errors
# =============================================================================

class ExecutionError(AgentError):
    """An action was valid but could not be carried out."""


class InjectionFailure(ExecutionError):
    """The host refused to post a synthesized input event."""


class GestureFailure(ExecutionError):
    """A scripted gesture or window action failed."""
