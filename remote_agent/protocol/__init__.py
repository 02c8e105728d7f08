"""
Command protocol: key symbols, typed actions and the command parser.
"""

from remote_agent.protocol.keys import KeyCode, lookup, name_for, resolve
from remote_agent.protocol.actions import Action, MouseButton, Point, GestureKind
from remote_agent.protocol.parser import parse, expand_batch, ACTION_TAGS
from remote_agent.protocol.errors import AgentError, ParseError, ExecutionError

__all__ = [
    "KeyCode",
    "lookup",
    "name_for",
    "resolve",
    "Action",
    "MouseButton",
    "Point",
    "GestureKind",
    "parse",
    "expand_batch",
    "ACTION_TAGS",
    "AgentError",
    "ParseError",
    "ExecutionError",
]
