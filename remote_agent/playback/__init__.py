"""
Playback of agent commands as real OS input.

Decodes commands into actions and replays them through an input injector,
one command at a time.
"""

from remote_agent.playback.injection import InputInjector, GestureRunner, RecordingInjector
from remote_agent.playback.os_controller import OSController
from remote_agent.playback.dispatcher import Dispatcher, ExecutionResult
from remote_agent.playback.replay import SessionReplayDriver, RecordedLog, SessionState

__all__ = [
    "InputInjector",
    "GestureRunner",
    "RecordingInjector",
    "OSController",
    "Dispatcher",
    "ExecutionResult",
    "SessionReplayDriver",
    "RecordedLog",
    "SessionState",
]
