"""
Live backend session: screenshot uploads in, instructions out.
"""

from remote_agent.session.client import BackendClient, BackendError
from remote_agent.session.capture import ScreenCapture, frontend_info
from remote_agent.session.live import LiveInstructionSource

__all__ = [
    "BackendClient",
    "BackendError",
    "ScreenCapture",
    "frontend_info",
    "LiveInstructionSource",
]
