"""
Live instruction source driven by the screenshot/instruction exchange.
"""

from __future__ import annotations
import logging
import threading
from typing import Iterator, Optional

from remote_agent.playback.replay import InstructionSource, SessionState, utc_timestamp
from remote_agent.session.capture import ScreenCapture, frontend_info
from remote_agent.session.client import BackendClient, BackendError

logger = logging.getLogger(__name__)


class LiveInstructionSource(InstructionSource):
    """
    Yields at most one command per screenshot upload.

    Every ``interval`` seconds the current screen and the session state are
    sent to the backend; a ``next_action`` in the response is yielded to the
    replay driver. Transport failures are logged and retried on the next tick.
    """

    paced = False

    def __init__(
        self,
        client: BackendClient,
        prompt: str,
        state: SessionState,
        capture: Optional[ScreenCapture] = None,
        interval: float = 3.0,
        stop_event: Optional[threading.Event] = None
    ):
        self.client = client
        self.prompt = prompt
        self.state = state
        self.capture = capture or ScreenCapture()
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.session_id: Optional[str] = None

    def __iter__(self) -> Iterator[str]:
        info = frontend_info(self.capture.screen_size())
        self.session_id = self.client.start_session(self.prompt, info)

        while not self.stop_event.wait(self.interval):
            command = self._exchange()
            if command:
                logger.info(f"Received instruction: {command}")
                yield command

    def _exchange(self) -> Optional[str]:
        """Upload one screenshot and return the next instruction, if any."""
        try:
            png = self.capture.grab_png()
        except OSError as e:
            logger.error(f"Could not capture the screen: {e}")
            return None

        try:
            response = self.client.send_screenshot(
                self.session_id,
                png,
                last_action=self.state.last_action,
                last_action_timestamp=self.state.last_action_timestamp,
                screenshot_timestamp=utc_timestamp(),
            )
        except BackendError as e:
            logger.error(f"Failed to send screenshot: {e}")
            return None

        next_action = response.get("next_action")
        if isinstance(next_action, str) and next_action:
            return next_action
        return None
