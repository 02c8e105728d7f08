"""
HTTP client for the instruction backend.

The backend hands out one instruction per screenshot: the agent uploads the
current screen together with the last action it performed, and the response
may carry ``next_action``.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Optional

import httpx

from remote_agent.protocol.errors import AgentError

logger = logging.getLogger(__name__)


class BackendError(AgentError):
    """The backend could not be reached or returned an unusable response."""


class BackendClient:
    """
    Connection to the instruction backend.

    Usage:
        with BackendClient("http://localhost:8000") as backend:
            session_id = backend.start_session("Open the downloads folder", info)
            response = backend.send_screenshot(session_id, png, "No action", ts)
            response.get("next_action")
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None
    ):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(base_url=self.base_url, timeout=timeout)

    def __enter__(self) -> BackendClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        logger.debug(f"HTTP {response.status_code} from {response.request.url}")
        try:
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise BackendError(f"Backend returned {e.response.status_code}") from e
        except ValueError as e:
            raise BackendError("Invalid JSON response") from e
        if not isinstance(data, dict):
            raise BackendError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def start_session(self, prompt: str, frontend_info: Dict[str, str]) -> str:
        """
        Start a session for ``prompt``.

        Returns:
            The session ID assigned by the backend
        """
        logger.info(f"Starting session: {frontend_info}")
        try:
            response = self._client.post(
                "/sessions",
                json={"prompt": prompt, "frontend_info": frontend_info},
            )
        except httpx.HTTPError as e:
            raise BackendError(f"Network error: {e}") from e

        data = self._json(response)
        session_id = data.get("session_id")
        if not isinstance(session_id, str) or not session_id:
            raise BackendError(f"No session_id in response: {data}")
        logger.info(f"Session started with ID: {session_id}")
        return session_id

    def send_screenshot(
        self,
        session_id: str,
        screenshot_png: bytes,
        last_action: str,
        last_action_timestamp: str,
        screenshot_timestamp: str = ""
    ) -> Dict[str, Any]:
        """
        Upload a screenshot and the outcome of the last action.

        Returns:
            The backend's JSON response
        """
        fields = {
            "screenshot_timestamp": screenshot_timestamp,
            "last_action": last_action,
            "last_action_timestamp": last_action_timestamp,
        }
        files = {"screenshot": ("screenshot.png", screenshot_png, "image/png")}
        try:
            response = self._client.post(f"/sessions/{session_id}", data=fields, files=files)
        except httpx.HTTPError as e:
            raise BackendError(f"Network error: {e}") from e
        return self._json(response)
