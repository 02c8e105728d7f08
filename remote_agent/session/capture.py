"""
Screen capture for screenshot uploads.
"""

from __future__ import annotations
import platform
from io import BytesIO
from typing import Dict, Tuple

from PIL import Image, ImageGrab


class ScreenCapture:
    """Grabs the main display as PNG bytes."""

    def grab(self) -> Image.Image:
        return ImageGrab.grab()

    def grab_png(self) -> bytes:
        buffer = BytesIO()
        self.grab().save(buffer, format="PNG")
        return buffer.getvalue()

    def screen_size(self) -> Tuple[int, int]:
        return self.grab().size


def frontend_info(screen_size: Tuple[int, int]) -> Dict[str, str]:
    """Describe this host to the backend when a session starts."""
    width, height = screen_size
    return {
        "screen_size": f"{width}x{height}",
        "os_info": platform.platform(),
    }
