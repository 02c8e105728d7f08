"""
Configuration management for the remote agent.
"""

from __future__ import annotations
from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field
import yaml


class DispatcherConfig(BaseModel):
    """Timing and behaviour of synthesized input."""

    click_settle: float = Field(default=0.1, ge=0, description="Delay between repeated clicks in seconds")
    drag_duration: float = Field(default=1.0, ge=0, description="Total time of a drag in seconds")
    drag_steps: int = Field(default=5, ge=1, description="Interpolated drag points, endpoint included")
    scroll_to_amount: float = Field(default=300, description="Scroll delta applied by scroll-to")
    autocomplete_settle: float = Field(default=0.1, ge=0, description="Delay between prefix and suffix in seconds")
    gesture_backend: Literal["chord", "applescript"] = Field(
        default="chord", description="How gestures are performed"
    )


class ReplayConfig(BaseModel):
    """Configuration for the session replay driver."""

    min_interval: float = Field(default=0.1, ge=0, description="Minimum gap between recorded commands in seconds")
    end_sentinel: str = Field(default="END", description="Instruction that ends a session")
    keep_results: int = Field(default=100, ge=0, description="Most recent command results kept in the session summary")


class SessionConfig(BaseModel):
    """Configuration for the live backend session."""

    backend_url: str = Field(default="http://localhost:8000", description="Backend base URL")
    screenshot_interval: float = Field(default=3.0, ge=0, description="Seconds between screenshot uploads")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")


class TelemetryConfig(BaseModel):
    """Configuration for input event capture."""

    queue_size: int = Field(default=1024, ge=1, description="Maximum buffered events before dropping")


class AgentConfig(BaseModel):
    """Main configuration for the agent."""

    dispatcher: DispatcherConfig = Field(default_factory=DispatcherConfig)
    replay: ReplayConfig = Field(default_factory=ReplayConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    fail_safe: bool = Field(default=True, description="Abort when the mouse hits a screen corner")
    verbose: bool = Field(default=False, description="Enable verbose logging")

    @classmethod
    def from_file(cls, path: Path) -> AgentConfig:
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_file(self, path: Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)
