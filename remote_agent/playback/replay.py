"""
Session replay driver that feeds commands to the dispatcher.
"""

from __future__ import annotations
import logging
import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Deque, Iterable, Iterator, List, Optional

from remote_agent.config import ReplayConfig
from remote_agent.playback.dispatcher import Dispatcher, ExecutionResult

logger = logging.getLogger(__name__)

CSV_HEADER = "Timestamp,Command"


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SessionState:
    """Last executed action, reported alongside each screenshot upload."""
    last_action: str = "No action"
    last_action_timestamp: str = field(default_factory=utc_timestamp)

    def record(self, command: str) -> None:
        self.last_action = command
        self.last_action_timestamp = utc_timestamp()


class InstructionSource(ABC):
    """
    Ordered, possibly unbounded source of raw commands.

    ``paced`` sources are throttled by the driver; unpaced sources set their
    own rhythm (for example one command per screenshot exchange).
    """

    paced: bool = False

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        """Yield raw command strings."""


@dataclass
class RecordedCommand:
    command: str
    timestamp: Optional[str] = None


class RecordedLog(InstructionSource):
    """
    A finite, recorded list of commands.

    Files are either a ``Timestamp,Command`` CSV (everything after the first
    comma of a row is the command) or plain text with one command per line.
    """

    paced = True

    def __init__(self, entries: Iterable[RecordedCommand]):
        self.entries: List[RecordedCommand] = list(entries)

    @classmethod
    def from_commands(cls, commands: Iterable[str]) -> RecordedLog:
        return cls(RecordedCommand(command=c) for c in commands)

    @classmethod
    def from_file(cls, path: Path) -> RecordedLog:
        """Load a recorded log from disk."""
        with open(path, encoding="utf-8") as f:
            lines = [line.rstrip("\r\n") for line in f]

        entries: List[RecordedCommand] = []
        if lines and lines[0].strip() == CSV_HEADER:
            for number, line in enumerate(lines[1:], start=2):
                if not line.strip():
                    continue
                timestamp, sep, command = line.partition(",")
                if not sep:
                    logger.warning(f"{path}:{number}: row has no command column, skipped")
                    continue
                entries.append(RecordedCommand(command=command, timestamp=timestamp))
        else:
            entries = [RecordedCommand(command=line) for line in lines if line.strip()]

        logger.info(f"Loaded {len(entries)} commands from {path}")
        return cls(entries)

    def to_file(self, path: Path) -> None:
        """Write the log as a ``Timestamp,Command`` CSV."""
        with open(path, "w", encoding="utf-8") as f:
            f.write(CSV_HEADER + "\n")
            for entry in self.entries:
                f.write(f"{entry.timestamp or ''},{entry.command}\n")

    def __iter__(self) -> Iterator[str]:
        return (entry.command for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class ReplaySummary:
    """
    Counters for one session.

    ``results`` keeps only the most recent results, up to
    ``ReplayConfig.keep_results``; pass ``on_result`` to see every one.
    """
    executed: int = 0
    failed: int = 0
    ended_by_sentinel: bool = False
    stopped: bool = False
    results: Deque[ExecutionResult] = field(default_factory=deque)


class SessionReplayDriver:
    """
    Feeds commands from an instruction source into the dispatcher.

    Commands run strictly one after another. A failed command is logged and
    the session moves on; only the end sentinel or ``stop()`` ends a session
    early. ``stop()`` takes effect between commands, never mid-action.

    Usage:
        driver = SessionReplayDriver(Dispatcher(OSController()))
        summary = driver.run(RecordedLog.from_file("session.csv"))
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        config: Optional[ReplayConfig] = None,
        state: Optional[SessionState] = None
    ):
        self.dispatcher = dispatcher
        self.config = config or ReplayConfig()
        self.state = state or SessionState()
        self.stop_event = threading.Event()
        self._running = False

        # Callbacks
        self.on_result: Optional[Callable[[ExecutionResult], None]] = None
        self.on_complete: Optional[Callable[[ReplaySummary], None]] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Request the session to end before the next command."""
        self.stop_event.set()
        logger.info("Stop requested")

    def is_end(self, command: str) -> bool:
        """True if ``command`` is the session end sentinel."""
        return command.strip() == self.config.end_sentinel

    def run(self, source: InstructionSource) -> ReplaySummary:
        """
        Run every command from ``source`` until it is exhausted, the end
        sentinel arrives, or ``stop()`` is called.
        """
        summary = ReplaySummary(results=deque(maxlen=self.config.keep_results))
        self._running = True
        self.stop_event.clear()
        last_start: Optional[float] = None

        logger.info(f"Starting session ({'paced' if source.paced else 'live'} source)")
        try:
            for command in source:
                if self.stop_event.is_set():
                    summary.stopped = True
                    logger.info("Session stopped")
                    break

                if self.is_end(command):
                    summary.ended_by_sentinel = True
                    self.state.record(command)
                    logger.info("Session ended by the server")
                    break

                if source.paced and last_start is not None:
                    remaining = self.config.min_interval - (time.monotonic() - last_start)
                    if remaining > 0:
                        time.sleep(remaining)
                last_start = time.monotonic()

                result = self.dispatcher.run(command)
                self.state.record(command)
                summary.results.append(result)
                summary.executed += 1
                if not result.ok:
                    summary.failed += 1
                    logger.warning(f"Command failed, continuing: {result.describe()}")

                if self.on_result:
                    self.on_result(result)
        finally:
            self._running = False

        logger.info(
            f"Session finished: {summary.executed} executed, {summary.failed} failed"
        )
        if self.on_complete:
            self.on_complete(summary)
        return summary
