"""
Bounded buffer for observed input events.

Platform listeners publish from their own threads; a single consumer drains
the queue. When the queue is full new events are dropped, never blocking the
listener.
"""

from __future__ import annotations
import json
import logging
import queue
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

from remote_agent.playback.replay import RecordedCommand, RecordedLog
from remote_agent.telemetry.encoder import to_command
from remote_agent.telemetry.events import TelemetryEvent

logger = logging.getLogger(__name__)


def event_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")


@dataclass(frozen=True)
class RecordedEvent:
    timestamp: str
    event: TelemetryEvent


class TelemetryRecorder:
    """
    Single-consumer queue of timestamped telemetry events.

    Usage:
        recorder = TelemetryRecorder(queue_size=1024)
        with InputListener(recorder):
            time.sleep(10)
        recorder.to_log(recorder.drain()).to_file(Path("session.csv"))
    """

    def __init__(self, queue_size: int = 1024):
        self._queue: "queue.Queue[RecordedEvent]" = queue.Queue(maxsize=queue_size)
        self.dropped = 0

    def publish(self, event: TelemetryEvent) -> bool:
        """Add an event; returns False if it was dropped because the queue is full."""
        try:
            self._queue.put_nowait(RecordedEvent(timestamp=event_timestamp(), event=event))
        except queue.Full:
            self.dropped += 1
            logger.warning(f"Telemetry queue full, dropped {event.type} event ({self.dropped} total)")
            return False
        return True

    def drain(self) -> List[RecordedEvent]:
        """Remove and return every buffered event, oldest first."""
        events: List[RecordedEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    @staticmethod
    def to_log(events: Iterable[RecordedEvent]) -> RecordedLog:
        """Convert events to a replayable log, skipping those without a command."""
        entries = []
        for recorded in events:
            command = to_command(recorded.event)
            if command is not None:
                entries.append(RecordedCommand(command=command, timestamp=recorded.timestamp))
        return RecordedLog(entries)

    @staticmethod
    def write_jsonl(events: Iterable[RecordedEvent], path: Path) -> None:
        """Write one ``{"timestamp", "event"}`` JSON object per line."""
        with open(path, "w", encoding="utf-8") as f:
            for recorded in events:
                record = {
                    "timestamp": recorded.timestamp,
                    "event": recorded.event.model_dump(by_alias=True),
                }
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
