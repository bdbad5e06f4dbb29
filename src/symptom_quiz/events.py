"""
Collaborator sinks

The engine talks to two fire-and-forget collaborators:
- an announcer taking a message string (screen-reader live region)
- a telemetry sink taking an event name and a payload

Their failures are logged and dropped; they never reach the engine.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Optional

from .config import config

logger = logging.getLogger(__name__)

Announcer = Callable[[str], None]
TelemetrySink = Callable[[str, dict], None]


def announce(announcer: Optional[Announcer], message: str) -> None:
    """Send a message to the announcer, if any."""
    if announcer is None:
        return
    try:
        announcer(message)
    except Exception as e:
        logger.warning(f"Announcer failed for {message!r}: {e}")


def track(sink: Optional[TelemetrySink], event: str, payload: dict) -> None:
    """Send an event to the telemetry sink, if any."""
    if sink is None:
        return
    try:
        sink(event, dict(payload))
    except Exception as e:
        logger.warning(f"Telemetry sink failed for {event!r}: {e}")


class LocalEventLog:
    """
    Telemetry sink that keeps recent events in memory.

    Nothing leaves the process; only the newest `max_events` are kept.
    """

    def __init__(self, max_events: Optional[int] = None):
        self.max_events = max_events if max_events is not None else config.telemetry.max_events
        self._events: deque = deque(maxlen=self.max_events)

    def __call__(self, event: str, payload: dict) -> None:
        self._events.append({
            "event": event,
            "data": dict(payload),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @property
    def events(self) -> list[dict]:
        return list(self._events)

    def named(self, event: str) -> list[dict]:
        """Events with the given name, oldest first."""
        return [e for e in self._events if e["event"] == event]

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
