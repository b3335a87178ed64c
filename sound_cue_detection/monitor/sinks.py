from __future__ import annotations

import json
import logging
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol

from sound_cue_detection.monitor.engine import DetectionEvent

logger = logging.getLogger(__name__)


class DetectionSink(Protocol):
    def on_detection(self, event: DetectionEvent) -> None:
        raise NotImplementedError


class LoggingSink:
    def on_detection(self, event: DetectionEvent) -> None:
        logger.info(
            "%s detected (confidence=%.2f at=%.2f)",
            event.label.display_name,
            event.confidence,
            event.confirmed_at,
        )


class EventLogSink:
    """Writes each confirmed detection as a JSON file under ``artifact_dir``."""

    def __init__(self, artifact_dir: str | Path) -> None:
        self.artifact_dir = Path(artifact_dir)
        self.artifact_dir.mkdir(parents=True, exist_ok=True)
        self._counter = 0

    def on_detection(self, event: DetectionEvent) -> None:
        self._counter += 1
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = self.artifact_dir / f"event_{stamp}_{self._counter:04d}_{event.label.value}.json"
        payload = dict(event.to_dict(), recorded_at=datetime.now().isoformat(timespec="seconds"))
        output.write_text(json.dumps(payload, indent=2), encoding="utf-8")


class DisplayState:
    """Currently displayed detection, cleared after ``display_seconds``.

    This is presentation state only and never feeds back into the engine.
    """

    def __init__(self, display_seconds: float = 3.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.display_seconds = max(0.0, float(display_seconds))
        self.clock = clock
        self._lock = threading.Lock()
        self._event: DetectionEvent | None = None
        self._shown_at = 0.0

    def on_detection(self, event: DetectionEvent) -> None:
        with self._lock:
            self._event = event
            self._shown_at = self.clock()

    def current(self) -> DetectionEvent | None:
        with self._lock:
            if self._event is None:
                return None
            if self.clock() - self._shown_at >= self.display_seconds:
                self._event = None
            return self._event

    def clear(self) -> None:
        with self._lock:
            self._event = None
