from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Mapping, Union

from sound_cue_detection.monitor.engine import ClassifierFrame, DetectionEngine, DetectionEvent
from sound_cue_detection.monitor.labels import SoundLabel
from sound_cue_detection.monitor.sinks import DetectionSink

logger = logging.getLogger(__name__)

Classifications = Union[Mapping[str, float], Iterable[tuple[str, float]]]


def map_classifications(classifications: Classifications) -> list[ClassifierFrame]:
    """Map raw classifier identifiers to frames, keeping the best score per label."""
    pairs = classifications.items() if isinstance(classifications, Mapping) else classifications
    best: dict[SoundLabel, float] = {}
    for identifier, raw_confidence in pairs:
        confidence = float(raw_confidence)
        if confidence < 0:
            continue
        label = SoundLabel.from_classifier_label(str(identifier))
        if label is None:
            continue
        if label not in best or confidence > best[label]:
            best[label] = confidence
    return [ClassifierFrame(label=label, confidence=confidence) for label, confidence in best.items()]


class ClassifierAdapter:
    """Funnels classifier callbacks into one engine and fans detections out to sinks."""

    def __init__(
        self,
        engine: DetectionEngine,
        sinks: Iterable[DetectionSink] = (),
        dispatch_inline: bool = False,
    ) -> None:
        self.engine = engine
        self.sinks: list[DetectionSink] = list(sinks)
        self.dispatch_inline = dispatch_inline
        self.classifier_errors = 0
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        if not dispatch_inline:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="detection-dispatch")

    def add_sink(self, sink: DetectionSink) -> None:
        self.sinks.append(sink)

    def handle_window(self, classifications: Classifications, now: float | None = None) -> DetectionEvent | None:
        frames = map_classifications(classifications)
        if not frames:
            return None
        with self._lock:
            event = self.engine.process_window(frames, now=now)
        if event is not None:
            self._dispatch(event)
        return event

    def handle_frame(self, label: SoundLabel, confidence: float, now: float | None = None) -> DetectionEvent | None:
        with self._lock:
            event = self.engine.process_frame(label, confidence, now=now)
        if event is not None:
            self._dispatch(event)
        return event

    def handle_classifier_error(self, error: BaseException) -> None:
        # Transient analysis failures keep the session alive.
        self.classifier_errors += 1
        logger.warning("Classifier analysis error (non-fatal): %s", error)

    def set_label_enabled(self, label: SoundLabel, enabled: bool) -> None:
        with self._lock:
            if enabled:
                self.engine.enable(label)
            else:
                self.engine.disable(label)

    def enabled_labels(self) -> frozenset[SoundLabel]:
        with self._lock:
            return self.engine.enabled_labels

    def is_enabled(self, label: SoundLabel) -> bool:
        with self._lock:
            return self.engine.is_enabled(label)

    def reset(self) -> None:
        with self._lock:
            self.engine.reset()

    def snapshot(self, now: float | None = None) -> dict[str, object]:
        with self._lock:
            payload = self.engine.snapshot(now=now)
        payload["classifier_errors"] = self.classifier_errors
        return payload

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _dispatch(self, event: DetectionEvent) -> Future | None:
        if self.dispatch_inline or self._executor is None:
            self._deliver(event)
            return None
        return self._executor.submit(self._deliver, event)

    def _deliver(self, event: DetectionEvent) -> None:
        for sink in self.sinks:
            try:
                sink.on_detection(event)
            except Exception:
                logger.exception("Detection sink %s failed for %s", type(sink).__name__, event.label.value)
