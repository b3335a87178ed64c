from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Iterable

import numpy as np

from sound_cue_detection.monitor.labels import SoundLabel

logger = logging.getLogger(__name__)

SUBTHRESHOLD_POLICIES = {"decrement", "reset"}


@dataclass(frozen=True)
class ClassifierFrame:
    label: SoundLabel
    confidence: float
    observed_at: float | None = None


@dataclass(frozen=True)
class DetectionEvent:
    label: SoundLabel
    confidence: float
    confirmed_at: float

    def to_dict(self) -> dict[str, object]:
        return {
            "label": self.label.value,
            "display_name": self.label.display_name,
            "confidence": round(self.confidence, 4),
            "confirmed_at": self.confirmed_at,
        }


@dataclass
class LabelTrackingState:
    history_size: int = 5
    consecutive_count: int = 0
    confidence_history: Deque[float] = field(default_factory=deque)
    last_confirmed_at: float | None = None

    def __post_init__(self) -> None:
        self.confidence_history = deque(self.confidence_history, maxlen=self.history_size)

    def clear_progress(self) -> None:
        self.consecutive_count = 0
        self.confidence_history.clear()


class DetectionEngine:
    """Single-writer state machine turning classifier frames into confirmed detections.

    Callers must serialize every call on one instance; see ``ClassifierAdapter``.
    """

    def __init__(
        self,
        enabled_labels: Iterable[SoundLabel] | None = None,
        per_label_cooldown_seconds: float = 10.0,
        global_cooldown_seconds: float = 10.0,
        competition_window_seconds: float = 5.0,
        history_size: int = 5,
        subthreshold_policy: str = "decrement",
        preserve_cooldowns_on_reset: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if subthreshold_policy not in SUBTHRESHOLD_POLICIES:
            raise ValueError("subthreshold_policy must be 'decrement' or 'reset'")
        self.per_label_cooldown_seconds = max(0.0, float(per_label_cooldown_seconds))
        self.global_cooldown_seconds = max(0.0, float(global_cooldown_seconds))
        self.competition_window_seconds = max(0.0, float(competition_window_seconds))
        self.history_size = max(1, int(history_size))
        self.subthreshold_policy = subthreshold_policy
        self.preserve_cooldowns_on_reset = preserve_cooldowns_on_reset
        self.clock = clock
        self._enabled: set[SoundLabel] = set(SoundLabel if enabled_labels is None else enabled_labels)
        self._tracking: dict[SoundLabel, LabelTrackingState] = {
            label: LabelTrackingState(history_size=self.history_size) for label in SoundLabel
        }
        self._ledger: dict[SoundLabel, Deque[tuple[float, float]]] = {}
        self._last_global_confirmed_at: float | None = None
        self._last_confirmed_label: SoundLabel | None = None

    @property
    def enabled_labels(self) -> frozenset[SoundLabel]:
        return frozenset(self._enabled)

    @property
    def last_confirmed_label(self) -> SoundLabel | None:
        return self._last_confirmed_label

    def enable(self, label: SoundLabel) -> None:
        self._enabled.add(label)

    def disable(self, label: SoundLabel) -> None:
        self._enabled.discard(label)

    def set_enabled(self, labels: Iterable[SoundLabel]) -> None:
        self._enabled = set(labels)

    def is_enabled(self, label: SoundLabel) -> bool:
        return label in self._enabled

    def tracking(self, label: SoundLabel) -> LabelTrackingState:
        return self._tracking[label]

    def ledger_entries(self, label: SoundLabel, now: float | None = None) -> list[tuple[float, float]]:
        if now is None:
            now = self.clock()
        return self._recent_scores(label, now)

    def process_frame(self, label: SoundLabel, confidence: float, now: float | None = None) -> DetectionEvent | None:
        if now is None:
            now = self.clock()
        confidence = _clamp(confidence)
        if not self._admit(label, confidence, now):
            return None
        return self._evaluate(label, confidence, now)

    def process_window(self, frames: Iterable[ClassifierFrame], now: float | None = None) -> DetectionEvent | None:
        """Run one analysis window: record every candidate first, then evaluate until one confirms."""
        if now is None:
            now = self.clock()

        admitted: list[tuple[SoundLabel, float]] = []
        for frame in frames:
            observed_at = now if frame.observed_at is None else frame.observed_at
            confidence = _clamp(frame.confidence)
            if self._admit(frame.label, confidence, observed_at):
                admitted.append((frame.label, confidence))

        # One confirmation per window; the rest of the window is left unevaluated.
        for label, confidence in admitted:
            event = self._evaluate(label, confidence, now)
            if event is not None:
                return event
        return None

    def reset(self) -> None:
        for state in self._tracking.values():
            state.clear_progress()
            if not self.preserve_cooldowns_on_reset:
                state.last_confirmed_at = None
        self._ledger.clear()
        if not self.preserve_cooldowns_on_reset:
            self._last_global_confirmed_at = None
            self._last_confirmed_label = None

    def snapshot(self, now: float | None = None) -> dict[str, object]:
        if now is None:
            now = self.clock()
        labels: dict[str, dict[str, object]] = {}
        for label in SoundLabel:
            state = self._tracking[label]
            labels[label.value] = {
                "enabled": label in self._enabled,
                "consecutive_count": state.consecutive_count,
                "required_frames": label.required_consecutive_frames,
                "confidence_history": [round(value, 4) for value in state.confidence_history],
                "candidates": len(self._recent_scores(label, now)),
                "cooldown_remaining": round(self._remaining(state.last_confirmed_at, self.per_label_cooldown_seconds, now), 3),
            }
        return {
            "last_confirmed_label": self._last_confirmed_label.value if self._last_confirmed_label else None,
            "global_cooldown_remaining": round(
                self._remaining(self._last_global_confirmed_at, self.global_cooldown_seconds, now), 3
            ),
            "labels": labels,
        }

    def _admit(self, label: SoundLabel, confidence: float, now: float) -> bool:
        if label not in self._enabled:
            return False

        state = self._tracking[label]
        if confidence < label.confidence_threshold:
            if self.subthreshold_policy == "reset":
                state.consecutive_count = 0
            else:
                state.consecutive_count = max(0, state.consecutive_count - 1)
            state.confidence_history.clear()
            logger.debug(
                "%s conf=%.3f < threshold=%.2f frames=%d/%d",
                label.value,
                confidence,
                label.confidence_threshold,
                state.consecutive_count,
                label.required_consecutive_frames,
            )
            return False

        self._record_candidate(label, confidence, now)
        return True

    def _evaluate(self, label: SoundLabel, confidence: float, now: float) -> DetectionEvent | None:
        state = self._tracking[label]

        # The label that confirmed last is exempt and governed by its own cooldown only.
        if label != self._last_confirmed_label and self._last_global_confirmed_at is not None:
            since_global = now - self._last_global_confirmed_at
            if since_global < self.global_cooldown_seconds:
                logger.debug("%s skipped: global cooldown %.1fs", label.value, since_global)
                state.clear_progress()
                return None

        if state.last_confirmed_at is not None:
            since_label = now - state.last_confirmed_at
            if since_label < self.per_label_cooldown_seconds:
                logger.debug("%s skipped: per-label cooldown %.1fs", label.value, since_label)
                state.consecutive_count = 0
                return None

        state.confidence_history.append(confidence)
        state.consecutive_count += 1
        if state.consecutive_count < label.required_consecutive_frames:
            logger.debug(
                "%s conf=%.3f frames=%d/%d",
                label.value,
                confidence,
                state.consecutive_count,
                label.required_consecutive_frames,
            )
            return None

        competitor = self._find_suppressor(label, confidence, now)
        if competitor is not None:
            logger.debug("%s suppressed by %s", label.value, competitor.value)
            state.consecutive_count = 0
            return None

        smoothed = float(np.mean(state.confidence_history))
        return self._confirm(label, smoothed, now)

    def _find_suppressor(self, label: SoundLabel, confidence: float, now: float) -> SoundLabel | None:
        own_scores = self._recent_scores(label, now)
        own_mean = float(np.mean([score for _, score in own_scores])) if own_scores else confidence

        for other in list(self._ledger):
            if other == label:
                continue
            scores = self._recent_scores(other, now)
            if not scores:
                continue
            if label.dominates(other):
                continue
            if other.dominates(label):
                return other
            if float(np.mean([score for _, score in scores])) > own_mean:
                return other
        return None

    def _confirm(self, label: SoundLabel, confidence: float, now: float) -> DetectionEvent:
        self._tracking[label].last_confirmed_at = now
        self._last_global_confirmed_at = now
        self._last_confirmed_label = label

        for state in self._tracking.values():
            state.clear_progress()
        self._ledger.clear()

        logger.info("%s confirmed (confidence=%.3f)", label.value, confidence)
        return DetectionEvent(label=label, confidence=confidence, confirmed_at=now)

    def _record_candidate(self, label: SoundLabel, confidence: float, now: float) -> None:
        entries = self._ledger.setdefault(label, deque())
        entries.append((now, confidence))
        self._prune(entries, now)

    def _recent_scores(self, label: SoundLabel, now: float) -> list[tuple[float, float]]:
        entries = self._ledger.get(label)
        if not entries:
            return []
        self._prune(entries, now)
        if not entries:
            del self._ledger[label]
            return []
        return list(entries)

    def _prune(self, entries: Deque[tuple[float, float]], now: float) -> None:
        # Entries can arrive out of order when callers backdate frames.
        fresh = [entry for entry in entries if now - entry[0] < self.competition_window_seconds]
        if len(fresh) != len(entries):
            entries.clear()
            entries.extend(fresh)

    @staticmethod
    def _remaining(since: float | None, duration: float, now: float) -> float:
        if since is None:
            return 0.0
        return max(0.0, duration - (now - since))


def _clamp(confidence: float) -> float:
    return min(1.0, max(0.0, float(confidence)))
