from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from sound_cue_detection.monitor.adapter import ClassifierAdapter
from sound_cue_detection.monitor.engine import DetectionEvent
from sound_cue_detection.monitor.labels import SoundLabel

SIMULATION_FRAME_INTERVAL_SECONDS = 0.3


@dataclass(frozen=True)
class SimulationResult:
    label: SoundLabel
    confidence: float
    frames: int
    detections: list[DetectionEvent]


def simulated_confidence(label: SoundLabel, rng: np.random.Generator) -> float:
    """Draw a confidence within the upper 90% of the band above the label threshold."""
    base = label.confidence_threshold
    return float(base + rng.uniform(0.0, (1.0 - base) * 0.9))


def simulate_sound(
    adapter: ClassifierAdapter,
    label: SoundLabel,
    start: float | None = None,
    seed: int | None = None,
    interval_seconds: float = SIMULATION_FRAME_INTERVAL_SECONDS,
) -> SimulationResult:
    """Play a synthetic burst of frames for ``label`` through the normal detection path.

    Frames are stamped backwards so the last one lands on ``start``, which defaults to
    the engine clock; a simulation never leaves timestamps in the future.
    """
    if not adapter.is_enabled(label):
        return SimulationResult(label=label, confidence=0.0, frames=0, detections=[])

    rng = np.random.default_rng(seed)
    confidence = simulated_confidence(label, rng)
    frames = label.required_consecutive_frames + 2
    if start is None:
        start = adapter.engine.clock()
    first = start - (frames - 1) * interval_seconds

    detections = []
    for idx in range(frames):
        event = adapter.handle_frame(label, confidence, now=first + idx * interval_seconds)
        if event is not None:
            detections.append(event)
    return SimulationResult(label=label, confidence=confidence, frames=frames, detections=detections)
