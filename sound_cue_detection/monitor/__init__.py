"""Runtime sound cue monitoring package."""

from sound_cue_detection.monitor.adapter import ClassifierAdapter
from sound_cue_detection.monitor.config import MonitorConfig
from sound_cue_detection.monitor.engine import ClassifierFrame, DetectionEngine, DetectionEvent
from sound_cue_detection.monitor.labels import SoundLabel

__all__ = [
    "ClassifierAdapter",
    "ClassifierFrame",
    "DetectionEngine",
    "DetectionEvent",
    "MonitorConfig",
    "SoundLabel",
]
