from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from sound_cue_detection.monitor.adapter import ClassifierAdapter
from sound_cue_detection.monitor.engine import DetectionEvent


@dataclass(frozen=True)
class RecordedWindow:
    observed_at: float
    classifications: list[tuple[str, float]]
    error: str = ""


def parse_window(payload: dict, line_number: int = 0) -> RecordedWindow:
    if "t" not in payload:
        raise ValueError(f"line {line_number}: missing 't'")
    observed_at = float(payload["t"])

    error = str(payload.get("error", "")).strip()
    raw = payload.get("classifications", {})
    if isinstance(raw, dict):
        pairs = [(str(name), float(score)) for name, score in raw.items()]
    elif isinstance(raw, list):
        pairs = [(str(item[0]), float(item[1])) for item in raw]
    else:
        raise ValueError(f"line {line_number}: 'classifications' must be an object or a list of pairs")
    return RecordedWindow(observed_at=observed_at, classifications=pairs, error=error)


def iter_recording(lines: Iterable[str]) -> Iterator[RecordedWindow]:
    for line_number, line in enumerate(lines, start=1):
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"line {line_number}: invalid JSON ({exc.msg})") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"line {line_number}: expected a JSON object")
        yield parse_window(payload, line_number=line_number)


def load_recording(path: str | Path) -> list[RecordedWindow]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Recording not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        return list(iter_recording(fh))


def replay(adapter: ClassifierAdapter, windows: Iterable[RecordedWindow]) -> list[DetectionEvent]:
    detections = []
    for window in windows:
        if window.error:
            adapter.handle_classifier_error(RuntimeError(window.error))
            continue
        event = adapter.handle_window(window.classifications, now=window.observed_at)
        if event is not None:
            detections.append(event)
    return detections
