import json

import pytest

from sound_cue_detection.monitor.adapter import ClassifierAdapter
from sound_cue_detection.monitor.engine import DetectionEngine
from sound_cue_detection.monitor.labels import SoundLabel
from sound_cue_detection.monitor.replay import iter_recording, load_recording, replay


def _write(path, rows):
    path.write_text("\n".join(json.dumps(row) for row in rows) + "\n", encoding="utf-8")


def test_replay_recording_detects_doorbell_and_logs_errors(tmp_path):
    recording = tmp_path / "session.jsonl"
    _write(
        recording,
        [
            {"t": 0.0, "classifications": {"door_bell": 0.6, "speech": 0.2}},
            {"t": 0.5, "error": "analysis interrupted"},
            {"t": 1.0, "classifications": [["Door Bell", 0.7]]},
            {"t": 3.0, "classifications": {"siren": 0.9}},
        ],
    )
    adapter = ClassifierAdapter(DetectionEngine(clock=lambda: 0.0), dispatch_inline=True)

    detections = replay(adapter, load_recording(recording))

    assert [event.label for event in detections] == [SoundLabel.DOORBELL]
    assert detections[0].confidence == pytest.approx(0.65)
    assert adapter.classifier_errors == 1


def test_recording_skips_blank_and_comment_lines():
    windows = list(iter_recording(["# header", "", '{"t": 1.5, "classifications": {}}']))

    assert len(windows) == 1
    assert windows[0].observed_at == 1.5


def test_recording_reports_line_numbers():
    with pytest.raises(ValueError, match="line 2"):
        list(iter_recording(['{"t": 0}', "{not json"]))

    with pytest.raises(ValueError, match="missing 't'"):
        list(iter_recording(['{"classifications": {}}']))


def test_missing_recording(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_recording(tmp_path / "nope.jsonl")
