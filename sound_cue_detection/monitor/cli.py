from __future__ import annotations

import argparse
import json
import logging

from sound_cue_detection.monitor.config import MonitorConfig
from sound_cue_detection.monitor.labels import SoundLabel, tuning_table
from sound_cue_detection.monitor.replay import load_recording, replay
from sound_cue_detection.monitor.service import MonitorService
from sound_cue_detection.monitor.simulation import simulate_sound


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sound cue detection monitor")
    parser.add_argument("command", choices=["labels", "status", "replay", "simulate"], help="Monitor command")
    parser.add_argument("target", nargs="?", default="", help="Recording path (replay) or label name (simulate)")
    parser.add_argument("--json", action="store_true", help="Print detections as JSON lines")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for simulate")
    return parser


def _print_labels() -> None:
    print(f"{'label':<15} {'threshold':>9} {'frames':>6}  dominates")
    for row in tuning_table():
        dominated = ", ".join(row["dominates_over"]) or "-"
        print(f"{row['label']:<15} {row['confidence_threshold']:>9.2f} {row['required_consecutive_frames']:>6}  {dominated}")


def _print_detections(detections, as_json: bool) -> None:
    for event in detections:
        if as_json:
            print(json.dumps(event.to_dict()))
        else:
            print(f"{event.confirmed_at:8.2f}s  {event.label.display_name:<14} confidence={event.confidence:.2f}")
    if not as_json:
        print(f"detections={len(detections)}")


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "labels":
        _print_labels()
        return 0

    config = MonitorConfig.from_env()
    logging.basicConfig(level=getattr(logging, config.log_level, logging.INFO))

    if args.command == "status":
        print("monitor_ready")
        print(json.dumps(config.describe(), indent=2))
        return 0

    if not args.target:
        raise SystemExit(f"{args.command} requires a target argument")

    service = MonitorService(config=config, dispatch_inline=True)
    try:
        if args.command == "replay":
            windows = load_recording(args.target)
            logging.info("Replaying %d recorded windows from %s", len(windows), args.target)
            detections = replay(service.adapter, windows)
            if service.adapter.classifier_errors:
                logging.warning("Recording contained %d classifier errors", service.adapter.classifier_errors)
            _print_detections(detections, args.json)
            return 0

        label = SoundLabel.parse(args.target)
        result = simulate_sound(service.adapter, label, seed=args.seed, interval_seconds=config.window_seconds)
        if result.frames == 0:
            print(f"{label.value} is disabled")
            return 1
        logging.info("Simulated %s: %d frames at confidence %.2f", label.value, result.frames, result.confidence)
        _print_detections(result.detections, args.json)
        return 0
    finally:
        service.close()


if __name__ == "__main__":
    raise SystemExit(main())
