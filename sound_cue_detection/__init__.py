"""Sound cue detection: turns classifier frames into confirmed detections."""
