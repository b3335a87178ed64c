from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class LabelTuning:
    display_name: str
    classifier_label: str
    confidence_threshold: float
    required_consecutive_frames: int
    dominates_over: frozenset[str] = frozenset()


class SoundLabel(Enum):
    DOORBELL = "doorbell"
    SIREN = "siren"
    KNOCK = "knock"
    ALARM = "alarm"
    SMOKE_ALARM = "smoke_alarm"
    DOG_BARK = "dog_bark"
    BABY_CRY = "baby_cry"
    CAT_MEOW = "cat_meow"
    WATER_RUNNING = "water_running"
    SPEECH = "speech"
    PHONE_RINGING = "phone_ringing"
    CAR_HORN = "car_horn"

    @property
    def tuning(self) -> LabelTuning:
        return LABEL_TUNING[self.value]

    @property
    def display_name(self) -> str:
        return self.tuning.display_name

    @property
    def classifier_label(self) -> str:
        return self.tuning.classifier_label

    @property
    def confidence_threshold(self) -> float:
        return self.tuning.confidence_threshold

    @property
    def required_consecutive_frames(self) -> int:
        return self.tuning.required_consecutive_frames

    @property
    def dominates_over(self) -> frozenset[SoundLabel]:
        return frozenset(SoundLabel(name) for name in self.tuning.dominates_over)

    def dominates(self, other: SoundLabel) -> bool:
        return other.value in self.tuning.dominates_over

    @classmethod
    def parse(cls, name: str) -> SoundLabel:
        """Resolve a user supplied label name (``dog_bark``, ``Dog Bark``, ``DOG-BARK``)."""
        key = normalize_identifier(name)
        for label in cls:
            if key in {label.value, normalize_identifier(label.display_name)}:
                return label
        raise ValueError(f"Unknown sound label: {name!r}")

    @classmethod
    def from_classifier_label(cls, identifier: str) -> SoundLabel | None:
        """Map a raw classifier identifier onto the closed taxonomy, or ``None``."""
        normalized = normalize_identifier(identifier)
        direct = CLASSIFIER_ALIASES.get(normalized)
        if direct is not None:
            return cls(direct)

        for substring, name in SUBSTRING_FALLBACKS:
            if substring in normalized:
                return cls(name)
        return None


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower().replace(" ", "_").replace("-", "_")


# Urgent safety sounds confirm on one frame, continuous household sounds need more proof.
# car_horn and phone_ringing thresholds sit above the scores their confusion partners produce.
LABEL_TUNING: dict[str, LabelTuning] = {
    "doorbell": LabelTuning("Doorbell", "door_bell", 0.50, 2),
    "siren": LabelTuning("Siren", "siren", 0.50, 1, frozenset({"alarm"})),
    "knock": LabelTuning("Knocking", "knock", 0.55, 2),
    "alarm": LabelTuning("Alarm", "fire_alarm", 0.50, 2, frozenset({"phone_ringing"})),
    "smoke_alarm": LabelTuning("Smoke Alarm", "smoke_detector", 0.45, 1, frozenset({"siren", "alarm"})),
    "dog_bark": LabelTuning("Dog Bark", "dog", 0.50, 3),
    "baby_cry": LabelTuning("Baby Cry", "crying_baby", 0.45, 1),
    "cat_meow": LabelTuning("Cat Meow", "cat", 0.50, 3),
    "water_running": LabelTuning("Water Running", "water_tap_faucet", 0.50, 3, frozenset({"car_horn"})),
    "speech": LabelTuning("Speech", "speech", 0.50, 2),
    "phone_ringing": LabelTuning("Phone Ringing", "telephone_bell_ringing", 0.65, 3),
    "car_horn": LabelTuning("Car Horn", "car_horn", 0.70, 2),
}


CLASSIFIER_ALIASES: dict[str, str] = {
    "door_bell": "doorbell",
    "doorbell": "doorbell",
    "doorbell_ring": "doorbell",
    "ding_dong": "doorbell",
    "siren": "siren",
    "civil_defense_siren": "siren",
    "police_siren": "siren",
    "ambulance_siren": "siren",
    "fire_engine_siren": "siren",
    "emergency_vehicle": "siren",
    "knock": "knock",
    "knocking": "knock",
    "door_knock": "knock",
    "tap": "knock",
    "thump_thud": "knock",
    "fire_alarm": "alarm",
    "alarm": "alarm",
    "alarm_clock": "alarm",
    "clock_alarm": "alarm",
    "buzzer": "alarm",
    "reverse_beeps": "alarm",
    "beep": "alarm",
    "smoke_detector": "smoke_alarm",
    "smoke_alarm": "smoke_alarm",
    "dog": "dog_bark",
    "dog_bark": "dog_bark",
    "dog_bow_wow": "dog_bark",
    "dog_growl": "dog_bark",
    "dog_howl": "dog_bark",
    "dog_whimper": "dog_bark",
    "crying_baby": "baby_cry",
    "baby_crying": "baby_cry",
    "crying_sobbing": "baby_cry",
    "baby_laughter": "baby_cry",
    "cat": "cat_meow",
    "cat_meow": "cat_meow",
    "cat_purr": "cat_meow",
    "meow": "cat_meow",
    "water_tap_faucet": "water_running",
    "water": "water_running",
    "bathtub_filling_washing": "water_running",
    "sink_filling_washing": "water_running",
    "liquid_dripping": "water_running",
    "liquid_filling_container": "water_running",
    "liquid_pouring": "water_running",
    "liquid_trickle_dribble": "water_running",
    "boiling": "water_running",
    "speech": "speech",
    "babble": "speech",
    "chatter": "speech",
    "shout": "speech",
    "yell": "speech",
    "whispering": "speech",
    "screaming": "speech",
    "children_shouting": "speech",
    "telephone_bell_ringing": "phone_ringing",
    "telephone": "phone_ringing",
    "ringtone": "phone_ringing",
    "car_horn": "car_horn",
    "honking": "car_horn",
    "vehicle_skidding": "car_horn",
    "air_horn": "car_horn",
    "bicycle_bell": "car_horn",
}

# Checked in order, so the more specific alarm variants come before plain "alarm".
SUBSTRING_FALLBACKS: tuple[tuple[str, str], ...] = (
    ("door_bell", "doorbell"),
    ("siren", "siren"),
    ("fire_alarm", "alarm"),
    ("smoke_detector", "smoke_alarm"),
    ("car_horn", "car_horn"),
    ("alarm", "alarm"),
    ("crying_baby", "baby_cry"),
    ("telephone", "phone_ringing"),
)


def parse_label_list(raw: str) -> frozenset[SoundLabel]:
    """Parse a comma separated list of label names; empty or ``all`` means every label."""
    text = raw.strip()
    if not text or text.lower() == "all":
        return frozenset(SoundLabel)
    return frozenset(SoundLabel.parse(item) for item in text.split(",") if item.strip())


def tuning_table() -> list[dict[str, object]]:
    return [
        {
            "label": label.value,
            "display_name": label.display_name,
            "confidence_threshold": label.confidence_threshold,
            "required_consecutive_frames": label.required_consecutive_frames,
            "dominates_over": sorted(other.value for other in label.dominates_over),
        }
        for label in SoundLabel
    ]
