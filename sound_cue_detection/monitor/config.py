from __future__ import annotations

import os
from dataclasses import dataclass, field

from sound_cue_detection.monitor.engine import SUBTHRESHOLD_POLICIES, DetectionEngine
from sound_cue_detection.monitor.labels import SoundLabel, parse_label_list


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    return float(value)


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    return int(value)


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _list_env(name: str) -> tuple[str, ...]:
    value = os.getenv(name, "")
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class MonitorConfig:
    enabled_labels: frozenset[SoundLabel] = field(default_factory=lambda: frozenset(SoundLabel))
    per_label_cooldown_seconds: float = 10.0
    global_cooldown_seconds: float = 10.0
    competition_window_seconds: float = 5.0
    history_size: int = 5
    subthreshold_policy: str = "decrement"
    preserve_cooldowns_on_reset: bool = True
    display_seconds: float = 3.0
    window_seconds: float = 0.3
    telegram_bot_token: str = ""
    telegram_chat_ids: tuple[str, ...] = ()
    enable_event_log: bool = True
    artifact_dir: str = "./artifacts"
    log_level: str = "INFO"

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_ids)

    @classmethod
    def from_env(cls) -> "MonitorConfig":
        enabled_labels = parse_label_list(os.getenv("ENABLED_SOUNDS", "all"))

        subthreshold_policy = os.getenv("SUBTHRESHOLD_POLICY", "decrement").strip().lower()
        if subthreshold_policy not in SUBTHRESHOLD_POLICIES:
            raise ValueError("SUBTHRESHOLD_POLICY must be 'decrement' or 'reset'")

        competition_window = _float_env("COMPETITION_WINDOW_SECONDS", 5.0)
        if competition_window <= 0:
            raise ValueError("COMPETITION_WINDOW_SECONDS must be positive")

        history_size = _int_env("HISTORY_SIZE", 5)
        if history_size < 1:
            raise ValueError("HISTORY_SIZE must be at least 1")

        display_seconds = _float_env("DISPLAY_SECONDS", 3.0)
        if display_seconds < 0:
            raise ValueError("DISPLAY_SECONDS must not be negative")

        window_seconds = _float_env("WINDOW_SECONDS", 0.3)
        if window_seconds <= 0:
            raise ValueError("WINDOW_SECONDS must be positive")

        return cls(
            enabled_labels=enabled_labels,
            per_label_cooldown_seconds=_float_env("PER_LABEL_COOLDOWN_SECONDS", 10.0),
            global_cooldown_seconds=_float_env("GLOBAL_COOLDOWN_SECONDS", 10.0),
            competition_window_seconds=competition_window,
            history_size=history_size,
            subthreshold_policy=subthreshold_policy,
            preserve_cooldowns_on_reset=_bool_env("PRESERVE_COOLDOWNS_ON_RESET", True),
            display_seconds=display_seconds,
            window_seconds=window_seconds,
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", "").strip(),
            telegram_chat_ids=_list_env("TELEGRAM_CHAT_ID"),
            enable_event_log=_bool_env("ENABLE_EVENT_LOG", True),
            artifact_dir=os.getenv("ARTIFACT_DIR", "./artifacts").strip(),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        )

    def build_engine(self) -> DetectionEngine:
        return DetectionEngine(
            enabled_labels=self.enabled_labels,
            per_label_cooldown_seconds=self.per_label_cooldown_seconds,
            global_cooldown_seconds=self.global_cooldown_seconds,
            competition_window_seconds=self.competition_window_seconds,
            history_size=self.history_size,
            subthreshold_policy=self.subthreshold_policy,
            preserve_cooldowns_on_reset=self.preserve_cooldowns_on_reset,
        )

    def describe(self) -> dict[str, object]:
        return {
            "enabled_labels": sorted(label.value for label in self.enabled_labels),
            "per_label_cooldown_seconds": self.per_label_cooldown_seconds,
            "global_cooldown_seconds": self.global_cooldown_seconds,
            "competition_window_seconds": self.competition_window_seconds,
            "history_size": self.history_size,
            "subthreshold_policy": self.subthreshold_policy,
            "preserve_cooldowns_on_reset": self.preserve_cooldowns_on_reset,
            "display_seconds": self.display_seconds,
            "window_seconds": self.window_seconds,
            "telegram": "on" if self.telegram_enabled else "off",
            "event_log": "on" if self.enable_event_log else "off",
        }
