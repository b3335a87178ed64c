import pytest

from sound_cue_detection.monitor.config import MonitorConfig
from sound_cue_detection.monitor.labels import SoundLabel


def test_config_from_env_success(monkeypatch):
    monkeypatch.setenv("ENABLED_SOUNDS", "siren,doorbell")
    monkeypatch.setenv("GLOBAL_COOLDOWN_SECONDS", "4.5")
    monkeypatch.setenv("PRESERVE_COOLDOWNS_ON_RESET", "false")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "token")
    monkeypatch.setenv("TELEGRAM_CHAT_ID", "1, 2")

    config = MonitorConfig.from_env()

    assert config.enabled_labels == frozenset({SoundLabel.SIREN, SoundLabel.DOORBELL})
    assert config.global_cooldown_seconds == 4.5
    assert config.preserve_cooldowns_on_reset is False
    assert config.telegram_chat_ids == ("1", "2")
    assert config.telegram_enabled


def test_config_defaults(monkeypatch):
    for name in ("ENABLED_SOUNDS", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID", "SUBTHRESHOLD_POLICY"):
        monkeypatch.delenv(name, raising=False)

    config = MonitorConfig.from_env()

    assert config.enabled_labels == frozenset(SoundLabel)
    assert config.per_label_cooldown_seconds == 10.0
    assert config.subthreshold_policy == "decrement"
    assert not config.telegram_enabled


def test_invalid_label_rejected(monkeypatch):
    monkeypatch.setenv("ENABLED_SOUNDS", "siren,thunder")

    with pytest.raises(ValueError):
        MonitorConfig.from_env()


def test_invalid_subthreshold_policy(monkeypatch):
    monkeypatch.setenv("SUBTHRESHOLD_POLICY", "ignore")

    with pytest.raises(ValueError):
        MonitorConfig.from_env()


def test_invalid_competition_window(monkeypatch):
    monkeypatch.setenv("COMPETITION_WINDOW_SECONDS", "0")

    with pytest.raises(ValueError):
        MonitorConfig.from_env()


def test_build_engine_applies_settings():
    config = MonitorConfig(
        enabled_labels=frozenset({SoundLabel.KNOCK}),
        global_cooldown_seconds=2.0,
        subthreshold_policy="reset",
    )

    engine = config.build_engine()

    assert engine.enabled_labels == frozenset({SoundLabel.KNOCK})
    assert engine.global_cooldown_seconds == 2.0
    assert engine.subthreshold_policy == "reset"


def test_window_seconds_from_env(monkeypatch):
    monkeypatch.delenv("WINDOW_SECONDS", raising=False)
    assert MonitorConfig.from_env().window_seconds == 0.3

    monkeypatch.setenv("WINDOW_SECONDS", "0.5")
    config = MonitorConfig.from_env()
    assert config.window_seconds == 0.5
    assert config.describe()["window_seconds"] == 0.5

    monkeypatch.setenv("WINDOW_SECONDS", "0")
    with pytest.raises(ValueError):
        MonitorConfig.from_env()
