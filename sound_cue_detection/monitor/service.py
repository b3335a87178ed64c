from __future__ import annotations

import logging

from sound_cue_detection.monitor.adapter import ClassifierAdapter
from sound_cue_detection.monitor.config import MonitorConfig
from sound_cue_detection.monitor.engine import DetectionEngine
from sound_cue_detection.monitor.notifier import TelegramNotifier
from sound_cue_detection.monitor.sinks import DetectionSink, DisplayState, EventLogSink, LoggingSink


class MonitorService:
    """One listening session: engine, display state and the configured sinks."""

    def __init__(
        self,
        config: MonitorConfig,
        engine: DetectionEngine | None = None,
        notifier: TelegramNotifier | None = None,
        dispatch_inline: bool = False,
    ) -> None:
        self.config = config
        self.engine = engine or config.build_engine()
        self.display = DisplayState(display_seconds=config.display_seconds, clock=self.engine.clock)
        if notifier is None and config.telegram_enabled:
            notifier = TelegramNotifier(config.telegram_bot_token, config.telegram_chat_ids)
        self.notifier = notifier

        sinks: list[DetectionSink] = [LoggingSink(), self.display]
        if config.enable_event_log:
            sinks.append(EventLogSink(config.artifact_dir))
        if notifier is not None:
            sinks.append(notifier)
        self.adapter = ClassifierAdapter(self.engine, sinks=sinks, dispatch_inline=dispatch_inline)

        logging.getLogger(__name__).info(
            "Monitor session ready (labels=%d sinks=%s)",
            len(self.engine.enabled_labels),
            ",".join(type(sink).__name__ for sink in sinks),
        )

    def status(self) -> dict[str, object]:
        current = self.display.current()
        return {
            "config": self.config.describe(),
            "engine": self.adapter.snapshot(),
            "current_detection": current.to_dict() if current is not None else None,
        }

    def restart(self) -> None:
        self.adapter.reset()
        self.display.clear()

    def close(self) -> None:
        self.adapter.close()
