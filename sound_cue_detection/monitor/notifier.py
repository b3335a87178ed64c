from __future__ import annotations

from datetime import datetime
from typing import Iterable

import requests

from sound_cue_detection.monitor.engine import DetectionEvent


class TelegramNotifier:
    def __init__(
        self,
        bot_token: str,
        chat_ids: Iterable[str],
        timeout_seconds: int = 15,
    ) -> None:
        self.bot_token = bot_token
        self.chat_ids = sorted({str(chat_id).strip() for chat_id in chat_ids if str(chat_id).strip()})
        self.timeout_seconds = timeout_seconds
        self.base_url = f"https://api.telegram.org/bot{bot_token}"
        self._session = requests.Session()

    @staticmethod
    def build_message(event: DetectionEvent, event_at: datetime | None = None) -> str:
        event_time = (event_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
        name = event.label.display_name
        return (
            f"[Sound Cue] {name} Detected at {event_time}: "
            f"detected a {name.lower()} with {int(event.confidence * 100)}% confidence."
        )

    def send_direct_text(self, chat_id: str, message: str) -> None:
        response = self._session.post(
            f"{self.base_url}/sendMessage",
            data={"chat_id": chat_id, "text": message},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()

    def send_text(self, message: str) -> None:
        if not self.chat_ids:
            raise ValueError("No Telegram recipients configured")

        for chat_id in self.chat_ids:
            self.send_direct_text(chat_id=chat_id, message=message)

    def on_detection(self, event: DetectionEvent) -> None:
        self.send_text(self.build_message(event))
