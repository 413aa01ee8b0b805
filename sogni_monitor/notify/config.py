"""Notification configuration — all secrets from env vars unless given explicitly."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

SERVICES = ("pushover", "telegram", "ntfy")


@dataclass(frozen=True)
class NotifyConfig:
    service: str = field(default_factory=lambda: os.getenv("NOTIFICATION_SERVICE", "pushover"))

    pushover_user_key: str = field(default_factory=lambda: os.getenv("PUSHOVER_USER_KEY", ""))
    pushover_api_token: str = field(default_factory=lambda: os.getenv("PUSHOVER_API_TOKEN", ""))

    telegram_bot_token: str = field(default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN", ""))
    telegram_chat_id: str = field(default_factory=lambda: os.getenv("TELEGRAM_CHAT_ID", ""))

    ntfy_topic: str = field(default_factory=lambda: os.getenv("NTFY_TOPIC", ""))
    ntfy_server: str = field(default_factory=lambda: os.getenv("NTFY_SERVER", "https://ntfy.sh"))

    request_timeout_s: float = 10.0

    def missing_credentials(self) -> list[str]:
        """Names of credentials the selected service still needs."""
        required = {
            "pushover": {"PUSHOVER_USER_KEY": self.pushover_user_key, "PUSHOVER_API_TOKEN": self.pushover_api_token},
            "telegram": {"TELEGRAM_BOT_TOKEN": self.telegram_bot_token, "TELEGRAM_CHAT_ID": self.telegram_chat_id},
            "ntfy": {"NTFY_TOPIC": self.ntfy_topic},
        }.get(self.service, {})
        return [name for name, value in required.items() if not value]
