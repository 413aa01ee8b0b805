"""Notifier — delivers monitor events through Pushover, Telegram or ntfy."""
from __future__ import annotations

import logging

import requests

from ..watch.models import EventKind, MonitorEvent, Priority
from .config import NotifyConfig
from .messages import Message, format_event

logger = logging.getLogger("sogni_monitor.notify")

PUSHOVER_API = "https://api.pushover.net/1/messages.json"
TELEGRAM_API = "https://api.telegram.org/bot{token}/sendMessage"

_PUSHOVER_PRIORITY = {Priority.NORMAL: 0, Priority.HIGH: 1}
_NTFY_PRIORITY = {Priority.NORMAL: 3, Priority.HIGH: 4}


class Notifier:
    """Fire-and-forget delivery; failures are logged and reported as ``False``."""

    def __init__(self, config: NotifyConfig) -> None:
        self._config = config

    @property
    def service(self) -> str:
        return self._config.service

    def notify(self, kind: EventKind, target: str, title: str, body: str, priority: Priority) -> bool:
        sender = {
            "pushover": self._send_pushover,
            "telegram": self._send_telegram,
            "ntfy": self._send_ntfy,
        }.get(self._config.service)
        if sender is None:
            logger.warning("Unknown notification service: %s", self._config.service)
            return False
        sent = sender(title, body, priority)
        if sent:
            logger.info("Sent [%s] %s: %s", kind.value, target or "-", title)
        return sent

    def notify_event(self, event: MonitorEvent) -> bool:
        msg = format_event(event)
        return self.notify(event.kind, event.target, msg.title, msg.body, msg.priority)

    def notify_message(self, kind: EventKind, target: str, msg: Message) -> bool:
        return self.notify(kind, target, msg.title, msg.body, msg.priority)

    # --- Pushover ---

    def _send_pushover(self, title: str, body: str, priority: Priority) -> bool:
        cfg = self._config
        if not cfg.pushover_user_key or not cfg.pushover_api_token:
            logger.warning("Pushover credentials not configured — skipping notification")
            return False
        return self._post(
            "Pushover",
            PUSHOVER_API,
            data={
                "token": cfg.pushover_api_token,
                "user": cfg.pushover_user_key,
                "title": title,
                "message": body,
                "priority": _PUSHOVER_PRIORITY[priority],
            },
        )

    # --- Telegram ---

    def _send_telegram(self, title: str, body: str, priority: Priority) -> bool:
        cfg = self._config
        if not cfg.telegram_bot_token or not cfg.telegram_chat_id:
            logger.warning("Telegram credentials not configured — skipping notification")
            return False
        return self._post(
            "Telegram",
            TELEGRAM_API.format(token=cfg.telegram_bot_token),
            json={"chat_id": cfg.telegram_chat_id, "text": f"🤖 *{title}*\n{body}", "parse_mode": "Markdown"},
        )

    # --- ntfy ---

    def _send_ntfy(self, title: str, body: str, priority: Priority) -> bool:
        cfg = self._config
        if not cfg.ntfy_topic:
            logger.warning("ntfy topic not configured — skipping notification")
            return False
        # JSON publishing keeps non-latin-1 titles out of HTTP headers
        return self._post(
            "ntfy",
            cfg.ntfy_server.rstrip("/"),
            json={
                "topic": cfg.ntfy_topic,
                "title": title,
                "message": body,
                "priority": _NTFY_PRIORITY[priority],
                "tags": ["computer", "warning"],
            },
        )

    def _post(self, name: str, url: str, **kwargs) -> bool:
        try:
            resp = requests.post(url, timeout=self._config.request_timeout_s, **kwargs)
        except requests.RequestException as e:
            logger.error("%s send failed: %s", name, e)
            return False
        if not resp.ok:
            logger.error("%s send failed: HTTP %s", name, resp.status_code)
            return False
        return True
