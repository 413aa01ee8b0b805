"""Notification delivery for SOGNI NFT monitor events."""
from .config import SERVICES, NotifyConfig
from .messages import Message, format_event, monitor_started
from .notifier import Notifier

__all__ = ["Notifier", "NotifyConfig", "Message", "SERVICES", "format_event", "monitor_started"]
