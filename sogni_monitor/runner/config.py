"""
SOGNI NFT Monitor — Configuration
Loads from a YAML file or environment variables (.env supported) with sensible defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

from ..notify.config import SERVICES, NotifyConfig
from ..watch.config import DEFAULT_API_ENDPOINT, WatchConfig

load_dotenv()


class ConfigValidationError(ValueError):
    """Raised when the monitor cannot start with the given settings."""


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() in ("1", "true", "yes", "on")


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigValidationError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _number(section: dict[str, Any], key: str, default: Any, cast: Callable[[Any], Any] = int) -> Any:
    """YAML numbers may arrive quoted; anything else that will not cast is rejected."""
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ConfigValidationError(f"{key}: expected a number, got {value!r}")
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"{key}: expected a number, got {value!r}") from e


@dataclass(frozen=True)
class Config:
    """Everything the monitor process needs."""

    watch: WatchConfig = field(default_factory=WatchConfig.from_env)
    notify: NotifyConfig = field(default_factory=NotifyConfig)

    # Logging
    log_dir: str = field(default_factory=lambda: os.getenv("LOG_DIR", ""))
    log_retention_days: int = field(default_factory=lambda: int(os.getenv("LOG_RETENTION_DAYS", "7")))
    debug_mode: bool = field(default_factory=lambda: _env_flag("DEBUG_MODE"))

    @classmethod
    def from_env(cls) -> Config:
        return cls()

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        with open(path, "r") as f:
            try:
                raw: dict[str, Any] = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigValidationError(f"{path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigValidationError(f"{path}: expected a mapping at the top level")

        api = _section(raw, "api")
        timing = _section(raw, "timing")
        thresholds = _section(raw, "thresholds")
        notifications = _section(raw, "notifications")
        pushover = _section(notifications, "pushover")
        telegram = _section(notifications, "telegram")
        ntfy = _section(notifications, "ntfy")
        log_cfg = _section(raw, "logging")

        env_watch = WatchConfig.from_env()
        env_notify = NotifyConfig()
        nfts = raw.get("nfts")
        if nfts is not None and not isinstance(nfts, list):
            raise ConfigValidationError(f"'nfts' must be a list of NFT IDs, got {nfts!r}")

        watch = WatchConfig(
            nft_ids=tuple(str(n) for n in nfts) if nfts else env_watch.nft_ids,
            api_endpoint=api.get("endpoint", env_watch.api_endpoint or DEFAULT_API_ENDPOINT),
            check_interval_s=_number(timing, "check_interval_s", env_watch.check_interval_s),
            job_completion_window_s=_number(timing, "job_completion_window_s", env_watch.job_completion_window_s),
            time_sync_tolerance_s=_number(timing, "time_sync_tolerance_s", env_watch.time_sync_tolerance_s),
            fetch_timeout_s=_number(api, "timeout_s", env_watch.fetch_timeout_s, float),
            fetch_retries=_number(api, "retries", env_watch.fetch_retries),
            fetch_retry_delay_s=_number(api, "retry_delay_s", env_watch.fetch_retry_delay_s, float),
            fetch_deadline_s=_number(api, "deadline_s", env_watch.fetch_deadline_s, float),
            persistent_error_threshold=_number(
                thresholds, "persistent_error_count", env_watch.persistent_error_threshold),
            aux_event_window_s=_number(thresholds, "aux_event_window_s", env_watch.aux_event_window_s),
            session_job_window_s=_number(thresholds, "session_job_window_s", env_watch.session_job_window_s),
        )
        notify = NotifyConfig(
            service=notifications.get("service", env_notify.service),
            pushover_user_key=pushover.get("user_key") or env_notify.pushover_user_key,
            pushover_api_token=pushover.get("api_token") or env_notify.pushover_api_token,
            telegram_bot_token=telegram.get("bot_token") or env_notify.telegram_bot_token,
            telegram_chat_id=str(telegram.get("chat_id") or env_notify.telegram_chat_id),
            ntfy_topic=ntfy.get("topic") or env_notify.ntfy_topic,
            ntfy_server=ntfy.get("server", env_notify.ntfy_server),
        )
        return cls(
            watch=watch,
            notify=notify,
            log_dir=log_cfg.get("log_dir", os.getenv("LOG_DIR", "")),
            log_retention_days=_number(log_cfg, "retention_days", os.getenv("LOG_RETENTION_DAYS", "7")),
            debug_mode=bool(log_cfg.get("debug", _env_flag("DEBUG_MODE"))),
        )


def validate_config(cfg: Config) -> None:
    """Raise ConfigValidationError listing every problem found."""
    w = cfg.watch
    problems: list[str] = []

    if not w.nft_ids:
        problems.append("no NFT IDs configured (SOGNI_NFT_IDS or 'nfts')")
    if not w.api_endpoint:
        problems.append("API endpoint is empty")
    for name in ("check_interval_s", "fetch_timeout_s", "fetch_deadline_s"):
        if getattr(w, name) <= 0:
            problems.append(f"{name} must be positive")
    for name in ("job_completion_window_s", "time_sync_tolerance_s", "aux_event_window_s",
                 "session_job_window_s", "fetch_retries", "fetch_retry_delay_s"):
        if getattr(w, name) < 0:
            problems.append(f"{name} must not be negative")
    if w.persistent_error_threshold < 1:
        problems.append("persistent_error_threshold must be at least 1")
    if cfg.log_retention_days < 0:
        problems.append("log_retention_days must not be negative")

    if cfg.notify.service not in SERVICES:
        problems.append(f"invalid notification service {cfg.notify.service!r} (expected one of {', '.join(SERVICES)})")
    else:
        missing = cfg.notify.missing_credentials()
        if missing:
            problems.append(f"{cfg.notify.service} not configured: missing {', '.join(missing)}")

    if problems:
        raise ConfigValidationError("; ".join(problems))
