"""Tests for configuration loading and validation."""
from __future__ import annotations

import dataclasses
import os
import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

from sogni_monitor.notify.config import NotifyConfig
from sogni_monitor.runner.config import Config, ConfigValidationError, validate_config
from sogni_monitor.watch.config import DEFAULT_API_ENDPOINT, WatchConfig

YAML = textwrap.dedent("""
    nfts: [123, 456]
    api:
      endpoint: https://socket.sogni.test/api/v1/client/nft
      timeout_s: 5
    timing:
      check_interval_s: 30
      job_completion_window_s: 240
    thresholds:
      persistent_error_count: 3
    notifications:
      service: telegram
      telegram:
        bot_token: tg-token
        chat_id: -100200
    logging:
      log_dir: logs
      debug: true
""")


def _valid() -> Config:
    return Config(
        watch=WatchConfig(nft_ids=("123",), api_endpoint=DEFAULT_API_ENDPOINT),
        notify=NotifyConfig(service="ntfy", ntfy_topic="nfts"),
        log_dir="",
        log_retention_days=7,
        debug_mode=False,
    )


def test_from_yaml(tmp_path: Path):
    path = tmp_path / "monitor.yaml"
    path.write_text(YAML)
    with patch.dict(os.environ, {}, clear=True):
        cfg = Config.from_yaml(str(path))
    assert cfg.watch.nft_ids == ("123", "456")
    assert cfg.watch.api_endpoint == "https://socket.sogni.test/api/v1/client/nft"
    assert cfg.watch.fetch_timeout_s == 5
    assert cfg.watch.check_interval_s == 30
    assert cfg.watch.job_completion_window_s == 240
    assert cfg.watch.time_sync_tolerance_s == 7200
    assert cfg.watch.persistent_error_threshold == 3
    assert cfg.notify.service == "telegram"
    assert cfg.notify.telegram_chat_id == "-100200"
    assert cfg.log_dir == "logs"
    assert cfg.debug_mode is True
    validate_config(cfg)


def test_from_yaml_secrets_fall_back_to_env(tmp_path: Path):
    path = tmp_path / "monitor.yaml"
    path.write_text("nfts: [1]\nnotifications:\n  service: pushover\n")
    env = {"PUSHOVER_USER_KEY": "u", "PUSHOVER_API_TOKEN": "t"}
    with patch.dict(os.environ, env, clear=True):
        cfg = Config.from_yaml(str(path))
    assert cfg.notify.pushover_user_key == "u"
    assert cfg.notify.pushover_api_token == "t"


def test_from_yaml_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "monitor.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigValidationError):
        Config.from_yaml(str(path))


def test_from_env():
    env = {
        "SOGNI_NFT_IDS": "11, 22,33",
        "CHECK_INTERVAL": "90",
        "TIME_SYNC_TOLERANCE": "3600",
        "NOTIFICATION_SERVICE": "ntfy",
        "NTFY_TOPIC": "workers",
        "DEBUG_MODE": "true",
    }
    with patch.dict(os.environ, env, clear=True):
        cfg = Config.from_env()
    assert cfg.watch.nft_ids == ("11", "22", "33")
    assert cfg.watch.check_interval_s == 90
    assert cfg.watch.time_sync_tolerance_s == 3600
    assert cfg.watch.job_completion_window_s == 180
    assert cfg.notify.ntfy_topic == "workers"
    assert cfg.debug_mode is True


def test_valid_config_passes():
    validate_config(_valid())


def test_no_targets_invalid():
    cfg = dataclasses.replace(_valid(), watch=WatchConfig(nft_ids=(), api_endpoint=DEFAULT_API_ENDPOINT))
    with pytest.raises(ConfigValidationError, match="no NFT IDs"):
        validate_config(cfg)


def test_non_positive_interval_invalid():
    cfg = dataclasses.replace(_valid(), watch=dataclasses.replace(_valid().watch, check_interval_s=0))
    with pytest.raises(ConfigValidationError, match="check_interval_s"):
        validate_config(cfg)


def test_negative_tolerance_invalid():
    cfg = dataclasses.replace(_valid(), watch=dataclasses.replace(_valid().watch, time_sync_tolerance_s=-1))
    with pytest.raises(ConfigValidationError, match="time_sync_tolerance_s"):
        validate_config(cfg)


def test_unknown_service_invalid():
    cfg = dataclasses.replace(_valid(), notify=NotifyConfig(service="sms"))
    with pytest.raises(ConfigValidationError, match="invalid notification service"):
        validate_config(cfg)


def test_missing_credentials_invalid():
    cfg = dataclasses.replace(_valid(), notify=NotifyConfig(service="pushover", pushover_user_key="",
                                                            pushover_api_token=""))
    with pytest.raises(ConfigValidationError, match="PUSHOVER_USER_KEY"):
        validate_config(cfg)


def test_from_yaml_coerces_quoted_numbers(tmp_path: Path):
    path = tmp_path / "monitor.yaml"
    path.write_text('nfts: [1]\ntiming:\n  check_interval_s: "60"\napi:\n  timeout_s: "2.5"\n')
    with patch.dict(os.environ, {}, clear=True):
        cfg = Config.from_yaml(str(path))
    assert cfg.watch.check_interval_s == 60
    assert cfg.watch.fetch_timeout_s == 2.5


@pytest.mark.parametrize("text, match", [
    ("nfts: 123\n", "nfts"),
    ("nfts: [1]\ntiming:\n  check_interval_s: soon\n", "check_interval_s"),
    ("nfts: [1]\nthresholds:\n  persistent_error_count: true\n", "persistent_error_count"),
    ("nfts: [1]\ntiming: 60\n", "timing"),
])
def test_from_yaml_rejects_mistyped_values(tmp_path: Path, text, match):
    path = tmp_path / "monitor.yaml"
    path.write_text(text)
    with patch.dict(os.environ, {}, clear=True), pytest.raises(ConfigValidationError, match=match):
        Config.from_yaml(str(path))
