"""Tests for rendering and the daemon loop — no network, no real sleeping."""
from __future__ import annotations

import io
import logging
import os
from unittest.mock import MagicMock, patch

from rich.console import Console

from sogni_monitor.notify.config import NotifyConfig
from sogni_monitor.runner.config import Config
from sogni_monitor.runner.daemon import Daemon, main, parse_args, setup_logging
from sogni_monitor.runner.render import render_cycle
from sogni_monitor.watch.config import WatchConfig
from sogni_monitor.watch.models import CycleReport, CycleSummary, EventKind, TargetRecord


def _cfg(tmp_path=None) -> Config:
    return Config(
        watch=WatchConfig(nft_ids=("123", "456"), api_endpoint="http://sogni.test", check_interval_s=60),
        notify=NotifyConfig(service="ntfy", ntfy_topic="nfts"),
        log_dir=str(tmp_path / "logs") if tmp_path else "",
        log_retention_days=3,
        debug_mode=False,
    )


def _report() -> CycleReport:
    return CycleReport(
        records=[
            TargetRecord(target="123", status="ONLINE", worker="sogni-worker", gpu="RTX 5090",
                         speed="⚡2.1x", model="flux", last_job="1m05s"),
            TargetRecord(target="456", status="OFFLINE", gpu="[RTX 4090]"),
            TargetRecord(target="789", status="ONLINE", error_label="TIMEOUT", cached=True, error_count=2),
        ],
        summary=CycleSummary(total=3, online=1, offline=1, errors=1, offline_targets=["456"]),
    )


def _console() -> Console:
    return Console(file=io.StringIO(), width=200, record=True)


# --- Rendering ---

def test_render_cycle_table_and_summary():
    console = _console()
    render_cycle(_report(), "ntfy", 60, console=console, clear=False)
    text = console.export_text()
    assert "SOGNI NFT Monitor" in text
    assert "Notifications: ntfy" in text
    assert "sogni-worker" in text
    assert "[RTX 4090]" in text
    assert "TIMEOUT" in text
    assert "Error #2 (cached)" in text
    assert "OFFLINE NFT(s): 456" in text
    assert "API Errors this cycle: 1" in text
    assert "Next refresh in 60 seconds" in text


# --- Logging ---

def test_setup_logging_writes_file(tmp_path):
    logger = setup_logging(_cfg(tmp_path))
    logging.getLogger("sogni_monitor.watch.cycle").info("hello from the cycle")
    for handler in logger.handlers:
        handler.flush()
    assert "hello from the cycle" in (tmp_path / "logs" / "monitor.log").read_text()
    setup_logging(_cfg())  # detach the file handler again
    assert len(logger.handlers) == 1


# --- Daemon ---

def _daemon(runner=None, notifier=None) -> Daemon:
    runner = runner or MagicMock()
    if not isinstance(runner.run_cycle.return_value, CycleReport):
        runner.run_cycle.return_value = _report()
    return Daemon(_cfg(), logging.getLogger("sogni_monitor.test"),
                  notifier=notifier or MagicMock(), runner=runner, console=_console())


def test_run_once_renders_report():
    daemon = _daemon()
    report = daemon.run_once(clear=False)
    assert report.summary.total == 3
    assert "OFFLINE NFT(s): 456" in daemon.console.export_text()


def test_run_announces_start_once_and_stops():
    runner = MagicMock()
    notifier = MagicMock()
    daemon = _daemon(runner=runner, notifier=notifier)
    cycles = []

    def _cycle():
        cycles.append(1)
        if len(cycles) == 2:
            daemon.stop()
        return _report()

    runner.run_cycle.side_effect = _cycle
    with patch.object(daemon._stop, "wait") as wait:
        wait.side_effect = lambda timeout: daemon._stop.is_set()
        daemon.run()

    assert len(cycles) == 2
    notifier.notify_message.assert_called_once()
    kind, target, msg = notifier.notify_message.call_args[0]
    assert kind is EventKind.MONITOR_STARTED
    assert "Monitoring 2 NFTs every 60s" in msg.body
    wait.assert_called_with(60)


def test_signal_stops_without_notifying():
    notifier = MagicMock()
    daemon = _daemon(notifier=notifier)
    daemon._handle_signal(15, None)
    assert daemon._stop.is_set()
    notifier.notify_event.assert_not_called()
    notifier.notify_message.assert_not_called()


def test_startup_notification_failure_is_logged(caplog):
    notifier = MagicMock()
    notifier.notify_message.side_effect = RuntimeError("boom")
    daemon = _daemon(notifier=notifier)
    daemon.announce_start()
    assert "Startup notification failed" in caplog.text


# --- CLI ---

def test_parse_args():
    args = parse_args(["--config", "m.yaml", "--once", "--debug"])
    assert args.config == "m.yaml"
    assert args.once and args.debug


def test_main_invalid_config_exits_1():
    with patch.dict(os.environ, {"NOTIFICATION_SERVICE": "ntfy", "NTFY_TOPIC": "x"}, clear=True):
        assert main(["--once"]) == 1


def test_main_once_runs_single_cycle():
    env = {"SOGNI_NFT_IDS": "123", "NOTIFICATION_SERVICE": "ntfy", "NTFY_TOPIC": "x"}
    with patch.dict(os.environ, env, clear=True), \
         patch("sogni_monitor.runner.daemon.Daemon") as daemon_cls:
        assert main(["--once"]) == 0
    daemon_cls.return_value.run_once.assert_called_once_with(clear=False)
    daemon_cls.return_value.run.assert_not_called()


def test_main_mistyped_yaml_exits_1(tmp_path):
    path = tmp_path / "monitor.yaml"
    path.write_text("nfts: 123\n")
    with patch.dict(os.environ, {}, clear=True):
        assert main(["--config", str(path), "--once"]) == 1
