#!/usr/bin/env python3
"""
SOGNI NFT Monitor Daemon
========================
Polls the SOGNI status API for every configured NFT worker, renders a status
table and sends notifications when a worker goes offline, comes back, is
kicked, times out a job, or the API keeps failing.

Usage:
    python -m sogni_monitor.runner.daemon                      # .env or environment variables
    python -m sogni_monitor.runner.daemon --config monitor.yaml
    python -m sogni_monitor.runner.daemon --once --debug       # single cycle, no startup notification

Signals:
    SIGTERM / SIGINT → stop without notifying
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import signal
import sys
import threading
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console

from ..notify.messages import monitor_started
from ..notify.notifier import Notifier
from ..watch.client import StatusClient
from ..watch.cycle import CycleRunner
from ..watch.models import CycleReport, EventKind
from .config import Config, ConfigValidationError, validate_config
from .render import render_cycle

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(cfg: Config) -> logging.Logger:
    """Configure console + optional rotating file logging for the package."""
    logger = logging.getLogger("sogni_monitor")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(logging.DEBUG if cfg.debug_mode else logging.INFO)
    ch.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(ch)

    if cfg.log_dir:
        log_dir = Path(cfg.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        # One file per day, keep N days
        fh = TimedRotatingFileHandler(
            log_dir / "monitor.log",
            when="midnight",
            backupCount=cfg.log_retention_days,
            utc=True,
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(fh)

    return logger


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

class Daemon:
    """Monitor loop: one cycle over all NFTs, render, sleep, repeat."""

    def __init__(
        self,
        cfg: Config,
        logger: logging.Logger,
        notifier: Optional[Notifier] = None,
        runner: Optional[CycleRunner] = None,
        console: Optional[Console] = None,
    ) -> None:
        self.cfg = cfg
        self.logger = logger
        self.notifier = notifier or Notifier(cfg.notify)
        self.runner = runner or CycleRunner(
            cfg.watch,
            fetch=StatusClient(cfg.watch).fetch,
            deliver=self.notifier.notify_event,
        )
        self.console = console or Console()
        self._stop = threading.Event()

    def install_signal_handlers(self) -> None:
        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)

    def _handle_signal(self, signum: int, frame) -> None:  # type: ignore[override]
        self.logger.info("Received signal %d — shutting down monitor", signum)
        self._stop.set()

    def stop(self) -> None:
        self._stop.set()

    def banner(self) -> None:
        w = self.cfg.watch
        self.logger.info("🚀 SOGNI NFT Monitor starting — %d NFTs every %ds, notifications via %s",
                         len(w.nft_ids), w.check_interval_s, self.cfg.notify.service)
        self.logger.info("Job completion window: %ds | Time sync tolerance: %ds",
                         w.job_completion_window_s, w.time_sync_tolerance_s)

    def announce_start(self) -> None:
        w = self.cfg.watch
        msg = monitor_started(len(w.nft_ids), w.check_interval_s, w.job_completion_window_s)
        try:
            self.notifier.notify_message(EventKind.MONITOR_STARTED, "", msg)
        except Exception:
            self.logger.exception("Startup notification failed")

    def run_once(self, clear: bool = True) -> CycleReport:
        report = self.runner.run_cycle()
        render_cycle(report, self.cfg.notify.service, self.cfg.watch.check_interval_s,
                     console=self.console, clear=clear)
        return report

    def run(self) -> None:
        self.banner()
        self.announce_start()
        while not self._stop.is_set():
            self.run_once()
            # Fixed pause after every cycle; a signal cuts it short
            self._stop.wait(self.cfg.watch.check_interval_s)
        self.logger.info("Monitor stopped.")


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Monitor SOGNI NFT workers and notify on state changes")
    parser.add_argument("--config", help="YAML config file (defaults to environment variables)")
    parser.add_argument("--once", action="store_true", help="run a single cycle and exit")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    cfg = Config.from_yaml(args.config) if args.config else Config.from_env()
    if args.debug:
        cfg = dataclasses.replace(cfg, debug_mode=True)
    return cfg


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        cfg = load_config(args)
    except (OSError, ValueError) as e:
        logging.basicConfig(format=LOG_FORMAT)
        logging.getLogger("sogni_monitor").error("Cannot load configuration: %s", e)
        return 1

    logger = setup_logging(cfg)
    try:
        validate_config(cfg)
    except ConfigValidationError as e:
        logger.error("❌ Invalid configuration: %s", e)
        logger.error("Exiting due to config errors")
        return 1

    daemon = Daemon(cfg, logger)
    if args.once:
        daemon.run_once(clear=False)
        return 0
    daemon.install_signal_handlers()
    daemon.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
