"""Cycle orchestrator — fetch, classify, observe and deliver for every NFT once."""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .ages import now_ms
from .classifier import Thresholds, classify
from .config import WatchConfig
from .display import format_age, format_speed, truncate_middle
from .models import (
    UNKNOWN,
    AuxTimestamps,
    CycleReport,
    FetchFailure,
    FetchResult,
    MonitorEvent,
    StatusPayload,
    TargetRecord,
    Verdict,
)
from .tracker import Observation, TargetState, TrackerPolicy

logger = logging.getLogger("sogni_monitor.watch.cycle")

WORKER_WIDTH = 13
GPU_WIDTH = 22
MODEL_WIDTH = 25


class CycleRunner:
    """Owns the per-NFT state and runs one polling cycle at a time."""

    def __init__(
        self,
        cfg: WatchConfig,
        fetch: Callable[[str], FetchResult],
        deliver: Optional[Callable[[MonitorEvent], Any]] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.cfg = cfg
        self._fetch = fetch
        self._deliver = deliver
        self._clock = clock
        self._states: dict[str, TargetState] = {}
        self._thresholds = Thresholds(
            job_completion_window_s=cfg.job_completion_window_s,
            time_sync_tolerance_s=cfg.time_sync_tolerance_s,
            session_job_window_s=cfg.session_job_window_s,
        )
        self._policy = TrackerPolicy(
            persistent_error_threshold=cfg.persistent_error_threshold,
            aux_event_window_s=cfg.aux_event_window_s,
        )

    def state_for(self, nft_id: str) -> TargetState:
        state = self._states.get(nft_id)
        if state is None:
            state = self._states[nft_id] = TargetState(target=nft_id)
        return state

    def run_cycle(self) -> CycleReport:
        report = CycleReport()
        now = self._clock()
        for nft_id in self.cfg.nft_ids:
            record, events = self._check_target(nft_id, now)
            report.records.append(record)
            report.events.extend(events)
            for event in events:
                self._dispatch(event)

        summary = report.summary
        summary.total = len(report.records)
        for record in report.records:
            if record.failed:
                summary.errors += 1
            elif record.status == Verdict.ONLINE.value:
                summary.online += 1
            else:
                summary.offline += 1
                summary.offline_targets.append(record.target)
        return report

    # --- per target ---

    def _check_target(self, nft_id: str, now: int) -> tuple[TargetRecord, list[MonitorEvent]]:
        state = self.state_for(nft_id)
        result = self._fetch(nft_id)

        if isinstance(result, FetchFailure):
            obs = state.observe(None, AuxTimestamps(), now, policy=self._policy)
            record = self._failure_record(nft_id, result, obs, state)
            logger.warning("%s for NFT %s%s (error #%d): %s", result.label, nft_id,
                           " (cached)" if obs.cached else "", record.error_count, result.detail)
            return record, obs.events

        payload = result.payload
        verdict = classify(payload, now, self._thresholds)
        obs = state.observe(
            verdict, payload.aux_timestamps, now,
            gpu=payload.gpu, model=payload.loaded_model_id, policy=self._policy,
        )
        logger.debug("NFT %s: %s", nft_id, verdict.value)
        return self._success_record(nft_id, verdict, payload, now), obs.events

    def _dispatch(self, event: MonitorEvent) -> None:
        if self._deliver is None:
            return
        try:
            self._deliver(event)
        except Exception:
            logger.exception("Delivery of %s for NFT %s failed", event.kind.value, event.target)

    # --- display records ---

    @staticmethod
    def _failure_record(nft_id: str, result: FetchFailure, obs: Observation, state: TargetState) -> TargetRecord:
        # A PersistentApiError resets the counter; show the count that triggered it.
        count = state.consecutive_errors or next((e.error_count for e in obs.events), 0)
        return TargetRecord(
            target=nft_id,
            status=obs.verdict.value if obs.verdict is not None else UNKNOWN,
            error_label=result.label,
            cached=obs.cached,
            error_count=count,
        )

    @staticmethod
    def _success_record(nft_id: str, verdict: Verdict, payload: StatusPayload, now: int) -> TargetRecord:
        return TargetRecord(
            target=nft_id,
            status=verdict.value,
            worker=truncate_middle(payload.image or "-", WORKER_WIDTH),
            gpu=truncate_middle(payload.gpu or "-", GPU_WIDTH),
            speed=format_speed(payload.speed_vs_baseline),
            model=truncate_middle(payload.loaded_model_id or "-", MODEL_WIDTH),
            last_job=format_age(payload.last_job_complete_time, now),
            last_kick=format_age(payload.last_worker_kick_time, now),
            job_fail=format_age(payload.last_job_timeout_time, now),
        )
