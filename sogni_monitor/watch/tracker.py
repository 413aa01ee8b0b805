"""Per-target state and transition detection.

One ``TargetState`` lives per NFT for the lifetime of the process. Each
cycle calls ``observe`` exactly once with the new verdict (or ``None`` when
the fetch failed); it commits the state update and returns the events to
deliver. Nothing here knows about transports.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .ages import age_seconds, within
from .models import AuxTimestamps, EventKind, MonitorEvent, Verdict

logger = logging.getLogger("sogni_monitor.watch.tracker")


@dataclass(frozen=True)
class TrackerPolicy:
    persistent_error_threshold: int = 5
    aux_event_window_s: int = 600


@dataclass
class Observation:
    """Outcome of one ``observe`` call.

    ``verdict`` is what to display: the fresh verdict, the last known good
    one when ``cached`` is set, or ``None`` for UNKNOWN.
    """
    verdict: Optional[Verdict]
    cached: bool = False
    events: list[MonitorEvent] = field(default_factory=list)


@dataclass
class TargetState:
    target: str
    previous_verdict: Optional[Verdict] = None
    previous_kick_ms: Optional[int] = None
    previous_timeout_ms: Optional[int] = None
    last_known_good: Optional[Verdict] = None
    consecutive_errors: int = 0
    first_cycle_completed: bool = False

    def observe(
        self,
        verdict: Optional[Verdict],
        aux: AuxTimestamps,
        now: int,
        *,
        gpu: Optional[str] = None,
        model: Optional[str] = None,
        policy: TrackerPolicy = TrackerPolicy(),
    ) -> Observation:
        if verdict is None:
            result = self._observe_failure(policy)
        else:
            result = self._observe_verdict(verdict, aux, now, gpu, model, policy)
        if result.verdict is not None:
            self.first_cycle_completed = True
        return result

    # --- failure path ---

    def _observe_failure(self, policy: TrackerPolicy) -> Observation:
        self.consecutive_errors += 1
        result = Observation(verdict=self.last_known_good, cached=self.last_known_good is not None)
        if self.consecutive_errors >= policy.persistent_error_threshold and self.first_cycle_completed:
            result.events.append(MonitorEvent(
                kind=EventKind.PERSISTENT_API_ERROR,
                target=self.target,
                error_count=self.consecutive_errors,
            ))
            logger.warning("NFT %s: %d consecutive API failures", self.target, self.consecutive_errors)
            self.consecutive_errors = 0  # re-arm after another full run of failures
        return result

    # --- success path ---

    def _observe_verdict(
        self,
        verdict: Verdict,
        aux: AuxTimestamps,
        now: int,
        gpu: Optional[str],
        model: Optional[str],
        policy: TrackerPolicy,
    ) -> Observation:
        self.consecutive_errors = 0
        self.last_known_good = verdict
        result = Observation(verdict=verdict)

        if self.first_cycle_completed:
            if self.previous_verdict is not None and self.previous_verdict != verdict:
                kind = EventKind.WENT_OFFLINE if verdict is Verdict.OFFLINE else EventKind.CAME_ONLINE
                result.events.append(MonitorEvent(kind=kind, target=self.target, gpu=gpu, model=model))

            for kind, previous, current in (
                (EventKind.WORKER_KICKED, self.previous_kick_ms, aux.kick),
                (EventKind.JOB_FAILED, self.previous_timeout_ms, aux.job_timeout),
            ):
                if current is None or current == previous:
                    continue
                age = age_seconds(current, now)
                if within(age, 0, policy.aux_event_window_s):
                    result.events.append(MonitorEvent(kind=kind, target=self.target, gpu=gpu, age_s=age))

        self.previous_verdict = verdict
        self.previous_kick_ms = aux.kick
        self.previous_timeout_ms = aux.job_timeout
        return result
