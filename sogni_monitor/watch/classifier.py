"""Status classifier — ordered heuristics from a status payload to a verdict.

Rules run strongest signal first and the first match wins. Clock-skew
tolerance only ever widens the lower bound of a window, so a fast remote
clock cannot keep a worker looking fresh.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

from .ages import age_seconds, within
from .models import StatusPayload, Verdict

logger = logging.getLogger("sogni_monitor.watch.classifier")

RECENT_CONNECT_WINDOW_S = 3600


@dataclass(frozen=True)
class Thresholds:
    job_completion_window_s: int = 180
    time_sync_tolerance_s: int = 7200
    session_job_window_s: int = 7200


@dataclass(frozen=True)
class Ages:
    """Bounded-or-None ages of the timestamps the rules look at."""
    last_job: Optional[int]
    connect: Optional[int]
    app_start: Optional[int]

    @classmethod
    def of(cls, payload: StatusPayload, now: int) -> Ages:
        return cls(
            last_job=age_seconds(payload.last_job_complete_time, now),
            connect=age_seconds(payload.connect_time, now),
            app_start=age_seconds(payload.last_app_start_time, now),
        )


class Rule(NamedTuple):
    name: str
    matches: Callable[[StatusPayload, Ages, Thresholds], bool]


def _active_job(payload: StatusPayload, ages: Ages, t: Thresholds) -> bool:
    return payload.has_active_job


def _recent_job_completion(payload: StatusPayload, ages: Ages, t: Thresholds) -> bool:
    return within(ages.last_job, -t.time_sync_tolerance_s, t.job_completion_window_s)


def _recent_connect(payload: StatusPayload, ages: Ages, t: Thresholds) -> bool:
    return within(ages.connect, -t.time_sync_tolerance_s, RECENT_CONNECT_WINDOW_S)


def _recent_app_start(payload: StatusPayload, ages: Ages, t: Thresholds) -> bool:
    return within(ages.app_start, -t.time_sync_tolerance_s, RECENT_CONNECT_WINDOW_S)


def _session_activity(payload: StatusPayload, ages: Ages, t: Thresholds) -> bool:
    worked = payload.session_job_count > 0 or payload.completed_jobs_since_break > 0
    return worked and ages.last_job is not None and ages.last_job < t.session_job_window_s


RULES: tuple[Rule, ...] = (
    Rule("active_job", _active_job),
    Rule("recent_job_completion", _recent_job_completion),
    Rule("recent_connect", _recent_connect),
    Rule("recent_app_start", _recent_app_start),
    Rule("session_activity", _session_activity),
)


def matching_rule(payload: StatusPayload, now: int, thresholds: Thresholds = Thresholds()) -> Optional[str]:
    """Name of the first rule that marks the worker online, or None."""
    ages = Ages.of(payload, now)
    for rule in RULES:
        if rule.matches(payload, ages, thresholds):
            return rule.name
    return None


def classify(payload: StatusPayload, now: int, thresholds: Thresholds = Thresholds()) -> Verdict:
    rule = matching_rule(payload, now, thresholds)
    if rule is None:
        logger.debug("No online signal matched — OFFLINE")
        return Verdict.OFFLINE
    logger.debug("Rule %s matched — ONLINE", rule)
    return Verdict.ONLINE
