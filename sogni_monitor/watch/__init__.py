"""Watch core — status inference and transition detection for SOGNI NFT workers."""
from .ages import age_seconds, now_ms
from .classifier import RULES, Thresholds, classify, matching_rule
from .client import StatusClient
from .config import WatchConfig
from .cycle import CycleRunner
from .models import (
    UNKNOWN,
    AuxTimestamps,
    CycleReport,
    CycleSummary,
    EventKind,
    FetchMalformedPayload,
    FetchResult,
    FetchSuccess,
    FetchTimeout,
    FetchTransportError,
    MonitorEvent,
    Priority,
    StatusPayload,
    TargetRecord,
    Verdict,
)
from .tracker import Observation, TargetState, TrackerPolicy

__all__ = [
    "UNKNOWN",
    "RULES",
    "AuxTimestamps",
    "CycleReport",
    "CycleRunner",
    "CycleSummary",
    "EventKind",
    "FetchMalformedPayload",
    "FetchResult",
    "FetchSuccess",
    "FetchTimeout",
    "FetchTransportError",
    "MonitorEvent",
    "Observation",
    "Priority",
    "StatusClient",
    "StatusPayload",
    "TargetRecord",
    "TargetState",
    "Thresholds",
    "TrackerPolicy",
    "Verdict",
    "WatchConfig",
    "age_seconds",
    "classify",
    "matching_rule",
    "now_ms",
]
