"""SOGNI NFT monitor — data contracts shared by the watch core and its collaborators."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union

UNKNOWN = "UNKNOWN"  # display-only; the classifier never produces it


class Verdict(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class EventKind(str, Enum):
    MONITOR_STARTED = "MonitorStarted"
    CAME_ONLINE = "CameOnline"
    WENT_OFFLINE = "WentOffline"
    WORKER_KICKED = "WorkerKicked"
    JOB_FAILED = "JobFailed"
    PERSISTENT_API_ERROR = "PersistentApiError"


class Priority(str, Enum):
    NORMAL = "normal"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Status payload
# ---------------------------------------------------------------------------

_TIMESTAMP_FIELDS = {
    "last_job_complete_time": "lastJobCompleteTime",
    "connect_time": "connectTime",
    "last_app_start_time": "lastAppStartTime",
    "last_worker_kick_time": "lastWorkerKickTime",
    "last_job_timeout_time": "lastJobTimeoutTime",
}
_COUNTER_FIELDS = {
    "session_job_count": "sessionJobCount",
    "completed_jobs_since_break": "completedJobsSinceBreak",
}
_DISPLAY_FIELDS = {
    "image": "image",
    "gpu": "gpu",
    "speed_vs_baseline": "speedVsBaseline",
    "loaded_model_id": "loadedModelID",
}


def _parse_timestamp(name: str, value: Any) -> Optional[int]:
    """Epoch milliseconds; null and false mean absent."""
    if value is None or value is False or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name}: expected epoch milliseconds, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{name}: expected epoch milliseconds, got {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and value.lstrip("-").isdigit():
        return int(value)
    raise ValueError(f"{name}: expected epoch milliseconds, got {value!r}")


def _parse_counter(name: str, value: Any) -> int:
    """Non-negative job count; null and false mean zero."""
    if value is None or value is False:
        return 0
    if isinstance(value, str) and value.isdigit():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{name}: expected a finite number, got {value!r}")
    if value < 0:
        raise ValueError(f"{name}: must not be negative, got {value!r}")
    return int(value)


def _parse_display(value: Any) -> Optional[str]:
    if value is None or value is False or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class StatusPayload:
    """One status response for one NFT worker."""
    active_worker_job: Any = None
    last_job_complete_time: Optional[int] = None
    connect_time: Optional[int] = None
    last_app_start_time: Optional[int] = None
    last_worker_kick_time: Optional[int] = None
    last_job_timeout_time: Optional[int] = None
    session_job_count: int = 0
    completed_jobs_since_break: int = 0
    image: Optional[str] = None
    gpu: Optional[str] = None
    speed_vs_baseline: Optional[str] = None
    loaded_model_id: Optional[str] = None

    @property
    def has_active_job(self) -> bool:
        return self.active_worker_job not in (None, False, "")

    @property
    def aux_timestamps(self) -> AuxTimestamps:
        return AuxTimestamps(kick=self.last_worker_kick_time, job_timeout=self.last_job_timeout_time)

    @classmethod
    def from_dict(cls, raw: Any) -> StatusPayload:
        """Build from the decoded JSON body. Raises ValueError on a malformed body."""
        if not isinstance(raw, dict):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        kwargs: dict[str, Any] = {"active_worker_job": raw.get("activeWorkerJob")}
        for attr, key in _TIMESTAMP_FIELDS.items():
            kwargs[attr] = _parse_timestamp(key, raw.get(key))
        for attr, key in _COUNTER_FIELDS.items():
            kwargs[attr] = _parse_counter(key, raw.get(key))
        for attr, key in _DISPLAY_FIELDS.items():
            kwargs[attr] = _parse_display(raw.get(key))
        return cls(**kwargs)


@dataclass(frozen=True)
class AuxTimestamps:
    """Raw auxiliary event timestamps, compared by value between cycles."""
    kick: Optional[int] = None
    job_timeout: Optional[int] = None


# ---------------------------------------------------------------------------
# Fetch results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FetchSuccess:
    payload: StatusPayload


@dataclass(frozen=True)
class FetchFailure:
    label: ClassVar[str] = "API_ERR"
    detail: str = ""


@dataclass(frozen=True)
class FetchTimeout(FetchFailure):
    label: ClassVar[str] = "TIMEOUT"


@dataclass(frozen=True)
class FetchTransportError(FetchFailure):
    code: Optional[int] = None


@dataclass(frozen=True)
class FetchMalformedPayload(FetchFailure):
    pass


FetchResult = Union[FetchSuccess, FetchTimeout, FetchTransportError, FetchMalformedPayload]


# ---------------------------------------------------------------------------
# Events and per-cycle output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonitorEvent:
    """A notification-worthy occurrence; delivery is someone else's job."""
    kind: EventKind
    target: str
    gpu: Optional[str] = None
    model: Optional[str] = None
    age_s: Optional[int] = None
    error_count: int = 0


@dataclass
class TargetRecord:
    """Display row for one target in one cycle."""
    target: str
    status: str
    error_label: Optional[str] = None
    cached: bool = False
    error_count: int = 0
    worker: str = "-"
    gpu: str = "-"
    speed: str = "-"
    model: str = "-"
    last_job: str = "-"
    last_kick: str = "-"
    job_fail: str = "-"

    @property
    def failed(self) -> bool:
        return self.error_label is not None


@dataclass
class CycleSummary:
    total: int = 0
    online: int = 0
    offline: int = 0
    errors: int = 0
    offline_targets: list[str] = field(default_factory=list)


@dataclass
class CycleReport:
    records: list[TargetRecord] = field(default_factory=list)
    summary: CycleSummary = field(default_factory=CycleSummary)
    events: list[MonitorEvent] = field(default_factory=list)
