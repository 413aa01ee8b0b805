"""Watch configuration — targets, API endpoint and classification thresholds."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_API_ENDPOINT = "https://socket.sogni.ai/api/v1/client/nft"


def _ids_from_env() -> tuple[str, ...]:
    raw = os.getenv("SOGNI_NFT_IDS", "")
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class WatchConfig:
    """Immutable settings for fetching and classifying NFT workers."""

    nft_ids: tuple[str, ...] = field(default_factory=_ids_from_env)
    api_endpoint: str = field(default_factory=lambda: os.getenv("SOGNI_API_ENDPOINT", DEFAULT_API_ENDPOINT))

    # Timing
    check_interval_s: int = 60
    job_completion_window_s: int = 180  # RTX 5090 finishes a job well inside 3 minutes
    time_sync_tolerance_s: int = 7200   # remote clock may run up to 2h ahead

    # Fetch policy
    fetch_timeout_s: float = 10.0
    fetch_retries: int = 2
    fetch_retry_delay_s: float = 1.0
    fetch_deadline_s: float = 15.0

    # Notification thresholds
    persistent_error_threshold: int = 5
    aux_event_window_s: int = 600
    session_job_window_s: int = 7200

    @classmethod
    def from_env(cls) -> WatchConfig:
        return cls(
            check_interval_s=int(os.getenv("CHECK_INTERVAL", "60")),
            job_completion_window_s=int(os.getenv("JOB_COMPLETION_WINDOW", "180")),
            time_sync_tolerance_s=int(os.getenv("TIME_SYNC_TOLERANCE", "7200")),
            fetch_timeout_s=float(os.getenv("FETCH_TIMEOUT_S", "10")),
            fetch_retries=int(os.getenv("FETCH_RETRIES", "2")),
            fetch_retry_delay_s=float(os.getenv("FETCH_RETRY_DELAY_S", "1")),
            fetch_deadline_s=float(os.getenv("FETCH_DEADLINE_S", "15")),
            persistent_error_threshold=int(os.getenv("PERSISTENT_ERROR_THRESHOLD", "5")),
            aux_event_window_s=int(os.getenv("AUX_EVENT_WINDOW_S", "600")),
            session_job_window_s=int(os.getenv("SESSION_JOB_WINDOW_S", "7200")),
        )
