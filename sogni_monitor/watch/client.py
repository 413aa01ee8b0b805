"""SOGNI status API client — one GET per NFT, failures returned as values."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable

import requests

from .config import WatchConfig
from .models import (
    FetchMalformedPayload,
    FetchResult,
    FetchSuccess,
    FetchTimeout,
    FetchTransportError,
    StatusPayload,
)

logger = logging.getLogger("sogni_monitor.watch.client")

RETRYABLE_CLIENT_ERRORS = (408, 429)


def _is_permanent(result: FetchResult) -> bool:
    code = getattr(result, "code", None)
    return code is not None and 400 <= code < 500 and code not in RETRYABLE_CLIENT_ERRORS


class StatusClient:
    """Fetches ``{endpoint}/{nft_id}/status`` with bounded timeout and retries."""

    def __init__(self, cfg: WatchConfig, sleep: Callable[[float], None] = time.sleep) -> None:
        self.cfg = cfg
        self._sleep = sleep

    def url_for(self, nft_id: str) -> str:
        return f"{self.cfg.api_endpoint.rstrip('/')}/{nft_id}/status"

    def fetch(self, nft_id: str) -> FetchResult:
        deadline = time.monotonic() + self.cfg.fetch_deadline_s
        attempts = 1 + max(0, self.cfg.fetch_retries)
        failure: FetchResult = FetchTimeout(detail=f"NFT {nft_id}: no attempt made")

        for attempt in range(1, attempts + 1):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return FetchTimeout(detail=f"NFT {nft_id}: exceeded {self.cfg.fetch_deadline_s:.0f}s")
            result = self._attempt(nft_id, min(self.cfg.fetch_timeout_s, remaining))
            if isinstance(result, (FetchSuccess, FetchMalformedPayload)) or _is_permanent(result):
                return result
            failure = result
            logger.debug("NFT %s attempt %d/%d failed: %s", nft_id, attempt, attempts, result.detail)
            if attempt < attempts and deadline - time.monotonic() > self.cfg.fetch_retry_delay_s:
                self._sleep(self.cfg.fetch_retry_delay_s)
        return failure

    __call__ = fetch

    def _attempt(self, nft_id: str, timeout: float) -> FetchResult:
        try:
            resp = requests.get(self.url_for(nft_id), timeout=timeout, headers={"Accept": "application/json"})
        except requests.Timeout as e:
            return FetchTimeout(detail=f"NFT {nft_id}: {e}")
        except requests.RequestException as e:
            return FetchTransportError(detail=f"NFT {nft_id}: {e}")

        if resp.status_code >= 400:
            return FetchTransportError(detail=f"NFT {nft_id}: HTTP {resp.status_code}", code=resp.status_code)

        try:
            body: Any = resp.json()
            payload = StatusPayload.from_dict(body)
        except (ValueError, OverflowError) as e:
            return FetchMalformedPayload(detail=f"NFT {nft_id}: invalid JSON ({e})")
        return FetchSuccess(payload)
