"""Title, body and priority for each monitor event."""
from __future__ import annotations

from typing import NamedTuple

from ..watch.display import format_duration
from ..watch.models import EventKind, MonitorEvent, Priority


class Message(NamedTuple):
    title: str
    body: str
    priority: Priority


def _ago(event: MonitorEvent) -> str:
    return format_duration(event.age_s) if event.age_s is not None else "-"


def format_event(event: MonitorEvent) -> Message:
    nft = event.target
    gpu = event.gpu or "-"
    if event.kind is EventKind.WENT_OFFLINE:
        return Message(f"🔴 NFT {nft} OFFLINE", "Worker has gone offline", Priority.HIGH)
    if event.kind is EventKind.CAME_ONLINE:
        return Message(
            f"🟢 NFT {nft} ONLINE",
            f"Worker back online\nGPU: {gpu}\nModel: {event.model or '-'}",
            Priority.NORMAL,
        )
    if event.kind is EventKind.WORKER_KICKED:
        return Message(f"⚠️ NFT {nft} KICKED", f"Worker kicked {_ago(event)} ago\nGPU: {gpu}", Priority.HIGH)
    if event.kind is EventKind.JOB_FAILED:
        return Message(f"❌ NFT {nft} JOB FAILED", f"Job timeout {_ago(event)} ago\nGPU: {gpu}", Priority.HIGH)
    if event.kind is EventKind.PERSISTENT_API_ERROR:
        return Message(
            f"🚨 NFT {nft} API ERROR",
            f"Persistent API failures ({event.error_count} consecutive)",
            Priority.HIGH,
        )
    raise ValueError(f"no message template for {event.kind.value}")


def monitor_started(nft_count: int, interval_s: int, job_window_s: int) -> Message:
    return Message(
        "🚀 NFT Monitor Started",
        f"Job completion window: {job_window_s}s\nMonitoring {nft_count} NFTs every {interval_s}s",
        Priority.NORMAL,
    )
