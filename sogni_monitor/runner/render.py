"""
Rich terminal rendering of a polling cycle. Pure consumer of CycleReport.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..watch.models import CycleReport, TargetRecord, Verdict

COLOR_ONLINE = "green"
COLOR_ERROR = "red"
COLOR_WARNING = "yellow"
COLOR_INFO = "cyan"


def build_table(report: CycleReport) -> Table:
    table = Table(box=box.ASCII, show_header=True, header_style="bold")
    table.add_column("NFT", style=COLOR_WARNING, width=6)
    table.add_column("Status", width=8)
    table.add_column("Worker", width=13)
    table.add_column("GPU", style="bold white", width=22)
    table.add_column("Speed", style="orange1", width=7)
    table.add_column("Model", style="blue", width=25)
    table.add_column("LastJob", style=COLOR_INFO, width=8)
    table.add_column("LastKick", style=COLOR_ERROR, width=8)
    table.add_column("JobFail", style=COLOR_ERROR, width=8)

    for record in report.records:
        table.add_row(*_row(record))
    return table


def _row(record: TargetRecord) -> list[str]:
    if record.failed:
        cached = " (cached)" if record.cached else ""
        red = f"[{COLOR_ERROR}]{{}}[/{COLOR_ERROR}]"
        return [
            escape(record.target),
            red.format(record.error_label),
            red.format("API Error"),
            red.format("Connection Failed"),
            red.format("-"),
            red.format(f"Error #{record.error_count}{cached}"),
            "-", "-", "-",
        ]

    color = COLOR_ONLINE if record.status == Verdict.ONLINE.value else COLOR_ERROR
    return [
        escape(record.target),
        f"[{color}]{record.status}[/{color}]",
        f"[{COLOR_ONLINE}]{escape(record.worker)}[/{COLOR_ONLINE}]",
        escape(record.gpu),
        escape(record.speed),
        escape(record.model),
        record.last_job,
        record.last_kick,
        record.job_fail,
    ]


def render_cycle(
    report: CycleReport,
    service: str,
    interval_s: int,
    console: Optional[Console] = None,
    clear: bool = True,
) -> None:
    console = console or Console()
    if clear:
        console.clear()
    console.print(f"[{COLOR_INFO}]SOGNI NFT Monitor - {datetime.now():%a %b %d %H:%M:%S %Y}[/{COLOR_INFO}]")
    console.print(f"[{COLOR_WARNING}]📱 Notifications: {service}[/{COLOR_WARNING}]\n")
    console.print(build_table(report))

    summary = report.summary
    console.print(f"\n[{COLOR_ONLINE}]✅ All {summary.total} NFTs monitored "
                  f"({summary.online} online, {summary.offline} offline, {summary.errors} errors)[/{COLOR_ONLINE}]")
    if summary.offline_targets:
        console.print(f"[{COLOR_ERROR}]❌ OFFLINE NFT(s): {' '.join(summary.offline_targets)}[/{COLOR_ERROR}]")
    if summary.errors:
        console.print(f"[orange1]⚠️  API Errors this cycle: {summary.errors}[/orange1]")
    console.print(f"[{COLOR_WARNING}]🔄 Next refresh in {interval_s} seconds... (Press Ctrl+C to exit)[/{COLOR_WARNING}]")
