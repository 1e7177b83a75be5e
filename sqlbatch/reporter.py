from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from sqlbatch.utils.profiler import ProfileStats


def print_plan(batches: List[Dict[str, Any]], title: str = "Batch Plan", console: Optional[Console] = None) -> None:
    """
    Render a batch plan as a rich table.

    Each entry carries `offset`, `rows` and `parameters`; an optional `sql`
    entry is shown as a truncated preview.
    """
    console = console or Console()

    if not batches:
        console.print("[yellow]No batches to display.[/yellow]")
        return

    total_rows = sum(b.get("rows", 0) for b in batches)
    table = Table(
        title=title,
        box=box.ROUNDED,
        caption=f"{len(batches)} batch(es), {total_rows:,} row(s)",
    )

    table.add_column("Batch", justify="right", style="cyan", no_wrap=True)
    table.add_column("Offset", justify="right", style="magenta")
    table.add_column("Rows", justify="right", style="green")
    table.add_column("Parameters", justify="right", style="yellow")
    show_sql = any("sql" in b for b in batches)
    if show_sql:
        table.add_column("Statement", style="dim", overflow="fold")

    for number, batch in enumerate(batches, start=1):
        cells = [
            str(number),
            f"{batch.get('offset', 0):,}",
            f"{batch.get('rows', 0):,}",
            f"{batch.get('parameters', 0):,}",
        ]
        if show_sql:
            text = batch.get("sql", "")
            cells.append(text if len(text) <= 160 else text[:157] + "...")
        table.add_row(*cells)

    console.print(table)


def print_profile(stats: ProfileStats, rows: int, console: Optional[Console] = None) -> None:
    """
    Render profiling stats for one run: duration, throughput, peak memory and CPU.
    """
    console = console or Console()

    table = Table(title=f"Run: {stats.label}", box=box.ROUNDED)
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Throughput (rows/s)", justify="right", style="bold green")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("CPU %", justify="right", style="red")

    duration = stats.duration_seconds
    throughput = rows / duration if duration > 0 else 0.0
    mem_bytes = stats.peak_rss_bytes or 0
    mem_mb = mem_bytes / (1024 * 1024)
    cpu = stats.cpu_percent or 0.0

    table.add_row(f"{rows:,}", f"{duration:.3f}", f"{throughput:,.2f}", f"{mem_mb:.2f}", f"{cpu:.1f}")
    console.print(table)


__all__ = ["print_plan", "print_profile"]
