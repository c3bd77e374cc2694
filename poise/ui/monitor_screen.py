"""Terminal screens: live recording monitor and session history tables."""

import time
import logging
import threading
from typing import Optional, Sequence, Tuple

from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..models.events import SignalKind
from ..models.session import Sample, SessionSummary
from ..recording.recorder import StreamingSessionRecorder

logger = logging.getLogger(__name__)

BAR_WIDTH = 20
# Display range per signal kind: m/s for motion, dBFS for level
DISPLAY_RANGES = {
    SignalKind.MOTION: (0.0, 2.0),
    SignalKind.LEVEL: (-80.0, 0.0),
}


def level_bar(value: float, value_range: Tuple[float, float], width: int = BAR_WIDTH) -> str:
    low, high = value_range
    fraction = (value - low) / (high - low) if high > low else 0.0
    filled = int(round(min(max(fraction, 0.0), 1.0) * width))
    return "█" * filled + "·" * (width - filled)


class MonitorScreen:
    """Live view of a running recorder."""

    def __init__(self, recorder: StreamingSessionRecorder, console: Optional[Console] = None,
                 refresh_per_second: float = 5.0):
        self.recorder = recorder
        self.console = console or Console()
        self.refresh_per_second = refresh_per_second
        self.value_range = DISPLAY_RANGES[recorder.provider.signal_kind]

    def render(self) -> Panel:
        """Build the monitor panel from the recorder's live statistics."""
        stats = self.recorder.get_stats()

        if stats.warming_up:
            status = Text("WARMING UP", style="bold yellow")
        elif stats.is_running:
            status = Text("RECORDING", style="bold red")
        else:
            status = Text("STOPPED", style="bold white")

        table = Table(show_header=True, header_style="bold magenta", expand=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Elapsed", f"{stats.elapsed_seconds:.1f}s")
        table.add_row("Samples", str(stats.sample_count))
        table.add_row("Readings", str(stats.readings_received))

        channel_b = self.recorder.channel_b
        table.add_row(self.recorder.channel_a,
                      f"{level_bar(stats.live_a, self.value_range)} {stats.live_a:8.3f}")
        if channel_b:
            table.add_row(channel_b,
                          f"{level_bar(stats.live_b, self.value_range)} {stats.live_b:8.3f}")

        header = Text.assemble(("Poise ", "bold blue"), f"{self.recorder.kind} session  |  ", status)
        return Panel(Group(Align.center(header), table), style="bright_blue")

    def run(self, stop_event: threading.Event, duration: Optional[float] = None) -> None:
        """Refresh the monitor until stop_event is set or duration elapses."""
        deadline = time.monotonic() + duration if duration else None
        interval = 1.0 / self.refresh_per_second

        with Live(self.render(), console=self.console, refresh_per_second=self.refresh_per_second) as live:
            while not stop_event.is_set():
                if deadline is not None and time.monotonic() >= deadline:
                    break
                live.update(self.render())
                stop_event.wait(interval)
            live.update(self.render())


def render_summary(summary: SessionSummary) -> Table:
    name_a, name_b = summary.channel_names
    table = Table(title=f"Session {summary.id}", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Kind", summary.kind)
    table.add_row("Created", summary.created_at.strftime("%Y-%m-%d %H:%M:%S"))
    table.add_row("Duration", f"{summary.duration:.1f}s")
    table.add_row("Samples", str(summary.sample_count))
    table.add_row(f"Avg {name_a}", f"{summary.avg_a:.4f}")
    table.add_row(f"Max {name_a}", f"{summary.max_a:.4f}")
    if name_b:
        table.add_row(f"Avg {name_b}", f"{summary.avg_b:.4f}")
        table.add_row(f"Max {name_b}", f"{summary.max_b:.4f}")
    return table


def render_history(sessions: Sequence[SessionSummary]) -> Table:
    table = Table(title="Practice History", show_header=True, header_style="bold magenta")
    table.add_column("Created", style="cyan")
    table.add_column("Kind")
    table.add_column("Id", style="dim")
    table.add_column("Duration", justify="right")
    table.add_column("Avg A", justify="right")
    table.add_column("Avg B", justify="right")
    table.add_column("Samples", justify="right")

    for summary in sessions:
        table.add_row(
            summary.created_at.strftime("%Y-%m-%d %H:%M"),
            summary.kind,
            summary.id,
            f"{summary.duration:.1f}s",
            f"{summary.avg_a:.3f}",
            f"{summary.avg_b:.3f}",
            str(summary.sample_count),
        )
    return table


def render_series(samples: Sequence[Sample], channel_names: Tuple[str, str]) -> Table:
    name_a, name_b = channel_names
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("t (s)", justify="right")
    table.add_column(name_a, justify="right")
    if name_b:
        table.add_column(name_b, justify="right")

    for sample in samples:
        row = [f"{sample.t:.2f}", f"{sample.channel_a:.4f}"]
        if name_b:
            row.append(f"{sample.channel_b:.4f}")
        table.add_row(*row)
    return table
