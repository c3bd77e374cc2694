"""Terminal user interface for Poise."""

from .monitor_screen import MonitorScreen, render_history, render_series, render_summary

__all__ = [
    "MonitorScreen",
    "render_history",
    "render_series",
    "render_summary",
]
