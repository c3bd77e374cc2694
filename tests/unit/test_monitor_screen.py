"""Unit tests for the terminal screens."""

import io
import threading

import pytest
from rich.console import Console

from poise.ui.monitor_screen import (
    MonitorScreen, level_bar, render_history, render_series, render_summary,
)


def _console():
    return Console(file=io.StringIO(), width=120, force_terminal=False)


def _text(console, renderable):
    console.print(renderable)
    return console.file.getvalue()


@pytest.mark.unit
class TestLevelBar:
    """Test cases for the live level bar."""

    def test_bounds(self):
        assert level_bar(0.0, (0.0, 2.0), width=4) == "····"
        assert level_bar(2.0, (0.0, 2.0), width=4) == "████"
        assert level_bar(-40.0, (-80.0, 0.0), width=4) == "██··"

    def test_out_of_range_clamped(self):
        assert level_bar(9.0, (0.0, 2.0), width=4) == "████"
        assert level_bar(-99.0, (-80.0, 0.0), width=4) == "····"


@pytest.mark.unit
class TestMonitorScreen:
    """Test cases for the live monitor."""

    def test_render_states(self, hand_provider, make_recorder, fake_clock):
        recorder = make_recorder(hand_provider, warmup_seconds=0.5)
        screen = MonitorScreen(recorder, console=_console())

        assert "STOPPED" in _text(_console(), screen.render())
        recorder.start()
        assert "WARMING UP" in _text(_console(), screen.render())
        fake_clock.set(0.6)
        recorder.tick()
        text = _text(_console(), screen.render())
        recorder.stop()

        assert "RECORDING" in text
        assert "left" in text
        assert "right" in text

    def test_run_until_stop_event(self, level_provider, make_recorder):
        recorder = make_recorder(level_provider)
        console = _console()
        stop_event = threading.Event()
        stop_event.set()

        MonitorScreen(recorder, console=console, refresh_per_second=50).run(stop_event)

        assert "voice" in console.file.getvalue()

    def test_run_with_duration(self, level_provider, make_recorder):
        recorder = make_recorder(level_provider)

        MonitorScreen(recorder, console=_console(), refresh_per_second=50).run(
            threading.Event(), duration=0.05)


@pytest.mark.unit
class TestSessionTables:
    """Test cases for summary, history and series tables."""

    def test_summary(self, make_summary):
        text = _text(_console(), render_summary(make_summary("abc")))

        assert "Session abc" in text
        assert "left" in text

    def test_history(self, make_summary):
        sessions = [make_summary("h1"), make_summary("v1", kind="voice")]

        text = _text(_console(), render_history(sessions))

        assert "h1" in text
        assert "voice" in text

    def test_series(self, make_summary):
        summary = make_summary("s1", kind="voice", values=(-20.0, -10.0))

        text = _text(_console(), render_series(summary.samples, summary.channel_names))

        assert "rms" in text
        assert "-10.0000" in text
