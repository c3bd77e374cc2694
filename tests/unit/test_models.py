"""Unit tests for data models."""

from datetime import datetime, timezone

import pytest

from poise.models.events import SessionEvent
from poise.models.scoring import ScoreResult
from poise.models.session import Sample, SessionSummary


@pytest.mark.unit
class TestSessionSummary:
    """Test cases for SessionSummary serialization."""

    def test_samples_stored_as_tuple(self):
        samples = [Sample(t=0.0, channel_a=1.0, channel_b=2.0)]
        summary = SessionSummary(id="s", created_at=datetime(2026, 1, 1), duration=0.2,
                                 avg_a=1.0, avg_b=2.0, max_a=1.0, max_b=2.0, samples=samples)

        samples.append(Sample(t=0.2, channel_a=3.0, channel_b=4.0))

        assert summary.samples == (Sample(t=0.0, channel_a=1.0, channel_b=2.0),)
        assert summary.sample_count == 1

    def test_from_dict_defaults_for_older_records(self):
        """Records without kind or channel names load as hand sessions."""
        data = {
            "id": "legacy",
            "created_at": "2025-12-24T08:15:00",
            "duration": 1.5,
            "avg_a": 0.2,
            "avg_b": 0.1,
            "max_a": 0.4,
            "max_b": 0.3,
            "samples": [{"t": 0.0, "channel_a": 0.2, "channel_b": 0.1}],
            "extra": "ignored",
        }

        summary = SessionSummary.from_dict(data)

        assert summary.kind == "hands"
        assert summary.channel_names == ("left", "right")
        assert summary.created_at == datetime(2025, 12, 24, 8, 15).astimezone()
        assert summary.samples[0].channel_a == 0.2

    @pytest.mark.parametrize("text", ["2026-03-02T10:00:00Z", "2026-03-02T10:00:00+00:00"])
    def test_from_dict_utc_timestamps(self, make_summary, text):
        data = make_summary("s1").to_dict()
        data["created_at"] = text

        summary = SessionSummary.from_dict(data)

        assert summary.created_at == datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)

    def test_naive_created_at_becomes_local(self, make_summary):
        summary = make_summary("s1", created_at=datetime(2026, 3, 1, 10, 0))

        assert summary.created_at.tzinfo is not None
        assert summary.created_at.replace(tzinfo=None) == datetime(2026, 3, 1, 10, 0)

    def test_from_dict_missing_field(self):
        with pytest.raises(KeyError):
            SessionSummary.from_dict({"id": "x", "created_at": "2026-01-01T00:00:00"})

    def test_to_dict(self, make_summary):
        data = make_summary("s1", kind="voice").to_dict()

        assert data["kind"] == "voice"
        assert data["channel_names"] == ["rms", "peak"]
        assert data["created_at"].startswith("2026-03-01T10:00:00")
        assert len(data["samples"]) == 3


@pytest.mark.unit
class TestScoreResult:
    """Test cases for ScoreResult clamping."""

    @pytest.mark.parametrize("raw,expected", [(7, 7), (-3, 0), (14, 10), (6.8, 6), ("9", 9)])
    def test_score_clamped(self, raw, expected):
        assert ScoreResult(score=raw, feedback="ok").score == expected


@pytest.mark.unit
def test_session_event_defaults():
    event = SessionEvent(event_id="e1", event_type="started")

    assert isinstance(event.timestamp, datetime)
    assert event.metadata == {}
