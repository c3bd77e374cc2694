"""Feature payloads handed to scoring backends."""

from typing import Any, Dict, List

from ..models.session import SessionSummary
from ..recording.downsample import DEFAULT_TARGET_COUNT, downsample

EMPTY_DB_FLOOR = -80.0


def _value_range(values: List[float]) -> float:
    if not values:
        return 0.0
    return max(values) - min(values)


def build_body_language_features(summary: SessionSummary,
                                 points: int = DEFAULT_TARGET_COUNT) -> Dict[str, Any]:
    """Hand-movement statistics plus the downsampled speed series."""
    compact = downsample(summary.samples, points)
    left = [s.channel_a for s in compact]
    right = [s.channel_b for s in compact]

    return {
        "kind": "body_language",
        "session_id": summary.id,
        "duration_sec": round(summary.duration, 2),
        "avg_left_hand_speed_m_s": round(summary.avg_a, 4),
        "avg_right_hand_speed_m_s": round(summary.avg_b, 4),
        "max_left_hand_speed_m_s": round(summary.max_a, 4),
        "max_right_hand_speed_m_s": round(summary.max_b, 4),
        "left_hand_range": round(_value_range(left), 4),
        "right_hand_range": round(_value_range(right), 4),
        "sample_points": len(compact),
        "samples": [s.to_dict() for s in compact],
    }


def build_vocal_features(summary: SessionSummary, transcript: str = "",
                         points: int = DEFAULT_TARGET_COUNT) -> Dict[str, Any]:
    """Loudness statistics, speaking pace and the downsampled level series.

    Channel A of a voice session carries the RMS level in dBFS.
    """
    compact = downsample(summary.samples, points)
    db_values = [s.channel_a for s in compact]
    db_min = min(db_values) if db_values else EMPTY_DB_FLOOR
    db_max = max(db_values) if db_values else EMPTY_DB_FLOOR

    word_count = len(transcript.split())
    wpm = word_count / summary.duration * 60.0 if summary.duration > 0 else 0.0

    return {
        "kind": "vocal",
        "session_id": summary.id,
        "duration_sec": round(summary.duration, 2),
        "wpm": round(wpm, 2),
        "avg_db": round(summary.avg_a, 2),
        "max_db": round(summary.max_a, 2),
        "min_db": round(db_min, 2),
        "range_db": round(db_max - db_min, 2),
        "sample_points": len(compact),
        "transcript": transcript,
        "samples": [s.to_dict() for s in compact],
    }
