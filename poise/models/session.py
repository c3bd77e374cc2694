"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Sample:
    """A single fixed-rate observation of both channels."""
    t: float          # seconds since recording started
    channel_a: float
    channel_b: float

    def to_dict(self) -> Dict[str, float]:
        return {"t": self.t, "channel_a": self.channel_a, "channel_b": self.channel_b}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sample":
        return cls(
            t=float(data["t"]),
            channel_a=float(data["channel_a"]),
            channel_b=float(data["channel_b"]),
        )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing "Z" for UTC."""
    if isinstance(value, str) and value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class SessionSummary:
    """A completed recording session."""
    id: str
    created_at: datetime
    duration: float
    avg_a: float
    avg_b: float
    max_a: float
    max_b: float
    samples: Tuple[Sample, ...] = ()
    kind: str = "hands"
    channel_names: Tuple[str, str] = ("left", "right")

    def __post_init__(self):
        # Own the samples by value
        object.__setattr__(self, "samples", tuple(self.samples))
        object.__setattr__(self, "channel_names", tuple(self.channel_names))
        # Naive timestamps are local time
        if self.created_at.tzinfo is None:
            object.__setattr__(self, "created_at", self.created_at.astimezone())

    @property
    def sample_count(self) -> int:
        return len(self.samples)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready dictionary with ISO-8601 timestamps."""
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "duration": self.duration,
            "avg_a": self.avg_a,
            "avg_b": self.avg_b,
            "max_a": self.max_a,
            "max_b": self.max_b,
            "kind": self.kind,
            "channel_names": list(self.channel_names),
            "samples": [sample.to_dict() for sample in self.samples],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionSummary":
        """Build a summary from a stored record.

        Unknown keys are ignored and the additive fields (``kind``,
        ``channel_names``) fall back to their defaults when absent.

        Raises:
            KeyError, ValueError, TypeError: If a required field is missing
                or malformed.
        """
        return cls(
            id=str(data["id"]),
            created_at=parse_timestamp(data["created_at"]),
            duration=float(data["duration"]),
            avg_a=float(data["avg_a"]),
            avg_b=float(data["avg_b"]),
            max_a=float(data["max_a"]),
            max_b=float(data["max_b"]),
            samples=tuple(Sample.from_dict(s) for s in data.get("samples", [])),
            kind=str(data.get("kind", "hands")),
            channel_names=tuple(data.get("channel_names", ("left", "right"))),
        )


@dataclass
class RecorderStats:
    """Live statistics of the recording in progress."""
    is_running: bool = False
    sample_count: int = 0
    elapsed_seconds: float = 0.0
    live_a: float = 0.0
    live_b: float = 0.0
    readings_received: int = 0
    warming_up: bool = False
