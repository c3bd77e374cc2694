"""Scoring-related data models."""

from dataclasses import dataclass

MIN_SCORE = 0
MAX_SCORE = 10


@dataclass(frozen=True)
class ScoreResult:
    """Score and short feedback returned by a scoring backend."""
    score: int       # 0...10
    feedback: str    # ~20 English words

    def __post_init__(self):
        object.__setattr__(self, "score", min(max(int(self.score), MIN_SCORE), MAX_SCORE))
