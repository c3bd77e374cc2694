"""Hand-off of finished sessions to external scoring backends."""

from .base import AbstractScoringBackend, ScoringError, parse_score_response
from ..models.scoring import ScoreResult
from .features import build_body_language_features, build_vocal_features

__all__ = [
    "AbstractScoringBackend",
    "ScoringError",
    "ScoreResult",
    "parse_score_response",
    "build_body_language_features",
    "build_vocal_features",
]
