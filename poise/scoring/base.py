"""Abstract base class for session scoring backends."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from ..models.scoring import ScoreResult

logger = logging.getLogger(__name__)


class ScoringError(Exception):
    """A scoring backend failed or returned an unusable answer."""


class AbstractScoringBackend(ABC):
    """Scores a session from its feature payload.

    Implementations own the prompt and the transport; the recorder side
    only supplies the payload built by :mod:`poise.scoring.features`.
    """

    name = "abstract"

    @abstractmethod
    def score(self, features: Dict[str, Any]) -> ScoreResult:
        """Score one session.

        Args:
            features: Payload from build_body_language_features or
                build_vocal_features

        Returns:
            ScoreResult with a 0-10 score and short feedback

        Raises:
            ScoringError: If the backend cannot produce a score
        """
        pass


def parse_score_response(content: str) -> ScoreResult:
    """Decode a backend answer of the form {"score": int, "feedback": str}.

    Scores outside 0-10 are clamped.

    Raises:
        ScoringError: If the content is not a JSON object with both keys
    """
    try:
        data = json.loads(content)
        return ScoreResult(score=int(data["score"]), feedback=str(data["feedback"]).strip())
    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Unusable scoring response: {content[:200]!r}")
        raise ScoringError(f"Invalid scoring response: {e}") from e
