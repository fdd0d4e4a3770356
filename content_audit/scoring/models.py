"""Score cache records and reporting models."""

from dataclasses import dataclass

SCORE_MIN = 0
SCORE_MAX = 100


@dataclass
class ScoreRecord:
    entity_type: str
    entity_id: str
    langcode: str
    vector_id: str
    score: int
    content_hash: str
    config_hash: str
    analyzed_at: int
    entity_revision_id: str | None = None


@dataclass
class ScoreStatistics:
    total_results: int = 0
    unique_entities: int = 0
    unique_vectors: int = 0
    oldest_analysis: int = 0  # unix seconds, 0 when empty
    newest_analysis: int = 0


def clamp_score(value) -> int:
    """Truncate to an integer and clamp into [0, 100].

    Accepts ints, floats and numeric strings ("73.9" -> 73). Raises
    ValueError or TypeError for values that cannot be read as a number.
    """
    if isinstance(value, str):
        value = float(value.strip())
    return max(SCORE_MIN, min(SCORE_MAX, int(value)))
