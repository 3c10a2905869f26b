from typing import Sequence

from store_check.config import MAX_PREVIEW
from store_check.models import (
    Ambiguous,
    ClassificationResult,
    Definitive,
    MatchCandidate,
    NoMatch,
)


def classify(candidates: Sequence[MatchCandidate], max_preview: int = MAX_PREVIEW) -> ClassificationResult:
    """
    Classify a ranked candidate list by its size: 0 → none, 1 → definitive, more → ambiguous.
    The decision uses the full list; only the ambiguous preview is truncated.
    """
    if not candidates:
        return NoMatch()
    if len(candidates) == 1:
        return Definitive(candidate=candidates[0])
    return Ambiguous(candidates=tuple(candidates[:max_preview]), total=len(candidates))
