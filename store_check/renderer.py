"""Presentation of classification results as JSON payloads or chat-style text."""
from typing import Any, Dict, List

from store_check.models import (
    Ambiguous,
    ClassificationResult,
    Definitive,
    MatchCandidate,
    MatchType,
    NoMatch,
    ResolutionOutcome,
)

FOUND_MESSAGE = "가맹점을 찾았습니다."
AMBIGUOUS_MESSAGE = "여러 가맹점이 검색되었습니다."
NOT_FOUND_MESSAGE = "성남시 아동수당 가맹점을 찾을 수 없습니다."

_MESSAGES = {
    MatchType.DEFINITIVE: FOUND_MESSAGE,
    MatchType.AMBIGUOUS: AMBIGUOUS_MESSAGE,
    MatchType.NONE: NOT_FOUND_MESSAGE,
}


def _percent(score: float) -> str:
    return f"{score * 100:.0f}%"


def _store_payload(candidate: MatchCandidate, semantic: bool) -> Dict[str, Any]:
    record = candidate.record
    payload: Dict[str, Any] = {
        "name": record.name,
        "category": record.category,
        "address": record.address,
    }
    if semantic:
        payload["similarityScore"] = round(candidate.normalized_score, 2)
    return payload


def render_json(
    result: ClassificationResult,
    semantic: bool = False,
    attach_store_alias: bool = False,
) -> Dict[str, Any]:
    """
    Build the structured response for a classification.

    Args:
        result (ClassificationResult): Classifier output.
        semantic (bool): Include similarity scores per candidate and overall.
        attach_store_alias (bool): Add a singular "store" entry for definitive results.

    Returns:
        Dict[str, Any]: JSON-serialisable payload.
    """
    candidates: List[Dict[str, Any]] = [_store_payload(c, semantic) for c in result.candidates]
    payload: Dict[str, Any] = {
        "success": True,
        "isAffiliated": result.match_type is not MatchType.NONE,
        "matchType": result.match_type.value,
        "message": _MESSAGES[result.match_type],
        "count": result.total,
        "candidates": candidates,
    }
    if semantic:
        best = result.best_score
        payload["score"] = round(best, 2) if best is not None else None
    if attach_store_alias and isinstance(result, Definitive):
        payload["store"] = candidates[0]
    return payload


def render_text(result: ClassificationResult, semantic: bool = False) -> str:
    """Render the fixed multi-line text template for each match type."""
    if isinstance(result, Definitive):
        record = result.candidate.record
        header = "✅ 성남시 아동수당 가맹점입니다"
        if semantic:
            header += f" (유사도: {_percent(result.best_score)})"
        return f"{header}\n\n⭐ {record.name} ({record.category})\n📍 {record.address}"

    if isinstance(result, Ambiguous):
        lines = []
        for index, candidate in enumerate(result.candidates, start=1):
            record = candidate.record
            line = f"{index}. {record.name} ({record.category})\n   📍 {record.address}"
            if semantic:
                line += f" (유사도: {_percent(candidate.normalized_score)})"
            lines.append(line)
        return (
            f"🤔 여러 가맹점이 검색되었습니다 ({result.total}곳)\n\n"
            + "\n".join(lines)
            + "\n\n목록에서 확인해보셔야 합니다."
        )

    if isinstance(result, NoMatch):
        return "❌ 가맹점을 찾을 수 없습니다.\n\n성남시 아동수당 가맹점이 아니거나, 등록되지 않은 가게입니다."

    raise TypeError(f"Unrecognized classification result: {result!r}")


def render_error(outcome: ResolutionOutcome) -> Dict[str, Any]:
    return {"success": False, "message": outcome.message}
