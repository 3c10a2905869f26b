# store_check/matchers/matching_orchestrator.py

from typing import Optional
from loguru import logger

from store_check.errors import (
    EmbeddingUnavailable,
    InvalidInput,
    RegistryUnavailable,
    StoreCheckError,
    VectorIndexUnavailable,
)
from store_check.input_parser import extract_fields
from store_check.matchers.classifier import classify
from store_check.matchers.lexical_matcher import LexicalMatchStrategy
from store_check.matchers.semantic_matcher import SearchMode, SemanticMatchStrategy
from store_check.models import OutcomeKind, ParsedInput, ResolutionOutcome
from store_check.registry import StoreRegistry

INTERNAL_ERROR_MESSAGE = "API 처리 중 오류가 발생했습니다."
INVALID_INPUT_MESSAGE = "잘못된 입력입니다."


def _parse_or_raise(
    content: Optional[str], registry: Optional[StoreRegistry], untagged_as_address: bool = False
) -> ParsedInput:
    if not isinstance(content, str) or not content.strip():
        raise InvalidInput()
    if registry is None or registry.is_empty():
        raise RegistryUnavailable()
    parsed = extract_fields(content, untagged_as_address=untagged_as_address)
    if parsed.is_empty:
        raise InvalidInput(INVALID_INPUT_MESSAGE)
    return parsed


def _error_outcome(error: StoreCheckError) -> ResolutionOutcome:
    if isinstance(error, InvalidInput):
        kind = OutcomeKind.CLIENT_ERROR
    elif isinstance(error, RegistryUnavailable):
        kind = OutcomeKind.CONFIG_ERROR
    else:
        kind = OutcomeKind.INTERNAL_ERROR
    return ResolutionOutcome(kind=kind, message=error.message)


def resolve_lexical(content: Optional[str], strategy: LexicalMatchStrategy) -> ResolutionOutcome:
    """
    Resolve pasted text to affiliated stores with fuzzy name/address matching.

    Args:
        content (Optional[str]): Raw pasted text.
        strategy (LexicalMatchStrategy): Strategy holding the prebuilt fuzzy indexes.

    Returns:
        ResolutionOutcome: Classification, or the error to report to the caller.
    """
    try:
        parsed = _parse_or_raise(content, strategy.registry)
        candidates = strategy.match(parsed)
        result = classify(candidates)
        logger.debug(f"✅ Lexical '{parsed.name}' / '{parsed.address}' → {result.match_type.value} ({result.total})")
        return ResolutionOutcome(kind=OutcomeKind.RESULT, result=result)
    except StoreCheckError as e:
        logger.debug(f"⚠️ Lexical resolution rejected: {e.message}")
        return _error_outcome(e)
    except Exception:
        logger.exception("Lexical resolution failed")
        return ResolutionOutcome(kind=OutcomeKind.INTERNAL_ERROR, message=INTERNAL_ERROR_MESSAGE)


async def resolve_semantic(
    content: Optional[str],
    strategy: SemanticMatchStrategy,
    registry: StoreRegistry,
    search_mode: SearchMode = SearchMode.STRICT,
    untagged_as_address: bool = True,
) -> ResolutionOutcome:
    """
    Resolve pasted text to affiliated stores by embedding similarity.

    Embedding or vector index failures are terminal for the request; there is
    no fallback to lexical matching.

    Args:
        content (Optional[str]): Raw pasted text.
        strategy (SemanticMatchStrategy): Strategy wired to the embedding service and vector index.
        registry (StoreRegistry): Registry snapshot the index was built from.
        search_mode (SearchMode): strict or wide.
        untagged_as_address (bool): Read untagged text as an address only.

    Returns:
        ResolutionOutcome: Classification, or the error to report to the caller.
    """
    try:
        parsed = _parse_or_raise(content, registry, untagged_as_address=untagged_as_address)
        candidates = await strategy.match(parsed, search_mode)
        result = classify(candidates)
        logger.debug(
            f"✅ Semantic ({search_mode.value}) '{parsed.name}' / '{parsed.address}' → "
            f"{result.match_type.value} ({result.total})"
        )
        return ResolutionOutcome(kind=OutcomeKind.RESULT, result=result)
    except (EmbeddingUnavailable, VectorIndexUnavailable) as e:
        logger.debug(f"⚠️ Semantic resolution failed: {e.message} ({e.__cause__})")
        return _error_outcome(e)
    except StoreCheckError as e:
        logger.debug(f"⚠️ Semantic resolution rejected: {e.message}")
        return _error_outcome(e)
    except Exception:
        logger.exception("Semantic resolution failed")
        return ResolutionOutcome(kind=OutcomeKind.INTERNAL_ERROR, message=INTERNAL_ERROR_MESSAGE)
