from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional
from loguru import logger

from store_check.config import (
    ADDRESS_ONLY_DAMPING,
    STRICT_SIMILARITY_THRESHOLD,
    STRICT_TOP_K,
    WIDE_SIMILARITY_THRESHOLD,
    WIDE_TOP_K,
)
from store_check.errors import EmbeddingUnavailable, StoreCheckError, VectorIndexUnavailable
from store_check.models import MatchCandidate, ParsedInput
from store_check.ports import EmbeddingService, VectorIndex


class SearchMode(str, Enum):
    STRICT = "strict"
    WIDE = "wide"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SearchMode":
        """Anything other than "wide" searches strictly."""
        if value == cls.WIDE.value:
            return cls.WIDE
        return cls.STRICT


@dataclass(frozen=True)
class SearchModeConfig:
    top_k: int
    threshold: float


SEARCH_MODES: Dict[SearchMode, SearchModeConfig] = {
    SearchMode.STRICT: SearchModeConfig(top_k=STRICT_TOP_K, threshold=STRICT_SIMILARITY_THRESHOLD),
    SearchMode.WIDE: SearchModeConfig(top_k=WIDE_TOP_K, threshold=WIDE_SIMILARITY_THRESHOLD),
}


def describe(parsed: ParsedInput) -> str:
    """Sentence embedded for the query, in the same shape the store vectors were built from."""
    if parsed.name:
        return f"{parsed.name} 주소는 {parsed.address}"
    return f'"" 주소는 {parsed.address}'


class SemanticMatchStrategy:
    """
    Embedding nearest-neighbour search against the store vector index.
    Two sequential external calls per request, no retries.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_index: VectorIndex,
        modes: Dict[SearchMode, SearchModeConfig] = SEARCH_MODES,
        address_only_damping: float = ADDRESS_ONLY_DAMPING,
    ):
        self.embedding_service = embedding_service
        self.vector_index = vector_index
        self.modes = modes
        self.address_only_damping = address_only_damping

    async def _embed(self, description: str) -> List[float]:
        try:
            vector = await self.embedding_service.embed(description)
        except StoreCheckError:
            raise
        except Exception as e:
            raise EmbeddingUnavailable() from e
        if not vector:
            raise EmbeddingUnavailable()
        return vector

    async def match(self, parsed: ParsedInput, mode: SearchMode = SearchMode.STRICT) -> List[MatchCandidate]:
        """
        Find stores whose description vector is close enough to the input.

        Args:
            parsed (ParsedInput): Extracted name and address.
            mode (SearchMode): strict (1 neighbour, 0.85) or wide (3 neighbours, 0.7).

        Returns:
            List[MatchCandidate]: Candidates at or above the mode threshold, most similar first.
                                  raw_score and normalized_score both hold the similarity.
        """
        settings = self.modes[mode]
        description = describe(parsed)

        vector = await self._embed(description)

        try:
            hits = await self.vector_index.query(vector, top_k=settings.top_k)
        except StoreCheckError:
            raise
        except Exception as e:
            raise VectorIndexUnavailable() from e

        address_only = not parsed.name
        candidates: List[MatchCandidate] = []
        for hit in hits:
            score = hit.score * self.address_only_damping if address_only else hit.score
            if score < settings.threshold:
                logger.debug(
                    f"🔻 '{hit.record.name}' below {mode.value} threshold: {score:.4f} < {settings.threshold}"
                )
                continue
            candidates.append(MatchCandidate(record=hit.record, raw_score=score, normalized_score=score))

        logger.debug(f"🧭 '{description}' ({mode.value}) → {len(candidates)}/{len(hits)} neighbours kept")
        return candidates
