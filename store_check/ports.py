"""Capability interfaces for the external services used by semantic matching.

Concrete adapters live in `store_check.clients`; tests substitute deterministic fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence

from store_check.models import MerchantRecord


@dataclass(frozen=True)
class VectorHit:
    """Nearest-neighbour result.

    Attributes:
        record: Registry store the vector belongs to
        score: Cosine similarity reported by the index (1 = identical)
    """
    record: MerchantRecord
    score: float


class EmbeddingService(ABC):
    """Turns text into a fixed-length vector."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Embed a single text.

        Raises:
            EmbeddingUnavailable: If the service fails
        """
        pass


class VectorIndex(ABC):
    """Nearest-neighbour lookup over the registry's store vectors."""

    @abstractmethod
    async def query(self, vector: Sequence[float], top_k: int) -> List[VectorHit]:
        """Return up to `top_k` hits, most similar first.

        Raises:
            VectorIndexUnavailable: If the index cannot be queried
        """
        pass
