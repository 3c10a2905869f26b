"""
In-process cosine nearest-neighbour index over registry records that carry embeddings.
"""
from typing import List, Sequence

import numpy as np

from store_check.ports import VectorHit, VectorIndex
from store_check.registry import StoreRegistry


class InMemoryVectorIndex(VectorIndex):
    """Brute-force cosine similarity with numpy. Built once, read-only afterwards."""

    def __init__(self, registry: StoreRegistry):
        self._records = tuple(r for r in registry.records if r.embedding)
        if self._records:
            matrix = np.asarray([r.embedding for r in self._records], dtype=float)
            norms = np.linalg.norm(matrix, axis=1, keepdims=True)
            self._matrix = matrix / np.where(norms == 0, 1.0, norms)
        else:
            self._matrix = np.empty((0, 0))

    def __len__(self) -> int:
        return len(self._records)

    async def query(self, vector: Sequence[float], top_k: int) -> List[VectorHit]:
        if not self._records or top_k <= 0:
            return []
        query = np.asarray(vector, dtype=float)
        norm = np.linalg.norm(query)
        if norm == 0:
            return []
        similarities = self._matrix @ (query / norm)
        # Stable sort keeps registry order among equal scores
        order = np.argsort(-similarities, kind="stable")[:top_k]
        return [VectorHit(record=self._records[i], score=float(similarities[i])) for i in order]
