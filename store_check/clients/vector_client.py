"""
Upstash Vector REST client with rate limiting using aiolimiter.
"""
from aiohttp import ClientSession, ClientTimeout
from aiolimiter import AsyncLimiter
from typing import Any, Dict, List, Optional, Sequence
from loguru import logger

from store_check.config import CONCURRENCY, UPSTASH_VECTOR_REST_TOKEN, UPSTASH_VECTOR_REST_URL
from store_check.errors import VectorIndexUnavailable
from store_check.models import MerchantRecord
from store_check.ports import VectorHit, VectorIndex
from store_check.registry import StoreRegistry


class UpstashVectorClient(VectorIndex):
    """
    Nearest-neighbour queries against an Upstash Vector index of store descriptions.
    Hits are mapped back to registry records by id so identity is preserved.
    """

    def __init__(
        self,
        registry: StoreRegistry,
        url: Optional[str] = None,
        token: Optional[str] = None,
    ):
        self.registry = registry
        self.base_url = (url or UPSTASH_VECTOR_REST_URL or "").rstrip("/")
        self.token = token or UPSTASH_VECTOR_REST_TOKEN
        if not self.base_url or not self.token:
            raise ValueError("UPSTASH_VECTOR_REST_URL and UPSTASH_VECTOR_REST_TOKEN must be set")
        self.rate_limiter = AsyncLimiter(max_rate=CONCURRENCY, time_period=1.0)
        self._session: Optional[ClientSession] = None

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=30))
        return self._session

    def _record_for(self, result: Dict[str, Any]) -> MerchantRecord:
        record = self.registry.get(str(result.get("id")))
        if record is not None:
            return record
        # Index entries that are not in the local snapshot still carry their store metadata
        metadata = result.get("metadata") or {}
        return MerchantRecord(
            id=str(result.get("id")),
            name=metadata.get("name", ""),
            category=metadata.get("category", ""),
            address=metadata.get("address", ""),
        )

    async def query(self, vector: Sequence[float], top_k: int) -> List[VectorHit]:
        """
        Query the index for the `top_k` nearest store vectors.

        Args:
            vector: Query embedding.
            top_k: Number of neighbours to return.

        Returns:
            List[VectorHit]: Hits ordered by similarity, best first.
        """
        payload = {
            "vector": list(vector),
            "topK": top_k,
            "includeMetadata": True,
            "includeVectors": False,
        }
        headers = {"Authorization": f"Bearer {self.token}"}

        async with self.rate_limiter:
            session = await self._get_session()
            try:
                async with session.post(f"{self.base_url}/query", json=payload, headers=headers) as resp:
                    data = await resp.json()
                    if resp.status != 200 or "error" in data:
                        raise VectorIndexUnavailable(
                            f"Upstash query error ({resp.status}): {data.get('error', 'unknown')}"
                        )
            except VectorIndexUnavailable:
                raise
            except Exception as e:
                logger.debug(f"⚠️ Upstash query failed: {e}")
                raise VectorIndexUnavailable() from e

        results = data.get("result") or []
        return [VectorHit(record=self._record_for(r), score=float(r.get("score", 0.0))) for r in results]

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
