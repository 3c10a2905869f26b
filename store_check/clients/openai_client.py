"""
Singleton OpenAI embeddings client with rate limiting using aiolimiter.
"""
import os
from typing import List
from aiolimiter import AsyncLimiter
from openai import AsyncOpenAI
from loguru import logger

from store_check.config import OPENAI_API_KEY, CONCURRENCY, EMBEDDING_MODEL
from store_check.errors import EmbeddingUnavailable
from store_check.ports import EmbeddingService


class OpenAIClient(EmbeddingService):
    """
    Singleton OpenAI client for generating text embeddings.
    Uses AsyncLimiter for rate limiting instead of semaphores.
    """
    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not OpenAIClient._initialized:
            api_key = OPENAI_API_KEY or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY must be set in environment or config")

            self.client = AsyncOpenAI(api_key=api_key)
            self.model = EMBEDDING_MODEL
            # Token bucket: CONCURRENCY requests per second, capped at the embeddings tier limit
            self.rate_limiter = AsyncLimiter(max_rate=min(CONCURRENCY, 500), time_period=1.0)
            OpenAIClient._initialized = True

    async def embeddings_create(self, **kwargs):
        """
        Create embeddings with rate limiting.
        Accepts all arguments that AsyncOpenAI.embeddings.create accepts.

        Returns:
            The response from OpenAI's embeddings API.
        """
        async with self.rate_limiter:
            try:
                return await self.client.embeddings.create(**kwargs)
            except Exception as e:
                logger.debug(f"⚠️ OpenAI embeddings request failed: {e}")
                raise

    async def embed(self, text: str) -> List[float]:
        """
        Embed a single description sentence.

        Raises:
            EmbeddingUnavailable: If the API call fails or returns no vector.
        """
        try:
            response = await self.embeddings_create(model=self.model, input=text)
        except Exception as e:
            raise EmbeddingUnavailable() from e

        if not response.data:
            raise EmbeddingUnavailable()
        return list(response.data[0].embedding)
