"""Clients for external embedding and vector search services."""
from store_check.clients.openai_client import OpenAIClient
from store_check.clients.vector_client import UpstashVectorClient
from store_check.clients.memory_index import InMemoryVectorIndex

__all__ = ["OpenAIClient", "UpstashVectorClient", "InMemoryVectorIndex"]
