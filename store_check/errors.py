"""Errors raised while resolving pasted text to an affiliated store."""
from typing import Optional


class StoreCheckError(Exception):
    """Base class for all store check errors."""
    default_message = "API 처리 중 오류가 발생했습니다."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidInput(StoreCheckError):
    """No text supplied, or neither a name nor an address could be extracted."""
    default_message = "입력 텍스트가 없습니다."


class RegistryUnavailable(StoreCheckError):
    """The store registry is empty or was not loaded."""
    default_message = "데이터를 불러오는데 실패했습니다."


class EmbeddingUnavailable(StoreCheckError):
    """The embedding service failed to produce a vector."""
    default_message = "임베딩 생성 실패"


class VectorIndexUnavailable(StoreCheckError):
    """The vector index query failed."""
    default_message = "벡터 검색 실패"
