import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from store_check.clients import InMemoryVectorIndex, UpstashVectorClient
from store_check.errors import EmbeddingUnavailable, VectorIndexUnavailable
from store_check.models import MerchantRecord
from store_check.registry import StoreRegistry, load_stores


def _mock_session(status: int, body: dict) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    session = MagicMock()
    session.post.return_value.__aenter__.return_value = response
    session.post.return_value.__aexit__.return_value = False
    return session


@pytest.mark.asyncio
async def test_memory_index_orders_by_cosine_similarity():
    a = MerchantRecord(id="a", name="A", category="", address="", embedding=(1.0, 0.0))
    b = MerchantRecord(id="b", name="B", category="", address="", embedding=(0.6, 0.8))
    c = MerchantRecord(id="c", name="C", category="", address="")
    index = InMemoryVectorIndex(StoreRegistry([a, b, c]))

    hits = await index.query([2.0, 0.0], top_k=5)

    assert len(index) == 2
    assert [h.record for h in hits] == [a, b]
    assert hits[0].score == pytest.approx(1.0)
    assert hits[1].score == pytest.approx(0.6)


@pytest.mark.asyncio
async def test_memory_index_without_embeddings_is_empty(registry):
    assert await InMemoryVectorIndex(registry).query([1.0, 0.0], top_k=3) == []


@pytest.mark.asyncio
async def test_upstash_query_maps_hits_to_registry_records(registry, stores):
    client = UpstashVectorClient(registry, url="https://vector.example/", token="t")
    body = {
        "result": [
            {"id": "3", "score": 0.91, "metadata": {"name": "이디야커피"}},
            {"id": "x9", "score": 0.8, "metadata": {"name": "새가게", "category": "카페", "address": "분당구"}},
        ]
    }
    session = _mock_session(200, body)

    with patch.object(client, "_get_session", AsyncMock(return_value=session)):
        hits = await client.query([0.1, 0.2], top_k=3)

    assert hits[0].record is stores[2]
    assert hits[0].score == 0.91
    assert hits[1].record.name == "새가게"
    url = session.post.call_args.args[0]
    sent = session.post.call_args.kwargs
    assert url == "https://vector.example/query"
    assert sent["json"]["topK"] == 3
    assert sent["json"]["includeMetadata"] is True
    assert sent["headers"]["Authorization"] == "Bearer t"


@pytest.mark.asyncio
async def test_upstash_error_response_raises(registry):
    client = UpstashVectorClient(registry, url="https://vector.example", token="t")
    session = _mock_session(401, {"error": "Unauthorized"})

    with patch.object(client, "_get_session", AsyncMock(return_value=session)):
        with pytest.raises(VectorIndexUnavailable):
            await client.query([0.1], top_k=1)


def test_upstash_requires_credentials(registry):
    with patch("store_check.clients.vector_client.UPSTASH_VECTOR_REST_URL", None):
        with pytest.raises(ValueError):
            UpstashVectorClient(registry, url=None, token=None)


@pytest.mark.asyncio
async def test_openai_embed_failure_raises_embedding_unavailable():
    from store_check.clients import openai_client as oai_client_module
    oai_client_module.OpenAIClient._instance = None
    oai_client_module.OpenAIClient._initialized = False

    with patch("store_check.clients.openai_client.AsyncOpenAI") as mock_openai, \
         patch("store_check.clients.openai_client.OPENAI_API_KEY", "test-key"):
        mock_instance = MagicMock()
        mock_instance.embeddings.create = AsyncMock(side_effect=RuntimeError("rate limited"))
        mock_openai.return_value = mock_instance

        client = oai_client_module.OpenAIClient()
        with pytest.raises(EmbeddingUnavailable):
            await client.embed("스타벅스 주소는 분당구")

    oai_client_module.OpenAIClient._instance = None
    oai_client_module.OpenAIClient._initialized = False


def test_load_stores_from_csv(tmp_path):
    path = tmp_path / "stores.csv"
    path.write_text(
        "id,name,category,address\n"
        "10,스타벅스,카페,경기도 성남시 분당구 정자동 123\n"
        ",김밥천국,,경기도 성남시 중원구 성남동 77\n",
        encoding="utf-8",
    )

    registry = load_stores(str(path))

    assert len(registry) == 2
    assert registry.get("10").name == "스타벅스"
    assert registry.records[1].id == "1"
    assert registry.records[1].category == ""
    assert registry.records[1].embedding is None


def test_load_stores_from_json_with_embeddings(tmp_path):
    path = tmp_path / "stores.json"
    path.write_text(
        json.dumps(
            [
                {"id": "a", "name": "스타벅스", "category": "카페", "address": "분당구", "embedding": [0.1, 0.2]},
                {"id": "b", "name": "김밥천국", "category": "분식", "address": "중원구"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )

    registry = load_stores(str(path))

    assert registry.get("a").embedding == (0.1, 0.2)
    assert registry.get("b").embedding is None
