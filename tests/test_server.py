import threading
from unittest.mock import patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from store_check.matchers.matching_orchestrator import resolve_lexical
from store_check.matchers.semantic_matcher import SemanticMatchStrategy
from store_check.ports import VectorHit
from store_check.registry import StoreRegistry
from store_check.server import create_app

from fakes import FakeEmbeddingService, FakeVectorIndex


def _app(registry, stores, hits=None):
    index = FakeVectorIndex(hits if hits is not None else [VectorHit(stores[0], 0.93)])
    return create_app(registry, SemanticMatchStrategy(FakeEmbeddingService(), index))


@pytest.mark.asyncio
async def test_check_returns_definitive_json(registry, stores):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        resp = await client.post("/api/share/check", json={"content": "스타벅스\n분당구 정자동 123"})
        assert resp.status == 200
        body = await resp.json()

    assert body["matchType"] == "definitive"
    assert body["candidates"][0]["name"] == "스타벅스"
    assert "store" not in body


@pytest.mark.asyncio
async def test_check_relaxed_config_attaches_store_alias(registry, stores):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        resp = await client.post(
            "/api/share/check", json={"content": "스타벅스\n분당구 정자동 123", "config": "relaxed"}
        )
        body = await resp.json()

    assert body["store"]["name"] == "스타벅스"


@pytest.mark.asyncio
async def test_check_text_response(registry, stores):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        resp = await client.post("/api/share/check", json={"content": "없는가게", "type": "text"})
        assert resp.status == 200
        assert resp.content_type == "text/plain"
        text = await resp.text()

    assert text.startswith("❌ 가맹점을 찾을 수 없습니다.")


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"content": ""}, {"content": "  "}])
async def test_check_blank_content_is_400(registry, stores, payload):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        resp = await client.post("/api/share/check", json=payload)
        assert resp.status == 400
        body = await resp.json()

    assert body["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("config", [["relaxed"], {"name": "relaxed"}, 1, "unknown"])
async def test_check_bad_config_is_400(registry, stores, config):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        resp = await client.post("/api/share/check", json={"content": "스타벅스", "config": config})
        assert resp.status == 400
        body = await resp.json()

    assert body["success"] is False


@pytest.mark.asyncio
async def test_check_runs_lexical_resolution_off_the_event_loop(registry, stores):
    loop_thread = threading.get_ident()
    seen_threads = []

    def recording_resolve(content, strategy):
        seen_threads.append(threading.get_ident())
        return resolve_lexical(content, strategy)

    with patch("store_check.server.resolve_lexical", side_effect=recording_resolve):
        async with TestClient(TestServer(_app(registry, stores))) as client:
            resp = await client.post("/api/share/check", json={"content": "스타벅스\n분당구 정자동 123"})
            assert resp.status == 200
            body = await resp.json()

    assert body["matchType"] == "definitive"
    assert len(seen_threads) == 1
    assert seen_threads[0] != loop_thread


@pytest.mark.asyncio
async def test_invalid_json_is_400(registry, stores):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        resp = await client.post("/api/share/check", data="not json")
        assert resp.status == 400


@pytest.mark.asyncio
async def test_empty_registry_is_503(stores):
    async with TestClient(TestServer(_app(StoreRegistry([]), stores))) as client:
        resp = await client.post("/api/share/check", json={"content": "스타벅스"})
        assert resp.status == 503


@pytest.mark.asyncio
async def test_check_query(registry, stores):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        missing = await client.get("/api/share/check")
        assert missing.status == 400

        resp = await client.get("/api/share/check", params={"query": "김밥천국"})
        body = await resp.json()

    assert [r["name"] for r in body["results"]] == ["김밥천국"]


@pytest.mark.asyncio
async def test_vector_check_includes_similarity(registry, stores):
    async with TestClient(TestServer(_app(registry, stores))) as client:
        resp = await client.post(
            "/api/share/vector_check",
            json={"content": "[네이버 지도]\n스타벅스\n경기 성남시 분당구 정자동 123", "searchMode": "strict"},
        )
        body = await resp.json()

    assert body["matchType"] == "definitive"
    assert body["score"] == 0.93
    assert body["candidates"][0]["similarityScore"] == 0.93


@pytest.mark.asyncio
async def test_vector_check_embedding_failure_is_500(registry, stores):
    strategy = SemanticMatchStrategy(FakeEmbeddingService(error=RuntimeError("down")), FakeVectorIndex())
    async with TestClient(TestServer(create_app(registry, strategy))) as client:
        resp = await client.post("/api/share/vector_check", json={"content": "[카카오맵]\n스타벅스\n분당구"})
        assert resp.status == 500
        body = await resp.json()

    assert body == {"success": False, "message": "임베딩 생성 실패"}


@pytest.mark.asyncio
async def test_vector_check_text_wide(registry, stores):
    hits = [VectorHit(stores[0], 0.9), VectorHit(stores[1], 0.8)]
    async with TestClient(TestServer(_app(registry, stores, hits))) as client:
        resp = await client.post(
            "/api/share/vector_check",
            json={"content": "[카카오맵]\n스타벅스\n분당구", "searchMode": "wide", "type": "text"},
        )
        text = await resp.text()

    assert text.startswith("🤔 여러 가맹점이 검색되었습니다 (2곳)")
    assert "(유사도: 90%)" in text
