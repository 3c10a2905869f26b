"""
HTTP transport for the store check pipelines, built on aiohttp.web.

    POST /api/share/check          {content, type?, config?}       fuzzy name/address lookup
    GET  /api/share/check?query=   free query lookup
    POST /api/share/vector_check   {content, type?, searchMode?}   embedding lookup
"""
import asyncio
import json
from typing import Any, Dict, Optional

from aiohttp import web
from loguru import logger

from store_check.matchers.lexical_matcher import LEXICAL_CONFIGS, LexicalMatchStrategy
from store_check.matchers.matching_orchestrator import resolve_lexical, resolve_semantic
from store_check.matchers.semantic_matcher import SearchMode, SemanticMatchStrategy
from store_check.models import OutcomeKind, ResolutionOutcome
from store_check.registry import StoreRegistry
from store_check.renderer import render_error, render_json, render_text

STATUS_BY_OUTCOME = {
    OutcomeKind.RESULT: 200,
    OutcomeKind.CLIENT_ERROR: 400,
    OutcomeKind.CONFIG_ERROR: 503,
    OutcomeKind.INTERNAL_ERROR: 500,
}

REGISTRY_KEY = web.AppKey("registry", StoreRegistry)
LEXICAL_KEY = web.AppKey("lexical_strategies", dict)
SEMANTIC_KEY = web.AppKey("semantic_strategy", SemanticMatchStrategy)


async def _read_body(request: web.Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _respond(
    outcome: ResolutionOutcome,
    as_text: bool,
    semantic: bool,
    attach_store_alias: bool = False,
) -> web.Response:
    status = STATUS_BY_OUTCOME[outcome.kind]
    if outcome.kind is not OutcomeKind.RESULT:
        return web.json_response(render_error(outcome), status=status)
    if as_text:
        return web.Response(
            text=render_text(outcome.result, semantic=semantic),
            content_type="text/plain",
            charset="utf-8",
        )
    payload = render_json(outcome.result, semantic=semantic, attach_store_alias=attach_store_alias)
    return web.json_response(payload, status=status)


def _bad_request(message: str) -> web.Response:
    return web.json_response({"success": False, "message": message}, status=400)


async def check(request: web.Request) -> web.Response:
    body = await _read_body(request)
    if body is None:
        return _bad_request("잘못된 요청 본문입니다.")

    strategies = request.app[LEXICAL_KEY]
    config_name = body.get("config") or "default"
    if not isinstance(config_name, str):
        return _bad_request("설정 이름은 문자열이어야 합니다.")
    strategy: Optional[LexicalMatchStrategy] = strategies.get(config_name)
    if strategy is None:
        return _bad_request(f"알 수 없는 설정입니다: {config_name}")

    outcome = await asyncio.to_thread(resolve_lexical, body.get("content"), strategy)
    return _respond(
        outcome,
        as_text=body.get("type") == "text",
        semantic=False,
        attach_store_alias=strategy.config.attach_store_alias,
    )


async def check_query(request: web.Request) -> web.Response:
    query = request.query.get("query")
    if not query:
        return web.json_response({"error": "쿼리 파라미터가 필요합니다."}, status=400)

    strategy = request.app[LEXICAL_KEY]["default"]
    found = strategy.search_entries(query)
    results = [
        {"id": c.record.id, "name": c.record.name, "category": c.record.category, "address": c.record.address}
        for c in found
    ]
    return web.json_response({"results": results})


async def vector_check(request: web.Request) -> web.Response:
    body = await _read_body(request)
    if body is None:
        return _bad_request("잘못된 요청 본문입니다.")

    search_mode = SearchMode.parse(body.get("searchMode"))
    outcome = await resolve_semantic(
        body.get("content"),
        request.app[SEMANTIC_KEY],
        request.app[REGISTRY_KEY],
        search_mode=search_mode,
    )
    return _respond(outcome, as_text=body.get("type") == "text", semantic=True)


def create_app(registry: StoreRegistry, semantic_strategy: SemanticMatchStrategy) -> web.Application:
    """
    Build the web application. Fuzzy indexes for every named lexical config
    are built here, once, from the registry snapshot.
    """
    app = web.Application()
    app[REGISTRY_KEY] = registry
    app[LEXICAL_KEY] = {name: LexicalMatchStrategy(registry, config) for name, config in LEXICAL_CONFIGS.items()}
    app[SEMANTIC_KEY] = semantic_strategy

    app.router.add_post("/api/share/check", check)
    app.router.add_get("/api/share/check", check_query)
    app.router.add_post("/api/share/vector_check", vector_check)

    logger.debug(f"🚀 App ready with {len(registry)} stores, lexical configs: {list(app[LEXICAL_KEY])}")
    return app
