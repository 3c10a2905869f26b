import os
import sys
import asyncio
import csv
from typing import List

import pandas as pd
from aiohttp import web
from loguru import logger

from store_check.clients import InMemoryVectorIndex, OpenAIClient, UpstashVectorClient
from store_check.config import (
    BATCH_SIZE,
    HOST,
    INPUT_CSV,
    LOG_LEVEL,
    OUTPUT_CSV,
    PORT,
    STORES_FILE,
    UPSTASH_VECTOR_REST_URL,
)
from store_check.matchers.lexical_matcher import LexicalMatchStrategy
from store_check.matchers.matching_orchestrator import resolve_lexical
from store_check.matchers.semantic_matcher import SemanticMatchStrategy
from store_check.models import ResolutionOutcome
from store_check.registry import StoreRegistry, load_stores
from store_check.server import create_app


def load_inputs_from_csv(file_path: str) -> List[str]:
    """Load pasted texts from the `content` column of a CSV."""
    df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
    return [str(value) for value in df["content"]]


def batch_iter(items: List[str], batch_size: int):
    """
    Yield index and slices of size `batch_size` for batched processing.
    """
    n = len(items)
    for i in range(0, n, batch_size):
        yield i, items[i:i+batch_size]


def build_semantic_strategy(registry: StoreRegistry) -> SemanticMatchStrategy:
    """Wire the embedding client and the configured vector index."""
    if UPSTASH_VECTOR_REST_URL:
        vector_index = UpstashVectorClient(registry)
    else:
        logger.debug("UPSTASH_VECTOR_REST_URL not set, using in-memory vector index")
        vector_index = InMemoryVectorIndex(registry)
    return SemanticMatchStrategy(OpenAIClient(), vector_index)


async def process_content(content: str, strategy: LexicalMatchStrategy) -> ResolutionOutcome:
    """
    Resolve one pasted text through the lexical pipeline.

    Fuzzy matching is CPU bound, so it runs in a worker thread to keep the
    batch concurrent.
    """
    return await asyncio.to_thread(resolve_lexical, content, strategy)


async def run_batch():
    """
    Resolve every pasted text in INPUT_CSV and write results incrementally to OUTPUT_CSV.
    """
    registry = load_stores(STORES_FILE)
    strategy = LexicalMatchStrategy(registry)
    all_inputs = load_inputs_from_csv(INPUT_CSV)

    output_path = OUTPUT_CSV
    if os.path.exists(output_path):
        os.remove(output_path)
    with open(output_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["content", "outcome", "matchType", "count", "stores"])

    for start_idx, batch in batch_iter(all_inputs, BATCH_SIZE):
        logger.info(f"Processing rows {start_idx}..{start_idx + len(batch) - 1}")

        outcomes = await asyncio.gather(*[process_content(content, strategy) for content in batch])

        with open(output_path, "a", newline="") as f:
            writer = csv.writer(f)
            for content, outcome in zip(batch, outcomes):
                result = outcome.result
                writer.writerow([
                    content,
                    outcome.kind.value,
                    result.match_type.value if result else "",
                    result.total if result else 0,
                    "; ".join(c.record.name for c in result.candidates) if result else outcome.message,
                ])


def serve():
    """Run the HTTP API."""
    registry = load_stores(STORES_FILE)
    semantic_strategy = build_semantic_strategy(registry)
    app = create_app(registry, semantic_strategy)

    async def close_clients(app: web.Application):
        # Close the aiohttp session to prevent unclosed connector warnings
        if isinstance(semantic_strategy.vector_index, UpstashVectorClient):
            await semantic_strategy.vector_index.close()

    app.on_cleanup.append(close_clients)
    web.run_app(app, host=HOST, port=PORT)


def main():
    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=LOG_LEVEL, format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>")

    if len(sys.argv) > 1 and sys.argv[1] == "serve":
        serve()
    else:
        asyncio.run(run_batch())


if __name__ == "__main__":
    main()
