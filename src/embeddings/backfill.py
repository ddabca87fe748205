"""
Batch embedding backfill.

Components without an embedding are embedded a few at a time. A failing item
is recorded in the result's error list and never stops the rest of the batch;
callers that want fail-fast semantics call `result.raise_for_failures()`.
"""

import asyncio
from typing import Callable, Optional

from loguru import logger

from shared.config import Settings, get_settings
from shared.errors import MatchEngineError, require_owner_id
from shared.models import BatchEmbeddingResult, Component, EmbeddingFailure, EmbeddingStats

from .normalizer import to_embedding_text
from .provider import EmbeddingProvider
from .store import ComponentStore

ProgressCallback = Callable[[int, int], None]


class EmbeddingBackfill:
    """Populates missing component embeddings for an owner."""

    def __init__(
        self,
        store: ComponentStore,
        embedder: EmbeddingProvider,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.embedder = embedder

    async def generate_embedding_for_component(self, component: Component) -> list[float]:
        text = to_embedding_text(component)
        if not text:
            raise MatchEngineError(
                f"Component {component.id} has no text to embed",
                details={"component_id": component.id},
            )
        return await self.embedder.embed(text)

    async def _embed_one(self, owner_id: str, component: Component) -> Optional[EmbeddingFailure]:
        try:
            embedding = await self.generate_embedding_for_component(component)
            await self.store.update_component_embedding(owner_id, component.id, embedding)
        except Exception as e:
            logger.error(f"Failed to embed component {component.id}: {e}")
            return EmbeddingFailure(component_id=component.id, error=str(e))

        logger.debug(f"Generated embedding for component {component.id} ({component.title})")
        return None

    async def generate_embeddings_for_user(
        self,
        owner_id: str,
        limit: Optional[int] = None,
        batch_size: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchEmbeddingResult:
        """
        Embed every component of the owner that lacks an embedding.

        Returns:
            BatchEmbeddingResult with total/successful/failed counts and one
            error entry per failed component
        """
        owner_id = require_owner_id(owner_id)
        limit = limit or self.settings.backfill_limit
        batch_size = max(1, batch_size or self.settings.backfill_batch_size)

        components = await self.store.get_components_without_embeddings(owner_id, limit)
        result = BatchEmbeddingResult(total=len(components))
        if not components:
            logger.info("No components need embeddings")
            return result

        logger.info(f"Processing {result.total} components in batches of {batch_size}")

        for start in range(0, len(components), batch_size):
            batch = components[start : start + batch_size]
            failures = await asyncio.gather(*(self._embed_one(owner_id, c) for c in batch))

            for failure in failures:
                if failure is None:
                    result.successful += 1
                else:
                    result.failed += 1
                    result.errors.append(failure)

            if on_progress:
                on_progress(result.successful + result.failed, result.total)

            # Pause between batches to stay under provider rate limits
            if start + batch_size < len(components):
                await asyncio.sleep(self.settings.backfill_batch_delay_seconds)

        logger.info(
            f"Batch embedding complete: {result.total} total, "
            f"{result.successful} successful, {result.failed} failed"
        )
        return result

    async def get_embedding_stats(self, owner_id: str) -> EmbeddingStats:
        return await self.store.get_embedding_stats(require_owner_id(owner_id))
