"""
Relevance retrieval: job description -> ranked candidate components.
"""

from typing import Optional

from loguru import logger

from embeddings.provider import EmbeddingProvider
from embeddings.store import ComponentStore
from shared.config import Settings, get_settings
from shared.errors import require_owner_id
from shared.models import Component, ScoredComponent
from shared.upstream import call_upstream


class RelevanceRetriever:
    """Finds the owner's components most relevant to a job description."""

    def __init__(
        self,
        store: ComponentStore,
        embedder: EmbeddingProvider,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.embedder = embedder

    async def get_owner_components(self, owner_id: str) -> list[Component]:
        return await call_upstream(
            self.store.get_user_components(require_owner_id(owner_id)),
            service="component store",
            timeout=self.settings.request_timeout_seconds,
        )

    async def _all_components(self, owner_id: str, limit: int) -> list[ScoredComponent]:
        components = await self.get_owner_components(owner_id)
        return [ScoredComponent(component=c) for c in components[:limit]]

    async def find_relevant_components(
        self,
        owner_id: str,
        job_description: str,
        limit: Optional[int] = None,
    ) -> list[ScoredComponent]:
        """
        Rank the owner's components against a job description.

        A blank description skips embedding entirely and returns the owner's
        components. An empty similarity result falls back to the same list.
        """
        owner_id = require_owner_id(owner_id)
        limit = limit or self.settings.retrieval_limit

        if not job_description or not job_description.strip():
            logger.info("No job description provided, using all components")
            return await self._all_components(owner_id, limit)

        query_vector = await self.embedder.embed(job_description)
        matches = await call_upstream(
            self.store.similarity_search(owner_id, query_vector, limit),
            service="vector search",
            timeout=self.settings.request_timeout_seconds,
        )

        if not matches:
            logger.warning("No components found via vector search, using all components")
            return await self._all_components(owner_id, limit)

        logger.info(f"Found {len(matches)} relevant components")
        return matches
