"""
Component store interface and an in-memory implementation.

`shared.database.Database` implements the same protocol against MongoDB Atlas.
"""

from typing import Optional, Protocol

import numpy as np

from shared.errors import NotFoundError, require_owner_id
from shared.models import Component, EmbeddingStats, Profile, ScoredComponent


class ComponentStore(Protocol):
    async def get_user_components(
        self, owner_id: str, limit: Optional[int] = None
    ) -> list[Component]: ...

    async def similarity_search(
        self, owner_id: str, query_vector: list[float], top_k: int
    ) -> list[ScoredComponent]: ...

    async def get_components_without_embeddings(
        self, owner_id: str, limit: int = 100
    ) -> list[Component]: ...

    async def update_component_embedding(
        self, owner_id: str, component_id: str, embedding: list[float]
    ) -> None: ...

    async def get_embedding_stats(self, owner_id: str) -> EmbeddingStats: ...


class ProfileStore(Protocol):
    async def get_profile(self, owner_id: str) -> Optional[Profile]: ...


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity; 0.0 for mismatched or zero vectors."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.shape != vb.shape:
        return 0.0
    denom = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denom == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denom)


class InMemoryComponentStore:
    """Owner-scoped component and profile store held in process memory."""

    def __init__(self, match_threshold: float = 0.7):
        self.match_threshold = match_threshold
        self._components: dict[str, Component] = {}
        self._profiles: dict[str, Profile] = {}

    def add(self, *components: Component) -> None:
        for component in components:
            require_owner_id(component.owner_id)
            self._components[component.id] = component

    def set_profile(self, owner_id: str, profile: Profile) -> None:
        self._profiles[require_owner_id(owner_id)] = profile

    def _owned(self, owner_id: str) -> list[Component]:
        owner_id = require_owner_id(owner_id)
        owned = [c for c in self._components.values() if c.owner_id == owner_id]
        return sorted(owned, key=lambda c: c.created_at, reverse=True)

    def _get(self, owner_id: str, component_id: str) -> Component:
        component = self._components.get(component_id)
        if component is None or component.owner_id != owner_id:
            raise NotFoundError(
                f"Component {component_id} not found",
                details={"component_id": component_id},
            )
        return component

    async def get_user_components(
        self, owner_id: str, limit: Optional[int] = None
    ) -> list[Component]:
        owned = self._owned(owner_id)
        return owned[:limit] if limit else owned

    async def similarity_search(
        self, owner_id: str, query_vector: list[float], top_k: int
    ) -> list[ScoredComponent]:
        scored = [
            ScoredComponent(component=c, similarity=cosine_similarity(query_vector, c.embedding))
            for c in self._owned(owner_id)
            if c.embedding
        ]
        scored = [s for s in scored if s.similarity > self.match_threshold]
        scored.sort(key=lambda s: s.similarity, reverse=True)
        return scored[:top_k]

    async def get_components_without_embeddings(
        self, owner_id: str, limit: int = 100
    ) -> list[Component]:
        return [c for c in self._owned(owner_id) if not c.embedding][:limit]

    async def update_component_embedding(
        self, owner_id: str, component_id: str, embedding: list[float]
    ) -> None:
        component = self._get(require_owner_id(owner_id), component_id)
        self._components[component_id] = component.model_copy(update={"embedding": embedding})

    async def update_component(self, owner_id: str, component_id: str, changes: dict) -> Component:
        updated = self._get(require_owner_id(owner_id), component_id).edit(**changes)
        self._components[component_id] = updated
        return updated

    async def delete_component(self, owner_id: str, component_id: str) -> bool:
        try:
            self._get(require_owner_id(owner_id), component_id)
        except NotFoundError:
            return False
        del self._components[component_id]
        return True

    async def get_embedding_stats(self, owner_id: str) -> EmbeddingStats:
        owned = self._owned(owner_id)
        with_embedding = sum(1 for c in owned if c.embedding)
        return EmbeddingStats(
            total=len(owned),
            with_embedding=with_embedding,
            without_embedding=len(owned) - with_embedding,
            percentage=round(with_embedding / len(owned) * 100) if owned else 0,
        )

    async def get_profile(self, owner_id: str) -> Optional[Profile]:
        return self._profiles.get(require_owner_id(owner_id))
