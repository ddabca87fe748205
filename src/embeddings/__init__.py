"""
Embeddings - text normalization, embedding provider and vector store.
"""

from .backfill import EmbeddingBackfill
from .normalizer import to_embedding_text
from .provider import CachedEmbeddingProvider, EmbeddingProvider, OpenAIEmbeddingProvider
from .store import ComponentStore, InMemoryComponentStore, ProfileStore, cosine_similarity

__all__ = [
    "EmbeddingBackfill",
    "to_embedding_text",
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "CachedEmbeddingProvider",
    "ComponentStore",
    "ProfileStore",
    "InMemoryComponentStore",
    "cosine_similarity",
]
