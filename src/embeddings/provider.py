"""
Embedding provider adapter using the OpenAI embeddings API.
"""

import hashlib
from typing import Optional, Protocol

from loguru import logger
from openai import AsyncOpenAI

from shared.cache import TTLCache
from shared.config import Settings, get_settings
from shared.errors import ConfigurationError, UpstreamServiceError
from shared.upstream import call_upstream


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> list[float]:
        """Return the embedding vector for text."""


class OpenAIEmbeddingProvider:
    """Generates fixed-length text embeddings with OpenAI."""

    service_name = "OpenAI embeddings"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            api_key = self.settings.openai_api_key.get_secret_value()
            if not api_key:
                raise ConfigurationError(
                    "OPENAI_API_KEY is not set; cannot generate embeddings",
                    config_key="openai_api_key",
                )
            # Retries are the caller's decision
            self._client = AsyncOpenAI(
                api_key=api_key,
                max_retries=0,
                timeout=self.settings.request_timeout_seconds,
            )
        return self._client

    @property
    def dimensions(self) -> int:
        return self.settings.embedding_dimensions

    async def embed(self, text: str) -> list[float]:
        """
        Embed text.

        Raises:
            ConfigurationError: no API key configured
            UpstreamServiceError: auth, rate limit, network or timeout failure
        """
        client = self.client
        response = await call_upstream(
            client.embeddings.create(
                model=self.settings.openai_embedding_model,
                input=text,
                dimensions=self.dimensions,
            ),
            service=self.service_name,
            timeout=self.settings.request_timeout_seconds,
        )

        if not response.data or not response.data[0].embedding:
            raise UpstreamServiceError("No embedding values returned", service=self.service_name)

        vector = list(response.data[0].embedding)
        if len(vector) != self.dimensions:
            raise UpstreamServiceError(
                f"Expected {self.dimensions} dimensions, got {len(vector)}",
                service=self.service_name,
            )
        return vector


class CachedEmbeddingProvider:
    """Memoizes another provider's embeddings by text."""

    def __init__(self, provider: EmbeddingProvider, cache: TTLCache[list[float]]):
        self.provider = provider
        self.cache = cache

    @classmethod
    def from_settings(
        cls, provider: EmbeddingProvider, settings: Optional[Settings] = None
    ) -> "CachedEmbeddingProvider":
        settings = settings or get_settings()
        return cls(
            provider,
            TTLCache(
                default_ttl=settings.embedding_cache_ttl_seconds,
                max_entries=settings.embedding_cache_max_entries,
            ),
        )

    @staticmethod
    def cache_key(text: str) -> str:
        return "emb_" + hashlib.sha256(text.encode("utf-8")).hexdigest()

    async def embed(self, text: str) -> list[float]:
        key = self.cache_key(text)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Embedding cache hit")
            return cached

        vector = await self.provider.embed(text)
        self.cache.put(key, vector)
        return vector
