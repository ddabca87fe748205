import asyncio
from typing import Optional

import pytest

from embeddings.store import InMemoryComponentStore
from shared.config import Settings
from shared.models import Component

OWNER = "user-1"
OTHER_OWNER = "user-2"

# Unit vectors; components embedded with MATCH are perfectly similar to a MATCH query
MATCH = [1.0, 0.0, 0.0]
ORTHOGONAL = [0.0, 1.0, 0.0]


class FakeEmbedder:
    """Embedding provider double that records every call."""

    def __init__(self, vector: Optional[list[float]] = None, delay: float = 0.0, fail_on: str = ""):
        self.vector = vector or MATCH
        self.delay = delay
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.cancelled = 0

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if self.fail_on and self.fail_on in text:
            raise RuntimeError(f"embedding failed for {text!r}")
        return list(self.vector)


class FakeModel:
    """Generative model double returning canned responses in order."""

    def __init__(self, *responses: str):
        self.responses = list(responses)
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


def make_component(
    type: str = "experience",
    title: str = "Software Engineer",
    owner_id: str = OWNER,
    embedding: Optional[list[float]] = MATCH,
    **fields,
) -> Component:
    return Component(owner_id=owner_id, type=type, title=title, embedding=embedding, **fields)


def make_components(type: str, count: int, **fields) -> list[Component]:
    return [make_component(type=type, title=f"{type} {i}", **fields) for i in range(count)]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        openai_api_key="sk-test",
        backfill_batch_delay_seconds=0,
        request_timeout_seconds=5,
    )


@pytest.fixture
def store():
    return InMemoryComponentStore(match_threshold=0.7)


@pytest.fixture
def embedder():
    return FakeEmbedder()
