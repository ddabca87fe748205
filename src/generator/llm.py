"""
Generative text model adapter using OpenAI chat completions.
"""

from typing import Optional, Protocol

from loguru import logger
from openai import AsyncOpenAI

from shared.config import Settings, get_settings
from shared.errors import ConfigurationError
from shared.upstream import call_upstream


class GenerativeModel(Protocol):
    async def generate(self, prompt: str) -> str:
        """Return the model's raw text for prompt."""


class OpenAIGenerativeModel:
    """Prompt in, raw text out. Fence removal and parsing belong to the caller."""

    service_name = "OpenAI chat"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        system_prompt: str = "You are an expert CV writer. You answer with valid JSON only.",
        temperature: float = 0.3,
        max_tokens: int = 3000,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self.model = model or self.settings.openai_model
        self.system_prompt = system_prompt
        self.temperature = temperature
        self.max_tokens = max_tokens

    @property
    def client(self) -> AsyncOpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            api_key = self.settings.openai_api_key.get_secret_value()
            if not api_key:
                raise ConfigurationError(
                    "OPENAI_API_KEY is not set; cannot call the generative model",
                    config_key="openai_api_key",
                )
            self._client = AsyncOpenAI(
                api_key=api_key,
                max_retries=0,
                timeout=self.settings.request_timeout_seconds,
            )
        return self._client

    async def generate(self, prompt: str) -> str:
        client = self.client
        response = await call_upstream(
            client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            ),
            service=self.service_name,
            timeout=self.settings.request_timeout_seconds,
        )

        content = response.choices[0].message.content if response.choices else None
        logger.debug(f"{self.model} returned {len(content or '')} characters")
        return content.strip() if content else ""
