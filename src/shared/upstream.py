"""
Timeout and error translation for calls to external providers.
"""

import asyncio
from typing import Awaitable, TypeVar

import openai
from loguru import logger

from .errors import UpstreamServiceError

T = TypeVar("T")


async def call_upstream(awaitable: Awaitable[T], service: str, timeout: float) -> T:
    """
    Await an external call with an explicit timeout.

    OpenAI SDK failures and timeouts are re-raised as UpstreamServiceError.
    Nothing is retried here; callers own the retry policy. Cancellation of the
    calling task propagates and abandons the request.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"{service} call timed out after {timeout}s")
        raise UpstreamServiceError(
            f"{service} timed out after {timeout}s", service=service, cause=e
        ) from e
    except openai.AuthenticationError as e:
        raise UpstreamServiceError(
            f"{service} rejected the API credentials", service=service, status_code=401, cause=e
        ) from e
    except openai.RateLimitError as e:
        raise UpstreamServiceError(
            f"{service} rate limit exceeded", service=service, status_code=429, cause=e
        ) from e
    except openai.APITimeoutError as e:
        raise UpstreamServiceError(
            f"{service} request timed out", service=service, cause=e
        ) from e
    except openai.APIConnectionError as e:
        raise UpstreamServiceError(
            f"Could not reach {service}: {e}", service=service, cause=e
        ) from e
    except openai.APIStatusError as e:
        raise UpstreamServiceError(
            f"{service} returned HTTP {e.status_code}",
            service=service,
            status_code=e.status_code,
            cause=e,
        ) from e
    except openai.OpenAIError as e:
        raise UpstreamServiceError(f"{service} failed: {e}", service=service, cause=e) from e
