"""
Match result cache, keyed by owner, normalized job description and any
caller-supplied job skills.
"""

import hashlib
from typing import Optional, Sequence

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from shared.cache import CacheStats, TTLCache
from shared.config import Settings, get_settings
from shared.models import JobSkill, MatchResult


def normalize_job_description(text: str) -> str:
    return (text or "").strip().lower()


def skills_fingerprint(job_skills: Optional[Sequence[JobSkill]]) -> str:
    """Order-independent digest of extracted job skills; empty when there are none."""
    if not job_skills:
        return ""
    return ",".join(sorted({f"{s.name.strip().lower()}:{s.required}" for s in job_skills}))


def make_cache_key(
    owner_id: str,
    job_description: str,
    job_skills: Optional[Sequence[JobSkill]] = None,
) -> str:
    """
    sha256 of owner_id|normalized text, so owners never share entries.

    Supplied job skills change the missing-skill result, so they are part of
    the key too.
    """
    raw = f"{owner_id}|{normalize_job_description(job_description)}"
    fingerprint = skills_fingerprint(job_skills)
    if fingerprint:
        raw += f"|skills:{fingerprint}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class MatchResultCache:
    """Stores serialized MatchResults; a value that fails to parse is a miss."""

    def __init__(self, cache: Optional[TTLCache[str]] = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        if cache is None:
            cache = TTLCache(
                default_ttl=settings.match_cache_ttl_seconds,
                max_entries=settings.match_cache_max_entries,
            )
        self._cache = cache

    def get(self, key: str) -> Optional[MatchResult]:
        raw = self._cache.get(key)
        if raw is None:
            return None
        try:
            return MatchResult.model_validate_json(raw)
        except (PydanticValidationError, ValueError) as e:
            logger.warning(f"Dropping unreadable cache entry {key[:12]}: {e}")
            self._cache.delete(key)
            return None

    def put(self, key: str, result: MatchResult, ttl: Optional[float] = None) -> None:
        self._cache.put(key, result.model_dump_json(by_alias=True), ttl=ttl)

    def delete(self, key: str) -> None:
        self._cache.delete(key)

    def clear(self) -> None:
        self._cache.clear()

    def stats(self) -> CacheStats:
        return self._cache.stats()
