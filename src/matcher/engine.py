"""
Match engine - scores an owner's CV components against a job description.

Flow:
1. Look up the (owner, job description, supplied job skills) key in the result cache
2. Join an identical in-flight calculation, or start one
3. Retrieve relevant components, score categories, detect missing skills
4. Build suggestions, store the result in the cache
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from shared.cache import CacheStats
from shared.config import Settings, get_settings
from shared.errors import require_owner_id
from shared.models import SKILL, JobDescriptionMetadata, MatchMetadata, MatchResult

from .cache import MatchResultCache, make_cache_key
from .retriever import RelevanceRetriever
from .scoring import CategoryScorer, top_matches
from .skills import detect_missing_skills, extract_job_skills
from .suggestions import generate_suggestions


@dataclass
class _InFlight:
    task: asyncio.Task
    waiters: int = 0


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class MatchEngine:
    """Computes and caches match scores."""

    def __init__(
        self,
        retriever: RelevanceRetriever,
        scorer: Optional[CategoryScorer] = None,
        cache: Optional[MatchResultCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.retriever = retriever
        self.scorer = scorer or CategoryScorer(self.settings)
        self.cache = cache or MatchResultCache(settings=self.settings)
        self._inflight: dict[str, _InFlight] = {}

    async def score(
        self,
        owner_id: str,
        job_description: str,
        job_metadata: Optional[JobDescriptionMetadata] = None,
        use_cache: bool = True,
    ) -> MatchResult:
        """
        Score the owner's components against a job description.

        Args:
            owner_id: Owning user, required
            job_description: Raw job description text
            job_metadata: Extracted job details; its skill list drives missing-skill detection
            use_cache: Skip the cache lookup when False (the result is still stored)

        Returns:
            MatchResult with metadata.cached set on a cache hit
        """
        owner_id = require_owner_id(owner_id)
        start = time.perf_counter()
        key = make_cache_key(
            owner_id, job_description, job_metadata.skills if job_metadata is not None else None
        )

        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                elapsed = _elapsed_ms(start)
                logger.info(f"Match score cache hit for owner {owner_id} ({elapsed:.2f}ms)")
                return cached.model_copy(
                    update={"metadata": MatchMetadata(calculation_time_ms=elapsed, cached=True)}
                )
        else:
            return await self._compute(key, owner_id, job_description, job_metadata)

        return await self._join(key, owner_id, job_description, job_metadata)

    async def _join(
        self,
        key: str,
        owner_id: str,
        job_description: str,
        job_metadata: Optional[JobDescriptionMetadata],
    ) -> MatchResult:
        """Await the single calculation for key, starting it if needed."""
        flight = self._inflight.get(key)
        if flight is None:
            task = asyncio.create_task(
                self._compute(key, owner_id, job_description, job_metadata)
            )
            flight = _InFlight(task=task)
            self._inflight[key] = flight
            task.add_done_callback(lambda t: self._finish(key, t))
        else:
            logger.debug(f"Joining in-flight match calculation for owner {owner_id}")

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            # The last waiter to leave abandons the calculation
            if flight.waiters == 1 and not flight.task.done():
                logger.info(f"All callers cancelled, abandoning match calculation for {owner_id}")
                flight.task.cancel()
            raise
        finally:
            flight.waiters -= 1

    def _finish(self, key: str, task: asyncio.Task) -> None:
        flight = self._inflight.get(key)
        if flight is not None and flight.task is task:
            del self._inflight[key]
        if not task.cancelled():
            # Marks the exception retrieved; waiters re-raise it themselves
            task.exception()

    async def _compute(
        self,
        key: str,
        owner_id: str,
        job_description: str,
        job_metadata: Optional[JobDescriptionMetadata],
    ) -> MatchResult:
        start = time.perf_counter()
        logger.info(f"Calculating match score for owner {owner_id}")

        candidates = await self.retriever.find_relevant_components(owner_id, job_description)
        breakdown, counts = self.scorer.score_components(candidates)

        missing_skills = await self._missing_skills(owner_id, job_description, job_metadata)

        suggestions = generate_suggestions(
            breakdown,
            missing_skills,
            counts,
            self.scorer.weights,
            max_suggestions=self.settings.max_suggestions,
        )

        result = MatchResult(
            score=self.scorer.total(breakdown),
            breakdown=breakdown,
            missing_skills=missing_skills,
            suggestions=suggestions,
            top_matched_components=top_matches(candidates),
            metadata=MatchMetadata(calculation_time_ms=_elapsed_ms(start), cached=False),
        )
        self.cache.put(key, result)

        logger.info(
            f"Match score for owner {owner_id}: {result.score} "
            f"({result.metadata.calculation_time_ms:.0f}ms, {len(candidates)} candidates)"
        )
        return result

    async def _missing_skills(
        self,
        owner_id: str,
        job_description: str,
        job_metadata: Optional[JobDescriptionMetadata],
    ) -> list[str]:
        if job_metadata is not None and job_metadata.skills:
            job_skills = job_metadata.skills
        else:
            job_skills = extract_job_skills(job_description)
        if not job_skills:
            return []

        owned = await self.retriever.get_owner_components(owner_id)
        owned_skills = [c for c in owned if c.category == SKILL]
        return detect_missing_skills(
            job_skills,
            owned_skills,
            similarity_threshold=self.settings.skill_similarity_threshold,
            limit=self.settings.max_missing_skills,
        )

    # -------------------------------------------------------------------------
    # Cache management
    # -------------------------------------------------------------------------

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Match score cache cleared")

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()
