"""
Category scoring.

Each category (experience, skills, education, projects) earns up to its
configured weight. A category's contribution grows with the number of owned
components in the candidate set and with their similarity to the job
description, with diminishing returns:

    coverage(x)  = min(1, ln(1 + x) / ln(1 + saturation))
    contribution = weight * (floor * coverage(count)
                             + (1 - floor) * coverage(sum of relevances))

where a component's relevance is min(1, similarity / strong_similarity), or
`fallback_relevance` when it has no similarity. The overall score is the sum
of the rounded, capped contributions.
"""

import math
from typing import Iterable, Optional

from shared.config import Settings, get_settings
from shared.models import (
    CATEGORIES,
    EDUCATION,
    EXPERIENCE,
    PROJECT,
    SKILL,
    CategoryBreakdown,
    MatchedComponent,
    ScoredComponent,
)


class CategoryScorer:
    """Turns a candidate set into a bounded per-category breakdown."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.weights = self.settings.category_weights
        self.saturation = self.settings.category_saturation

    def coverage(self, category: str, amount: float) -> float:
        if amount <= 0:
            return 0.0
        saturation = max(1, self.saturation[category])
        return min(1.0, math.log1p(amount) / math.log1p(saturation))

    def relevance(self, similarity: Optional[float]) -> float:
        if similarity is None:
            return self.settings.fallback_relevance
        strong = self.settings.strong_similarity
        return max(0.0, min(1.0, similarity / strong))

    def score_category(self, category: str, members: list[ScoredComponent]) -> float:
        if not members:
            return 0.0
        floor = self.settings.relevance_floor
        effective = sum(self.relevance(m.similarity) for m in members)
        blended = floor * self.coverage(category, len(members)) + (1 - floor) * self.coverage(
            category, effective
        )
        weight = self.weights[category]
        return min(weight, round(weight * blended, 1))

    @staticmethod
    def group(candidates: Iterable[ScoredComponent]) -> dict[str, list[ScoredComponent]]:
        grouped: dict[str, list[ScoredComponent]] = {category: [] for category in CATEGORIES}
        for candidate in candidates:
            category = candidate.component.category
            if category is not None:
                grouped[category].append(candidate)
        return grouped

    def score_components(
        self, candidates: Iterable[ScoredComponent]
    ) -> tuple[CategoryBreakdown, dict[str, int]]:
        """
        Score a candidate set.

        Returns:
            Tuple of (breakdown, component count per category)
        """
        grouped = self.group(candidates)
        breakdown = CategoryBreakdown(
            experience_match=self.score_category(EXPERIENCE, grouped[EXPERIENCE]),
            skills_match=self.score_category(SKILL, grouped[SKILL]),
            education_match=self.score_category(EDUCATION, grouped[EDUCATION]),
            projects_match=self.score_category(PROJECT, grouped[PROJECT]),
        )
        counts = {category: len(members) for category, members in grouped.items()}
        return breakdown, counts

    def total(self, breakdown: CategoryBreakdown) -> float:
        return min(100.0, breakdown.total)


def top_matches(candidates: Iterable[ScoredComponent], limit: int = 10) -> list[MatchedComponent]:
    """Best candidates by similarity, as weak references."""
    ranked = sorted(
        candidates,
        key=lambda s: s.similarity if s.similarity is not None else -1.0,
        reverse=True,
    )
    return [
        MatchedComponent(
            component_id=s.component.id,
            type=s.component.type,
            title=s.component.title,
            similarity=s.similarity,
        )
        for s in ranked[:limit]
    ]
