"""
CV variants - alternative selections of the same components, each tuned to a focus area.

Strategy:
1. Suggest focus areas from the job text and the candidate's strengths
2. Run one selection per focus area, concurrently
3. Score each variant on its own subset of components
4. Rank the variants and explain the trade-offs
"""

import asyncio
from typing import Iterable, Optional
from uuid import uuid4

from loguru import logger

from matcher.scoring import CategoryScorer
from shared.config import Settings, get_settings
from shared.errors import ValidationError
from shared.models import (
    EDUCATION,
    EXPERIENCE,
    PROJECT,
    SKILL,
    CVVariant,
    FocusArea,
    Profile,
    ScoredComponent,
    SelectedCV,
    VariantComparison,
    VariantComponents,
    VariantRecommendation,
)

from .selector import FOCUS_DESCRIPTIONS, ComponentSelector

FOCUS_KEYWORDS = {
    FocusArea.TECHNICAL: [
        "react", "node", "python", "java", "aws", "kubernetes", "docker", "sql", "api",
        "framework", "library", "code", "develop", "implement", "build", "engineer",
    ],
    FocusArea.LEADERSHIP: [
        "lead", "manage", "mentor", "team", "director", "head", "vp", "senior", "principal",
        "architect", "coordinate", "oversee", "hire", "train",
    ],
    FocusArea.IMPACT: [
        "revenue", "million", "billion", "users", "growth", "%", "increased", "reduced",
        "saved", "roi", "kpi", "metric", "business", "customer",
    ],
    FocusArea.INNOVATION: [
        "innovate", "patent", "research", "r&d", "first", "pioneer", "invent",
        "cutting-edge", "novel", "breakthrough", "prototype",
    ],
}

# Keyword hits in the job text needed before an area counts as emphasized
JOB_EMPHASIS_HITS = 2
MAX_FOCUS_AREAS = 5


def _keyword_hits(text: str, area: FocusArea) -> int:
    return sum(1 for keyword in FOCUS_KEYWORDS[area] if keyword in text)


def _component_text(candidate: ScoredComponent) -> str:
    c = candidate.component
    return " ".join([c.title, c.description or "", " ".join(c.highlights)]).lower()


def suggest_focus_areas(
    candidates: Iterable[ScoredComponent], job_description: str
) -> list[FocusArea]:
    """
    Pick focus areas worth generating variants for.

    Areas the job text emphasizes come first, then the candidate's strongest
    area if the job does not already ask for it. Balanced is always included.
    """
    job_text = (job_description or "").lower()
    suggestions = [FocusArea.BALANCED]
    suggestions += [
        area for area in FOCUS_KEYWORDS if _keyword_hits(job_text, area) >= JOB_EMPHASIS_HITS
    ]

    distribution = {area: 0.0 for area in FOCUS_KEYWORDS}
    for candidate in candidates:
        text = _component_text(candidate)
        weight = candidate.similarity if candidate.similarity is not None else 1.0
        for area in FOCUS_KEYWORDS:
            distribution[area] += weight * _keyword_hits(text, area)

    strongest = max(distribution.values())
    if strongest > 0:
        for area, strength in distribution.items():
            if strength == strongest and area not in suggestions:
                suggestions.append(area)

    summary = ", ".join(f"{a.value}={s:.2f}" for a, s in distribution.items())
    logger.debug(f"Focus distribution: {summary}")
    return suggestions[:MAX_FOCUS_AREAS]


class CVVariantGenerator:
    """Generates and compares focus-specific CV variants."""

    def __init__(
        self,
        selector: ComponentSelector,
        scorer: Optional[CategoryScorer] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.selector = selector
        self.scorer = scorer or CategoryScorer(self.settings)

    async def generate_variants(
        self,
        candidates: list[ScoredComponent],
        job_description: str,
        profile: Optional[Profile] = None,
        focus_areas: Optional[list[FocusArea]] = None,
    ) -> list[CVVariant]:
        """
        Generate one variant per distinct focus area.

        Returns:
            Variants sorted by score, highest first
        """
        areas = list(dict.fromkeys(FocusArea(a) for a in focus_areas or [FocusArea.BALANCED]))
        logger.info(f"Generating {len(areas)} CV variants: {', '.join(a.value for a in areas)}")

        variants = await asyncio.gather(
            *(self._generate_one(candidates, job_description, profile, area) for area in areas)
        )
        ranked = sorted(variants, key=lambda v: v.score, reverse=True)
        logger.info(f"Generated {len(ranked)} variants, best: {ranked[0].title} ({ranked[0].score})")
        return ranked

    async def _generate_one(
        self,
        candidates: list[ScoredComponent],
        job_description: str,
        profile: Optional[Profile],
        focus_area: FocusArea,
    ) -> CVVariant:
        selected = await self.selector.select_and_rank_components(
            [c.component for c in candidates], job_description, profile, focus_area=focus_area
        )
        chosen = self._resolve(selected, candidates)
        breakdown, _ = self.scorer.score_components(chosen)

        return CVVariant(
            id=f"variant-{focus_area.value}-{uuid4().hex[:8]}",
            title=f"{focus_area.value.capitalize()} Focus",
            description=FOCUS_DESCRIPTIONS[focus_area],
            focus_area=focus_area,
            score=self.scorer.total(breakdown),
            selected_components=VariantComponents(
                experience=[c.component for c in chosen if c.component.category == EXPERIENCE],
                education=[c.component for c in chosen if c.component.category == EDUCATION],
                skills=[c.component for c in chosen if c.component.category == SKILL],
                projects=[c.component for c in chosen if c.component.category == PROJECT],
            ),
            professional_summary=selected.professional_summary,
            strength_areas=selected.strength_areas,
            weakness_areas=selected.weakness_areas,
            reasoning=selected.reasoning,
        )

    @staticmethod
    def _resolve(
        selected: SelectedCV, candidates: list[ScoredComponent]
    ) -> list[ScoredComponent]:
        """Map selected ids and skill names back to the source candidates."""
        by_id = {c.component.id: c for c in candidates}
        ids = [
            item.id
            for item in [*selected.experiences, *selected.education, *selected.projects]
            if item.id
        ]
        chosen = {i: by_id[i] for i in ids if i in by_id}

        skill_names = {name.strip().lower() for name in selected.skills.technical}
        for candidate in candidates:
            component = candidate.component
            if component.category == SKILL and component.title.strip().lower() in skill_names:
                chosen.setdefault(component.id, candidate)

        return list(chosen.values())

    def recommend(self, variants: list[CVVariant]) -> VariantRecommendation:
        """
        Rank variants and describe their trade-offs.

        Ties on score go to the variant with more selected components.

        Raises:
            ValidationError: no variants given
        """
        if not variants:
            raise ValidationError("At least one variant is required", field="variants")

        ranked = sorted(
            variants,
            key=lambda v: (v.score, v.selected_components.count),
            reverse=True,
        )

        comparison = []
        for rank, variant in enumerate(ranked, start=1):
            pros = [f"Score: {variant.score}/100"]
            if variant.strength_areas:
                pros.append(f"Strong in: {', '.join(variant.strength_areas)}")
            pros.append(
                "Well-rounded approach"
                if variant.focus_area == FocusArea.BALANCED
                else f"Optimized for {variant.focus_area.value}"
            )
            cons = (
                [f"Could improve: {', '.join(variant.weakness_areas)}"]
                if variant.weakness_areas
                else ["No major weaknesses identified"]
            )
            comparison.append(VariantComparison(rank=rank, variant=variant, pros=pros, cons=cons))

        return VariantRecommendation(recommended=ranked[0], comparison=comparison)
