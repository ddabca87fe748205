"""
Improvement suggestions derived from score gaps and missing skills.
"""

from typing import Mapping

from shared.models import CATEGORIES, EDUCATION, EXPERIENCE, PROJECT, SKILL, CategoryBreakdown

_EMPTY_ADVICE = {
    EXPERIENCE: "Add your work experience to show roles relevant to this job",
    SKILL: "Add your skills so they can be matched against the job requirements",
    EDUCATION: "Add your education background",
    PROJECT: "Add relevant projects to showcase your practical experience",
}

_PARTIAL_ADVICE = {
    EXPERIENCE: "Add more relevant work experience or expand the highlights of existing roles",
    SKILL: "Add more skills that match the job requirements",
    EDUCATION: "Add detail to your education such as coursework, awards or certifications",
    PROJECT: "Add more projects that use the technologies in this job description",
}

# Share of a category's weight at which it counts as saturated
NEAR_SATURATION = 0.9


def generate_suggestions(
    breakdown: CategoryBreakdown,
    missing_skills: list[str],
    counts: Mapping[str, int],
    weights: Mapping[str, float],
    max_suggestions: int = 5,
) -> list[str]:
    """
    Ordered, de-duplicated advice.

    Empty categories always get a suggestion, weak categories get one piece of
    advice each, saturated categories get none, and missing skills are listed
    last.
    """
    empty = [_EMPTY_ADVICE[c] for c in CATEGORIES if counts.get(c, 0) == 0]

    partial = [
        _PARTIAL_ADVICE[c]
        for c in CATEGORIES
        if counts.get(c, 0) > 0 and breakdown.for_category(c) < weights[c] * NEAR_SATURATION
    ]

    suggestions = empty + partial
    if missing_skills:
        suggestions.append(f"Consider adding these skills: {', '.join(missing_skills[:5])}")

    return suggestions[: max(max_suggestions, len(empty))]
