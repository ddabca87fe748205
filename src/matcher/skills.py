"""
Missing-skill detection.
"""

import re
from typing import Iterable, Optional

from loguru import logger

from embeddings.store import cosine_similarity
from shared.models import Component, JobSkill

# Skills recognised in raw job-description text when no extracted skill list is given
KNOWN_SKILLS = [
    "JavaScript", "TypeScript", "Python", "Java", "C++", "C#", "Go", "Rust", "Ruby", "PHP",
    "Kotlin", "Swift", "Scala",
    "React", "Vue", "Angular", "Node.js", "Express", "Next.js", "Django", "Flask", "FastAPI",
    "Spring",
    "Docker", "Kubernetes", "Terraform", "AWS", "Azure", "GCP",
    "PostgreSQL", "MySQL", "MongoDB", "Redis", "Elasticsearch", "Kafka",
    "Git", "CI/CD", "Agile", "Scrum",
    "Machine Learning", "AI", "Data Science", "TensorFlow", "PyTorch",
    "GraphQL", "REST", "Microservices", "Linux",
]


def _pattern(term: str, ignore_case: bool = True) -> re.Pattern:
    return re.compile(
        r"(?<![\w+#.])" + re.escape(term) + r"(?![\w+#])",
        re.IGNORECASE if ignore_case else 0,
    )


# These are ordinary words in lower case; match them exactly
_CASE_SENSITIVE = {"Go", "AI", "REST"}

_KNOWN_PATTERNS = [
    (skill, _pattern(skill, ignore_case=skill not in _CASE_SENSITIVE)) for skill in KNOWN_SKILLS
]


def extract_job_skills(job_description: str) -> list[JobSkill]:
    """
    Find known skills mentioned in raw job text.

    Requirement status is unknown for these, so they count as likely required.
    """
    if not job_description:
        return []
    return [
        JobSkill(name=skill)
        for skill, pattern in _KNOWN_PATTERNS
        if pattern.search(job_description)
    ]


def _mentions(text: Optional[str], skill: str) -> bool:
    return bool(text) and bool(_pattern(skill).search(text))


def is_skill_covered(
    skill: JobSkill,
    owned_skills: Iterable[Component],
    similarity_threshold: float = 0.85,
) -> bool:
    """Case-insensitive containment either way, or embedding similarity at or above the threshold."""
    name = skill.name.strip()
    for owned in owned_skills:
        if _mentions(owned.title, name) or _mentions(owned.description, name):
            return True
        if owned.title.strip() and _mentions(name, owned.title.strip()):
            return True
        if skill.embedding and owned.embedding:
            if cosine_similarity(skill.embedding, owned.embedding) >= similarity_threshold:
                return True
    return False


def detect_missing_skills(
    job_skills: Iterable[JobSkill],
    owned_skills: list[Component],
    similarity_threshold: float = 0.85,
    limit: int = 10,
) -> list[str]:
    """
    Names of required or likely-required job skills the owner does not list.

    Explicitly optional skills are ignored. Required skills come first; only
    the bare skill name is returned.
    """
    candidates = [s for s in job_skills if s.required is not False and s.name.strip()]
    # Stable sort keeps the job description's own order within each group
    candidates.sort(key=lambda s: s.required is not True)

    seen: set[str] = set()
    missing: list[str] = []
    for skill in candidates:
        key = skill.name.strip().lower()
        if key in seen:
            continue
        seen.add(key)

        if is_skill_covered(skill, owned_skills, similarity_threshold):
            continue

        logger.debug(f"Missing skill: {skill.label}")
        missing.append(skill.name.strip())

    return missing[:limit]
