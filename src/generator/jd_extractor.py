"""
Job description extraction - raw job text to structured metadata via the LLM.
"""

from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ParseError
from shared.models import GroupedSkill, JobDescriptionMetadata, JobSkill

from .llm import GenerativeModel
from .parsing import parse_llm_json

EXTRACTION_PROMPT = """Analyze the following job description and extract structured information in JSON format:

Job Description:
{raw_text}

Extract the following fields:
- title: Job title
- company: Company name
- requirements: Array of job requirements
- skills: Array of skills with {{"skill": name, "level": level if mentioned, "required": boolean}}
- responsibilities: Array of job responsibilities
- qualifications: Array of qualifications
- metadata: {{"location": location if mentioned}}
- groupedSkills: Array of skill groups with {{"category": group name, "summary": one-line description, "technologies": [names]}}

Return ONLY valid JSON without any markdown formatting or code blocks."""


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _skills(value: Any) -> list[JobSkill]:
    skills = []
    for item in value if isinstance(value, list) else []:
        if isinstance(item, str):
            skills.append(JobSkill(name=item))
            continue
        if not isinstance(item, dict):
            continue
        name = item.get("skill") or item.get("name")
        if not name:
            continue
        required = item.get("required")
        skills.append(
            JobSkill(
                name=str(name).strip(),
                level=item.get("level") or None,
                required=required if isinstance(required, bool) else None,
            )
        )
    return skills


def _grouped_skills(value: Any) -> list[GroupedSkill]:
    groups = []
    for item in value if isinstance(value, list) else []:
        if not isinstance(item, dict) or not item.get("category"):
            continue
        groups.append(
            GroupedSkill(
                category=str(item["category"]).strip(),
                summary=str(item.get("summary") or "").strip(),
                technologies=_strings(item.get("technologies")),
            )
        )
    return groups


class JobDescriptionExtractor:
    """Extracts title, company, requirements and skills from a job posting."""

    def __init__(self, model: GenerativeModel):
        self.model = model

    async def extract(self, raw_text: str) -> JobDescriptionMetadata:
        """
        Extract structured job metadata.

        Raises:
            ParseError: model output is not a JSON object
        """
        if not raw_text or not raw_text.strip():
            return JobDescriptionMetadata(raw_text=raw_text or "")

        raw = await self.model.generate(EXTRACTION_PROMPT.format(raw_text=raw_text))
        data = parse_llm_json(raw)
        if not isinstance(data, dict):
            raise ParseError("Expected a JSON object for job description metadata", raw=raw)

        extra: Optional[dict] = data.get("metadata") if isinstance(data.get("metadata"), dict) else None
        try:
            metadata = JobDescriptionMetadata(
                title=data.get("title") or "Untitled Position",
                company=data.get("company") or "Unknown Company",
                location=(extra or {}).get("location") or data.get("location"),
                raw_text=raw_text,
                requirements=_strings(data.get("requirements")),
                skills=_skills(data.get("skills")),
                responsibilities=_strings(data.get("responsibilities")),
                qualifications=_strings(data.get("qualifications")),
                grouped_skills=_grouped_skills(data.get("groupedSkills") or data.get("grouped_skills")),
            )
        except PydanticValidationError as e:
            raise ParseError(f"Invalid job description metadata: {e.error_count()} errors", raw=raw, cause=e) from e

        logger.info(
            f"Extracted job '{metadata.title}' at {metadata.company}: "
            f"{len(metadata.skills)} skills, {len(metadata.requirements)} requirements"
        )
        return metadata
