"""
Professional summary writer - the short opening paragraph of a CV.

The summary follows the usual HR structure: current role and years of
experience, then core competencies with a quantified achievement, then an
objective aligned with the target role. When the model fails or its answer is
unusable, a template summary is returned instead.
"""

import re
from datetime import date
from typing import Optional

from loguru import logger

from shared.errors import ParseError, UpstreamServiceError
from shared.models import (
    EXPERIENCE,
    PROJECT,
    SKILL,
    Component,
    JobDescriptionMetadata,
    ScoredComponent,
)

from .llm import GenerativeModel
from .parsing import parse_llm_json

MAX_EXPERIENCES = 3
MAX_SKILLS = 8
MAX_PROJECTS = 2

# Accepted summary length, in words
MIN_WORDS = 20
MAX_WORDS = 200

_YEAR_MONTH = re.compile(r"(\d{4})(?:[-/.](\d{1,2}))?")
_ONGOING = {"", "present", "current", "now"}

# Defaults JobDescriptionMetadata uses when extraction found nothing
_UNKNOWN_TITLE = JobDescriptionMetadata.model_fields["title"].default
_UNKNOWN_COMPANY = JobDescriptionMetadata.model_fields["company"].default

SUMMARY_PROMPT = """You are a professional CV writer specializing in professional summaries that pass ATS systems and impress HR managers.

TARGET JOB:
{target}

CANDIDATE'S TOP MATCHED EXPERIENCE ({experience_count} roles, {years} total years):
{experiences}

CANDIDATE'S TOP SKILLS ({skill_count} skills matched):
{skills}
{projects}
TASK:
Write a professional summary (2-3 sentences, 50-120 words) with this structure:
1. Opening: "[Job Title] with [X]+ years of experience in [domain]", using the most relevant role and {years} years
2. Core competencies: the top 3-5 skills that match the job, plus a quantified achievement from the highlights if available
3. Objective: how the candidate's expertise serves {objective}

Use action verbs and concrete technologies. Avoid buzzwords, generic statements, humble language and personal pronouns (I, me, my).

Return ONLY valid JSON without markdown formatting:
{{"summary": "the professional summary"}}"""


def _month_index(value: Optional[str], today: date) -> Optional[int]:
    text = (value or "").strip().lower()
    if text in _ONGOING:
        return today.year * 12 + today.month - 1
    match = _YEAR_MONTH.search(text)
    if not match:
        return None
    month = int(match.group(2)) if match.group(2) else 1
    if not 1 <= month <= 12:
        month = 1
    return int(match.group(1)) * 12 + month - 1


def total_years(experiences: list[Component], today: Optional[date] = None) -> int:
    """
    Whole years covered by the experiences' date ranges.

    A missing end date means the role is ongoing. Undated roles are skipped;
    any experience at all counts as at least one year.
    """
    if not experiences:
        return 0
    today = today or date.today()

    months = 0
    for experience in experiences:
        if not experience.start_date:
            continue
        start = _month_index(experience.start_date, today)
        end = _month_index(experience.end_date, today)
        if start is None or end is None:
            continue
        months += max(0, end - start)
    return max(1, round(months / 12))


def most_recent(experiences: list[Component], today: Optional[date] = None) -> Optional[Component]:
    """The experience that ended last; ongoing roles come first."""
    today = today or date.today()
    if not experiences:
        return None
    return max(experiences, key=lambda e: _month_index(e.end_date, today) or 0)


def _target(job: Optional[JobDescriptionMetadata]) -> tuple[Optional[str], Optional[str]]:
    if job is None:
        return None, None
    title = job.title if job.title != _UNKNOWN_TITLE else None
    company = job.company if job.company != _UNKNOWN_COMPANY else None
    return title, company


def fallback_summary(
    experiences: list[Component],
    skills: list[Component],
    target_role: Optional[str] = None,
    target_company: Optional[str] = None,
) -> str:
    """Template summary used when the model cannot provide one."""
    current = most_recent(experiences)
    role = current.title if current and current.title else "Professional"
    years = max(total_years(experiences), 1)
    skill_names = ", ".join(s.title for s in skills[:5] if s.title)

    opening = f"{role} with {years}+ years of experience"
    if skill_names:
        opening += f" specializing in {skill_names}"
    return (
        f"{opening}. Proven track record of delivering high-quality solutions. "
        f"Seeking to leverage expertise to contribute to {target_company or 'a dynamic organization'}"
        f" as {target_role or 'a valued team member'}."
    )


def _describe_experience(index: int, c: Component) -> str:
    highlights = "; ".join(c.highlights[:3]) or "None listed"
    return (
        f"{index}. {c.title} at {c.organization or 'Company'}\n"
        f"   Duration: {c.start_date or 'Date'} - {c.end_date or 'Present'}\n"
        f"   Key highlights: {highlights}"
    )


class ProfessionalSummaryWriter:
    """Writes a CV's professional summary with the generative model."""

    def __init__(self, model: GenerativeModel):
        self.model = model

    async def generate_from_matches(
        self,
        candidates: list[ScoredComponent],
        job: Optional[JobDescriptionMetadata] = None,
    ) -> str:
        """
        Summary from the components that matched a job.

        Candidates are taken in the order given, so the best matches of each
        category feed the prompt.
        """
        components = [c.component for c in candidates]
        experiences = [c for c in components if c.category == EXPERIENCE][:MAX_EXPERIENCES]
        skills = [c for c in components if c.category == SKILL][:MAX_SKILLS]
        projects = [c for c in components if c.category == PROJECT][:MAX_PROJECTS]

        title, company = _target(job)
        target = "\n".join(
            line
            for line in (
                f"Title: {title}" if title else "",
                f"Company: {company}" if company else "",
                f"Location: {job.location}" if job is not None and job.location else "",
            )
            if line
        )
        years = total_years(experiences)

        project_lines = ""
        if projects:
            project_lines = "\nNOTABLE PROJECTS:\n" + "\n".join(
                f"- {p.title}: {p.description or ''}" for p in projects
            ) + "\n"

        prompt = SUMMARY_PROMPT.format(
            target=target or "Not specified",
            experience_count=len(experiences),
            years=years,
            experiences="\n\n".join(
                _describe_experience(i, e) for i, e in enumerate(experiences, start=1)
            ) or "None",
            skill_count=len(skills),
            skills="\n".join(
                f"- {s.title}{': ' + s.description if s.description else ''}" for s in skills
            ) or "None",
            projects=project_lines,
            objective=f"{title or 'the role'} at {company}" if company else (title or "the target role"),
        )
        return await self._write(prompt, fallback_summary(experiences, skills, title, company))

    async def generate_from_components(
        self,
        experiences: list[Component],
        skills: list[Component],
        target_role: str,
        target_company: Optional[str] = None,
    ) -> str:
        """Summary from raw components, without matching context."""
        current = most_recent(experiences)
        years = total_years(experiences)
        prompt = f"""Write a professional summary (2-3 sentences, 50-120 words) for a CV:

Current Role: {current.title if current and current.title else 'Professional'}
Total Experience: {years} years
Top Skills: {', '.join(s.title for s in skills[:MAX_SKILLS])}
Target Role: {target_role}
{f'Target Company: {target_company}' if target_company else ''}

Follow HR best practices:
1. Start with role + years
2. List top competencies
3. Include objective aligned with target role

Return ONLY valid JSON without markdown formatting:
{{"summary": "the professional summary"}}"""
        return await self._write(
            prompt, fallback_summary(experiences, skills, target_role, target_company)
        )

    async def _write(self, prompt: str, fallback: str) -> str:
        try:
            raw = await self.model.generate(prompt)
            data = parse_llm_json(raw)
        except (ParseError, UpstreamServiceError) as e:
            logger.warning(f"Summary generation failed, using template: {e}")
            return fallback

        summary = data.get("summary") if isinstance(data, dict) else None
        if not isinstance(summary, str):
            logger.warning("Summary response has no 'summary' text, using template")
            return fallback

        summary = " ".join(summary.split())
        words = len(summary.split())
        if not MIN_WORDS <= words <= MAX_WORDS:
            logger.warning(f"Summary has {words} words, outside {MIN_WORDS}-{MAX_WORDS}, using template")
            return fallback

        logger.info(f"Professional summary generated ({words} words)")
        return summary
