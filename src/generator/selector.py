"""
LLM selector - picks, ranks and rewrites the components that best fit a job.
"""

from typing import Optional

from loguru import logger

from shared.config import Settings, get_settings
from shared.models import (
    EDUCATION,
    EXPERIENCE,
    PROJECT,
    SKILL,
    Component,
    FocusArea,
    Profile,
    SelectedCV,
)

from .llm import GenerativeModel
from .parsing import parse_llm_model

NOT_SPECIFIED = "Not specified"

FOCUS_DESCRIPTIONS = {
    FocusArea.TECHNICAL: (
        "Technical Excellence - Emphasize programming languages, frameworks, tools, "
        "technical depth, and engineering skills"
    ),
    FocusArea.LEADERSHIP: (
        "Leadership & Management - Emphasize team leadership, mentoring, decision-making, "
        "and stakeholder management"
    ),
    FocusArea.IMPACT: (
        "Business Impact - Emphasize metrics, business outcomes, revenue, user growth, "
        "and measurable achievements"
    ),
    FocusArea.INNOVATION: (
        "Innovation & R&D - Emphasize new solutions, cutting-edge technology, patents, "
        "research, and pioneering work"
    ),
    FocusArea.BALANCED: (
        "Balanced Approach - Evenly distribute focus across technical skills, leadership, "
        "impact, and innovation"
    ),
}

OUTPUT_FORMAT = """{
  "experiences": [
    {
      "id": "component_id",
      "title": "Job Title",
      "organization": "Company Name",
      "location": "City, Country",
      "remote": false,
      "start": "Jan 2020",
      "end": "Present",
      "bullets": ["Achievement 1", "Achievement 2", "Achievement 3"]
    }
  ],
  "education": [
    {
      "id": "component_id",
      "school": "University Name",
      "degree": "Degree Name",
      "concentration": "Field of Study",
      "location": "City, Country",
      "graduation_date": "May 2020",
      "gpa": "3.8/4.0",
      "coursework": ["Course 1", "Course 2"],
      "awards": ["Award 1"]
    }
  ],
  "skills": {
    "technical": ["Skill 1", "Skill 2", "Skill 3"],
    "languages": [{"name": "English", "level": "Native"}],
    "interests": ["Interest 1", "Interest 2"]
  },
  "projects": [
    {
      "id": "component_id",
      "title": "Project Name",
      "organization": "Company/Personal",
      "location": "Location or N/A",
      "start": "Start Date",
      "end": "End Date",
      "bullets": ["Achievement 1", "Achievement 2"]
    }
  ]
}"""

FOCUS_OUTPUT_FIELDS = """Also include these top-level fields:
  "professional_summary": "2-3 sentence summary written for this focus",
  "reasoning": "Why this selection works for the focus area",
  "strength_areas": ["Area 1", "Area 2"],
  "weakness_areas": ["Area 1", "Area 2"]"""


def _or(value: Optional[str], default: str) -> str:
    return value if value else default


def _format_component(index: int, component: Component) -> str:
    category = component.category
    lines = [f"{index}. [{component.id}] {component.title}"]

    if category in (EXPERIENCE, EDUCATION):
        lines[0] += (
            f" at {_or(component.organization, 'N/A')}"
            f" ({_or(component.start_date, 'N/A')} - {_or(component.end_date, 'Current')})"
        )
    elif category == PROJECT:
        lines[0] += f" ({_or(component.organization, 'Personal')})"
    elif category == SKILL:
        return f"{lines[0]}: {_or(component.description, 'No description')}"

    lines.append(f"   {_or(component.description, 'No description')}")
    if component.highlights:
        lines.append(f"   Highlights: {', '.join(component.highlights)}")
    return "\n".join(lines)


def _section(name: str, components: list[Component]) -> str:
    body = "\n\n".join(_format_component(i, c) for i, c in enumerate(components, start=1))
    return f"{name} ({len(components)}):\n{body or 'None'}"


class ComponentSelector:
    """Chooses and rewrites CV content for one job description."""

    def __init__(self, model: GenerativeModel, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.model = model

    def build_prompt(
        self,
        components: list[Component],
        job_description: str,
        profile: Optional[Profile],
        focus_area: Optional[FocusArea] = None,
    ) -> str:
        profile = profile or Profile()
        grouped: dict[str, list[Component]] = {EXPERIENCE: [], EDUCATION: [], SKILL: [], PROJECT: []}
        for component in components:
            if component.category in grouped:
                grouped[component.category].append(component)

        focus = ""
        if focus_area is not None:
            focus = (
                f"\nFOCUS AREA: {focus_area.value.upper()}\n"
                f"{FOCUS_DESCRIPTIONS[focus_area]}\n"
                f"Prioritize components that demonstrate {focus_area.value} strengths.\n"
            )

        s = self.settings
        return f"""You are a professional CV writer. Given a job description and candidate's components, select and rank the most relevant items for each category.

Job Description:
{job_description}

Candidate Profile:
Name: {_or(profile.full_name, NOT_SPECIFIED)}
Profession: {_or(profile.profession, NOT_SPECIFIED)}
Languages: {_or(", ".join(profile.languages), NOT_SPECIFIED)}
Interests: {_or(", ".join(profile.interests), NOT_SPECIFIED)}
{focus}
Available Components:

{_section("EXPERIENCES", grouped[EXPERIENCE])}

{_section("EDUCATION", grouped[EDUCATION])}

{_section("SKILLS", grouped[SKILL])}

{_section("PROJECTS", grouped[PROJECT])}

Task:
1. Select the MOST RELEVANT items from each category that match the job requirements
2. Rank them by relevance (most relevant first)
3. Rewrite bullets/highlights to be more impactful and aligned with the job
4. Use the component id shown in brackets as each item's "id"
5. Return ONLY valid JSON without markdown formatting

Output format:
{OUTPUT_FORMAT}
{FOCUS_OUTPUT_FIELDS if focus_area is not None else ""}
Important: Select at most {s.selector_max_experiences} experiences, {s.selector_max_education} education entries, {s.selector_max_skills} technical skills and {s.selector_max_projects} projects. Quality over quantity!"""

    async def select_and_rank_components(
        self,
        components: list[Component],
        job_description: str,
        profile: Optional[Profile] = None,
        focus_area: Optional[FocusArea] = None,
    ) -> SelectedCV:
        """
        Ask the model to select and rank components for the job.

        Returns:
            SelectedCV bounded per category, without items naming unknown ids

        Raises:
            ParseError: model output is not valid JSON of the expected shape
            UpstreamServiceError: model call failed
        """
        if not components:
            logger.info("No components to select from, skipping model call")
            return SelectedCV()

        prompt = self.build_prompt(components, job_description, profile, focus_area)
        raw = await self.model.generate(prompt)
        selected = parse_llm_model(raw, SelectedCV)

        bounded = self._bound(selected, {c.id for c in components})
        logger.info(
            f"Selected {len(bounded.experiences)} experiences, {len(bounded.education)} education, "
            f"{len(bounded.skills.technical)} skills, {len(bounded.projects)} projects"
        )
        return bounded

    def _bound(self, selected: SelectedCV, known_ids: set[str]) -> SelectedCV:
        def known(items: list) -> list:
            kept = [item for item in items if item.id is None or item.id in known_ids]
            if len(kept) < len(items):
                logger.warning(f"Dropped {len(items) - len(kept)} items with unknown component ids")
            return kept

        s = self.settings
        skills = selected.skills.model_copy(
            update={"technical": selected.skills.technical[: s.selector_max_skills]}
        )
        return selected.model_copy(
            update={
                "experiences": known(selected.experiences)[: s.selector_max_experiences],
                "education": known(selected.education)[: s.selector_max_education],
                "projects": known(selected.projects)[: s.selector_max_projects],
                "skills": skills,
            }
        )
