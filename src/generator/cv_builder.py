"""
CV draft builder - turns an owner's components into renderer-ready CV content.
"""

from typing import Optional

from loguru import logger

from embeddings.store import ProfileStore
from matcher.retriever import RelevanceRetriever
from shared.config import Settings, get_settings
from shared.errors import NotFoundError, require_owner_id
from shared.models import (
    CVContent,
    JobDescriptionMetadata,
    LanguageEntry,
    Profile,
    RenderProfile,
    ScoredComponent,
    SelectedCV,
    SkillsSection,
)

from .selector import ComponentSelector
from .summary import ProfessionalSummaryWriter

DEFAULT_MARGINS = {"left": "1.5cm", "right": "1.5cm", "top": "2cm", "bottom": "2cm"}

# Placeholders shown where the profile has no value
PLACEHOLDER_NAME = "Your Name"
PLACEHOLDER_EMAIL = "email@example.com"
PLACEHOLDER_PHONE = "(000) 000-0000"
PLACEHOLDER_ADDRESS = "123 Street"
PLACEHOLDER_CITY = "City, State ZIP"


def render_profile(profile: Optional[Profile]) -> RenderProfile:
    profile = profile or Profile()
    return RenderProfile(
        name=profile.full_name or PLACEHOLDER_NAME,
        email=profile.email or PLACEHOLDER_EMAIL,
        phone=profile.phone or PLACEHOLDER_PHONE,
        address=profile.address or PLACEHOLDER_ADDRESS,
        city_state_zip=profile.city_state_zip or PLACEHOLDER_CITY,
    )


def merge_profile_skills(skills: SkillsSection, profile: Optional[Profile]) -> SkillsSection:
    """Fill languages and interests from the profile when the selection has none."""
    if profile is None:
        return skills
    update = {}
    if not skills.languages and profile.languages:
        update["languages"] = [LanguageEntry(name=name) for name in profile.languages]
    if not skills.interests and profile.interests:
        update["interests"] = list(profile.interests)
    return skills.model_copy(update=update) if update else skills


class CVGenerator:
    """Builds a tailored CV draft for a job description."""

    def __init__(
        self,
        retriever: RelevanceRetriever,
        selector: ComponentSelector,
        profiles: ProfileStore,
        settings: Optional[Settings] = None,
        summaries: Optional[ProfessionalSummaryWriter] = None,
    ):
        self.settings = settings or get_settings()
        self.retriever = retriever
        self.selector = selector
        self.profiles = profiles
        self.summaries = summaries

    async def generate_cv_content(
        self,
        owner_id: str,
        job_description: str,
        include_projects: bool = False,
        job_metadata: Optional[JobDescriptionMetadata] = None,
    ) -> CVContent:
        """
        Retrieve, select and assemble CV content.

        With a summary writer configured, the professional summary is written
        from the matched components; otherwise the selection's own summary is
        used, if it has one.

        Raises:
            NotFoundError: the owner has no components
        """
        owner_id = require_owner_id(owner_id)
        logger.info(f"Generating CV content for owner {owner_id}")

        profile = await self.profiles.get_profile(owner_id)
        if profile is None:
            logger.warning(f"No profile for owner {owner_id}, using placeholders")

        candidates = await self.retriever.find_relevant_components(
            owner_id, job_description, limit=self.settings.draft_retrieval_limit
        )
        if not candidates:
            raise NotFoundError(
                "No components found for this user", details={"owner_id": owner_id}
            )

        selected = await self.selector.select_and_rank_components(
            [c.component for c in candidates], job_description, profile
        )

        content = CVContent(
            profile=render_profile(profile),
            margins=dict(DEFAULT_MARGINS),
            experience=selected.experiences,
            education=selected.education,
            skills=merge_profile_skills(selected.skills, profile),
            projects=selected.projects if include_projects else [],
            professional_summary=await self._summary(candidates, selected, job_metadata),
        )
        logger.info(
            f"CV content ready: {len(content.experience)} experiences, "
            f"{len(content.education)} education, {len(content.projects)} projects"
        )
        return content

    async def _summary(
        self,
        candidates: list[ScoredComponent],
        selected: SelectedCV,
        job_metadata: Optional[JobDescriptionMetadata],
    ) -> str:
        if self.summaries is None:
            return selected.professional_summary
        return await self.summaries.generate_from_matches(candidates, job_metadata)
