"""
Pydantic models for CV components, match results and CV variants.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import PartialBatchFailure, ValidationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ComponentType(str, Enum):
    """Component sub-types, native and provider-qualified."""

    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILL = "skill"
    PROJECT = "project"
    GITHUB_PROFILE = "github_profile"
    GITHUB_REPOSITORY = "github_repository"
    YOUTUBE_CHANNEL = "youtube_channel"
    YOUTUBE_VIDEO = "youtube_video"
    LINKEDIN_PROFILE = "linkedin_profile"
    LINKEDIN_EXPERIENCE = "linkedin_experience"
    LINKEDIN_EDUCATION = "linkedin_education"
    LINKEDIN_SKILL = "linkedin_skill"
    LINKEDIN_CERTIFICATION = "linkedin_certification"
    LINKEDIN_LANGUAGE = "linkedin_language"
    JD_REQUIREMENT = "jd_requirement"
    JD_SKILL = "jd_skill"
    JD_METADATA = "jd_metadata"

    @property
    def category(self) -> Optional[str]:
        """Scoring category, or None for profile-level and job-description types."""
        return _CATEGORY_BY_TYPE.get(self)


# Scoring categories
EXPERIENCE = "experience"
EDUCATION = "education"
SKILL = "skill"
PROJECT = "project"
CATEGORIES = (EXPERIENCE, SKILL, EDUCATION, PROJECT)

_CATEGORY_BY_TYPE = {
    ComponentType.EXPERIENCE: EXPERIENCE,
    ComponentType.LINKEDIN_EXPERIENCE: EXPERIENCE,
    ComponentType.EDUCATION: EDUCATION,
    ComponentType.LINKEDIN_EDUCATION: EDUCATION,
    ComponentType.LINKEDIN_CERTIFICATION: EDUCATION,
    ComponentType.SKILL: SKILL,
    ComponentType.LINKEDIN_SKILL: SKILL,
    ComponentType.LINKEDIN_LANGUAGE: SKILL,
    ComponentType.PROJECT: PROJECT,
    ComponentType.GITHUB_REPOSITORY: PROJECT,
    ComponentType.YOUTUBE_VIDEO: PROJECT,
}

# Fields that feed the embedding text; editing any of them invalidates the vector
EMBEDDED_FIELDS = frozenset(
    {"type", "title", "organization", "description", "highlights", "start_date", "end_date", "data"}
)


class Component(BaseModel):
    """A reusable CV building block owned by one user."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    owner_id: str = Field(..., description="Owning user")
    type: str = Field(..., description="ComponentType value")
    title: str = Field(default="")
    organization: Optional[str] = None
    description: Optional[str] = None
    highlights: list[str] = Field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    data: dict[str, Any] = Field(
        default_factory=dict, description="Provider-specific raw fields"
    )
    embedding: Optional[list[float]] = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def component_type(self) -> ComponentType:
        try:
            return ComponentType(self.type)
        except ValueError:
            raise ValidationError(
                f"Unknown component type: {self.type!r}", field="type"
            ) from None

    @property
    def category(self) -> Optional[str]:
        """Scoring category; unknown types belong to none."""
        try:
            return ComponentType(self.type).category
        except ValueError:
            return None

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def edit(self, **changes: Any) -> "Component":
        """
        Return an edited copy.

        A change to any embedded field drops the stored embedding, since the
        vector is only valid for the text it was derived from.
        """
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValidationError(f"Unknown component fields: {sorted(unknown)}")

        update = dict(changes)
        text_changed = any(
            name in EMBEDDED_FIELDS and value != getattr(self, name)
            for name, value in changes.items()
        )
        if text_changed and "embedding" not in changes:
            update["embedding"] = None
        update["updated_at"] = _utcnow()
        return self.model_copy(update=update)

    def to_document(self) -> dict[str, Any]:
        """Convert to a MongoDB document."""
        doc = self.model_dump(exclude={"id"})
        doc["_id"] = self.id
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Component":
        """Build from a MongoDB document."""
        doc = dict(doc)
        if "_id" in doc:
            doc["id"] = str(doc.pop("_id"))
        doc.pop("similarity", None)
        return cls.model_validate(doc)


class ScoredComponent(BaseModel):
    """Retrieval candidate; similarity is None when it came from the fallback path."""

    component: Component
    similarity: Optional[float] = None


# -----------------------------------------------------------------------------
# Job description
# -----------------------------------------------------------------------------


class JobSkill(BaseModel):
    """Skill extracted from a job description."""

    name: str
    required: Optional[bool] = Field(
        default=None, description="None means unknown, treated as likely required"
    )
    level: Optional[str] = None
    embedding: Optional[list[float]] = None

    @property
    def label(self) -> str:
        return f"{self.name} (Required)" if self.required else self.name


class GroupedSkill(BaseModel):
    category: str
    summary: str = ""
    technologies: list[str] = Field(default_factory=list)


class JobDescriptionMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "Untitled Position"
    company: str = "Unknown Company"
    location: Optional[str] = None
    raw_text: str = ""
    requirements: list[str] = Field(default_factory=list)
    skills: list[JobSkill] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)
    qualifications: list[str] = Field(default_factory=list)
    grouped_skills: list[GroupedSkill] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Match results
# -----------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CategoryBreakdown(_CamelModel):
    experience_match: float = 0.0
    skills_match: float = 0.0
    education_match: float = 0.0
    projects_match: float = 0.0

    @property
    def total(self) -> float:
        return round(
            self.experience_match + self.skills_match + self.education_match + self.projects_match,
            1,
        )

    def for_category(self, category: str) -> float:
        return {
            EXPERIENCE: self.experience_match,
            SKILL: self.skills_match,
            EDUCATION: self.education_match,
            PROJECT: self.projects_match,
        }[category]


class MatchedComponent(_CamelModel):
    """Weak reference to a scored component."""

    component_id: str
    type: str
    title: str
    similarity: Optional[float] = None


class MatchMetadata(_CamelModel):
    calculation_time_ms: float = 0.0
    cached: bool = False
    timestamp: datetime = Field(default_factory=_utcnow)


class MatchResult(_CamelModel):
    score: float = Field(..., ge=0, le=100)
    breakdown: CategoryBreakdown
    missing_skills: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    top_matched_components: list[MatchedComponent] = Field(default_factory=list)
    metadata: MatchMetadata = Field(default_factory=MatchMetadata)

    def payload(self) -> dict[str, Any]:
        """Result content without timing metadata."""
        return self.model_dump(exclude={"metadata"})


# -----------------------------------------------------------------------------
# Profile and LLM-selected CV content
# -----------------------------------------------------------------------------


class Profile(BaseModel):
    """Owner profile; every field may be missing."""

    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None
    profession: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city_state_zip: Optional[str] = None
    languages: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)


class _LLMModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class ExperienceEntry(_LLMModel):
    id: Optional[str] = None
    title: Optional[str] = None
    organization: Optional[str] = None
    location: Optional[str] = None
    remote: bool = False
    start: Optional[str] = None
    end: Optional[str] = None
    bullets: list[str] = Field(default_factory=list)


class EducationEntry(_LLMModel):
    id: Optional[str] = None
    school: Optional[str] = None
    degree: Optional[str] = None
    concentration: Optional[str] = None
    location: Optional[str] = None
    graduation_date: Optional[str] = None
    gpa: Optional[str] = None
    coursework: list[str] = Field(default_factory=list)
    awards: list[str] = Field(default_factory=list)


class ProjectEntry(_LLMModel):
    id: Optional[str] = None
    title: Optional[str] = None
    organization: Optional[str] = None
    location: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    bullets: list[str] = Field(default_factory=list)


class LanguageEntry(_LLMModel):
    name: str
    level: Optional[str] = None


class SkillsSection(_LLMModel):
    technical: list[str] = Field(default_factory=list)
    languages: list[LanguageEntry] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)


class SelectedCV(_LLMModel):
    """Components chosen and rewritten by the LLM for one job description."""

    experiences: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    skills: SkillsSection = Field(default_factory=SkillsSection)
    projects: list[ProjectEntry] = Field(default_factory=list)

    # Filled in when selecting for a CV variant
    professional_summary: str = ""
    reasoning: str = ""
    strength_areas: list[str] = Field(default_factory=list)
    weakness_areas: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.experiences
            or self.education
            or self.projects
            or self.skills.technical
            or self.skills.languages
            or self.skills.interests
        )


class RenderProfile(BaseModel):
    name: str
    email: str
    phone: str
    address: str
    city_state_zip: str


class CVContent(BaseModel):
    """Structured CV handed to the document renderer."""

    profile: RenderProfile
    margins: dict[str, str]
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    skills: SkillsSection = Field(default_factory=SkillsSection)
    projects: list[ProjectEntry] = Field(default_factory=list)
    professional_summary: str = ""


# -----------------------------------------------------------------------------
# CV variants
# -----------------------------------------------------------------------------


class FocusArea(str, Enum):
    TECHNICAL = "technical"
    LEADERSHIP = "leadership"
    IMPACT = "impact"
    INNOVATION = "innovation"
    BALANCED = "balanced"


class VariantComponents(BaseModel):
    experience: list[Component] = Field(default_factory=list)
    education: list[Component] = Field(default_factory=list)
    skills: list[Component] = Field(default_factory=list)
    projects: list[Component] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.experience) + len(self.education) + len(self.skills) + len(self.projects)


class CVVariant(BaseModel):
    id: str
    title: str
    description: str = ""
    focus_area: FocusArea
    score: float = Field(..., ge=0, le=100)
    selected_components: VariantComponents = Field(default_factory=VariantComponents)
    professional_summary: str = ""
    strength_areas: list[str] = Field(default_factory=list)
    weakness_areas: list[str] = Field(default_factory=list)
    reasoning: str = ""


class VariantComparison(BaseModel):
    rank: int
    variant: CVVariant
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class VariantRecommendation(BaseModel):
    recommended: CVVariant
    comparison: list[VariantComparison]


# -----------------------------------------------------------------------------
# Embedding backfill
# -----------------------------------------------------------------------------


class EmbeddingFailure(BaseModel):
    component_id: str
    error: str


class BatchEmbeddingResult(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    errors: list[EmbeddingFailure] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        return self.failed > 0

    def raise_for_failures(self) -> None:
        """Raise PartialBatchFailure when any item failed."""
        if self.partial:
            raise PartialBatchFailure(self)


class EmbeddingStats(BaseModel):
    total: int = 0
    with_embedding: int = 0
    without_embedding: int = 0
    percentage: int = 0
