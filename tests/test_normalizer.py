import pytest

from embeddings.normalizer import to_embedding_text
from shared.errors import ValidationError
from shared.models import Component, ComponentType

from conftest import OWNER


def component(type_: ComponentType, **fields) -> Component:
    return Component(owner_id=OWNER, type=type_.value, **fields)


class TestToEmbeddingText:
    """Canonical text per component sub-type"""

    def test_every_type_has_a_formatter(self):
        for type_ in ComponentType:
            # Must not raise; empty components may legitimately produce ""
            assert isinstance(to_embedding_text(component(type_)), str)

    def test_experience_joins_non_empty_parts(self):
        text = to_embedding_text(
            component(
                ComponentType.EXPERIENCE,
                title="Backend Engineer",
                organization="Acme",
                description="Built APIs",
                highlights=["Scaled to 1M users", ""],
                start_date="2020",
            )
        )
        assert text == "Backend Engineer - at Acme - Built APIs - Scaled to 1M users - 2020 - Present"

    def test_skill_with_only_title(self):
        assert to_embedding_text(component(ComponentType.SKILL, title="Python")) == "Python"

    def test_linkedin_education_uses_data_fields(self):
        text = to_embedding_text(
            component(
                ComponentType.LINKEDIN_EDUCATION,
                data={"degree": "BSc", "field": "Computer Science", "school": "MIT"},
            )
        )
        assert text == "BSc in Computer Science from MIT"

    def test_jd_skill_marks_required(self):
        required = component(
            ComponentType.JD_SKILL, data={"skill": "Kubernetes", "level": "expert", "required": True}
        )
        optional = component(
            ComponentType.JD_SKILL, data={"skill": "Kubernetes", "required": False}
        )
        assert to_embedding_text(required) == "Kubernetes - expert (Required)"
        assert to_embedding_text(optional) == "Kubernetes"

    def test_jd_requirement_falls_back_to_description(self):
        assert to_embedding_text(
            component(ComponentType.JD_REQUIREMENT, data={"requirement": "5 years Go"})
        ) == "5 years Go"
        assert to_embedding_text(
            component(ComponentType.JD_REQUIREMENT, data={"description": "Team player"})
        ) == "Team player"
        assert to_embedding_text(component(ComponentType.JD_REQUIREMENT)) == ""

    def test_github_repository(self):
        text = to_embedding_text(
            component(
                ComponentType.GITHUB_REPOSITORY,
                data={
                    "name": "matcher",
                    "description": "Semantic matching",
                    "language": "Python",
                    "topics": ["nlp", "search"],
                },
            )
        )
        assert text == "matcher - Semantic matching - Language: Python - Topics: nlp, search"

    def test_unknown_type_raises(self):
        with pytest.raises(ValidationError):
            to_embedding_text(Component(owner_id=OWNER, type="hobby", title="Chess"))
