import pytest
from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings
from shared.errors import (
    ConfigurationError,
    NotFoundError,
    UpstreamServiceError,
    ValidationError,
    public_error,
    require_owner_id,
)
from shared.library import load_library, parse_library
from shared.models import Component, MatchResult

from conftest import MATCH, OWNER, make_component

PROFILE_YAML = """
personal:
  name: Ada Lovelace
  email: ada@example.com
  location: London, UK
experience:
  - company: Analytical Engines Ltd
    title: Programmer
    start_date: "1842"
    achievements: [First published algorithm]
    technologies: [Difference Engine]
education:
  - institution: Home schooled
    degree: Mathematics
certifications:
  - name: Royal Society Fellow
    issuer: Royal Society
skills:
  Languages: [Python, Go]
  Tools: [Docker]
projects:
  - name: Note G
    description: Bernoulli numbers
languages:
  English: Native
interests: [Chess, Poetry]
"""


class TestErrors:
    """Error taxonomy and public payloads"""

    def test_configuration_error_is_validation_error(self):
        error = ConfigurationError("missing key", config_key="openai_api_key")
        assert isinstance(error, ValidationError)
        assert error.to_dict()["details"] == {"config_key": "openai_api_key"}

    def test_upstream_error_details(self):
        error = UpstreamServiceError("rate limited", service="OpenAI chat", status_code=429)
        assert error.to_dict()["error_code"] == "UPSTREAM_SERVICE_ERROR"
        assert error.details == {"service": "OpenAI chat", "status_code": 429}

    def test_public_error_hides_details_in_production(self):
        payload = public_error(NotFoundError("No components"), production=True)
        assert payload == {"error": "Failed to calculate match score"}

    def test_public_error_includes_diagnostics_elsewhere(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            payload = public_error(e, production=False)

        assert payload["error"] == "Failed to calculate match score"
        assert payload["detail"] == {"error_type": "RuntimeError", "message": "boom"}
        assert "RuntimeError: boom" in payload["traceback"]

    def test_require_owner_id(self):
        assert require_owner_id("u1") == "u1"
        for missing in (None, "", "   "):
            with pytest.raises(ValidationError):
                require_owner_id(missing)


class TestSettings:
    def test_weights_must_sum_to_100(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, weight_experience=50)

    def test_custom_weights(self):
        settings = Settings(
            _env_file=None,
            weight_experience=50,
            weight_skills=30,
            weight_education=10,
            weight_projects=10,
        )
        assert settings.category_weights["experience"] == 50

    def test_production(self):
        assert Settings(_env_file=None, environment="Production").is_production
        assert not Settings(_env_file=None, environment="development").is_production


class TestComponent:
    """Embedding invalidation and document mapping"""

    def test_editing_embedded_text_clears_embedding(self):
        component = make_component(title="Engineer")

        edited = component.edit(description="Now with more detail")

        assert edited.embedding is None
        assert component.embedding == MATCH

    def test_editing_other_fields_keeps_embedding(self):
        component = make_component(title="Engineer")
        assert component.edit(title="Engineer").embedding == MATCH

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            make_component().edit(colour="blue")

    def test_unknown_type(self):
        component = Component(owner_id=OWNER, type="hobby")
        assert component.category is None
        with pytest.raises(ValidationError):
            component.component_type

    def test_document_round_trip(self):
        component = make_component(highlights=["Led migration"])
        doc = component.to_document()
        doc["similarity"] = 0.9

        assert doc["_id"] == component.id
        assert Component.from_document(doc) == component

    def test_match_result_uses_camel_case(self):
        result = MatchResult.model_validate(
            {
                "score": 10,
                "breakdown": {"experienceMatch": 10},
                "missingSkills": ["Go"],
                "topMatchedComponents": [],
            }
        )
        dumped = result.model_dump(by_alias=True)

        assert result.breakdown.experience_match == 10
        assert dumped["missingSkills"] == ["Go"]
        assert "calculationTimeMs" in dumped["metadata"]


class TestComponentLibrary:
    """YAML profile import"""

    def test_parse_library(self):
        import yaml

        library = parse_library(OWNER, yaml.safe_load(PROFILE_YAML))

        assert library.profile.full_name == "Ada Lovelace"
        assert library.profile.city_state_zip == "London, UK"
        assert library.profile.languages == ["English (Native)"]
        assert library.profile.interests == ["Chess", "Poetry"]
        assert library.count_by_type() == {
            "experience": 1,
            "education": 1,
            "linkedin_certification": 1,
            "skill": 3,
            "project": 1,
            "linkedin_language": 1,
        }
        experience = library.components[0]
        assert experience.organization == "Analytical Engines Ltd"
        assert experience.highlights == ["First published algorithm", "Technologies: Difference Engine"]
        assert all(c.owner_id == OWNER and c.embedding is None for c in library.components)

    def test_load_library_from_file(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text(PROFILE_YAML)

        library = load_library(OWNER, path)

        assert len(library.components) == 8

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            load_library(OWNER, tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text("personal: [unclosed")
        with pytest.raises(ValidationError):
            load_library(OWNER, path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "profile.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValidationError):
            load_library(OWNER, path)
