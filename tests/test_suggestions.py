from matcher.skills import detect_missing_skills, extract_job_skills, is_skill_covered
from matcher.suggestions import generate_suggestions
from shared.models import CategoryBreakdown, JobSkill

from conftest import make_component

WEIGHTS = {"experience": 40, "skill": 30, "education": 20, "project": 10}


def counts(experience=0, skill=0, education=0, project=0):
    return {"experience": experience, "skill": skill, "education": education, "project": project}


class TestGenerateSuggestions:
    """Ordered advice from score gaps"""

    def test_every_empty_category_gets_a_suggestion(self):
        suggestions = generate_suggestions(CategoryBreakdown(), [], counts(), WEIGHTS)

        assert len(suggestions) == 4
        assert "work experience" in suggestions[0]
        assert "skills" in suggestions[1]
        assert "education" in suggestions[2]
        assert "projects" in suggestions[3]

    def test_saturated_categories_produce_nothing(self):
        breakdown = CategoryBreakdown(
            experience_match=40, skills_match=30, education_match=20, projects_match=10
        )
        assert generate_suggestions(breakdown, [], counts(4, 15, 2, 3), WEIGHTS) == []

    def test_order_is_empty_then_partial_then_skills(self):
        breakdown = CategoryBreakdown(experience_match=20, skills_match=30, education_match=20)
        suggestions = generate_suggestions(
            breakdown, ["Kubernetes", "Go"], counts(2, 15, 2, 0), WEIGHTS
        )

        assert suggestions == [
            "Add relevant projects to showcase your practical experience",
            "Add more relevant work experience or expand the highlights of existing roles",
            "Consider adding these skills: Kubernetes, Go",
        ]

    def test_skill_line_lists_at_most_five(self):
        suggestions = generate_suggestions(
            CategoryBreakdown(experience_match=40, skills_match=30, education_match=20, projects_match=10),
            ["A1", "B2", "C3", "D4", "E5", "F6"],
            counts(4, 15, 2, 3),
            WEIGHTS,
        )
        assert suggestions == ["Consider adding these skills: A1, B2, C3, D4, E5"]

    def test_cap_never_drops_empty_category_entries(self):
        suggestions = generate_suggestions(
            CategoryBreakdown(), ["Kubernetes"], counts(), WEIGHTS, max_suggestions=2
        )
        assert len(suggestions) == 4


class TestMissingSkills:
    """Required job skills the owner does not list"""

    def test_extracts_known_skills_from_text(self):
        names = [s.name for s in extract_job_skills("We use Node.js, C++ and PostgreSQL; Go is a plus.")]

        assert "Node.js" in names
        assert "C++" in names
        assert "PostgreSQL" in names
        assert "Go" in names
        assert "Java" not in names

    def test_common_words_are_not_skills(self):
        names = [s.name for s in extract_job_skills("Let's go and rest, the air is fine.")]
        assert names == []

    def test_covered_by_title_or_description(self):
        owned = [
            make_component(type="skill", title="Kubernetes (CKA)"),
            make_component(type="skill", title="Cloud", description="AWS and GCP"),
        ]
        assert is_skill_covered(JobSkill(name="kubernetes"), owned)
        assert is_skill_covered(JobSkill(name="AWS"), owned)
        assert not is_skill_covered(JobSkill(name="Azure"), owned)

    def test_covered_by_embedding_similarity(self):
        owned = [make_component(type="skill", title="Container orchestration", embedding=[1.0, 0.0])]
        close = JobSkill(name="K8s", embedding=[0.99, 0.05])
        far = JobSkill(name="Accounting", embedding=[0.0, 1.0])

        assert is_skill_covered(close, owned, similarity_threshold=0.85)
        assert not is_skill_covered(far, owned, similarity_threshold=0.85)

    def test_required_first_optional_excluded_deduplicated(self):
        skills = [
            JobSkill(name="Terraform"),
            JobSkill(name="Rust", required=False),
            JobSkill(name="Kafka", required=True),
            JobSkill(name="terraform", required=True),
        ]
        assert detect_missing_skills(skills, []) == ["Kafka", "terraform"]

    def test_limit(self):
        skills = [JobSkill(name=f"Skill{i}") for i in range(20)]
        assert len(detect_missing_skills(skills, [], limit=10)) == 10
