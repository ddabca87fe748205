import pytest

from matcher.scoring import CategoryScorer, top_matches
from shared.models import ScoredComponent

from conftest import make_component, make_components


def scored(components, similarity=1.0):
    return [ScoredComponent(component=c, similarity=similarity) for c in components]


@pytest.fixture
def scorer(settings):
    return CategoryScorer(settings)


class TestCategoryScorer:
    """Bounded per-category contributions"""

    def test_no_components_scores_zero(self, scorer):
        breakdown, counts = scorer.score_components([])

        assert scorer.total(breakdown) == 0
        assert breakdown.experience_match == 0
        assert breakdown.skills_match == 0
        assert breakdown.education_match == 0
        assert breakdown.projects_match == 0
        assert counts == {"experience": 0, "skill": 0, "education": 0, "project": 0}

    def test_saturated_categories_earn_full_weight(self, scorer):
        candidates = scored(
            make_components("experience", 10)
            + make_components("skill", 40)
            + make_components("education", 5)
            + make_components("project", 6)
        )
        breakdown, _ = scorer.score_components(candidates)

        assert breakdown.experience_match == 40
        assert breakdown.skills_match == 30
        assert breakdown.education_match == 20
        assert breakdown.projects_match == 10
        assert scorer.total(breakdown) == 100

    @pytest.mark.parametrize("count", [1, 2, 3, 5, 8, 20])
    def test_each_category_bounded_by_weight_and_sum_is_score(self, scorer, count):
        candidates = scored(
            make_components("experience", count) + make_components("skill", count), similarity=0.9
        )
        breakdown, _ = scorer.score_components(candidates)

        assert 0 <= breakdown.experience_match <= 40
        assert 0 <= breakdown.skills_match <= 30
        assert scorer.total(breakdown) == round(
            breakdown.experience_match
            + breakdown.skills_match
            + breakdown.education_match
            + breakdown.projects_match,
            1,
        )

    def test_more_components_never_score_lower(self, scorer):
        totals = [
            scorer.total(scorer.score_components(scored(make_components("experience", n)))[0])
            for n in range(6)
        ]
        assert totals == sorted(totals)

    def test_weak_similarity_scores_lower_than_strong(self, scorer):
        components = make_components("experience", 3)
        strong, _ = scorer.score_components(scored(components, similarity=0.8))
        weak, _ = scorer.score_components(scored(components, similarity=0.1))

        assert weak.experience_match < strong.experience_match

    def test_fallback_candidates_use_fallback_relevance(self, scorer):
        components = make_components("experience", 3)
        with_similarity, _ = scorer.score_components(scored(components, similarity=1.0))
        without, _ = scorer.score_components(scored(components, similarity=None))

        assert without.experience_match == with_similarity.experience_match

    def test_provider_types_count_toward_their_category(self, scorer):
        candidates = scored(
            [
                make_component(type="linkedin_experience"),
                make_component(type="github_repository"),
                make_component(type="jd_skill"),
            ]
        )
        _, counts = scorer.score_components(candidates)

        assert counts["experience"] == 1
        assert counts["project"] == 1
        assert counts["skill"] == 0


class TestTopMatches:
    def test_sorted_by_similarity_and_limited(self):
        components = make_components("skill", 3)
        candidates = [
            ScoredComponent(component=components[0], similarity=0.72),
            ScoredComponent(component=components[1], similarity=0.95),
            ScoredComponent(component=components[2], similarity=None),
        ]

        matches = top_matches(candidates, limit=2)

        assert [m.similarity for m in matches] == [0.95, 0.72]
        assert matches[0].component_id == components[1].id
