from types import SimpleNamespace

import pytest

from shared.database import Database
from shared.errors import ValidationError

from conftest import MATCH, OWNER, make_component


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    async def to_list(self, length=None):
        return self.docs[:length] if length else self.docs


class FakeCollection:
    """Records aggregation pipelines and returns canned documents."""

    def __init__(self, docs=()):
        self.docs = list(docs)
        self.pipelines: list[list[dict]] = []

    def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        return FakeCursor(self.docs)


def make_database(settings, docs=()) -> tuple[Database, FakeCollection]:
    collection = FakeCollection(docs)
    database = Database(settings)
    database._db = SimpleNamespace(components=collection)
    return database, collection


class TestSimilaritySearch:
    """Atlas vector search pipeline"""

    def test_pipeline_is_owner_scoped(self, settings):
        database, _ = make_database(settings)

        search = database.similarity_pipeline(OWNER, MATCH, 5)[0]["$vectorSearch"]

        assert search["filter"] == {"owner_id": OWNER}
        assert search["index"] == settings.mongodb_vector_index
        assert search["path"] == "embedding"
        assert search["queryVector"] == MATCH
        assert search["limit"] == 5
        assert search["numCandidates"] == settings.vector_num_candidates

    def test_pipeline_maps_score_to_cosine_and_applies_threshold(self, settings):
        database, _ = make_database(settings)

        _, add_fields, match = database.similarity_pipeline(OWNER, MATCH, 5)

        assert add_fields == {
            "$addFields": {
                "similarity": {"$subtract": [{"$multiply": [2, {"$meta": "vectorSearchScore"}]}, 1]}
            }
        }
        assert match == {"$match": {"similarity": {"$gt": settings.similarity_match_threshold}}}

    def test_candidate_pool_covers_top_k(self, settings):
        database, _ = make_database(settings)

        search = database.similarity_pipeline(OWNER, MATCH, settings.vector_num_candidates + 10)[0]

        assert search["$vectorSearch"]["numCandidates"] == settings.vector_num_candidates + 10

    def test_blank_owner_rejected(self, settings):
        database, _ = make_database(settings)

        with pytest.raises(ValidationError):
            database.similarity_pipeline(" ", MATCH, 5)

    @pytest.mark.asyncio
    async def test_results_carry_cosine_similarity(self, settings):
        component = make_component(title="Backend Engineer")
        doc = dict(component.to_document(), similarity=0.82)
        database, collection = make_database(settings, [doc])

        results = await database.similarity_search(OWNER, MATCH, 5)

        assert len(collection.pipelines) == 1
        assert [(r.component.id, r.similarity) for r in results] == [(component.id, 0.82)]
        assert results[0].component.title == "Backend Engineer"

    @pytest.mark.asyncio
    async def test_no_matches(self, settings):
        database, _ = make_database(settings)

        assert await database.similarity_search(OWNER, MATCH, 5) == []
