from matcher.cache import MatchResultCache, make_cache_key
from shared.cache import TTLCache
from shared.models import CategoryBreakdown, JobSkill, MatchResult


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestTTLCache:
    """Lazy expiry and bounded size"""

    def test_get_within_ttl(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl=300, clock=clock)
        cache.put("k", "v")

        clock.now += 299
        assert cache.get("k") == "v"

    def test_expired_entry_is_never_served(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl=300, clock=clock)
        cache.put("k", "v")

        clock.now += 300
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl=300, clock=clock)
        cache.put("short", 1, ttl=10)
        cache.put("long", 2)

        clock.now += 11
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_oldest_entry_evicted_when_full(self):
        cache = TTLCache(default_ttl=300, max_entries=2, clock=FakeClock())
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)

        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_purge_expired(self):
        clock = FakeClock()
        cache = TTLCache(default_ttl=10, clock=clock)
        cache.put("a", 1)
        cache.put("b", 2, ttl=100)

        clock.now += 50
        assert cache.purge_expired() == 1
        assert len(cache) == 1

    def test_stats_count_hits_and_misses(self):
        cache = TTLCache(default_ttl=300, clock=FakeClock())
        cache.put("k", "v")
        cache.get("k")
        cache.get("missing")

        stats = cache.stats()
        assert (stats.size, stats.hits, stats.misses) == (1, 1, 1)
        assert stats.hit_rate == 0.5


class TestCacheKey:
    def test_normalizes_case_and_whitespace(self):
        assert make_cache_key("u1", "  React Developer \n") == make_cache_key("u1", "react developer")

    def test_owners_never_share_keys(self):
        assert make_cache_key("u1", "React") != make_cache_key("u2", "React")

    def test_is_sha256_hex(self):
        key = make_cache_key("u1", "React")
        assert len(key) == 64
        int(key, 16)

    def test_job_skills_are_part_of_the_key(self):
        skills = [JobSkill(name="Airflow", required=True), JobSkill(name="dbt")]

        assert make_cache_key("u1", "Data engineer", skills) != make_cache_key("u1", "Data engineer")
        assert make_cache_key("u1", "Data engineer", skills) == make_cache_key(
            "u1", "data engineer", [JobSkill(name="DBT"), JobSkill(name=" airflow", required=True)]
        )
        assert make_cache_key("u1", "Data engineer", skills) != make_cache_key(
            "u1", "Data engineer", [JobSkill(name="Airflow", required=False), JobSkill(name="dbt")]
        )

    def test_empty_job_skills_keep_the_plain_key(self):
        assert make_cache_key("u1", "React", []) == make_cache_key("u1", "React")


class TestMatchResultCache:
    def result(self) -> MatchResult:
        return MatchResult(
            score=42.5,
            breakdown=CategoryBreakdown(experience_match=30, skills_match=12.5),
            missing_skills=["Kubernetes"],
            suggestions=["Add your education background"],
        )

    def test_round_trips_payload(self, settings):
        cache = MatchResultCache(settings=settings)
        original = self.result()
        cache.put("key", original)

        restored = cache.get("key")
        assert restored.payload() == original.payload()

    def test_malformed_entry_is_a_miss_and_removed(self, settings):
        backing = TTLCache(default_ttl=300)
        cache = MatchResultCache(backing, settings=settings)
        backing.put("key", "{not json")

        assert cache.get("key") is None
        assert len(backing) == 0

    def test_wrong_shape_is_a_miss(self, settings):
        backing = TTLCache(default_ttl=300)
        cache = MatchResultCache(backing, settings=settings)
        backing.put("key", '{"score": 500}')

        assert cache.get("key") is None
