"""
Application configuration using Pydantic Settings.
Loads from environment variables and .env file.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment ("production" hides error diagnostics from callers)
    environment: str = Field(default="development")

    # MongoDB - component and profile store
    mongodb_uri: str = Field(default="mongodb://localhost:27017")
    mongodb_database: str = Field(default="cv_builder")
    mongodb_vector_index: str = Field(
        default="component_embedding_index",
        description="Atlas vector search index on components.embedding",
    )
    vector_num_candidates: int = Field(
        default=200, description="Candidate pool scanned by $vectorSearch"
    )

    # OpenAI / LLM
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    openai_model: str = Field(default="gpt-4o")
    openai_model_mini: str = Field(default="gpt-4o-mini")
    openai_embedding_model: str = Field(default="text-embedding-3-small")
    embedding_dimensions: int = Field(default=768)
    request_timeout_seconds: float = Field(
        default=30.0, description="Timeout applied to every external call"
    )

    # Retrieval
    retrieval_limit: int = Field(default=50, description="Top-K for match scoring")
    draft_retrieval_limit: int = Field(default=30, description="Top-K for CV drafts")
    similarity_match_threshold: float = Field(
        default=0.7, description="Minimum cosine similarity a retrieved component must exceed"
    )

    # Scoring weights (points out of 100)
    weight_experience: float = Field(default=40.0)
    weight_skills: float = Field(default=30.0)
    weight_education: float = Field(default=20.0)
    weight_projects: float = Field(default=10.0)

    # Component counts at which a category's coverage saturates
    saturation_experience: int = Field(default=4)
    saturation_skills: int = Field(default=15)
    saturation_education: int = Field(default=2)
    saturation_projects: int = Field(default=3)

    strong_similarity: float = Field(
        default=0.5, description="Mean similarity treated as a full-strength match"
    )
    relevance_floor: float = Field(
        default=0.5, description="Share of a category's points earned by coverage alone"
    )
    fallback_relevance: float = Field(
        default=1.0, description="Relevance used for candidates without a similarity"
    )
    skill_similarity_threshold: float = Field(default=0.85)
    max_missing_skills: int = Field(default=10)
    max_suggestions: int = Field(default=5)

    # Result cache
    match_cache_ttl_seconds: int = Field(default=300)
    match_cache_max_entries: int = Field(default=100)
    embedding_cache_ttl_seconds: int = Field(default=24 * 60 * 60)
    embedding_cache_max_entries: int = Field(default=1000)

    # Embedding backfill
    backfill_limit: int = Field(default=100)
    backfill_batch_size: int = Field(default=5)
    backfill_batch_delay_seconds: float = Field(default=0.5)

    # Selector bounds
    selector_max_experiences: int = Field(default=5)
    selector_max_education: int = Field(default=3)
    selector_max_skills: int = Field(default=15)
    selector_max_projects: int = Field(default=3)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @model_validator(mode="after")
    def _check_weights(self) -> "Settings":
        total = sum(self.category_weights.values())
        if abs(total - 100.0) > 1e-6:
            raise ValueError(f"Category weights must sum to 100, got {total}")
        return self

    @property
    def category_weights(self) -> dict[str, float]:
        """Maximum points per scoring category."""
        return {
            "experience": self.weight_experience,
            "skill": self.weight_skills,
            "education": self.weight_education,
            "project": self.weight_projects,
        }

    @property
    def category_saturation(self) -> dict[str, int]:
        """Component count per category that earns full coverage."""
        return {
            "experience": self.saturation_experience,
            "skill": self.saturation_skills,
            "education": self.saturation_education,
            "project": self.saturation_projects,
        }

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
