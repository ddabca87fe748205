"""
Matcher - semantic match scoring of CV components against job descriptions.

Retrieves the owner's most relevant components by embedding similarity,
scores them per category, detects missing skills and suggests improvements.
"""

from .cache import MatchResultCache, make_cache_key
from .engine import MatchEngine
from .retriever import RelevanceRetriever
from .scoring import CategoryScorer
from .skills import detect_missing_skills, extract_job_skills
from .suggestions import generate_suggestions

__all__ = [
    "MatchEngine",
    "MatchResultCache",
    "make_cache_key",
    "RelevanceRetriever",
    "CategoryScorer",
    "detect_missing_skills",
    "extract_job_skills",
    "generate_suggestions",
]
