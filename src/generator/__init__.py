"""
Generator - LLM-driven CV drafting.

Selects and rewrites the components that fit a job description, assembles
renderer-ready CV content with a professional summary and produces
focus-specific CV variants.
"""

from .cv_builder import CVGenerator
from .jd_extractor import JobDescriptionExtractor
from .llm import GenerativeModel, OpenAIGenerativeModel
from .parsing import parse_llm_json, unwrap_code_fence
from .selector import ComponentSelector
from .summary import ProfessionalSummaryWriter
from .variants import CVVariantGenerator, suggest_focus_areas

__all__ = [
    "CVGenerator",
    "JobDescriptionExtractor",
    "GenerativeModel",
    "OpenAIGenerativeModel",
    "parse_llm_json",
    "unwrap_code_fence",
    "ComponentSelector",
    "ProfessionalSummaryWriter",
    "CVVariantGenerator",
    "suggest_focus_areas",
]
