# Shared module for common utilities, models, and configuration
from .config import Settings, get_settings
from .database import Database
from .errors import (
    ConfigurationError,
    MatchEngineError,
    NotFoundError,
    ParseError,
    PartialBatchFailure,
    UpstreamServiceError,
    ValidationError,
)
from .models import Component, ComponentType, FocusArea, MatchResult, Profile

__all__ = [
    "Settings",
    "get_settings",
    "Database",
    "MatchEngineError",
    "ValidationError",
    "ConfigurationError",
    "UpstreamServiceError",
    "NotFoundError",
    "ParseError",
    "PartialBatchFailure",
    "Component",
    "ComponentType",
    "FocusArea",
    "MatchResult",
    "Profile",
]
