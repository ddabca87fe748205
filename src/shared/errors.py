"""
Error taxonomy for the matching engine.
"""

import traceback
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .models import BatchEmbeddingResult


class MatchEngineError(Exception):
    """Base exception for the matching engine."""

    error_code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.details = details or {}
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/response."""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(MatchEngineError):
    """Malformed or missing required input (e.g. absent owner id)."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if field:
            self.details["field"] = field


class ConfigurationError(ValidationError):
    """Required configuration (usually a provider credential) is missing."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key


class UpstreamServiceError(MatchEngineError):
    """Embedding or generative-model provider failed (auth, rate limit, network, timeout)."""

    error_code = "UPSTREAM_SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.service = service
        if service:
            self.details["service"] = service
        if status_code:
            self.details["status_code"] = status_code


class NotFoundError(MatchEngineError):
    """Nothing exists for the owner where something was required."""

    error_code = "NOT_FOUND"


class ParseError(MatchEngineError):
    """Generative-model output is not valid JSON of the expected shape."""

    error_code = "PARSE_ERROR"

    def __init__(self, message: str, raw: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.raw = raw
        if raw:
            self.details["raw_excerpt"] = raw[:200]


class PartialBatchFailure(MatchEngineError):
    """A batch finished but some items failed; the full result is attached."""

    error_code = "PARTIAL_BATCH_FAILURE"

    def __init__(self, result: "BatchEmbeddingResult"):
        super().__init__(
            f"{result.failed} of {result.total} items failed",
            details={"errors": [e.model_dump() for e in result.errors]},
        )
        self.result = result


def require_owner_id(owner_id: Optional[str]) -> str:
    """Every operation is scoped to one owner; reject a missing id early."""
    if not owner_id or not str(owner_id).strip():
        raise ValidationError("owner_id is required", field="owner_id")
    return str(owner_id)


def public_error(
    exc: BaseException,
    production: bool,
    message: str = "Failed to calculate match score",
) -> dict[str, Any]:
    """
    Build the caller-facing error payload.

    Production callers only get the generic message. Elsewhere the error type,
    details and traceback are included for diagnosis.
    """
    payload: dict[str, Any] = {"error": message}
    if production:
        return payload

    if isinstance(exc, MatchEngineError):
        payload["detail"] = exc.to_dict()
    else:
        payload["detail"] = {"error_type": type(exc).__name__, "message": str(exc)}
    payload["traceback"] = "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__)
    )
    return payload
