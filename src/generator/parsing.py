"""
Parsing of generative-model output.

Accepted shapes, after trimming surrounding whitespace:

    ```json <payload> ```
    ``` <payload> ```
    <payload>

Anything else is passed to the JSON parser unchanged and fails there.
"""

import json
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ParseError

M = TypeVar("M", bound=BaseModel)

_FENCE = re.compile(r"\A```(?:json)?[ \t]*\n?(?P<body>.*?)\n?[ \t]*```\Z", re.DOTALL | re.IGNORECASE)


def unwrap_code_fence(text: str) -> str:
    """Return the payload inside an optional markdown code fence."""
    text = (text or "").strip()
    match = _FENCE.match(text)
    if match:
        return match.group("body").strip()
    return text


def parse_llm_json(text: str) -> Any:
    """
    Decode model output as JSON.

    Raises:
        ParseError: empty output or invalid JSON
    """
    payload = unwrap_code_fence(text)
    if not payload:
        raise ParseError("Model returned an empty response", raw=text or "")
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParseError(f"Model returned invalid JSON: {e.msg}", raw=text, cause=e) from e


def parse_llm_model(text: str, model: Type[M]) -> M:
    """Decode model output into a pydantic model, raising ParseError on a wrong shape."""
    data = parse_llm_json(text)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(
            f"Model output does not match {model.__name__}: {e.error_count()} errors",
            raw=text,
            cause=e,
        ) from e
