"""
Canonical embedding text for every component sub-type.

Each ComponentType registers exactly one formatter. The registry is checked on
import, so adding a sub-type without a formatter fails immediately instead of
silently embedding an empty string.
"""

from typing import Any, Callable, Optional

from shared.errors import ValidationError
from shared.models import Component, ComponentType

Formatter = Callable[[Component], str]

_FORMATTERS: dict[ComponentType, Formatter] = {}


def formatter(*types: ComponentType) -> Callable[[Formatter], Formatter]:
    """Register a formatter for one or more component types."""

    def register(func: Formatter) -> Formatter:
        for component_type in types:
            if component_type in _FORMATTERS:
                raise RuntimeError(f"Duplicate formatter for {component_type.value}")
            _FORMATTERS[component_type] = func
        return func

    return register


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _join(*parts: Any, sep: str = " - ") -> str:
    """Join the non-empty parts."""
    return sep.join(p for p in (_text(part) for part in parts) if p)


def _prefixed(prefix: str, value: Any) -> str:
    value = _text(value)
    return f"{prefix} {value}" if value else ""


def _listed(values: Optional[list[Any]], label: str = "") -> str:
    items = ", ".join(_text(v) for v in values or [] if _text(v))
    if not items:
        return ""
    return f"{label}: {items}" if label else items


def _date_range(component: Component) -> str:
    if not (component.start_date or component.end_date):
        return ""
    return f"{component.start_date or 'Unknown'} - {component.end_date or 'Present'}"


# -----------------------------------------------------------------------------
# Native components
# -----------------------------------------------------------------------------


@formatter(ComponentType.EXPERIENCE)
def _experience(c: Component) -> str:
    return _join(
        c.title,
        _prefixed("at", c.organization),
        c.description,
        _listed(c.highlights),
        _date_range(c),
    )


@formatter(ComponentType.EDUCATION)
def _education(c: Component) -> str:
    return _join(
        c.title,
        _prefixed("from", c.organization),
        c.description,
        _listed(c.highlights),
        _date_range(c),
    )


@formatter(ComponentType.SKILL, ComponentType.PROJECT)
def _titled(c: Component) -> str:
    return _join(c.title, c.description, _listed(c.highlights))


# -----------------------------------------------------------------------------
# Imported provider components (fields live in component.data)
# -----------------------------------------------------------------------------


@formatter(ComponentType.GITHUB_PROFILE)
def _github_profile(c: Component) -> str:
    d = c.data
    return _join(
        d.get("name") or d.get("login") or c.title,
        _join(d.get("bio"), d.get("company"), d.get("location"), sep=" "),
    )


@formatter(ComponentType.GITHUB_REPOSITORY)
def _github_repository(c: Component) -> str:
    d = c.data
    return _join(
        d.get("name") or c.title,
        d.get("description") or c.description,
        _prefixed("Language:", d.get("language")),
        _listed(d.get("topics"), "Topics"),
    )


@formatter(ComponentType.YOUTUBE_CHANNEL, ComponentType.YOUTUBE_VIDEO)
def _youtube(c: Component) -> str:
    d = c.data
    return _join(d.get("title") or c.title, d.get("description") or c.description)


@formatter(ComponentType.LINKEDIN_PROFILE)
def _linkedin_profile(c: Component) -> str:
    d = c.data
    return _join(d.get("headline"), d.get("summary"), sep=" ")


@formatter(ComponentType.LINKEDIN_EXPERIENCE)
def _linkedin_experience(c: Component) -> str:
    d = c.data
    return _join(
        _join(d.get("title") or c.title, _prefixed("at", d.get("company")), sep=" "),
        d.get("description"),
        _listed(d.get("skills"), "Skills"),
    )


@formatter(ComponentType.LINKEDIN_EDUCATION)
def _linkedin_education(c: Component) -> str:
    d = c.data
    return _join(
        _join(
            d.get("degree"),
            _prefixed("in", d.get("field")),
            _prefixed("from", d.get("school")),
            sep=" ",
        ),
        d.get("description"),
    )


@formatter(ComponentType.LINKEDIN_SKILL)
def _linkedin_skill(c: Component) -> str:
    return _text(c.data.get("name") or c.title)


@formatter(ComponentType.LINKEDIN_CERTIFICATION)
def _linkedin_certification(c: Component) -> str:
    d = c.data
    return _join(d.get("name") or c.title, _prefixed("from", d.get("issuer")), sep=" ")


@formatter(ComponentType.LINKEDIN_LANGUAGE)
def _linkedin_language(c: Component) -> str:
    d = c.data
    return _join(d.get("name") or c.title, d.get("proficiency"))


# -----------------------------------------------------------------------------
# Job-description components
# -----------------------------------------------------------------------------


@formatter(ComponentType.JD_REQUIREMENT)
def _jd_requirement(c: Component) -> str:
    return _text(c.data.get("requirement") or c.data.get("description") or "")


@formatter(ComponentType.JD_SKILL)
def _jd_skill(c: Component) -> str:
    d = c.data
    marker = "(Required)" if d.get("required") is True else ""
    return _join(d.get("skill"), _join(d.get("level"), marker, sep=" "))


@formatter(ComponentType.JD_METADATA)
def _jd_metadata(c: Component) -> str:
    d = c.data
    return _join(d.get("title"), d.get("company"), d.get("description"), sep=" ")


_unregistered = set(ComponentType) - set(_FORMATTERS)
if _unregistered:
    raise RuntimeError(
        f"No embedding formatter for: {sorted(t.value for t in _unregistered)}"
    )


def to_embedding_text(component: Component) -> str:
    """
    Convert a component into the text that gets embedded.

    Raises:
        ValidationError: the component's type is not a known sub-type
    """
    return _FORMATTERS[component.component_type](component)
