"""
Component library loader.
Loads a professional profile from YAML and splits it into reusable components.

Expected layout:

    personal: {name, profession, email, phone, address, city_state_zip, interests}
    experience: [{company, title, start_date, end_date, description, achievements, technologies}]
    education: [{institution, degree, field, start_date, graduation_date, description, achievements}]
    certifications: [{name, issuer, date}]
    skills: {category: [skill, ...]}
    projects: [{name, organization, description, highlights, start_date, end_date}]
    languages: {language: level}
    interests: [interest, ...]
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .errors import NotFoundError, ValidationError, require_owner_id
from .models import Component, ComponentType, Profile


@dataclass
class ComponentLibrary:
    """Everything imported for one owner."""

    profile: Profile = field(default_factory=Profile)
    components: list[Component] = field(default_factory=list)

    def count_by_type(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for component in self.components:
            counts[component.type] = counts.get(component.type, 0) + 1
        return counts


def _str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_str(v) for v in value if _str(v)]


def parse_library(owner_id: str, data: dict[str, Any]) -> ComponentLibrary:
    """Build components from already-parsed profile data."""
    owner_id = require_owner_id(owner_id)
    if not isinstance(data, dict):
        raise ValidationError("Profile document must be a mapping")

    personal = data.get("personal") or {}
    profile = Profile(
        full_name=_str(personal.get("name")) or None,
        profession=_str(personal.get("profession") or data.get("profession")) or None,
        email=_str(personal.get("email")) or None,
        phone=_str(personal.get("phone")) or None,
        address=_str(personal.get("address")) or None,
        city_state_zip=_str(personal.get("city_state_zip") or personal.get("location")) or None,
        languages=[
            f"{_str(name)} ({_str(level)})" if _str(level) else _str(name)
            for name, level in (data.get("languages") or {}).items()
        ],
        interests=_list(personal.get("interests") or data.get("interests")),
    )

    components: list[Component] = []

    def add(type_: ComponentType, **fields: Any) -> None:
        components.append(Component(owner_id=owner_id, type=type_.value, **fields))

    for exp in data.get("experience") or []:
        highlights = _list(exp.get("achievements"))
        technologies = _list(exp.get("technologies"))
        if technologies:
            highlights.append(f"Technologies: {', '.join(technologies)}")
        add(
            ComponentType.EXPERIENCE,
            title=_str(exp.get("title")),
            organization=_str(exp.get("company")) or None,
            description=_str(exp.get("description")) or None,
            highlights=highlights,
            start_date=_str(exp.get("start_date")) or None,
            end_date=_str(exp.get("end_date")) or None,
        )

    for edu in data.get("education") or []:
        degree = _str(edu.get("degree"))
        study = _str(edu.get("field"))
        add(
            ComponentType.EDUCATION,
            title=f"{degree} in {study}" if degree and study else degree or study,
            organization=_str(edu.get("institution")) or None,
            description=_str(edu.get("description")) or None,
            highlights=_list(edu.get("achievements")),
            start_date=_str(edu.get("start_date")) or None,
            end_date=_str(edu.get("graduation_date")) or None,
        )

    for cert in data.get("certifications") or []:
        add(
            ComponentType.LINKEDIN_CERTIFICATION,
            title=_str(cert.get("name")),
            organization=_str(cert.get("issuer")) or None,
            start_date=_str(cert.get("date")) or None,
            data={"name": _str(cert.get("name")), "issuer": _str(cert.get("issuer"))},
        )

    for category, skills in (data.get("skills") or {}).items():
        for skill in _list(skills):
            add(ComponentType.SKILL, title=skill, description=_str(category) or None)

    for project in data.get("projects") or []:
        add(
            ComponentType.PROJECT,
            title=_str(project.get("name") or project.get("title")),
            organization=_str(project.get("organization")) or None,
            description=_str(project.get("description")) or None,
            highlights=_list(project.get("highlights")),
            start_date=_str(project.get("start_date")) or None,
            end_date=_str(project.get("end_date")) or None,
        )

    for language, level in (data.get("languages") or {}).items():
        add(
            ComponentType.LINKEDIN_LANGUAGE,
            title=_str(language),
            data={"name": _str(language), "proficiency": _str(level)},
        )

    return ComponentLibrary(profile=profile, components=components)


def load_library(owner_id: str, path: Path) -> ComponentLibrary:
    """
    Load a component library from a YAML file.

    Raises:
        NotFoundError: the file does not exist
        ValidationError: the file is not a YAML mapping
    """
    if not path.exists():
        raise NotFoundError(f"Profile file not found: {path}", details={"path": str(path)})

    with open(path) as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML in {path}: {e}", cause=e) from e

    library = parse_library(owner_id, data)
    logger.info(
        f"Loaded {len(library.components)} components for {library.profile.full_name or owner_id}"
    )
    return library
