from __future__ import annotations

import logging
from typing import Any, Iterable

from skillzen.schemas.resume import (
    NO_DESCRIPTION,
    NO_DURATION,
    NO_FIELD,
    NO_YEAR,
    NOT_PROVIDED,
    UNKNOWN_COMPANY,
    UNKNOWN_DEGREE,
    UNKNOWN_INSTITUTION,
    UNKNOWN_POSITION,
    EducationEntry,
    ExperienceEntry,
    PersonalInfo,
)

from .paths import Candidate, as_joined_text, as_list, candidates, date_range, first_present, label_of
from .vocabulary import EDUCATION_KEYWORDS, SUMMARY_KEYWORDS, TECH_KEYWORDS, match_keywords

logger = logging.getLogger(__name__)

MAX_SKILLS = 25
MAX_SKILL_CHARS = 50

_PERSON_CONTAINERS = ("contact_info", "", "personal_info", "personalInfo", "basic_info", "candidate", "contact")
_PERSON_TRAILERS = ("personal_details", "profile")


def _person_paths(field: str, *extra: str) -> tuple[Candidate, ...]:
    leading = [f"{container}.{field}" if container else field for container in _PERSON_CONTAINERS]
    trailing = [f"{container}.{field}" for container in _PERSON_TRAILERS]
    return candidates(*leading, *extra, *trailing)


PERSONAL_INFO_FIELDS: dict[str, tuple[Candidate, ...]] = {
    "name": _person_paths("name", "full_name", "candidate_name"),
    "email": _person_paths("email", "email_address", "contact_email"),
    "phone": _person_paths("phone", "contact_info.mobile", "mobile", "phone_number", "contact_phone"),
    "address": _person_paths("address", "location", "full_address", "contact_address"),
    "linkedin": _person_paths("linkedin", "social_links.linkedin", "social_media.linkedin"),
    "website": _person_paths("website", "social_links.website", "social_media.website", "portfolio"),
}

EXPERIENCE_SOURCES = candidates(
    "experience",
    "work_experience",
    "employment_history",
    "work_history",
    "jobs",
    "positions",
    "employment",
    "career_history",
    "professional_experience",
    transform=as_list,
)

EXPERIENCE_FIELDS: dict[str, tuple[tuple[Candidate, ...], str]] = {
    "company": (
        candidates(
            "company", "organization", "employer", "company_name",
            "workplace", "employer_name", "organization_name", "work_place",
        ),
        UNKNOWN_COMPANY,
    ),
    "position": (
        candidates(
            "position", "title", "job_title", "role",
            "position_title", "job_role", "designation", "occupation",
        ),
        UNKNOWN_POSITION,
    ),
    "duration": (
        candidates("duration", "dates", "period", "time_period", "employment_period", "work_period")
        + (Candidate("", date_range("start_date", "end_date")), Candidate("", date_range("from_date", "to_date"))),
        NO_DURATION,
    ),
    "description": (
        candidates(
            "description", "responsibilities", "duties", "summary", "achievements", "key_achievements",
            "work_description", "job_description", "role_description", "responsibility", "duty",
            transform=as_joined_text,
        ),
        NO_DESCRIPTION,
    ),
}

# Narrower than EXPERIENCE_FIELDS["description"]: only prose fields feed skill matching.
EXPERIENCE_TEXT = candidates("description", "responsibilities", "duties", transform=as_joined_text)

EDUCATION_SOURCES = candidates(
    "education",
    "educational_background",
    "academic_background",
    "qualifications",
    "academic_history",
    "schools",
    "education_history",
    "academic_qualifications",
    transform=as_list,
)

EDUCATION_FIELDS: dict[str, tuple[tuple[Candidate, ...], str]] = {
    "institution": (
        candidates(
            "institution", "school", "name", "university", "college",
            "institute", "school_name", "organization", "establishment",
        ),
        UNKNOWN_INSTITUTION,
    ),
    "degree": (
        candidates(
            "degree", "qualification", "certificate", "diploma", "program",
            "course", "study", "title", "level",
        ),
        UNKNOWN_DEGREE,
    ),
    "field": (
        candidates(
            "field", "major", "specialization", "subject", "discipline",
            "focus", "area", "stream", "branch", "department",
        ),
        NO_FIELD,
    ),
    "year": (
        candidates(
            "year", "graduation_year", "date", "end_date", "completion_date",
            "dates", "graduation_date", "passing_year", "end_year", "completion_year",
        ),
        NO_YEAR,
    ),
}

EDUCATION_FIELD_TEXT = candidates("field", "major", "specialization")
EDUCATION_DEGREE_TEXT = candidates("degree", "qualification")

SUMMARY_SOURCES = candidates("summary", "objective", "professional_summary", "profile", transform=as_joined_text)

SKILL_ARRAYS = ("skills", "technical_skills", "competencies")

LIST_SOURCES: dict[str, tuple[Candidate, ...]] = {
    "achievements": candidates("achievements", "awards", "honors", transform=as_list),
    "certifications": candidates("certifications", "certificates", "licenses", transform=as_list),
    "languages": candidates("languages", "language_skills", transform=as_list),
    "projects": candidates("projects", "portfolio", transform=as_list),
}


def unique_casefold(items: Iterable[str], *, limit: int | None = None, max_chars: int | None = None) -> list[str]:
    """Trimmed, non-empty, case-insensitively unique strings in first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        text = item.strip()
        if not text:
            continue
        if max_chars is not None and len(text) >= max_chars:
            continue
        folded = text.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        result.append(text)
        if limit is not None and len(result) >= limit:
            break
    return result


def _as_payload(data: Any) -> dict[str, Any]:
    return data if isinstance(data, dict) else {}


def experience_entries(data: Any) -> list[dict[str, Any]]:
    entries = first_present(_as_payload(data), EXPERIENCE_SOURCES, default=[])
    normalized: list[dict[str, Any]] = []
    for entry in entries:
        if isinstance(entry, dict):
            normalized.append(entry)
        elif isinstance(entry, str):
            normalized.append({"description": entry})
        else:
            normalized.append({})
    return normalized


def education_entries(data: Any) -> list[dict[str, Any]]:
    entries = first_present(_as_payload(data), EDUCATION_SOURCES, default=[])
    normalized: list[dict[str, Any]] = []
    for entry in entries:
        if isinstance(entry, dict):
            normalized.append(entry)
        elif isinstance(entry, str):
            normalized.append({"institution": entry})
        else:
            normalized.append({})
    return normalized


def experience_text(entry: dict[str, Any]) -> str:
    return first_present(entry, EXPERIENCE_TEXT, default="")


def listed_skills(data: Any) -> list[str]:
    """Skills the vendor reported explicitly, before any keyword inference."""
    payload = _as_payload(data)
    labels: list[str] = []
    for key in SKILL_ARRAYS:
        values = payload.get(key)
        if isinstance(values, list):
            labels.extend(label_of(item) for item in values if item is not None)
    return unique_casefold(labels)


def summary_text(data: Any) -> str:
    return first_present(_as_payload(data), SUMMARY_SOURCES, default="")


def extract_personal_info(data: Any) -> PersonalInfo:
    payload = _as_payload(data)
    values = {
        field: first_present(payload, lookups, default=NOT_PROVIDED)
        for field, lookups in PERSONAL_INFO_FIELDS.items()
    }
    return PersonalInfo(**values)


def extract_experience(data: Any) -> list[ExperienceEntry]:
    return [
        ExperienceEntry(
            **{
                field: first_present(entry, lookups, default=placeholder)
                for field, (lookups, placeholder) in EXPERIENCE_FIELDS.items()
            }
        )
        for entry in experience_entries(data)
    ]


def extract_education(data: Any) -> list[EducationEntry]:
    return [
        EducationEntry(
            **{
                field: first_present(entry, lookups, default=placeholder)
                for field, (lookups, placeholder) in EDUCATION_FIELDS.items()
            }
        )
        for entry in education_entries(data)
    ]


def extract_skills(data: Any) -> list[str]:
    found: list[str] = list(listed_skills(data))

    for entry in experience_entries(data):
        found.extend(match_keywords(experience_text(entry), TECH_KEYWORDS))

    found.extend(match_keywords(summary_text(data), SUMMARY_KEYWORDS))

    for entry in education_entries(data):
        field_text = first_present(entry, EDUCATION_FIELD_TEXT, default="")
        degree_text = first_present(entry, EDUCATION_DEGREE_TEXT, default="")
        found.extend(match_keywords(f"{field_text}\n{degree_text}", EDUCATION_KEYWORDS))

    skills = unique_casefold(found, limit=MAX_SKILLS, max_chars=MAX_SKILL_CHARS)
    logger.debug("resume_skills_extracted count=%s", len(skills))
    return skills


def extract_list(data: Any, name: str) -> list[str]:
    values = first_present(_as_payload(data), LIST_SOURCES[name], default=[])
    return unique_casefold(label_of(item) for item in values if item is not None)


def extract_summary(data: Any) -> str:
    return summary_text(data)

