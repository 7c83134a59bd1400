from __future__ import annotations

import json
from typing import Any

from skillzen.core.scoring import get_scoring_value
from skillzen.schemas.resume import NO_DESCRIPTION, NOT_PROVIDED, NormalizedResumeRecord, ResumeAnalysis

from .extractor import (
    EDUCATION_FIELDS,
    EXPERIENCE_FIELDS,
    LIST_SOURCES,
    education_entries,
    experience_entries,
    listed_skills,
)
from .paths import dig, first_present, is_present

_SUMMARY_KEYS = ("summary", "objective", "professional_summary")


def _points(path: str) -> int:
    return int(get_scoring_value(path, 0) or 0)


def _has_contact(data: dict[str, Any], field: str) -> bool:
    return is_present(dig(data, f"contact_info.{field}")) or is_present(data.get(field))


def _contact_points(data: dict[str, Any]) -> int:
    return sum(
        _points(f"contact.{field}")
        for field in ("email", "phone", "address", "linkedin", "website")
        if _has_contact(data, field)
    )


def _summary_points(data: dict[str, Any]) -> int:
    if any(is_present(data.get(key)) for key in _SUMMARY_KEYS):
        return _points("summary")
    return 0


def _experience_points(data: dict[str, Any]) -> int:
    entries = experience_entries(data)
    if not entries:
        return 0
    score = min(len(entries) * _points("experience.per_entry"), _points("experience.entries_cap"))
    min_chars = _points("experience.detail_min_chars")
    lookups, _ = EXPERIENCE_FIELDS["description"]
    if any(len(first_present(entry, lookups, default="")) > min_chars for entry in entries):
        score += _points("experience.detailed_description")
    return score


def _education_points(data: dict[str, Any]) -> int:
    entries = education_entries(data)
    if not entries:
        return 0
    score = min(len(entries) * _points("education.per_entry"), _points("education.entries_cap"))
    degree_lookups, _ = EDUCATION_FIELDS["degree"]
    institution_lookups, _ = EDUCATION_FIELDS["institution"]
    if any(
        first_present(entry, degree_lookups) is not None and first_present(entry, institution_lookups) is not None
        for entry in entries
    ):
        score += _points("education.degree_details")
    return score


def _skill_points(data: dict[str, Any]) -> int:
    skills = listed_skills(data)
    if not skills:
        return 0
    score = min(len(skills) * _points("skills.per_skill"), _points("skills.skills_cap"))
    markers = [str(marker).lower() for marker in get_scoring_value("skills.technical_markers", [])]
    if any(marker in skill.lower() for skill in skills for marker in markers):
        score += _points("skills.technical_bonus")
    return score


def _list_points(data: dict[str, Any], name: str) -> int:
    if first_present(data, LIST_SOURCES[name]) is not None:
        return _points(name)
    return 0


def _keyword_points(data: dict[str, Any]) -> int:
    text = json.dumps(data, ensure_ascii=False, default=str).lower()
    terms = [str(term).lower() for term in get_scoring_value("keywords.terms", [])]
    found = sum(1 for term in terms if term in text)
    return min(found * _points("keywords.per_keyword"), _points("keywords.cap"))


def calculate_ats_score(data: Any) -> int:
    """Additive ATS compatibility estimate for a raw vendor payload, clamped to 0..100."""
    payload = data if isinstance(data, dict) else {}
    score = (
        _contact_points(payload)
        + _summary_points(payload)
        + _experience_points(payload)
        + _education_points(payload)
        + _skill_points(payload)
        + _list_points(payload, "achievements")
        + _list_points(payload, "certifications")
        + _keyword_points(payload)
    )
    return max(0, min(score, 100))


def score_tier(score: int) -> str:
    if score >= _points("tiers.excellent"):
        return "excellent"
    if score >= _points("tiers.good"):
        return "good"
    return "needs improvement"


def extract_strengths(record: NormalizedResumeRecord) -> list[str]:
    strengths: list[str] = []
    if record.skills:
        strengths.append(f"Strong technical skills in {', '.join(record.skills[:3])}")
    if record.experience:
        strengths.append(f"Relevant work experience with {len(record.experience)} position(s)")
    if record.education:
        strengths.append("Solid educational background")
    if record.achievements:
        strengths.append("Notable achievements and accomplishments")
    if record.certifications:
        strengths.append("Relevant certifications")
    return strengths or ["Resume shows good structure and organization"]


def extract_improvements(record: NormalizedResumeRecord) -> list[str]:
    improvements: list[str] = []
    if record.personal_info.email == NOT_PROVIDED:
        improvements.append("Add professional email address")
    if record.personal_info.phone == NOT_PROVIDED:
        improvements.append("Include phone number")
    if not record.summary:
        improvements.append("Add a professional summary or objective")
    if not record.skills:
        improvements.append("Include relevant skills section")
    if record.experience and not any(
        entry.description != NO_DESCRIPTION and len(entry.description) > 20 for entry in record.experience
    ):
        improvements.append("Add detailed descriptions to work experience")
    if not record.achievements:
        improvements.append("Include quantifiable achievements and metrics")
    return improvements or ["Resume is well-structured"]


def generate_overall_analysis(record: NormalizedResumeRecord, score: int) -> str:
    tier = score_tier(score)
    analysis = f"This resume has an ATS score of {score}/100. "
    if tier == "excellent":
        analysis += "Overall it is excellent: well-optimized for ATS systems with strong skills and relevant experience."
    elif tier == "good":
        analysis += "Overall it is good, but more detailed descriptions and additional skills would help."
    else:
        analysis += "Overall it needs improvement in structure, content and ATS optimization."
    if record.skills:
        analysis += f" It includes {len(record.skills)} relevant skills."
    if record.experience:
        analysis += f" The candidate has {len(record.experience)} work experience entries."
    return analysis


def build_analysis(record: NormalizedResumeRecord, score: int) -> ResumeAnalysis:
    return ResumeAnalysis(
        strengths=extract_strengths(record),
        improvements=extract_improvements(record),
        overall=generate_overall_analysis(record, score),
    )
