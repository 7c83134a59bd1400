from __future__ import annotations

import logging
from typing import Any

from skillzen.schemas.resume import NormalizedResumeRecord

from .extractor import (
    extract_education,
    extract_experience,
    extract_list,
    extract_personal_info,
    extract_skills,
    extract_summary,
)
from .scoring import build_analysis, calculate_ats_score

logger = logging.getLogger(__name__)


def normalize_resume_payload(
    data: Any,
    *,
    source: str | None = None,
    include_raw: bool = False,
) -> NormalizedResumeRecord:
    """Map one resume-vendor response body onto the normalized record.

    Missing or oddly shaped fields fall back to placeholders; a non-mapping
    top-level value is treated as an empty payload.
    """
    payload = data if isinstance(data, dict) else {}
    record = NormalizedResumeRecord(
        personal_info=extract_personal_info(payload),
        experience=extract_experience(payload),
        education=extract_education(payload),
        skills=extract_skills(payload),
        achievements=extract_list(payload, "achievements"),
        certifications=extract_list(payload, "certifications"),
        languages=extract_list(payload, "languages"),
        projects=extract_list(payload, "projects"),
        summary=extract_summary(payload),
        source=source,
        raw_data=payload if include_raw else None,
    )
    score = calculate_ats_score(payload)
    record.ats_score = score
    record.analysis = build_analysis(record, score)
    logger.info(
        "resume_normalized source=%s ats_score=%s experience=%s education=%s skills=%s",
        source,
        score,
        len(record.experience),
        len(record.education),
        len(record.skills),
    )
    return record
