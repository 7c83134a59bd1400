from .extractor import (
    extract_education,
    extract_experience,
    extract_personal_info,
    extract_skills,
)
from .normalize import normalize_resume_payload
from .scoring import build_analysis, calculate_ats_score

__all__ = [
    "normalize_resume_payload",
    "calculate_ats_score",
    "build_analysis",
    "extract_personal_info",
    "extract_experience",
    "extract_education",
    "extract_skills",
]
