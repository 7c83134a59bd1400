from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NOT_PROVIDED = "Not provided"
UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_POSITION = "Unknown Position"
NO_DURATION = "Duration not specified"
NO_DESCRIPTION = "No description provided"
UNKNOWN_INSTITUTION = "Unknown Institution"
UNKNOWN_DEGREE = "Unknown Degree"
NO_FIELD = "Field not specified"
NO_YEAR = "Year not specified"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PersonalInfo(_CamelModel):
    name: str = NOT_PROVIDED
    email: str = NOT_PROVIDED
    phone: str = NOT_PROVIDED
    address: str = NOT_PROVIDED
    linkedin: str = NOT_PROVIDED
    website: str = NOT_PROVIDED


class ExperienceEntry(_CamelModel):
    company: str = UNKNOWN_COMPANY
    position: str = UNKNOWN_POSITION
    duration: str = NO_DURATION
    description: str = NO_DESCRIPTION


class EducationEntry(_CamelModel):
    institution: str = UNKNOWN_INSTITUTION
    degree: str = UNKNOWN_DEGREE
    field: str = NO_FIELD
    year: str = NO_YEAR


class ResumeAnalysis(_CamelModel):
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    overall: str = ""


class NormalizedResumeRecord(_CamelModel):
    ats_score: int = Field(default=0, ge=0, le=100)
    analysis: ResumeAnalysis = Field(default_factory=ResumeAnalysis)
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list, max_length=25)
    achievements: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
    summary: str = ""
    source: str | None = None
    raw_data: dict[str, Any] | None = None


class ResumeNormalizeRequest(BaseModel):
    payload: dict[str, Any] = Field(default_factory=dict)
    source: str | None = Field(default=None, max_length=50)
    include_raw: bool = False
