"""
Resume models for PrimoBoost
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ExperienceLevel(str, Enum):
    """Seniority derived from years of experience."""

    ENTRY = "entry"
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    LEAD = "lead"
    EXECUTIVE = "executive"

    @property
    def rank(self) -> int:
        return list(ExperienceLevel).index(self) + 1


class UserType(str, Enum):
    """Who the optimized resume is written for."""

    FRESHER = "fresher"
    STUDENT = "student"
    EXPERIENCED = "experienced"


class ResumeProject(BaseModel):
    name: str
    description: str | None = None


class ParsedResume(BaseModel):
    projects: list[ResumeProject] = Field(default_factory=list)


class UserResume(BaseModel):
    """An analyzed resume record."""

    id: str
    user_id: str
    file_name: str | None = None
    skills_detected: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel | None = None
    years_of_experience: int | None = None
    domains: list[str] = Field(default_factory=list)
    parsed_data: ParsedResume = Field(default_factory=ParsedResume)
    analysis_status: str = "pending"


class AdditionalSection(BaseModel):
    """Free-form resume section supplied by the user."""

    title: str
    bullets: list[str] = Field(default_factory=list)


class CompanyDescriptionParams(BaseModel):
    """Inputs for an "About the Company" blurb."""

    company_name: str
    role_title: str
    job_description: str = ""
    qualification: str = ""
    domain: str = ""
    experience_required: str = ""


class OptimizedResume(BaseModel):
    """JSON resume returned by the optimizer. Unknown keys are kept."""

    model_config = {"extra": "allow"}

    name: str | None = None
    origin: str = "jd_optimized"

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
