"""
Job board models for PrimoBoost
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ApplicationMethod(str, Enum):
    MANUAL = "manual"
    AUTO = "auto"


class JobListing(BaseModel):
    """A job board listing."""

    id: str
    company_name: str
    company_logo_url: str | None = None
    role_title: str
    domain: str | None = None
    location_type: str | None = None  # Remote / Onsite / Hybrid
    location_city: str | None = None
    experience_required: str | None = None
    eligible_years: str | list[str] | None = None
    short_description: str | None = None
    full_description: str | None = None
    qualification: str | None = None
    application_link: str | None = None
    posted_date: datetime
    is_active: bool = True


class JobTags(BaseModel):
    """Derived display data for a listing."""

    job_id: str
    skill_tags: list[str] = Field(default_factory=list)
    eligible_year_tags: list[str] = Field(default_factory=list)
    posted_days_ago: int


class JobApplication(BaseModel):
    id: str
    user_id: str
    job_id: str
    application_method: ApplicationMethod
    optimized_resume_id: str | None = None
    status: str = "submitted"
