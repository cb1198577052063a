"""
Jobs Service for PrimoBoost

Job board listings, display tags, applications and AI company blurbs.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any

from primoboost.core.resume_optimizer import ResumeOptimizer
from primoboost.models.jobs import ApplicationMethod, JobApplication, JobListing, JobTags
from primoboost.models.resume import CompanyDescriptionParams
from primoboost.storage.database import Database

logger = logging.getLogger(__name__)

JOBS_TABLE = "job_listings"
APPLICATIONS_TABLE = "job_applications"

COMMON_SKILLS = [
    "React", "Node.js", "Python", "Java", "TypeScript",
    "JavaScript", "SQL", "AWS", "Docker", "Kubernetes",
]
MAX_SKILL_TAGS = 8
MAX_YEAR_TAGS = 3


class JobNotFoundError(Exception):
    """Raised when a job ID is unknown."""
    pass


def eligible_year_tags(raw: str | list[str] | None) -> list[str]:
    """Split an eligible-years value into at most three unique tags."""
    if not raw:
        return []

    if isinstance(raw, list):
        tokens = raw
    elif any(sep in raw for sep in (",", "|", "/")):
        tokens = re.split(r"[,|/]", raw)
    else:
        tokens = raw.split()

    tags: list[str] = []
    for token in tokens:
        value = str(token).strip()
        if value and value not in tags:
            tags.append(value)
    return tags[:MAX_YEAR_TAGS]


def skill_tags(job: JobListing) -> list[str]:
    """Domain first, then the common skills mentioned in the short description."""
    tags: list[str] = []
    if job.domain:
        tags.append(job.domain)

    description = (job.short_description or "").lower()
    for skill in COMMON_SKILLS:
        if skill.lower() in description and len(tags) < MAX_SKILL_TAGS:
            tags.append(skill.upper())
    return tags[:MAX_SKILL_TAGS]


def posted_days_ago(posted_date: datetime, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    if posted_date.tzinfo is None:
        posted_date = posted_date.replace(tzinfo=timezone.utc)
    return int((now - posted_date).total_seconds() // 86400)


class JobsService:
    """Job listing queries and applications."""

    def __init__(self, database: Database, resume_optimizer: ResumeOptimizer | None = None):
        self.database = database
        self.resume_optimizer = resume_optimizer

    async def list_jobs(
        self,
        domain: str | None = None,
        location_type: str | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[JobListing]:
        """Active listings, newest first."""
        filters: dict[str, Any] = {"is_active": True}
        if domain:
            filters["domain"] = domain
        if location_type:
            filters["location_type"] = location_type

        if not search:
            rows = await self.database.select(
                JOBS_TABLE, filters=filters, order_by="posted_date", desc=True,
                limit=limit, offset=offset,
            )
            return [JobListing(**row) for row in rows]

        # Search is applied after the query, so page over the matches here
        rows = await self.database.select(JOBS_TABLE, filters=filters, order_by="posted_date", desc=True)
        needle = search.lower()
        matches = [
            row for row in rows
            if needle in (row.get("role_title") or "").lower()
            or needle in (row.get("company_name") or "").lower()
        ]
        return [JobListing(**row) for row in matches[offset:offset + limit]]

    async def get_job(self, job_id: str) -> JobListing:
        row = await self.database.get(JOBS_TABLE, job_id)
        if not row:
            raise JobNotFoundError(f"Job not found: {job_id}")
        return JobListing(**row)

    async def get_tags(self, job_id: str, now: datetime | None = None) -> JobTags:
        job = await self.get_job(job_id)
        return JobTags(
            job_id=job.id,
            skill_tags=skill_tags(job),
            eligible_year_tags=eligible_year_tags(job.eligible_years),
            posted_days_ago=posted_days_ago(job.posted_date, now),
        )

    async def apply(
        self,
        user_id: str,
        job_id: str,
        method: ApplicationMethod,
        optimized_resume_id: str | None = None,
    ) -> JobApplication:
        """Record an application for a listing."""
        job = await self.get_job(job_id)
        row = await self.database.insert(APPLICATIONS_TABLE, {
            "user_id": user_id,
            "job_id": job.id,
            "application_method": method.value,
            "optimized_resume_id": optimized_resume_id,
            "status": "submitted",
        })
        logger.info(f"User {user_id} applied to job {job_id} ({method.value})")
        return JobApplication(**row)

    async def enrich_company_description(self, job_id: str) -> str:
        """Generate an "About the Company" section for a listing."""
        if not self.resume_optimizer:
            raise RuntimeError("Company descriptions need an LLM client")

        job = await self.get_job(job_id)
        params = CompanyDescriptionParams(
            company_name=job.company_name,
            role_title=job.role_title,
            job_description=job.full_description or job.short_description or "",
            qualification=job.qualification or "",
            domain=job.domain or "",
            experience_required=job.experience_required or "",
        )
        return await self.resume_optimizer.generate_company_description(params)
