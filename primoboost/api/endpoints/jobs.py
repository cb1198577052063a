"""
Job board API endpoints
"""

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from primoboost.api.dependencies import get_jobs_service
from primoboost.api.endpoints.resume import llm_http_error
from primoboost.core.jobs_service import JobNotFoundError
from primoboost.core.llm_client import LLMError
from primoboost.models.jobs import ApplicationMethod, JobApplication, JobListing, JobTags

router = APIRouter()


class ApplyRequest(BaseModel):
    user_id: str
    method: ApplicationMethod = ApplicationMethod.MANUAL
    optimized_resume_id: str | None = None


@router.get("/", response_model=list[JobListing])
async def list_jobs(
    domain: str | None = None,
    location_type: str | None = None,
    search: str | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> list[JobListing]:
    """Active listings, newest first."""
    return await get_jobs_service().list_jobs(
        domain=domain,
        location_type=location_type,
        search=search,
        limit=limit,
        offset=offset,
    )


@router.get("/{job_id}", response_model=JobListing)
async def get_job(job_id: str) -> JobListing:
    try:
        return await get_jobs_service().get_job(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")


@router.get("/{job_id}/tags", response_model=JobTags)
async def get_job_tags(job_id: str) -> JobTags:
    """Skill tags, eligible-year tags and listing age."""
    try:
        return await get_jobs_service().get_tags(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")


@router.post("/{job_id}/apply", response_model=JobApplication)
async def apply_to_job(job_id: str, request: ApplyRequest) -> JobApplication:
    try:
        return await get_jobs_service().apply(
            request.user_id, job_id, request.method, request.optimized_resume_id
        )
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")


@router.post("/{job_id}/company-description")
async def generate_company_description(job_id: str) -> dict[str, str]:
    """Generate an "About the Company" section for a listing."""
    try:
        description = await get_jobs_service().enrich_company_description(job_id)
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except LLMError as e:
        raise llm_http_error(e)
    return {"job_id": job_id, "company_description": description}
