"""
Resume API endpoints

- Resume analysis (skills, experience, projects)
- JD-targeted optimization
- ATS section generation
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from primoboost.api.dependencies import get_resume_analyzer, get_resume_optimizer
from primoboost.core.llm_client import LLMConfigurationError, LLMError
from primoboost.core.resume_analyzer import ResumeValidationError
from primoboost.core.resume_optimizer import InputTooLongError
from primoboost.models.resume import AdditionalSection, UserResume, UserType

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# REQUEST MODELS
# ============================================================================

class AnalyzeResumeRequest(BaseModel):
    user_id: str
    file_name: str
    text: str
    size_bytes: int | None = None


class OptimizeResumeRequest(BaseModel):
    """Resume text plus the job description to target."""
    resume: str
    job_description: str
    user_type: UserType = UserType.EXPERIENCED
    user_name: str | None = None
    user_email: str | None = None
    user_phone: str | None = None
    user_linkedin: str | None = None
    user_github: str | None = None
    target_role: str | None = None
    additional_sections: list[AdditionalSection] | None = None


class ATSSectionRequest(BaseModel):
    section_type: str
    data: Any = None
    model_override: str | None = None
    draft_text: str | None = None


def llm_http_error(e: LLMError) -> HTTPException:
    """Map an LLM failure onto an HTTP error."""
    if isinstance(e, LLMConfigurationError):
        return HTTPException(status_code=500, detail="Server configuration error")
    return HTTPException(status_code=502, detail=str(e))


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/analyze", response_model=UserResume)
async def analyze_resume(request: AnalyzeResumeRequest) -> UserResume:
    """Validate and analyze resume text extracted by the client."""
    analyzer = get_resume_analyzer()
    try:
        analyzer.validate_upload(
            request.file_name,
            request.size_bytes if request.size_bytes is not None else len(request.text.encode()),
        )
        return await analyzer.analyze(request.user_id, request.text, request.file_name)
    except ResumeValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{resume_id}", response_model=UserResume)
async def get_resume(resume_id: str) -> UserResume:
    resume = await get_resume_analyzer().get_resume(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume


@router.post("/optimize")
async def optimize_resume(request: OptimizeResumeRequest) -> dict[str, Any]:
    """Rewrite a resume against a job description."""
    try:
        optimized = await get_resume_optimizer().optimize_resume(
            request.resume,
            request.job_description,
            request.user_type,
            user_name=request.user_name,
            user_email=request.user_email,
            user_phone=request.user_phone,
            user_linkedin=request.user_linkedin,
            user_github=request.user_github,
            target_role=request.target_role,
            additional_sections=request.additional_sections,
        )
    except InputTooLongError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LLMError as e:
        raise llm_http_error(e)
    return optimized.as_dict()


@router.post("/ats-section")
async def generate_ats_section(request: ATSSectionRequest) -> dict[str, Any]:
    try:
        content = await get_resume_optimizer().generate_ats_section(
            request.section_type,
            request.data,
            model_override=request.model_override,
            draft_text=request.draft_text,
        )
    except LLMError as e:
        raise llm_http_error(e)
    return {"section_type": request.section_type, "content": content}
