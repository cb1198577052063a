"""
LinkedIn API endpoints
"""

from fastapi import APIRouter, HTTPException

from primoboost.api.dependencies import get_linkedin_optimizer
from primoboost.api.endpoints.resume import llm_http_error
from primoboost.core.linkedin_optimizer import LinkedInOptimizationError
from primoboost.core.llm_client import LLMError
from primoboost.models.linkedin import OptimizedProfile, ProfileOptimizationForm

router = APIRouter()


@router.post("/optimize", response_model=OptimizedProfile)
async def optimize_profile(form: ProfileOptimizationForm) -> OptimizedProfile:
    """Suggest an optimized headline, about, experience, skills and achievements."""
    try:
        return await get_linkedin_optimizer().optimize_profile(form)
    except LinkedInOptimizationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except LLMError as e:
        raise llm_http_error(e)
