"""
Question API endpoints

AI generation of personalized and follow-up interview questions.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from primoboost.api.dependencies import get_database, get_question_service, get_resume_analyzer
from primoboost.core.question_service import QUESTIONS_TABLE
from primoboost.models.interview import InterviewConfig
from primoboost.models.question import InterviewQuestion
from primoboost.models.resume import UserResume

router = APIRouter()


class GenerateQuestionRequest(BaseModel):
    config: InterviewConfig
    resume_id: str
    index: int = 0


class FollowUpRequest(BaseModel):
    question_id: str
    answer: str
    resume_id: str


async def _load_resume(resume_id: str) -> UserResume:
    resume = await get_resume_analyzer().get_resume(resume_id)
    if not resume:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume


@router.post("/generate", response_model=InterviewQuestion)
async def generate_question(request: GenerateQuestionRequest) -> InterviewQuestion:
    """Generate a question personalized to the candidate's resume."""
    resume = await _load_resume(request.resume_id)
    question = await get_question_service().generate_single_question(
        request.config, resume, request.index
    )
    if not question:
        raise HTTPException(status_code=502, detail="Failed to generate question")
    return question


@router.post("/follow-up", response_model=InterviewQuestion)
async def generate_follow_up(request: FollowUpRequest) -> InterviewQuestion:
    """Generate a follow-up to an answer."""
    row = await get_database().get(QUESTIONS_TABLE, request.question_id)
    if not row:
        raise HTTPException(status_code=404, detail="Question not found")

    resume = await _load_resume(request.resume_id)
    question = await get_question_service().generate_follow_up_question(
        InterviewQuestion(**row), request.answer, resume
    )
    if not question:
        raise HTTPException(status_code=502, detail="Failed to generate follow-up question")
    return question
