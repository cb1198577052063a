"""
Metadata API endpoints

Provides reference data for:
- Interview categories and session types
- Durations
- Question difficulty levels
- LinkedIn seniority levels and tones
"""

from fastapi import APIRouter
from pydantic import BaseModel

from primoboost.models.interview import DURATION_OPTIONS, InterviewCategory, SessionType
from primoboost.models.linkedin import OptimizationTone, SeniorityLevel
from primoboost.models.question import QuestionDifficulty

router = APIRouter()


class OptionInfo(BaseModel):
    """A selectable option."""
    id: str
    name: str
    description: str = ""


@router.get("/interview-categories")
async def get_interview_categories() -> list[OptionInfo]:
    descriptions = {
        "technical": "Technical, coding and project questions",
        "hr": "HR and behavioral questions",
        "mixed": "A mix of technical, HR and behavioral questions",
    }
    return [
        OptionInfo(
            id=category.value,
            name="HR" if category == InterviewCategory.HR else category.value.title(),
            description=descriptions.get(category.value, ""),
        )
        for category in InterviewCategory
    ]


@router.get("/session-types")
async def get_session_types() -> list[OptionInfo]:
    descriptions = {
        "general": "General interview practice",
        "company-based": "Questions for a specific company",
    }
    return [
        OptionInfo(
            id=session_type.value,
            name=session_type.value.replace("-", " ").title(),
            description=descriptions.get(session_type.value, ""),
        )
        for session_type in SessionType
    ]


@router.get("/durations")
async def get_durations() -> list[dict[str, int | str]]:
    """Interview length options in minutes."""
    return [{"minutes": minutes, "name": f"{minutes} minutes"} for minutes in DURATION_OPTIONS]


@router.get("/difficulty-levels")
async def get_difficulty_levels() -> list[OptionInfo]:
    return [
        OptionInfo(id=difficulty.value, name=difficulty.value)
        for difficulty in QuestionDifficulty
    ]


@router.get("/seniority-levels")
async def get_seniority_levels() -> list[OptionInfo]:
    return [
        OptionInfo(id=level.value, name=level.value.title())
        for level in SeniorityLevel
    ]


@router.get("/tones")
async def get_tones() -> list[OptionInfo]:
    """LinkedIn optimization tone options."""
    descriptions = {
        "professional": "Polished and formal",
        "conversational": "Friendly and approachable",
        "ambitious": "Bold and achievement-focused",
    }
    return [
        OptionInfo(
            id=tone.value,
            name=tone.value.title(),
            description=descriptions.get(tone.value, ""),
        )
        for tone in OptimizationTone
    ]
