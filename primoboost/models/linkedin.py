"""
LinkedIn profile optimization models for PrimoBoost
"""

from enum import Enum

from pydantic import BaseModel, Field


class OptimizationTone(str, Enum):
    PROFESSIONAL = "professional"
    CONVERSATIONAL = "conversational"
    AMBITIOUS = "ambitious"


class SeniorityLevel(str, Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    EXECUTIVE = "executive"


class ProfileOptimizationForm(BaseModel):
    """Current profile sections and targeting preferences."""

    headline: str = ""
    about: str = ""
    experience: str = ""
    skills: str = ""
    achievements: str = ""
    target_role: str
    industry: str
    tone: OptimizationTone = OptimizationTone.PROFESSIONAL
    seniority_level: SeniorityLevel = SeniorityLevel.MID


class TextSuggestion(BaseModel):
    original: str
    optimized: str
    explanation: str
    character_count: int | None = None


class ListSuggestion(BaseModel):
    original: str
    optimized: list[str] = Field(default_factory=list)
    explanation: str


class OptimizedProfile(BaseModel):
    headline: TextSuggestion
    about: TextSuggestion
    experience: TextSuggestion
    skills: ListSuggestion
    achievements: ListSuggestion
    overall_score: int = 75
    key_improvements: list[str] = Field(default_factory=list)
