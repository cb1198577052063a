"""
Question models for PrimoBoost
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class QuestionDifficulty(str, Enum):
    """Question difficulty levels."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @property
    def rank(self) -> int:
        return {"Easy": 1, "Medium": 2, "Hard": 3}[self.value]


class QuestionCategory(str, Enum):
    """Question bank categories."""

    TECHNICAL = "Technical"
    HR = "HR"
    BEHAVIORAL = "Behavioral"
    CODING = "Coding"
    PROJECTS = "Projects"


class InterviewType(str, Enum):
    """Whether a bank question is generic or tied to a company."""

    GENERAL = "general"
    COMPANY_SPECIFIC = "company-specific"


class InterviewQuestion(BaseModel):
    """A row of the interview question bank."""

    id: str
    question_text: str
    category: QuestionCategory = QuestionCategory.TECHNICAL
    difficulty: QuestionDifficulty = QuestionDifficulty.MEDIUM
    interview_type: InterviewType = InterviewType.GENERAL
    company_name: str | None = None
    role: str | None = None
    is_active: bool = True

    # Dynamic (AI-generated) questions
    is_dynamic: bool = False
    generated_for_user: str | None = None
    source_question_id: str | None = None
    resume_context: dict[str, Any] | None = None


class DynamicQuestionContext(BaseModel):
    """Resume context a generated question was built from."""

    resume_id: str | None = None
    user_id: str | None = None
    skill_being_tested: str = "general"
    experience_level: str = "junior"
    specific_project: str | None = None
    specific_technology: str | None = None
    previous_answers: list[str] = Field(default_factory=list)


class GeneratedQuestion(BaseModel):
    """Shape of a question returned by the LLM."""

    question_text: str
    category: str = "Technical"
    difficulty: str = "Medium"
    generation_rationale: str | None = None
    expected_topics: list[str] = Field(default_factory=list)
