"""
Answer feedback models for PrimoBoost
"""

from pydantic import BaseModel, Field


class AnswerFeedback(BaseModel):
    """AI feedback for a single interview answer."""

    score: int = Field(..., ge=0, le=100, description="Answer score (0-100)")
    feedback: str
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    tone_confidence_rating: str = Field(
        default="N/A",
        description="Qualitative rating of tone and confidence"
    )


class InterviewResponseRecord(BaseModel):
    """A saved answer (row of interview_responses)."""

    session_id: str
    question_id: str
    question_order: int
    user_answer_text: str
    audio_transcript: str
    ai_feedback_json: AnswerFeedback
    individual_score: int
    tone_rating: str | None = None
    confidence_rating: int | None = None
    response_duration_seconds: int = 0
    auto_submitted: bool = False
    silence_duration: float = 0.0
