"""
Interview session and stage models for PrimoBoost
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from primoboost.models.question import InterviewQuestion


class SessionType(str, Enum):
    """Interview session types."""

    GENERAL = "general"
    COMPANY_BASED = "company-based"


class InterviewCategory(str, Enum):
    """Interview focus."""

    TECHNICAL = "technical"
    HR = "hr"
    MIXED = "mixed"


class InterviewStage(str, Enum):
    """Session runner stages."""

    LOADING = "loading"  # Session created, questions loading
    READY = "ready"  # Questions loaded, waiting to start
    QUESTION = "question"  # Question being read out
    LISTENING = "listening"  # Capturing the candidate's answer
    PROCESSING = "processing"  # Answer being analyzed
    FEEDBACK = "feedback"  # Feedback saved for the answer
    COMPLETED = "completed"  # Interview finished


class SessionStatus(str, Enum):
    """Stored status of a mock_interview_sessions row."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"  # ended by the user before the last question
    CANCELLED = "cancelled"  # no questions could be loaded


class ViolationType(str, Enum):
    """Anti-cheating monitor events."""

    TAB_SWITCH = "tab_switch"
    WINDOW_BLUR = "window_blur"
    FULLSCREEN_EXIT = "fullscreen_exit"


DURATION_OPTIONS = [5, 10, 15, 20, 30, 45, 60]


class InterviewConfig(BaseModel):
    """User's interview configuration."""

    session_type: SessionType = SessionType.GENERAL
    interview_category: InterviewCategory
    company_name: str | None = None
    target_role: str | None = None
    domain: str | None = Field(
        default=None,
        description="Technical domain (technical interviews only)"
    )
    duration_minutes: int = Field(default=15, ge=5, le=60)

    @model_validator(mode="after")
    def _check_company(self) -> "InterviewConfig":
        if self.session_type == SessionType.COMPANY_BASED and not self.company_name:
            raise ValueError("Please select a company")
        if self.session_type == SessionType.GENERAL:
            self.company_name = None
        if self.interview_category != InterviewCategory.TECHNICAL:
            self.domain = None
        return self


class Violation(BaseModel):
    """A single anti-cheating violation."""

    type: ViolationType
    duration_seconds: float = 0.0
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SecurityStats(BaseModel):
    """Violation counters recorded on the session."""

    tab_switch_count: int = 0
    fullscreen_exits: int = 0
    total_violation_time: float = 0.0
    violations_log: list[Violation] = Field(default_factory=list)

    def record(self, violation: Violation) -> None:
        self.violations_log.append(violation)
        if violation.type == ViolationType.FULLSCREEN_EXIT:
            self.fullscreen_exits += 1
        else:
            self.tab_switch_count += 1
        self.total_violation_time += violation.duration_seconds


class AnswerDraft(BaseModel):
    """The answer currently being captured."""

    transcript: str = ""
    started_at: float | None = None  # clock seconds when listening began


class InterviewSession(BaseModel):
    """Live interview session state."""

    # Identification
    session_id: str
    user_id: str

    # Setup
    config: InterviewConfig
    resume_id: str | None = None

    # State
    status: SessionStatus = SessionStatus.IN_PROGRESS
    stage: InterviewStage = InterviewStage.LOADING
    paused: bool = False
    skipping: bool = False

    # Questions
    questions: list[InterviewQuestion] = Field(default_factory=list)
    current_question_index: int = 0
    skipped_questions: list[str] = Field(default_factory=list)
    answer: AnswerDraft = Field(default_factory=AnswerDraft)

    # Timing
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None

    # Security
    security: SecurityStats = Field(default_factory=SecurityStats)

    # Result
    overall_score: int | None = None
    questions_answered: int = 0
    actual_duration_seconds: int | None = None
    status_message: str = "Initializing interview..."

    @property
    def skip_count(self) -> int:
        return len(self.skipped_questions)

    @property
    def total_seconds(self) -> int:
        return self.config.duration_minutes * 60

    def get_current_question(self) -> InterviewQuestion | None:
        """Get the current active question."""
        if self.questions and self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def has_next_question(self) -> bool:
        return self.current_question_index + 1 < len(self.questions)

    def question_payload(self, time_remaining: float) -> dict[str, Any]:
        """Question data sent to the browser for speech synthesis."""
        question = self.get_current_question()
        return {
            "question_id": question.id if question else None,
            "question_text": question.question_text if question else None,
            "category": question.category.value if question else None,
            "difficulty": question.difficulty.value if question else None,
            "question_number": self.current_question_index + 1,
            "total_questions": len(self.questions),
            "time_remaining": int(time_remaining),
        }
