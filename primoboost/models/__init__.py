"""
Data models and schemas for PrimoBoost

Contains Pydantic models for:
- Interview sessions and configuration
- Questions and answer feedback
- Resumes and LinkedIn profiles
- Job listings and applications
- Payments and offers
"""

from primoboost.models.interview import (
    InterviewSession,
    InterviewConfig,
    InterviewStage,
    InterviewCategory,
    SessionType,
    ViolationType,
)
from primoboost.models.question import InterviewQuestion, QuestionCategory, QuestionDifficulty
from primoboost.models.feedback import AnswerFeedback
from primoboost.models.resume import ExperienceLevel, UserResume, UserType, OptimizedResume
from primoboost.models.linkedin import ProfileOptimizationForm, OptimizedProfile
from primoboost.models.jobs import JobListing, JobTags, JobApplication, ApplicationMethod
from primoboost.models.payment import CreateOrderRequest, OrderResponse, OfferStatus

__all__ = [
    # Interview
    "InterviewSession",
    "InterviewConfig",
    "InterviewStage",
    "InterviewCategory",
    "SessionType",
    "ViolationType",
    # Question
    "InterviewQuestion",
    "QuestionCategory",
    "QuestionDifficulty",
    "AnswerFeedback",
    # Resume / LinkedIn
    "ExperienceLevel",
    "UserResume",
    "UserType",
    "OptimizedResume",
    "ProfileOptimizationForm",
    "OptimizedProfile",
    # Jobs
    "JobListing",
    "JobTags",
    "JobApplication",
    "ApplicationMethod",
    # Payments
    "CreateOrderRequest",
    "OrderResponse",
    "OfferStatus",
]
