"""
Core business logic modules for PrimoBoost

Contains:
- Interview Orchestrator: Stage machine for the mock-interview room
- Speech activity and timers: silence auto-submit and the countdown
- Question and Feedback services: question bank, AI questions, answer scoring
- Resume, LinkedIn and Jobs services
- Payment Service: coupons, orders and the seasonal offer
"""

from primoboost.core.interview_orchestrator import InterviewOrchestrator
from primoboost.core.llm_client import LLMClient
from primoboost.core.question_service import QuestionService
from primoboost.core.feedback_service import FeedbackService
from primoboost.core.resume_optimizer import ResumeOptimizer
from primoboost.core.resume_analyzer import ResumeAnalyzer
from primoboost.core.linkedin_optimizer import LinkedInOptimizer
from primoboost.core.jobs_service import JobsService
from primoboost.core.payment_service import PaymentService

__all__ = [
    "InterviewOrchestrator",
    "LLMClient",
    "QuestionService",
    "FeedbackService",
    "ResumeOptimizer",
    "ResumeAnalyzer",
    "LinkedInOptimizer",
    "JobsService",
    "PaymentService",
]
