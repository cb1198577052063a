"""
API Dependencies

Provides dependency injection for API endpoints.
Manages singleton instances of core components.
"""

import logging

from primoboost.config.settings import get_settings
from primoboost.core.feedback_service import FeedbackService
from primoboost.core.interview_orchestrator import InterviewOrchestrator
from primoboost.core.jobs_service import JobsService
from primoboost.core.linkedin_optimizer import LinkedInOptimizer
from primoboost.core.llm_client import LLMClient
from primoboost.core.payment_service import PaymentService, RazorpayGateway
from primoboost.core.question_service import QuestionService
from primoboost.core.resume_analyzer import ResumeAnalyzer
from primoboost.core.resume_optimizer import ResumeOptimizer
from primoboost.storage.database import Database, create_database

logger = logging.getLogger(__name__)


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_database: Database | None = None
_llm_client: LLMClient | None = None
_payment_gateway: RazorpayGateway | None = None
_orchestrator: InterviewOrchestrator | None = None
_question_service: QuestionService | None = None


def get_database() -> Database:
    global _database

    if _database is None:
        _database = create_database()

    return _database


def get_llm_client() -> LLMClient:
    global _llm_client

    if _llm_client is None:
        _llm_client = LLMClient()
        if not _llm_client.configured:
            logger.warning("LLM API key not configured, AI features will fall back or fail")

    return _llm_client


def get_payment_gateway() -> RazorpayGateway | None:
    """Razorpay client, or None when credentials are missing."""
    global _payment_gateway

    settings = get_settings()
    if _payment_gateway is None and settings.payment_gateway_configured:
        _payment_gateway = RazorpayGateway(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_key_secret,
            api_url=settings.razorpay_api_url,
        )

    return _payment_gateway


def get_question_service() -> QuestionService:
    global _question_service

    if _question_service is None:
        _question_service = QuestionService(get_database(), get_llm_client())

    return _question_service


def get_feedback_service() -> FeedbackService:
    return FeedbackService(get_llm_client())


def get_orchestrator() -> InterviewOrchestrator:
    """
    Get the interview orchestrator singleton.

    Live sessions are held in memory, so there must only be one.
    """
    global _orchestrator

    if _orchestrator is None:
        _orchestrator = InterviewOrchestrator(
            database=get_database(),
            question_service=get_question_service(),
            feedback_service=get_feedback_service(),
        )

    return _orchestrator


def get_resume_optimizer() -> ResumeOptimizer:
    return ResumeOptimizer(get_llm_client())


def get_resume_analyzer() -> ResumeAnalyzer:
    return ResumeAnalyzer(get_database())


def get_linkedin_optimizer() -> LinkedInOptimizer:
    return LinkedInOptimizer(get_llm_client())


def get_jobs_service() -> JobsService:
    return JobsService(get_database(), get_resume_optimizer())


def get_payment_service() -> PaymentService:
    return PaymentService(get_database(), get_payment_gateway())


async def cleanup():
    """Cleanup resources on shutdown."""
    global _database, _llm_client, _payment_gateway, _orchestrator, _question_service

    if _orchestrator:
        await _orchestrator.close()
        _orchestrator = None

    if _llm_client:
        await _llm_client.close()
        _llm_client = None

    if _payment_gateway:
        await _payment_gateway.close()
        _payment_gateway = None

    if _database:
        await _database.close()
        _database = None

    _question_service = None
