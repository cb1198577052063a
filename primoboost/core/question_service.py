"""
Question Service for PrimoBoost

Selects interview questions from the question bank and generates
personalized ones from the candidate's resume:
- Category-based selection for standard interviews
- Hybrid selection (60% bank, 40% AI) when a resume is attached
- Follow-up questions based on an answer
"""

import logging
import math
import random
from typing import Any

from primoboost.config.settings import get_settings
from primoboost.core.llm_client import LLMClient, LLMError
from primoboost.models.interview import InterviewCategory, InterviewConfig
from primoboost.models.question import (
    DynamicQuestionContext,
    GeneratedQuestion,
    InterviewQuestion,
    InterviewType,
    QuestionCategory,
    QuestionDifficulty,
)
from primoboost.models.resume import ExperienceLevel, UserResume
from primoboost.prompts.interviewer import InterviewerPrompts
from primoboost.storage.database import Database

logger = logging.getLogger(__name__)

QUESTIONS_TABLE = "interview_questions"

DATABASE_SHARE = 0.6


def categories_for_config(config: InterviewConfig) -> list[QuestionCategory]:
    """Bank categories used for resume-based (hybrid) selection."""
    if config.interview_category == InterviewCategory.TECHNICAL:
        return [QuestionCategory.TECHNICAL, QuestionCategory.CODING, QuestionCategory.PROJECTS]
    if config.interview_category == InterviewCategory.HR:
        return [QuestionCategory.HR, QuestionCategory.BEHAVIORAL]
    return list(QuestionCategory)


def room_categories_for_config(config: InterviewConfig) -> list[QuestionCategory]:
    """Bank categories used when no resume is attached."""
    if config.interview_category == InterviewCategory.TECHNICAL:
        return [QuestionCategory.TECHNICAL]
    if config.interview_category == InterviewCategory.HR:
        return [QuestionCategory.HR, QuestionCategory.BEHAVIORAL]
    return [QuestionCategory.TECHNICAL, QuestionCategory.HR, QuestionCategory.BEHAVIORAL]


def difficulties_for_experience(level: str | None) -> list[QuestionDifficulty]:
    """Difficulty bands suitable for an experience level."""
    if level in ("entry", "junior"):
        return [QuestionDifficulty.EASY, QuestionDifficulty.MEDIUM]
    if level in ("mid", "senior", "lead", "executive"):
        return [QuestionDifficulty.MEDIUM, QuestionDifficulty.HARD]
    return list(QuestionDifficulty)


def map_category(text: str) -> QuestionCategory:
    """Map free-form LLM category text onto a bank category."""
    normalized = (text or "").lower()
    if "tech" in normalized:
        return QuestionCategory.TECHNICAL
    if "hr" in normalized:
        return QuestionCategory.HR
    if "behavio" in normalized:
        return QuestionCategory.BEHAVIORAL
    if "cod" in normalized:
        return QuestionCategory.CODING
    if "project" in normalized:
        return QuestionCategory.PROJECTS
    return QuestionCategory.TECHNICAL


def _map_difficulty(text: str) -> QuestionDifficulty:
    for difficulty in QuestionDifficulty:
        if difficulty.value.lower() == (text or "").strip().lower():
            return difficulty
    return QuestionDifficulty.MEDIUM


def relevance_score(
    question: InterviewQuestion,
    resume: UserResume,
    jitter: float | None = None,
) -> float:
    """
    Rank a bank question against a resume.

    +10 per resume skill mentioned in the question, +1/+2/+3 for
    Easy/Medium/Hard, +5 when the difficulty sits within one step of the
    candidate's experience rank, plus a small random jitter.
    """
    score = 0.0
    question_text = question.question_text.lower()

    for skill in resume.skills_detected:
        if skill.lower() in question_text:
            score += 10

    score += question.difficulty.rank

    experience_rank = resume.experience_level.rank if resume.experience_level else 2
    if abs(experience_rank - question.difficulty.rank) <= 1:
        score += 5

    if jitter is None:
        jitter = random.random() * 2
    return score + jitter


class QuestionService:
    """
    Question bank access and AI question generation.

    Generated questions are written back to the bank as dynamic questions
    owned by the user they were generated for.
    """

    def __init__(self, database: Database, llm_client: LLMClient | None = None):
        self.database = database
        self.llm_client = llm_client
        self.settings = get_settings()
        self.prompts = InterviewerPrompts()

    # =========================================================================
    # BANK SELECTION
    # =========================================================================

    async def _fetch_bank(
        self,
        categories: list[QuestionCategory],
        company_name: str | None,
    ) -> list[InterviewQuestion]:
        """Active, non-dynamic questions for the categories."""
        base_filters: dict[str, Any] = {"is_active": True, "is_dynamic": False}
        in_filters = {"category": [c.value for c in categories]}

        rows = await self.database.select(
            QUESTIONS_TABLE,
            filters={**base_filters, "interview_type": InterviewType.GENERAL.value},
            in_filters=in_filters,
        )
        if company_name:
            rows += await self.database.select(
                QUESTIONS_TABLE,
                filters={
                    **base_filters,
                    "interview_type": InterviewType.COMPANY_SPECIFIC.value,
                    "company_name": company_name,
                },
                in_filters=in_filters,
            )
        return [InterviewQuestion(**row) for row in rows]

    async def get_questions(
        self,
        categories: list[QuestionCategory],
        count: int,
        company_name: str | None = None,
    ) -> list[InterviewQuestion]:
        """
        Pick up to ``count`` bank questions spread evenly across categories.
        """
        questions = await self._fetch_bank(categories, company_name)
        if not questions:
            return []

        by_category: dict[QuestionCategory, list[InterviewQuestion]] = {}
        for question in questions:
            by_category.setdefault(question.category, []).append(question)
        for pool in by_category.values():
            random.shuffle(pool)

        # Round-robin across categories so a mixed interview stays mixed
        selected: list[InterviewQuestion] = []
        pools = [by_category[c] for c in categories if c in by_category]
        while len(selected) < count and any(pools):
            for pool in pools:
                if pool and len(selected) < count:
                    selected.append(pool.pop())

        random.shuffle(selected)
        return selected

    async def select_database_questions(
        self,
        config: InterviewConfig,
        resume: UserResume,
        count: int,
    ) -> list[InterviewQuestion]:
        """Bank questions ranked by relevance to the resume."""
        if count <= 0:
            return []
        try:
            questions = await self._fetch_bank(categories_for_config(config), config.company_name)
        except Exception as e:
            logger.error(f"Error fetching database questions: {e}")
            return []

        ranked = sorted(questions, key=lambda q: relevance_score(q, resume), reverse=True)
        return ranked[:count]

    async def select_questions_for_interview(
        self,
        config: InterviewConfig,
        resume: UserResume,
        total_questions: int = 10,
    ) -> list[InterviewQuestion]:
        """Hybrid selection: 60% ranked bank questions, the rest AI-generated."""
        database_count = math.ceil(total_questions * DATABASE_SHARE)
        ai_count = total_questions - database_count

        database_questions = await self.select_database_questions(config, resume, database_count)
        ai_questions = await self.generate_ai_questions(config, resume, ai_count)

        questions = database_questions + ai_questions
        random.shuffle(questions)
        logger.info(
            f"Selected {len(database_questions)} bank and {len(ai_questions)} generated questions"
        )
        return questions

    # =========================================================================
    # AI GENERATION
    # =========================================================================

    async def generate_ai_questions(
        self,
        config: InterviewConfig,
        resume: UserResume,
        count: int,
    ) -> list[InterviewQuestion]:
        generated = []
        for index in range(count):
            question = await self.generate_single_question(config, resume, index)
            if question:
                generated.append(question)
        return generated

    async def _save_generated(
        self,
        generated: GeneratedQuestion,
        row_overrides: dict[str, Any],
    ) -> InterviewQuestion:
        row = {
            "question_text": generated.question_text,
            "category": map_category(generated.category).value,
            "difficulty": _map_difficulty(generated.difficulty).value,
            "is_active": True,
            "is_dynamic": True,
            **row_overrides,
        }
        saved = await self.database.insert(QUESTIONS_TABLE, row)
        return InterviewQuestion(**saved)

    async def generate_single_question(
        self,
        config: InterviewConfig,
        resume: UserResume,
        index: int,
    ) -> InterviewQuestion | None:
        """Generate and store one resume-personalized question. None on failure."""
        if not self.llm_client:
            return None

        skills = resume.skills_detected
        projects = resume.parsed_data.projects
        context = DynamicQuestionContext(
            resume_id=resume.id,
            user_id=resume.user_id,
            skill_being_tested=skills[index % len(skills)] if skills else "general",
            experience_level=resume.experience_level.value if resume.experience_level else "junior",
            specific_project=projects[0].name if projects else None,
            specific_technology=skills[0] if skills else None,
        )
        prompt = self.prompts.generate_question_prompt(config, resume, context)

        try:
            data = await self.llm_client.complete_json(
                prompt,
                model=self.settings.llm_question_model,
                trace_name="question_generation",
            )
            generated = GeneratedQuestion(**data)
            return await self._save_generated(
                generated,
                {
                    "interview_type": (
                        InterviewType.COMPANY_SPECIFIC.value if config.company_name
                        else InterviewType.GENERAL.value
                    ),
                    "company_name": config.company_name,
                    "role": config.target_role,
                    "generated_for_user": resume.user_id,
                    "resume_context": context.model_dump(),
                },
            )
        except (LLMError, ValueError, TypeError) as e:
            logger.error(f"AI question generation failed (question {index + 1}): {e}")
            return None
        except Exception as e:
            logger.error(f"Failed to save generated question: {e}")
            return None

    async def generate_follow_up_question(
        self,
        previous_question: InterviewQuestion,
        answer: str,
        resume: UserResume,
    ) -> InterviewQuestion | None:
        """Generate and store a follow-up to an answer. None on failure."""
        if not self.llm_client:
            return None

        prompt = self.prompts.follow_up_prompt(previous_question, answer, resume)
        context = DynamicQuestionContext(
            resume_id=resume.id,
            user_id=resume.user_id,
            skill_being_tested="follow-up",
            experience_level=resume.experience_level.value if resume.experience_level else "junior",
            previous_answers=[answer],
        )

        try:
            data = await self.llm_client.complete_json(
                prompt,
                model=self.settings.llm_question_model,
                trace_name="follow_up_generation",
            )
            generated = GeneratedQuestion(**data)
            return await self._save_generated(
                generated,
                {
                    "interview_type": InterviewType.GENERAL.value,
                    "generated_for_user": resume.user_id,
                    "source_question_id": previous_question.id,
                    "resume_context": context.model_dump(),
                },
            )
        except Exception as e:
            logger.error(f"Follow-up question generation failed: {e}")
            return None
