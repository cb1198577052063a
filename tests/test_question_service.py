import json

import httpx
import pytest

from primoboost.core.question_service import (
    QuestionService,
    categories_for_config,
    difficulties_for_experience,
    map_category,
    relevance_score,
    room_categories_for_config,
)
from primoboost.models.interview import InterviewCategory, InterviewConfig
from primoboost.models.question import InterviewQuestion, QuestionCategory, QuestionDifficulty
from primoboost.models.resume import ExperienceLevel, UserResume
from tests.conftest import chat_response


@pytest.fixture
def resume():
    return UserResume(
        id="resume-1",
        user_id="user-1",
        skills_detected=["Python", "SQL"],
        experience_level=ExperienceLevel.MID,
        years_of_experience=4,
        parsed_data={"projects": [{"name": "Payments API"}]},
    )


def generated_question_handler(requests):
    def handler(request):
        requests.append(json.loads(request.content))
        return chat_response({
            "question_text": "How did you design the Payments API?",
            "category": "Project-based",
            "difficulty": "Hard",
            "generation_rationale": "Tests ownership",
            "expected_topics": ["design"],
        })
    return handler


class TestCategoryRules:
    def test_resume_categories(self):
        assert categories_for_config(InterviewConfig(interview_category=InterviewCategory.TECHNICAL)) == [
            QuestionCategory.TECHNICAL, QuestionCategory.CODING, QuestionCategory.PROJECTS,
        ]
        assert categories_for_config(InterviewConfig(interview_category=InterviewCategory.HR)) == [
            QuestionCategory.HR, QuestionCategory.BEHAVIORAL,
        ]
        assert len(categories_for_config(InterviewConfig(interview_category=InterviewCategory.MIXED))) == 5

    def test_room_categories(self):
        assert room_categories_for_config(InterviewConfig(interview_category=InterviewCategory.TECHNICAL)) == [
            QuestionCategory.TECHNICAL,
        ]
        assert room_categories_for_config(InterviewConfig(interview_category=InterviewCategory.MIXED)) == [
            QuestionCategory.TECHNICAL, QuestionCategory.HR, QuestionCategory.BEHAVIORAL,
        ]

    def test_difficulties_for_experience(self):
        assert difficulties_for_experience("junior") == [QuestionDifficulty.EASY, QuestionDifficulty.MEDIUM]
        assert difficulties_for_experience("lead") == [QuestionDifficulty.MEDIUM, QuestionDifficulty.HARD]
        assert difficulties_for_experience(None) == list(QuestionDifficulty)

    @pytest.mark.parametrize("text, expected", [
        ("Technical", QuestionCategory.TECHNICAL),
        ("HR round", QuestionCategory.HR),
        ("Behavioural", QuestionCategory.BEHAVIORAL),
        ("Live coding", QuestionCategory.CODING),
        ("Project-based", QuestionCategory.PROJECTS),
        ("something else", QuestionCategory.TECHNICAL),
    ])
    def test_map_category(self, text, expected):
        assert map_category(text) == expected


class TestRelevance:
    def test_skill_matches_and_difficulty(self, resume):
        question = InterviewQuestion(
            id="q", question_text="Optimize a slow SQL query in Python", difficulty=QuestionDifficulty.HARD
        )
        # 2 skills (+20), Hard (+3), |mid(3) - hard(3)| <= 1 (+5)
        assert relevance_score(question, resume, jitter=0) == 28

    def test_far_difficulty_gets_no_band_bonus(self, resume):
        resume.experience_level = ExperienceLevel.EXECUTIVE
        question = InterviewQuestion(id="q", question_text="Tell me about yourself", difficulty=QuestionDifficulty.EASY)
        assert relevance_score(question, resume, jitter=0) == 1

    def test_default_experience_rank(self, resume):
        resume.experience_level = None
        question = InterviewQuestion(id="q", question_text="Hello", difficulty=QuestionDifficulty.EASY)
        assert relevance_score(question, resume, jitter=0) == 6

    def test_random_jitter_range(self, resume):
        question = InterviewQuestion(id="q", question_text="Hello", difficulty=QuestionDifficulty.EASY)
        score = relevance_score(question, resume)
        assert 6 <= score < 8


class TestBankSelection:
    async def test_get_questions_spreads_categories(self, database):
        service = QuestionService(database)
        questions = await service.get_questions(
            [QuestionCategory.HR, QuestionCategory.BEHAVIORAL], count=4
        )
        categories = [q.category for q in questions]
        assert len(questions) == 4
        assert categories.count(QuestionCategory.HR) == 2
        assert categories.count(QuestionCategory.BEHAVIORAL) == 2

    async def test_get_questions_excludes_inactive_and_dynamic(self, database):
        await database.update("interview_questions", {"is_active": False}, {"id": "hr-0"})
        await database.update("interview_questions", {"is_dynamic": True}, {"id": "hr-1"})
        questions = await QuestionService(database).get_questions([QuestionCategory.HR], count=10)
        assert [q.id for q in questions] == ["hr-2"]

    async def test_company_questions_included_only_for_that_company(self, database):
        await database.insert("interview_questions", {
            "id": "acme-1", "question_text": "Why Acme?", "category": "HR", "difficulty": "Easy",
            "interview_type": "company-specific", "company_name": "Acme",
            "is_active": True, "is_dynamic": False,
        })
        service = QuestionService(database)

        with_company = await service.get_questions([QuestionCategory.HR], count=10, company_name="Acme")
        without_company = await service.get_questions([QuestionCategory.HR], count=10)

        assert "acme-1" in {q.id for q in with_company}
        assert "acme-1" not in {q.id for q in without_company}


class TestHybridSelection:
    async def test_sixty_percent_bank_rest_generated(self, database, make_llm, resume):
        requests = []
        service = QuestionService(database, make_llm(generated_question_handler(requests)))
        config = InterviewConfig(interview_category=InterviewCategory.TECHNICAL, target_role="Backend Engineer")

        questions = await service.select_questions_for_interview(config, resume, total_questions=5)

        dynamic = [q for q in questions if q.is_dynamic]
        assert len(questions) == 5
        assert len(dynamic) == 2
        assert len(requests) == 2
        assert requests[0]["model"] == "google/gemini-2.0-flash-exp:free"
        assert all(q.category in (QuestionCategory.TECHNICAL, QuestionCategory.CODING, QuestionCategory.PROJECTS)
                   for q in questions)

        stored = [r for r in database.rows("interview_questions") if r["is_dynamic"]]
        assert len(stored) == 2
        assert stored[0]["generated_for_user"] == "user-1"
        assert stored[0]["category"] == "Projects"
        assert stored[0]["difficulty"] == "Hard"
        assert stored[0]["resume_context"]["skill_being_tested"] == "Python"
        assert stored[1]["resume_context"]["skill_being_tested"] == "SQL"

    async def test_generation_failure_returns_none(self, database, make_llm, resume):
        service = QuestionService(database, make_llm(lambda request: httpx.Response(401)))
        config = InterviewConfig(interview_category=InterviewCategory.TECHNICAL)

        assert await service.generate_single_question(config, resume, 0) is None
        questions = await service.select_questions_for_interview(config, resume, total_questions=5)
        assert len(questions) == 3

    async def test_follow_up_links_source_question(self, database, make_llm, resume):
        requests = []
        service = QuestionService(database, make_llm(generated_question_handler(requests)))
        previous = InterviewQuestion(id="technical-0", question_text="What is an index?")

        follow_up = await service.generate_follow_up_question(previous, "A lookup structure", resume)

        assert follow_up.source_question_id == "technical-0"
        assert follow_up.resume_context["skill_being_tested"] == "follow-up"
        assert follow_up.resume_context["previous_answers"] == ["A lookup structure"]

    async def test_no_llm_client(self, database, resume):
        service = QuestionService(database)
        config = InterviewConfig(interview_category=InterviewCategory.HR)
        assert await service.generate_single_question(config, resume, 0) is None
