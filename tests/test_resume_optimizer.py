import json

import pytest

from primoboost.config.settings import get_settings
from primoboost.core.llm_client import LLMResponseError
from primoboost.core.resume_optimizer import InputTooLongError, ResumeOptimizer, deep_clean_comments
from primoboost.models.resume import CompanyDescriptionParams, UserType
from tests.conftest import chat_response


def recording_llm(make_llm, content, calls):
    def handler(request):
        calls.append(json.loads(request.content))
        return chat_response(content)
    return make_llm(handler)


class TestDeepCleanComments:
    @pytest.mark.parametrize("text, expected", [
        ("Led a team of 5 // internal note", "Led a team of 5"),
        ("// whole line comment\nBuilt APIs", "Built APIs"),
        ("/* draft */Built APIs", "Built APIs"),
        ("// Line 3 Built APIs", "Built APIs"),
        ("Portfolio: https://example.com/me", "Portfolio: https://example.com/me"),
        ("One\n\n\n\nTwo", "One\n\nTwo"),
    ])
    def test_strings(self, text, expected):
        assert deep_clean_comments(text) == expected

    def test_nested_structures(self):
        value = {
            "summary": "Engineer // fix later",
            "skills": ["Python /* main */", 3, None],
            "education": {"degree": "B.Tech // CS"},
        }
        assert deep_clean_comments(value) == {
            "summary": "Engineer",
            "skills": ["Python", 3, None],
            "education": {"degree": "B.Tech"},
        }


class TestOptimizeResume:
    async def test_returns_cleaned_resume_with_origin(self, make_llm):
        calls = []
        optimizer = ResumeOptimizer(recording_llm(make_llm, {
            "name": "Jane Doe",
            "summary": "Backend engineer // tweak",
            "origin": "model",
            "skills": [{"category": "Languages", "list": ["Python"]}],
        }, calls))

        result = await optimizer.optimize_resume(
            "Jane's resume", "Python developer role", UserType.EXPERIENCED,
            user_name="Jane Doe", user_email="jane@example.com",
        )

        assert result.origin == "jd_optimized"
        assert result.as_dict() == {
            "name": "Jane Doe",
            "summary": "Backend engineer",
            "origin": "jd_optimized",
            "skills": [{"category": "Languages", "list": ["Python"]}],
        }
        prompt = calls[0]["messages"][0]["content"]
        assert calls[0]["model"] == "openai/gpt-5"
        assert "- Name: Jane Doe" in prompt
        assert "- Email: jane@example.com" in prompt
        assert "Phone" not in prompt
        assert "User Type: experienced" in prompt

    async def test_input_too_long(self, make_llm, monkeypatch):
        monkeypatch.setenv("MAX_INPUT_LENGTH", "20")
        get_settings.cache_clear()
        calls = []
        optimizer = ResumeOptimizer(recording_llm(make_llm, {}, calls))

        with pytest.raises(InputTooLongError, match="Input too long. Max 20 chars."):
            await optimizer.optimize_resume("x" * 15, "y" * 10, UserType.FRESHER)
        assert calls == []

    async def test_non_object_response(self, make_llm):
        optimizer = ResumeOptimizer(recording_llm(make_llm, ["not", "a", "resume"], []))
        with pytest.raises(LLMResponseError):
            await optimizer.optimize_resume("resume", "jd", UserType.STUDENT)


class TestSections:
    async def test_ats_section_json(self, make_llm):
        calls = []
        optimizer = ResumeOptimizer(recording_llm(make_llm, '```json\n["Built X", "Led Y"]\n```', calls))

        result = await optimizer.generate_ats_section(
            "workExperienceBullets", {"role": "SDE"}, model_override="openai/gpt-4o-mini"
        )

        assert result == ["Built X", "Led Y"]
        assert calls[0]["model"] == "openai/gpt-4o-mini"

    async def test_ats_section_plain_lines(self, make_llm):
        optimizer = ResumeOptimizer(recording_llm(make_llm, "Summary line one\n\n  \nSummary line two", []))
        result = await optimizer.generate_ats_section("summary", {})
        assert result == ["Summary line one", "Summary line two"]

    async def test_company_description_strips_fences(self, make_llm):
        calls = []
        optimizer = ResumeOptimizer(recording_llm(make_llm, "```markdown\nAcme builds rockets.\n```", calls))

        text = await optimizer.generate_company_description(
            CompanyDescriptionParams(company_name="Acme", role_title="Engineer")
        )

        assert text == "Acme builds rockets."
        assert "Company: Acme" in calls[0]["messages"][0]["content"]
