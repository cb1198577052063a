import json

import httpx
import pytest

from primoboost.config.settings import get_settings
from primoboost.core.llm_client import LLMClient
from primoboost.storage.database import InMemoryDatabase


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Deterministic settings for every test."""
    monkeypatch.setenv("LLM_API_KEY", "test-key")
    monkeypatch.setenv("SUPABASE_URL", "")
    monkeypatch.setenv("SUPABASE_SERVICE_KEY", "")
    monkeypatch.setenv("RAZORPAY_KEY_ID", "rzp_test_key")
    monkeypatch.setenv("RAZORPAY_KEY_SECRET", "rzp_test_secret")
    monkeypatch.setenv("LANGFUSE_ENABLED", "false")
    monkeypatch.setenv("INTERVIEW_QUESTION_COUNT", "3")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def chat_response(content, status_code: int = 200) -> httpx.Response:
    """Chat-completions response body carrying ``content``."""
    if not isinstance(content, str):
        content = json.dumps(content)
    return httpx.Response(status_code, json={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_llm(sleeps):
    """Build an LLMClient whose HTTP calls go to ``handler``."""

    async def fake_sleep(delay):
        sleeps.append(delay)

    def factory(handler) -> LLMClient:
        return LLMClient(transport=httpx.MockTransport(handler), sleep=fake_sleep)

    return factory


def bank_rows() -> list[dict]:
    """A small question bank: three questions per category."""
    rows = []
    for category in ["Technical", "HR", "Behavioral", "Coding", "Projects"]:
        for index, difficulty in enumerate(["Easy", "Medium", "Hard"]):
            rows.append({
                "id": f"{category.lower()}-{index}",
                "question_text": f"{category} question {index}",
                "category": category,
                "difficulty": difficulty,
                "interview_type": "general",
                "is_active": True,
                "is_dynamic": False,
            })
    return rows


@pytest.fixture
def database():
    return InMemoryDatabase({"interview_questions": bank_rows()})
