"""
LinkedIn Profile Optimizer for PrimoBoost
"""

import json
import logging
import math
import re
from typing import Any

from pydantic import ValidationError

from primoboost.config.settings import get_settings
from primoboost.core.llm_client import LLMClient, strip_code_fences
from primoboost.models.linkedin import (
    ListSuggestion,
    OptimizedProfile,
    ProfileOptimizationForm,
    TextSuggestion,
)
from primoboost.prompts.linkedin import LinkedInPrompts

logger = logging.getLogger(__name__)

DEFAULT_OVERALL_SCORE = 75
DEFAULT_KEY_IMPROVEMENTS = ["Profile optimized for better visibility"]

_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")


class LinkedInOptimizationError(Exception):
    """The model output could not be turned into suggestions."""
    pass


class LinkedInOptimizer:
    """
    Rewrites LinkedIn profile sections for recruiter search.

    Sections the model leaves out, or returns in the wrong shape, fall back
    to the user's original text.
    """

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client
        self.settings = get_settings()
        self.prompts = LinkedInPrompts()

    async def optimize_profile(self, form: ProfileOptimizationForm) -> OptimizedProfile:
        text = await self.llm_client.complete(
            self.prompts.optimize_profile_prompt(form),
            model=self.settings.llm_linkedin_model,
            trace_name="linkedin_optimization",
            trace_metadata={"target_role": form.target_role, "industry": form.industry},
        )

        try:
            data = json.loads(strip_code_fences(text.strip()))
        except json.JSONDecodeError:
            logger.error(f"Failed to parse JSON response: {text[:200]}")
            raise LinkedInOptimizationError("Invalid JSON response from AI. Please try again.")

        if not isinstance(data, dict):
            raise LinkedInOptimizationError("Invalid JSON response from AI. Please try again.")

        try:
            return self._build_profile(form, data)
        except ValidationError as e:
            logger.error(f"LinkedIn response did not fit the profile model: {e}")
            raise LinkedInOptimizationError("Invalid JSON response from AI. Please try again.") from e

    def _build_profile(self, form: ProfileOptimizationForm, data: dict[str, Any]) -> OptimizedProfile:
        headline = self._section(data, "headline")
        about = self._section(data, "about")
        experience = self._section(data, "experience")
        skills = self._section(data, "skills")
        achievements = self._section(data, "achievements")

        optimized_headline = self._text(headline, "optimized") or form.headline
        optimized_about = self._text(about, "optimized") or form.about

        key_improvements = data.get("keyImprovements")
        if not isinstance(key_improvements, list):
            key_improvements = DEFAULT_KEY_IMPROVEMENTS

        return OptimizedProfile(
            headline=TextSuggestion(
                original=form.headline,
                optimized=optimized_headline,
                explanation=self._text(headline, "explanation") or "Optimized for clarity and impact",
                character_count=len(optimized_headline),
            ),
            about=TextSuggestion(
                original=form.about,
                optimized=optimized_about,
                explanation=self._text(about, "explanation") or "Enhanced for engagement",
                character_count=len(optimized_about),
            ),
            experience=TextSuggestion(
                original=form.experience,
                optimized=self._text(experience, "optimized") or form.experience,
                explanation=(
                    self._text(experience, "explanation") or "Strengthened with metrics and action verbs"
                ),
            ),
            skills=ListSuggestion(
                original=form.skills,
                optimized=self._as_list(skills.get("optimized")),
                explanation=self._text(skills, "explanation") or "Curated for role relevance",
            ),
            achievements=ListSuggestion(
                original=form.achievements,
                optimized=self._as_list(achievements.get("optimized")),
                explanation=self._text(achievements, "explanation") or "Highlighted measurable accomplishments",
            ),
            overall_score=self._score(data.get("overallScore")),
            key_improvements=[str(item) for item in key_improvements],
        )

    @staticmethod
    def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
        section = data.get(key)
        return section if isinstance(section, dict) else {}

    @staticmethod
    def _text(section: dict[str, Any], key: str) -> str:
        value = section.get(key)
        return value.strip() if isinstance(value, str) else ""

    @staticmethod
    def _as_list(value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value]

    @staticmethod
    def _score(value: Any) -> int:
        """Read overallScore as 0-100, accepting numbers and strings like "85/100"."""
        if isinstance(value, bool):
            return DEFAULT_OVERALL_SCORE
        if isinstance(value, str):
            match = _LEADING_NUMBER.match(value)
            value = float(match.group(1)) if match else None
        if not isinstance(value, (int, float)) or not value or not math.isfinite(value):
            return DEFAULT_OVERALL_SCORE
        return max(0, min(100, round(value)))
