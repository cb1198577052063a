"""
Resume Optimizer for PrimoBoost

Rewrites a resume against a job description and produces ATS-friendly
section copy and "About the Company" blurbs for job listings.
"""

import json
import logging
import re
from typing import Any

from primoboost.config.settings import get_settings
from primoboost.core.llm_client import LLMClient, LLMResponseError
from primoboost.models.resume import AdditionalSection, CompanyDescriptionParams, OptimizedResume, UserType
from primoboost.prompts.resume import ResumePrompts

logger = logging.getLogger(__name__)

_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_LINE_MARKER = re.compile(r"//\s*Line\s*\d+\s*")
_WHOLE_LINE_COMMENT = re.compile(r"^\s*//")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_TRAILING_COMMENT = re.compile(r"(?<!:)//")


class InputTooLongError(ValueError):
    """Resume plus job description exceed the input limit."""
    pass


def _strip_comments(text: str) -> str:
    cleaned = _BLOCK_COMMENT.sub("", text)
    cleaned = _LINE_MARKER.sub("", cleaned)

    lines = []
    for line in re.split(r"\r?\n", cleaned):
        if _WHOLE_LINE_COMMENT.match(line):
            lines.append("")
            continue
        match = _TRAILING_COMMENT.search(line)
        # Lines with a URL before the comment are kept as they are
        if match and "://" not in line[:match.start()]:
            line = line[:match.start()].rstrip()
        lines.append(line)

    return _EXCESS_NEWLINES.sub("\n\n", "\n".join(lines)).strip()


def deep_clean_comments(value: Any) -> Any:
    """Remove code-style comments the model sometimes leaves in string values."""
    if isinstance(value, str):
        return _strip_comments(value)
    if isinstance(value, list):
        return [deep_clean_comments(item) for item in value]
    if isinstance(value, dict):
        return {key: deep_clean_comments(item) for key, item in value.items()}
    return value


class ResumeOptimizer:
    """JD-targeted resume optimization backed by the default model."""

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client
        self.settings = get_settings()
        self.prompts = ResumePrompts()

    async def optimize_resume(
        self,
        resume: str,
        job_description: str,
        user_type: UserType,
        user_name: str | None = None,
        user_email: str | None = None,
        user_phone: str | None = None,
        user_linkedin: str | None = None,
        user_github: str | None = None,
        target_role: str | None = None,
        additional_sections: list[AdditionalSection] | None = None,
    ) -> OptimizedResume:
        """
        Optimize a resume for a job description.

        Raises:
            InputTooLongError: If the combined input is over the limit
            LLMError: If the model call fails or returns invalid JSON
        """
        max_length = self.settings.max_input_length
        if len(resume) + len(job_description) > max_length:
            raise InputTooLongError(f"Input too long. Max {max_length} chars.")

        contact = {
            "Name": user_name,
            "Email": user_email,
            "Phone": user_phone,
            "LinkedIn": user_linkedin,
            "GitHub": user_github,
        }
        prompt = self.prompts.optimize_resume_prompt(
            resume,
            job_description,
            user_type.value,
            contact,
            target_role=target_role,
            additional_sections=additional_sections,
        )

        parsed = await self.llm_client.complete_json(
            prompt,
            model=self.settings.llm_default_model,
            trace_name="resume_optimization",
        )
        if not isinstance(parsed, dict):
            raise LLMResponseError("Optimized resume is not a JSON object")

        parsed = deep_clean_comments(parsed)
        parsed["origin"] = "jd_optimized"
        logger.info(f"Optimized resume for {user_type.value} user")
        return OptimizedResume(**parsed)

    async def generate_ats_section(
        self,
        section_type: str,
        data: Any,
        model_override: str | None = None,
        draft_text: str | None = None,
    ) -> Any:
        """Generate one ATS-optimized section. JSON when parseable, else lines."""
        prompt = self.prompts.ats_section_prompt(section_type, data, draft_text)
        text = await self.llm_client.complete(
            prompt,
            model=model_override or self.settings.llm_default_model,
            trace_name="ats_section",
            trace_metadata={"section_type": section_type},
        )

        text = re.sub(r"```json|```", "", text).strip()
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return [line for line in text.split("\n") if line.strip()]

    async def generate_company_description(self, params: CompanyDescriptionParams) -> str:
        """2-3 paragraph "About the Company" text."""
        text = await self.llm_client.complete(
            self.prompts.company_description_prompt(params),
            model=self.settings.llm_default_model,
            trace_name="company_description",
            trace_metadata={"company": params.company_name},
        )
        return re.sub(r"```markdown|```", "", text).strip()
