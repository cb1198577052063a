"""
Resume and job-listing prompt templates
"""

import json
from typing import Any

from primoboost.models.resume import AdditionalSection, CompanyDescriptionParams


class ResumePrompts:
    """Prompts for JD-targeted resume optimization and ATS copy."""

    def optimize_resume_prompt(
        self,
        resume: str,
        job_description: str,
        user_type: str,
        contact: dict[str, str],
        target_role: str | None = None,
        additional_sections: list[AdditionalSection] | None = None,
    ) -> str:
        contact_lines = "\n".join(f"- {key}: {value}" for key, value in contact.items() if value)
        sections = ""
        if additional_sections:
            sections = "\n\nAdditional Sections:\n" + json.dumps(
                [s.model_dump() for s in additional_sections], indent=2
            )

        return f"""You are an AI Resume Optimizer.
Analyze the resume and job description, then return an optimized JSON resume.
Resume:
{resume}

Job Description:
{job_description}

User Type: {user_type}
Target Role: {target_role or 'As in job description'}
Contact Details:
{contact_lines or '- Use the details in the resume'}{sections}

Return ONLY the JSON resume (name, phone, email, linkedin, github, summary,
workExperience, education, projects, skills, certifications)."""

    def ats_section_prompt(self, section_type: str, data: Any, draft_text: str | None = None) -> str:
        return (
            f"Generate an ATS-optimized {section_type} section.\n"
            f"Data:\n{json.dumps(data)}\n"
            f"Draft:\n{draft_text or ''}"
        )

    def company_description_prompt(self, params: CompanyDescriptionParams) -> str:
        return f"""You are a professional writer.
Create a 2-3 paragraph "About the Company" section for a job listing.

Company: {params.company_name}
Role: {params.role_title}
Domain: {params.domain}
Experience: {params.experience_required}
Job Description: {params.job_description}
Qualification: {params.qualification}

Guidelines:
- Keep tone professional and concise (150-250 words)
- No fictional data or stats
- Emphasize company strengths and opportunities"""
