"""
AI Interviewer Prompt Templates

Contains structured prompts for:
- Resume-personalized question generation
- Follow-up questions based on the candidate's answer
"""

from primoboost.models.interview import InterviewConfig
from primoboost.models.question import DynamicQuestionContext, InterviewQuestion
from primoboost.models.resume import UserResume


class InterviewerPrompts:
    """
    Prompt templates for the AI interviewer.

    Every prompt asks for a single JSON object so the response can be
    stored directly in the question bank.
    """

    QUESTION_JSON_SHAPE = """{
  "question_text": "Your personalized question here",
  "category": "Technical|HR|Behavioral|Coding|Projects",
  "difficulty": "Easy|Medium|Hard",
  "generation_rationale": "Why this question is relevant",
  "expected_topics": ["topic1", "topic2"],
  "resume_context": {}
}"""

    def generate_question_prompt(
        self,
        config: InterviewConfig,
        resume: UserResume,
        context: DynamicQuestionContext,
    ) -> str:
        """Prompt for one question tailored to the candidate's resume."""
        level = resume.experience_level.value if resume.experience_level else "junior"
        projects = ", ".join(p.name for p in resume.parsed_data.projects) or "None listed"

        return f"""Generate a personalized interview question based on the candidate's resume.

Resume Information:
- Experience Level: {level}
- Years of Experience: {resume.years_of_experience or 0}
- Key Skills: {', '.join(resume.skills_detected)}
- Domains: {', '.join(resume.domains)}
- Projects: {projects}

Interview Configuration:
- Type: {config.session_type.value}
- Category: {config.interview_category.value}
- Company: {config.company_name or 'General'}
- Role: {config.target_role or 'Software Engineer'}

Specific Context for This Question:
- Testing Skill: {context.skill_being_tested}
- Specific Project: {context.specific_project or 'N/A'}
- Technology Focus: {context.specific_technology or 'N/A'}

Generate ONE interview question that:
1. Tests the candidate's knowledge of "{context.skill_being_tested}"
2. Is appropriate for {level} level candidates
3. References their specific experience or projects when relevant
4. Feels natural and conversational
5. Has clear evaluation criteria

Return a JSON object with this structure:
{self.QUESTION_JSON_SHAPE}

IMPORTANT: Return ONLY the JSON object, no additional text."""

    def follow_up_prompt(
        self,
        previous_question: InterviewQuestion,
        answer: str,
        resume: UserResume,
    ) -> str:
        """Prompt for a follow-up that digs into the previous answer."""
        level = resume.experience_level.value if resume.experience_level else "junior"

        return f"""Based on the candidate's answer, generate a relevant follow-up question.

Previous Question: {previous_question.question_text}

Candidate's Answer: {answer}

Resume Context:
- Skills: {', '.join(resume.skills_detected)}
- Experience Level: {level}

Generate a follow-up question that:
1. Probes deeper into their answer
2. Validates their claimed skills
3. Is appropriate for their experience level
4. Feels like a natural conversation

Return JSON with: {{"question_text": "...", "category": "...", "difficulty": "...", "generation_rationale": "...", "expected_topics": []}}"""
