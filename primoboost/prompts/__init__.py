"""
AI prompt templates for PrimoBoost

Contains structured prompts for:
- Interview question and follow-up generation
- Answer feedback
- Resume optimization and ATS copy
- LinkedIn profile optimization
"""

from primoboost.prompts.interviewer import InterviewerPrompts
from primoboost.prompts.evaluator import EvaluatorPrompts
from primoboost.prompts.resume import ResumePrompts
from primoboost.prompts.linkedin import LinkedInPrompts

__all__ = [
    "InterviewerPrompts",
    "EvaluatorPrompts",
    "ResumePrompts",
    "LinkedInPrompts",
]
