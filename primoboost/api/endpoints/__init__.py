"""
API endpoint modules for PrimoBoost
"""

from primoboost.api.endpoints import ai, interview, jobs, linkedin, metadata, payments, questions, resume

__all__ = ["ai", "interview", "jobs", "linkedin", "metadata", "payments", "questions", "resume"]
