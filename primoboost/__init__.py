"""
PrimoBoost - AI career toolkit backend

Resume optimization, AI mock interviews, a job board, LinkedIn profile
optimization and subscription checkout behind one FastAPI service.
"""

__version__ = "0.1.0"
__author__ = "PrimoBoost Team"
