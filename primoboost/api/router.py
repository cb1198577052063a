"""
Main API router for PrimoBoost

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from primoboost.api.endpoints import ai, interview, jobs, linkedin, metadata, payments, questions, resume

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    interview.router,
    prefix="/interview",
    tags=["Interview"]
)

api_router.include_router(
    questions.router,
    prefix="/questions",
    tags=["Questions"]
)

api_router.include_router(
    resume.router,
    prefix="/resume",
    tags=["Resume"]
)

api_router.include_router(
    linkedin.router,
    prefix="/linkedin",
    tags=["LinkedIn"]
)

api_router.include_router(
    jobs.router,
    prefix="/jobs",
    tags=["Jobs"]
)

api_router.include_router(
    payments.router,
    prefix="/payments",
    tags=["Payments"]
)

api_router.include_router(
    ai.router,
    prefix="/ai",
    tags=["AI"]
)

api_router.include_router(
    metadata.router,
    prefix="/metadata",
    tags=["Metadata"]
)
