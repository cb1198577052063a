"""
API layer for PrimoBoost

Contains FastAPI routers for:
- Mock-interview sessions (REST and WebSocket)
- Question generation
- Resume and LinkedIn optimization
- Job board
- Payments
- AI proxy
"""

from primoboost.api.router import api_router

__all__ = ["api_router"]
