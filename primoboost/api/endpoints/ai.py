"""
AI proxy API endpoints

Forwards chat-completion requests from the browser so the LLM API key
stays on the server.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from primoboost.api.dependencies import get_llm_client
from primoboost.config.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/enrich")
async def enrich(request: Request) -> JSONResponse:
    """
    Proxy a chat completion.

    Body: {"model"?, "messages": [...], "temperature"?, "max_tokens"?}
    """
    settings = get_settings()
    llm_client = get_llm_client()

    if not llm_client.configured:
        logger.error("LLM API key not configured")
        return JSONResponse(status_code=500, content={"error": "Server configuration error"})

    try:
        body: Any = await request.json()
    except ValueError:
        body = {}

    messages = body.get("messages") if isinstance(body, dict) else None
    if not isinstance(messages, list):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request: messages array required"},
        )

    payload = {
        "model": body.get("model") or settings.llm_proxy_model,
        "messages": messages,
        "temperature": body.get("temperature", 0.7),
        "max_tokens": body.get("max_tokens", 2000),
    }
    logger.info(f"AI request: model={payload['model']}, messages={len(messages)}")

    try:
        status_code, data = await llm_client.proxy_completion(payload)
    except httpx.TimeoutException:
        logger.error("AI proxy request timeout")
        return JSONResponse(
            status_code=504,
            content={"error": f"Request timeout after {int(settings.llm_proxy_timeout_seconds)} seconds"},
        )
    except Exception as e:
        logger.error(f"AI proxy error: {e}")
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to process AI request", "detail": str(e)},
        )

    if status_code >= 400:
        error = data.get("error") if isinstance(data.get("error"), dict) else {}
        return JSONResponse(
            status_code=status_code,
            content={
                "error": error.get("message") or "AgentRouter API error",
                "code": error.get("code") or status_code,
                "details": data,
            },
        )

    return JSONResponse(status_code=200, content=data)


@router.get("/health")
async def ai_health() -> dict[str, Any]:
    return {
        "status": "ok",
        "agent_router_configured": bool(get_settings().llm_api_key),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
