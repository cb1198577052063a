"""
LLM Client for PrimoBoost

Single entry point for chat-completion calls against the OpenAI-compatible
LLM gateway (AgentRouter / OpenRouter):
- Bounded exponential-backoff retries for 429 / 5xx / network failures
- HTTP status classification into typed errors
- Content extraction and JSON parsing of model output
- Single-attempt passthrough for the AI proxy endpoint

Integrated with Langfuse for observability and tracing.
"""

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable

import httpx
from langfuse import Langfuse

from primoboost.config.settings import get_settings

logger = logging.getLogger(__name__)

Message = dict[str, str]


# =============================================================================
# ERRORS
# =============================================================================

class LLMError(Exception):
    """Base error for LLM gateway failures."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LLMConfigurationError(LLMError):
    """Raised when no API key is configured."""
    pass


class BadRequestError(LLMError):
    """HTTP 400 from the gateway."""
    pass


class UnauthorizedError(LLMError):
    """HTTP 401 from the gateway."""
    pass


class InsufficientCreditsError(LLMError):
    """HTTP 402 from the gateway."""
    pass


class RetryExhaustedError(LLMError):
    """Transient failures persisted through every attempt."""
    pass


class EmptyResponseError(LLMError):
    """The gateway answered without message content."""
    pass


class LLMResponseError(LLMError):
    """Model output could not be parsed."""
    pass


# =============================================================================
# OUTPUT HELPERS
# =============================================================================

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences, preferring the body of a ```json block."""
    match = _JSON_FENCE.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return re.sub(r"```[a-zA-Z]*\n?", "", text).strip()


def extract_json_block(text: str) -> Any:
    """Parse JSON from model output, tolerating fences and surrounding prose."""
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    json_start = cleaned.find("{")
    json_end = cleaned.rfind("}") + 1
    if json_start >= 0 and json_end > json_start:
        try:
            return json.loads(cleaned[json_start:json_end])
        except json.JSONDecodeError as e:
            raise LLMResponseError(f"Invalid JSON in model response: {e}") from e

    raise LLMResponseError("No JSON object in model response")


def _error_message(response: httpx.Response) -> str:
    """Build a readable message from an error response body."""
    message = f"AgentRouter error {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        message = f"{error['message']} (Code: {error.get('code') or response.status_code})"
    return message


# =============================================================================
# CLIENT
# =============================================================================

class LLMClient:
    """
    Chat-completion client with classified errors and retries.

    Retry policy:
    - 429 and 5xx responses, and transport errors, are retried
    - up to ``llm_max_retries`` attempts in total
    - the delay starts at ``llm_initial_retry_delay_seconds`` and doubles
    - 400 / 401 / 402 and other 4xx responses fail immediately
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = get_settings()
        self.api_url = self.settings.llm_api_url
        self.headers = {
            "Authorization": f"Bearer {self.settings.llm_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.settings.llm_referer,
            "X-Title": self.settings.llm_app_title,
        }
        self.max_retries = self.settings.llm_max_retries
        self.initial_delay = self.settings.llm_initial_retry_delay_seconds
        self._sleep = sleep

        # HTTP client for API calls
        self.client = httpx.AsyncClient(
            headers=self.headers,
            timeout=self.settings.llm_timeout_seconds,
            transport=transport,
        )

        # Initialize Langfuse for observability
        self.langfuse = None
        if self.settings.langfuse_enabled:
            if self.settings.langfuse_secret_key and self.settings.langfuse_public_key:
                try:
                    self.langfuse = Langfuse(
                        secret_key=self.settings.langfuse_secret_key,
                        public_key=self.settings.langfuse_public_key,
                        host=self.settings.langfuse_base_url,
                    )
                    logger.info("Langfuse initialized for LLM observability")
                except Exception as e:
                    logger.warning(f"Failed to initialize Langfuse: {e}")
            else:
                logger.info("Langfuse keys not configured, tracing disabled")

    @property
    def configured(self) -> bool:
        return bool(self.settings.llm_api_key)

    async def close(self):
        """Close the HTTP client and flush Langfuse."""
        await self.client.aclose()
        if self.langfuse:
            try:
                self.langfuse.flush()
            except Exception as e:
                logger.warning(f"Failed to flush Langfuse: {e}")

    # =========================================================================
    # REQUESTS
    # =========================================================================

    async def _post_with_retry(self, payload: dict[str, Any]) -> httpx.Response:
        """POST to the gateway, retrying transient failures with backoff."""
        retries = 0
        delay = self.initial_delay

        while True:
            try:
                response = await self.client.post(self.api_url, json=payload)
            except httpx.TransportError as e:
                retries += 1
                if retries >= self.max_retries:
                    raise RetryExhaustedError(
                        f"Network error after {self.max_retries} retries: {e}"
                    ) from e
                logger.warning(
                    f"LLM network error: {e}. Attempt {retries}/{self.max_retries}, "
                    f"retrying in {delay}s"
                )
                await self._sleep(delay)
                delay *= 2
                continue

            if response.is_success:
                return response

            status = response.status_code
            message = _error_message(response)

            if status == 400:
                raise BadRequestError(f"Bad Request: {message}", status)
            if status == 401:
                raise UnauthorizedError(f"Unauthorized: {message}", status)
            if status == 402:
                raise InsufficientCreditsError(f"Insufficient Credits: {message}", status)
            if status == 429 or status >= 500:
                retries += 1
                if retries >= self.max_retries:
                    raise RetryExhaustedError(
                        f"Failed after {self.max_retries} retries: {message}", status
                    )
                logger.warning(
                    f"LLM gateway returned {status}. Attempt {retries}/{self.max_retries}, "
                    f"retrying in {delay}s"
                )
                await self._sleep(delay)
                delay *= 2
                continue

            raise LLMError(message, status)

    def _extract_content(self, result: dict) -> str:
        """Extract text content from API response, handling list/dict formats."""
        choices = result.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content", "")

        # Handle case where content is a list (multi-part response)
        if isinstance(content, list):
            text_parts = []
            for part in content:
                if isinstance(part, str):
                    text_parts.append(part)
                elif isinstance(part, dict) and "text" in part:
                    text_parts.append(part["text"])
            content = "".join(text_parts)

        return content if isinstance(content, str) else str(content)

    async def complete(
        self,
        prompt: str | None = None,
        messages: list[Message] | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        trace_name: str = "llm_call",
        trace_metadata: dict | None = None,
    ) -> str:
        """
        Run a chat completion and return the message text.

        Args:
            prompt: Single user prompt (ignored when messages are given)
            messages: Full chat history
            model: Model override (defaults to llm_default_model)
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response
            trace_name: Name for Langfuse span
            trace_metadata: Additional metadata for span

        Returns:
            Model response text
        """
        if not self.configured:
            raise LLMConfigurationError("LLM API key is not configured")

        if messages is None:
            messages = [{"role": "user", "content": prompt or ""}]

        payload: dict[str, Any] = {
            "model": model or self.settings.llm_default_model,
            "messages": messages,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        span = None
        if self.langfuse:
            try:
                span = self.langfuse.start_span(
                    name=trace_name,
                    input=messages,
                    metadata={"model": payload["model"], **(trace_metadata or {})},
                )
            except Exception as lf_err:
                logger.warning(f"Langfuse span start failed: {lf_err}")
                span = None

        try:
            response = await self._post_with_retry(payload)
            content = self._extract_content(response.json())
        except LLMError as e:
            logger.error(f"LLM call '{trace_name}' failed: {e}")
            if span:
                try:
                    span.update(level="ERROR", status_message=str(e))
                    span.end()
                except Exception:
                    pass
            raise

        if span:
            try:
                span.update(output=content)
                span.end()
            except Exception:
                pass

        if not content:
            raise EmptyResponseError("No content from AgentRouter")
        return content

    async def complete_json(self, prompt: str, **kwargs) -> Any:
        """Run a completion and parse the JSON it contains."""
        text = await self.complete(prompt, **kwargs)
        return extract_json_block(text)

    async def proxy_completion(self, payload: dict[str, Any]) -> tuple[int, dict[str, Any]]:
        """
        Forward a completion request unchanged, without retries.

        Returns the upstream status code and JSON body. Timeouts propagate
        as httpx.TimeoutException so the caller can answer 504.
        """
        response = await self.client.post(
            self.api_url,
            json=payload,
            headers={"Accept": "application/json"},
            timeout=self.settings.llm_proxy_timeout_seconds,
        )
        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        if response.is_success:
            usage = data.get("usage") or {}
            logger.info(f"AI proxy response: tokens={usage.get('total_tokens', 0)}")
        else:
            logger.error(f"AI proxy upstream error {response.status_code}: {data}")
        return response.status_code, data
