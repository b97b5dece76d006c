"""
LLM client abstraction for the study's language-model providers.

Provides an async interface that sends a full Transcript with:
- Structured logging of requests/responses
- Bounded timeout per call (no retries)
- Usage tracking (tokens)

Supported providers:
- gemini: Google Gemini generateContent API (default)
- anthropic: Claude Messages API
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import time

import httpx
import structlog

from src.core.config import settings
from src.core.exceptions import (
    ConfigurationError,
    LLMError,
    LLMInvalidResponseError,
    LLMTimeoutError,
)
from src.domain.models.transcript import Transcript, TranscriptRole

log = structlog.get_logger(__name__)


# =============================================================================
# Provider defaults
# =============================================================================

# Override via LLM_MODEL / LLM_BASE_URL if needed.

GEMINI_DEFAULTS = dict(
    model="gemini-2.0-flash",
    base_url="https://generativelanguage.googleapis.com/v1",
)

ANTHROPIC_DEFAULTS = dict(
    model="claude-sonnet-4-6",
    base_url="https://api.anthropic.com/v1",
    max_tokens=2048,
)

PROVIDER_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "gemini": GEMINI_DEFAULTS,
    "anthropic": ANTHROPIC_DEFAULTS,
}


# =============================================================================
# Response and Base Classes
# =============================================================================


@dataclass
class LLMResponse:
    """Standardized LLM response.

    content is "" when the provider answered successfully without text.
    """

    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0
    raw_response: Optional[Dict[str, Any]] = None


class LLMClient(ABC):
    """Abstract base for LLM providers."""

    provider_name: str = "unknown"
    display_name: str = "LLM"

    def __init__(self, model: str, base_url: str, timeout: float):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @abstractmethod
    async def generate(
        self,
        transcript: Transcript,
        timeout: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate the next completion for a transcript.

        Args:
            transcript: Ordered role-tagged blocks, prompt last
            timeout: Optional timeout override in seconds

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMTimeoutError: Call exceeded the timeout
            LLMError: Non-success status or transport failure
            LLMInvalidResponseError: Body is not a JSON object of the expected shape
        """
        pass

    async def _post_json(
        self,
        url: str,
        headers: Dict[str, str],
        payload: Dict[str, Any],
        timeout: float,
    ) -> Dict[str, Any]:
        """Single POST with error mapping. Never retries."""
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            log.warning(
                "llm_timeout",
                provider=self.provider_name,
                timeout_seconds=timeout,
            )
            raise LLMTimeoutError(
                f"LLM call timed out (timeout={timeout}s)"
            ) from e
        except httpx.HTTPStatusError as e:
            log.error(
                "llm_http_error",
                provider=self.provider_name,
                status_code=e.response.status_code,
                body=e.response.text[:500],
            )
            raise LLMError(
                f"Failed to get response from {self.display_name} API "
                f"(status {e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            log.error("llm_transport_error", provider=self.provider_name, error=str(e))
            raise LLMError(f"Failed to get response from {self.display_name} API: {e}") from e
        except ValueError as e:
            raise LLMInvalidResponseError(
                f"{self.display_name} API returned a non-JSON body"
            ) from e

        if not isinstance(data, dict):
            raise LLMInvalidResponseError(
                f"{self.display_name} API returned an unexpected payload"
            )
        return data


# =============================================================================
# Gemini Client
# =============================================================================


class GeminiClient(LLMClient):
    """Google Gemini generateContent client.

    Each transcript block is sent as its own content entry with role
    "user" or "model". The completion is read from
    candidates[0].content.parts[0].text.
    """

    provider_name = "gemini"
    display_name = "Gemini"

    def __init__(
        self,
        model: str,
        timeout: float,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_output_tokens: Optional[int] = None,
    ):
        """
        Initialize Gemini client.

        Raises:
            ConfigurationError: If API key is not configured
        """
        super().__init__(
            model=model,
            base_url=base_url or GEMINI_DEFAULTS["base_url"],
            timeout=timeout,
        )
        self.api_key = api_key or settings.gemini_api_key
        self.max_output_tokens = max_output_tokens

        if not self.api_key:
            raise ConfigurationError("Gemini API key not configured (GEMINI_API_KEY)")

        log.info(
            "gemini_client_initialized",
            model=self.model,
            base_url=self.base_url,
            timeout=self.timeout,
        )

    def build_payload(self, transcript: Transcript) -> Dict[str, Any]:
        """Map transcript blocks onto Gemini contents."""
        payload: Dict[str, Any] = {
            "contents": [
                {"role": role.value, "parts": [{"text": text}]}
                for role, text in transcript.entries()
            ]
        }
        if self.max_output_tokens:
            payload["generationConfig"] = {"maxOutputTokens": self.max_output_tokens}
        return payload

    async def generate(
        self,
        transcript: Transcript,
        timeout: Optional[float] = None,
    ) -> LLMResponse:
        timeout = timeout or self.timeout
        start = time.perf_counter()

        log.debug(
            "llm_call_start",
            provider=self.provider_name,
            model=self.model,
            block_count=len(transcript),
            prompt_length=len(transcript.prompt),
        )

        data = await self._post_json(
            f"{self.base_url}/models/{self.model}:generateContent",
            headers={
                "x-goog-api-key": self.api_key,
                "Content-Type": "application/json",
            },
            payload=self.build_payload(transcript),
            timeout=timeout,
        )

        latency_ms = (time.perf_counter() - start) * 1000
        content = self._extract_text(data)

        usage_meta = data.get("usageMetadata") or {}
        usage = {
            "input_tokens": usage_meta.get("promptTokenCount", 0),
            "output_tokens": usage_meta.get("candidatesTokenCount", 0),
        }

        log.info(
            "llm_call_complete",
            provider=self.provider_name,
            model=self.model,
            latency_ms=round(latency_ms, 2),
            input_tokens=usage["input_tokens"],
            output_tokens=usage["output_tokens"],
        )

        return LLMResponse(
            content=content,
            model=data.get("modelVersion", self.model),
            usage=usage,
            latency_ms=latency_ms,
            raw_response=data,
        )

    def _extract_text(self, data: Dict[str, Any]) -> str:
        """Read candidates[0].content.parts[0].text, "" when absent."""
        try:
            candidates = data.get("candidates") or []
            if not candidates:
                return ""
            parts = (candidates[0].get("content") or {}).get("parts") or []
            if not parts:
                return ""
            text = parts[0].get("text")
        except AttributeError as e:
            raise LLMInvalidResponseError("Gemini API returned malformed candidates") from e

        if text is None:
            return ""
        if not isinstance(text, str):
            raise LLMInvalidResponseError("Gemini API returned non-text content")
        return text


# =============================================================================
# Anthropic Client
# =============================================================================


class AnthropicClient(LLMClient):
    """Anthropic Claude Messages API client.

    The Messages API requires alternating roles, so consecutive transcript
    blocks with the same role are joined into one message (the system and
    task-context blocks are both user-role and lead the conversation).
    """

    provider_name = "anthropic"
    display_name = "Anthropic"

    def __init__(
        self,
        model: str,
        timeout: float,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        """
        Initialize Anthropic client.

        Raises:
            ConfigurationError: If API key is not configured
        """
        super().__init__(
            model=model,
            base_url=base_url or ANTHROPIC_DEFAULTS["base_url"],
            timeout=timeout,
        )
        self.api_key = api_key or settings.anthropic_api_key
        self.max_tokens = max_tokens or ANTHROPIC_DEFAULTS["max_tokens"]

        if not self.api_key:
            raise ConfigurationError(
                "Anthropic API key not configured (ANTHROPIC_API_KEY)"
            )

        log.info(
            "anthropic_client_initialized",
            model=self.model,
            base_url=self.base_url,
            timeout=self.timeout,
        )

    def build_messages(self, transcript: Transcript) -> List[Dict[str, str]]:
        """Map transcript blocks onto alternating Messages API entries."""
        messages: List[Dict[str, str]] = []
        for role, text in transcript.entries():
            api_role = "user" if role == TranscriptRole.USER else "assistant"
            if messages and messages[-1]["role"] == api_role:
                messages[-1]["content"] += "\n\n" + text
            else:
                messages.append({"role": api_role, "content": text})
        return messages

    async def generate(
        self,
        transcript: Transcript,
        timeout: Optional[float] = None,
    ) -> LLMResponse:
        timeout = timeout or self.timeout
        start = time.perf_counter()

        log.debug(
            "llm_call_start",
            provider=self.provider_name,
            model=self.model,
            block_count=len(transcript),
            prompt_length=len(transcript.prompt),
        )

        data = await self._post_json(
            f"{self.base_url}/messages",
            headers={
                "x-api-key": self.api_key,
                "content-type": "application/json",
                "anthropic-version": "2023-06-01",
            },
            payload={
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": self.build_messages(transcript),
            },
            timeout=timeout,
        )

        latency_ms = (time.perf_counter() - start) * 1000

        content = ""
        blocks = data.get("content") or []
        if blocks:
            if not isinstance(blocks[0], dict):
                raise LLMInvalidResponseError("Anthropic API returned malformed content")
            content = blocks[0].get("text", "") or ""

        usage_data = data.get("usage") or {}
        usage = {
            "input_tokens": usage_data.get("input_tokens", 0),
            "output_tokens": usage_data.get("output_tokens", 0),
        }

        log.info(
            "llm_call_complete",
            provider=self.provider_name,
            model=self.model,
            latency_ms=round(latency_ms, 2),
            input_tokens=usage["input_tokens"],
            output_tokens=usage["output_tokens"],
        )

        return LLMResponse(
            content=content,
            model=data.get("model", self.model),
            usage=usage,
            latency_ms=latency_ms,
            raw_response=data,
        )


# =============================================================================
# Client Factory
# =============================================================================


def get_llm_client(provider: Optional[str] = None) -> LLMClient:
    """
    Factory for the configured LLM client.

    Uses provider defaults with optional LLM_MODEL / LLM_BASE_URL overrides.

    Args:
        provider: "gemini" or "anthropic" (defaults to settings.llm_provider)

    Returns:
        LLMClient instance

    Raises:
        ConfigurationError: If the provider is unknown or its API key is missing
    """
    provider = provider or settings.llm_provider
    if provider not in PROVIDER_DEFAULTS:
        raise ConfigurationError(
            f"Unknown LLM provider '{provider}'. "
            f"Supported providers: {', '.join(PROVIDER_DEFAULTS)}"
        )

    defaults = PROVIDER_DEFAULTS[provider]
    model = settings.llm_model or defaults["model"]
    base_url = settings.llm_base_url or defaults["base_url"]
    timeout = settings.llm_timeout_seconds

    if provider == "gemini":
        return GeminiClient(
            model=model,
            timeout=timeout,
            base_url=base_url,
            max_output_tokens=settings.llm_max_tokens,
        )
    return AnthropicClient(
        model=model,
        timeout=timeout,
        base_url=base_url,
        max_tokens=settings.llm_max_tokens,
    )
