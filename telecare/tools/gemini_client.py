"""Gemini Generative Language API client.

Thin async wrapper over the ``generateContent`` REST endpoint. Callers own
the fallback policy; this module only reports failures through the
``GeminiError`` hierarchy (plus httpx transport errors and timeouts).
"""

import httpx
import logging
from typing import Any, Dict, Optional

from telecare.config.llm_config import GenerationConfig
from telecare.config.settings import settings

logger = logging.getLogger(__name__)


class GeminiError(Exception):
    """Base class for generative-text service failures."""


class GeminiNotConfiguredError(GeminiError):
    """No API key configured. An expected condition that selects the fallback path."""


class GeminiHTTPError(GeminiError):
    """The service answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Gemini API error {status_code}: {body[:200]}")
        self.status_code = status_code
        self.body = body


class GeminiResponseError(GeminiError):
    """The service answered 2xx but the body is not a JSON object."""


def extract_text(result: Dict[str, Any]) -> Optional[str]:
    """Return the first candidate's first text part, or None."""
    try:
        text = result["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text or None


class GeminiClient:
    """Client for a single Gemini model.

    Args:
        api_key: Access credential; None means the service is not configured
        model: Model name (e.g. "gemini-1.5-flash")
        endpoint: Base URL of the v1beta API
        timeout: Seconds before the HTTP call is abandoned
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model or settings.gemini_model
        self.endpoint = (endpoint or settings.gemini_endpoint).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.gemini_timeout_seconds
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "GeminiClient":
        return cls(api_key=settings.gemini_api_key or None)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def url(self) -> str:
        return f"{self.endpoint}/models/{self.model}:generateContent"

    async def generate(self, prompt: str, config: GenerationConfig) -> Optional[str]:
        """Send one prompt and return the first generated text.

        Returns:
            The candidate text, or None when the response is well-formed but
            carries no usable text.

        Raises:
            GeminiNotConfiguredError: If no API key is configured
            GeminiHTTPError: On a non-2xx status
            GeminiResponseError: If the body is not a JSON object
            httpx.HTTPError: On transport failures and timeouts
        """
        if not self.is_configured:
            raise GeminiNotConfiguredError("Gemini API key not configured")

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": config.to_request(),
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(
                self.url,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=payload,
            )

        if resp.status_code < 200 or resp.status_code >= 300:
            raise GeminiHTTPError(resp.status_code, resp.text)

        try:
            result = resp.json()
        except ValueError as e:
            raise GeminiResponseError(f"Gemini returned a non-JSON body: {e}") from e

        if not isinstance(result, dict):
            raise GeminiResponseError("Gemini returned an unexpected body shape")

        return extract_text(result)
