"""Generation-service client: one Gemini `generateContent` call per run."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from daily_builder.builder.errors import GenerationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"
DEFAULT_TIMEOUT_SECONDS = 120.0


class TextGenerator(Protocol):
    """Anything that turns a prompt into response text."""

    def generate(self, prompt: str) -> str:
        """Return the generated text for `prompt`."""


class GeminiClient:
    """Thin httpx wrapper around the Gemini REST API.

    Exactly one request is made per `generate` call. Failures are not retried;
    they surface as `GenerationError` and end the run.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._transport = transport

    @property
    def model(self) -> str:
        return self._model

    def generate(self, prompt: str) -> str:
        if not self._api_key:
            raise GenerationError("Gemini API key is not configured. Set GEMINI_API_KEY.")

        url = f"{self._base_url}/models/{self._model}:generateContent"
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        logger.info("Calling Gemini model %s (prompt_chars=%d)", self._model, len(prompt))
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    url,
                    json=body,
                    headers={"x-goog-api-key": self._api_key},
                )
        except httpx.TimeoutException as error:
            raise GenerationError(f"Gemini request timed out: {error}") from error
        except httpx.HTTPError as error:
            raise GenerationError(f"Gemini request failed: {error}") from error

        if not response.is_success:
            raise GenerationError(
                f"Gemini returned HTTP {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as error:
            raise GenerationError("Gemini response is not valid JSON.") from error

        text = response_text(payload)
        if not text:
            raise GenerationError("Gemini response contains no text.")
        logger.info("Gemini response received (chars=%d)", len(text))
        return text


def response_text(payload: Any) -> str:
    """Join the text parts of the first candidate, empty when there are none."""

    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        return ""
    content = first.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    return "".join(
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
