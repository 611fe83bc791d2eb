"""Text generation through the Gemini `generateContent` REST method."""
from __future__ import annotations
import logging
from typing import Any

import httpx

from shadowbinder.provider.base import ProviderError

LOGGER = logging.getLogger("shadowbinder.provider.gemini")


class GeminiProvider:
    """Minimal Gemini client: prompt in, text out.

    A fresh `httpx.Client` is opened per call unless one is injected.
    """

    def __init__(
        self,
        api_key: str,
        model_id: str,
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model_id}:generateContent"

    def generate_text(self, prompt: str) -> str:
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key}

        try:
            if self._client is not None:
                r = self._client.post(self.url, headers=headers, json=payload)
                data = self._read(r)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    r = client.post(self.url, headers=headers, json=payload)
                    data = self._read(r)
        except httpx.TimeoutException as e:
            raise ProviderError(f"Gemini request timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Gemini request failed: {e}") from e

        return extract_text(data)

    def _read(self, r: httpx.Response) -> dict[str, Any]:
        if r.status_code >= 400:
            raise ProviderError(_error_message(r))
        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError("Malformed Gemini response: body is not JSON") from e
        if not isinstance(data, dict):
            raise ProviderError("Malformed Gemini response: expected a JSON object")
        return data


def _error_message(r: httpx.Response) -> str:
    """Prefer Gemini's own `error.message`; fall back to the status line."""
    try:
        message = r.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = None
    if message:
        return f"[{r.status_code}] {message}"
    return f"Gemini responded with HTTP {r.status_code}"


def extract_text(data: dict[str, Any]) -> str:
    """
    Pull the generated text out of a `generateContent` response.

    Args:
        data: Decoded response body.

    Returns:
        Concatenated text parts of the first candidate.

    Raises:
        ProviderError: the prompt was blocked, no text came back, or the
            payload does not have the documented shape.
    """
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise ProviderError("Malformed Gemini response: candidates is not a list")
    if not candidates:
        feedback = data.get("promptFeedback") or {}
        if not isinstance(feedback, dict):
            raise ProviderError("Malformed Gemini response: promptFeedback is not an object")
        reason = feedback.get("blockReason")
        if reason:
            raise ProviderError(f"Text not available. Response was blocked due to {reason}")
        raise ProviderError("Malformed Gemini response: no candidates")

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise ProviderError("Malformed Gemini response: candidate is not an object")
    content = candidate.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if parts is not None and not isinstance(parts, list):
        raise ProviderError("Malformed Gemini response: content parts is not a list")
    texts = [p["text"] for p in parts or [] if isinstance(p, dict) and isinstance(p.get("text"), str)]
    if not texts:
        reason = candidate.get("finishReason")
        if reason and reason != "STOP":
            raise ProviderError(f"Text not available. Candidate finished with reason {reason}")
        raise ProviderError("Malformed Gemini response: candidate has no text")

    LOGGER.debug("Gemini returned %d text part(s)", len(texts))
    return "".join(texts)
