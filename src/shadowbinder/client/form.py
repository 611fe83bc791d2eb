"""Form client: validates a prompt, submits it to the endpoint, renders the outcome.

State mirrors a single-page form: the prompt, the selected type, the last
result or error, a loading flag, and the notifications (toasts) raised so far.
"""
from __future__ import annotations
import html
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from shadowbinder.common.config import DEFAULT_CLIENT_TIMEOUT_S, DEFAULT_ENDPOINT_URL
from shadowbinder.common.schema import GenerationResponse, GenerationType

LOGGER = logging.getLogger("shadowbinder.client.form")

MAX_PROMPT_CHARS = 500
ECHO_CHARS = 50

VALIDATION_MESSAGE = "A valid incantation and type are required."
INVALID_RESPONSE_MESSAGE = "Invalid response from the abyss"
FALLBACK_ERROR_MESSAGE = "The abyss rejected your request."


class FormSubmissionError(Exception):
    pass


@dataclass(frozen=True)
class FormError:
    message: str


@dataclass(frozen=True)
class Notification:
    level: str  # "success" | "error"
    title: str
    description: str


@dataclass
class GenerationForm:
    """Single-submission form bound to one generation endpoint.

    Pass `client` to reuse an existing `httpx.Client` (its own timeout is
    then ignored in favour of `timeout`).
    """

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    timeout: float = DEFAULT_CLIENT_TIMEOUT_S
    client: httpx.Client | None = None
    prompt: str = ""
    type: str = GenerationType.TEXT.value
    result: GenerationResponse | None = None
    error: FormError | None = None
    loading: bool = False
    notifications: list[Notification] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Field updates
    # ------------------------------------------------------------------
    def set_prompt(self, value: str) -> None:
        self.prompt = value
        self.error = None

    def set_type(self, value: str | GenerationType) -> None:
        self.type = value.value if isinstance(value, GenerationType) else value
        self.error = None

    @property
    def is_valid(self) -> bool:
        stripped = self.prompt.strip()
        return (
            len(stripped) > 0
            and len(self.prompt) <= MAX_PROMPT_CHARS
            and self.type in {t.value for t in GenerationType}
        )

    @property
    def echo(self) -> str:
        if len(self.prompt) > ECHO_CHARS:
            return self.prompt[:ECHO_CHARS] + "..."
        return self.prompt

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    def submit(self) -> GenerationResponse | None:
        """
        Validate and submit the form once.

        Returns:
            The stored result on success, None on any failure or when a
            submission is already in flight.
        """
        if self.loading:
            LOGGER.debug("Submission ignored: request already in flight")
            return None

        if not self.is_valid:
            self.error = FormError(VALIDATION_MESSAGE)
            self._notify("error", "Forbidden Incantation",
                         "Provide a proper prompt and select a creation type.")
            return None

        self.loading = True
        self.error = None
        self.result = None
        try:
            data = self._post({"prompt": self.prompt, "type": self.type})
            self.result = _parse_result(data)
        except (FormSubmissionError, httpx.HTTPError, httpx.InvalidURL) as e:
            self._fail(str(e) or FALLBACK_ERROR_MESSAGE)
            return None
        finally:
            self.loading = False

        self._notify("success", "Creation Summoned",
                     f"Your {self.result.type.value} has emerged from the shadows.")
        return self.result

    def _post(self, payload: dict[str, str]) -> Any:
        deadline = time.monotonic() + self.timeout
        try:
            if self.client is not None:
                status_code, body = self._send(self.client, payload, deadline)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    status_code, body = self._send(client, payload, deadline)
        except httpx.TimeoutException as e:
            LOGGER.warning("Request to %s timed out after %ss", self.endpoint_url, self.timeout)
            raise FormSubmissionError(self._timeout_message()) from e
        except httpx.TransportError as e:
            LOGGER.warning("Request to %s failed: %s", self.endpoint_url, e)
            raise FormSubmissionError(f"Network error: {e}") from e

        if not 200 <= status_code < 300:
            raise FormSubmissionError(_error_from_body(status_code, body))
        try:
            return json.loads(body)
        except ValueError as e:
            raise FormSubmissionError(INVALID_RESPONSE_MESSAGE) from e

    def _send(self, client: httpx.Client, payload: dict[str, str], deadline: float) -> tuple[int, bytes]:
        """POST and read the whole body, aborting once `deadline` has passed.

        Per-step timeouts only bound a single connect/read, so a body that
        trickles in is checked against the overall deadline chunk by chunk.
        """
        remaining = max(deadline - time.monotonic(), 0.0)
        chunks: list[bytes] = []
        with client.stream("POST", self.endpoint_url, json=payload, timeout=remaining) as r:
            for chunk in r.iter_bytes():
                if time.monotonic() > deadline:
                    LOGGER.warning("Request to %s exceeded %ss while reading the body",
                                   self.endpoint_url, self.timeout)
                    raise FormSubmissionError(self._timeout_message())
                chunks.append(chunk)
            return r.status_code, b"".join(chunks)

    def _timeout_message(self) -> str:
        return f"Request timed out after {self.timeout:g} seconds"

    def _fail(self, message: str) -> None:
        self.result = None
        self.error = FormError(message)
        self._notify("error", "Ritual Failed", message)

    def _notify(self, level: str, title: str, description: str) -> None:
        note = Notification(level=level, title=title, description=description)
        self.notifications.append(note)
        log = LOGGER.info if level == "success" else LOGGER.warning
        log("%s: %s", title, description)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render_html(self) -> str:
        chunks: list[str] = []
        if self.error is not None:
            chunks.append(
                '<div role="alert" id="prompt-error" class="error">'
                f"<p>{html.escape(self.error.message)}</p></div>"
            )
        if self.result is not None:
            chunks.append('<section class="result" aria-labelledby="result-title">')
            chunks.append('<h2 id="result-title">Manifested Creation</h2>')
            if self.result.type is GenerationType.TEXT:
                chunks.append(f'<div class="prose"><p>{html.escape(self.result.content)}</p></div>')
            else:
                src = "data:image/png;base64," + html.escape(self.result.content, quote=True)
                chunks.append(f'<img src="{src}" alt="Manifested vision from the abyss" loading="lazy">')
            chunks.append("</section>")
        return "\n".join(chunks)

    def render_text(self) -> str:
        if self.error is not None:
            return f"Error: {self.error.message}"
        if self.result is None:
            return ""
        if self.result.type is GenerationType.TEXT:
            return self.result.content
        return f"[image: {len(self.result.content)} base64 characters]"


def _error_from_body(status_code: int, body: bytes) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return f"HTTP error! Status: {status_code}"


def _parse_result(data: Any) -> GenerationResponse:
    if not isinstance(data, dict) or not data.get("type") or not data.get("content"):
        raise FormSubmissionError(INVALID_RESPONSE_MESSAGE)
    try:
        return GenerationResponse.model_validate(data)
    except ValidationError as e:
        raise FormSubmissionError(INVALID_RESPONSE_MESSAGE) from e
