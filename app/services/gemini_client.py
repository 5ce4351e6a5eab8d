# gemini_client.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)
SAFETY_THRESHOLD = "BLOCK_MEDIUM_AND_ABOVE"

_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


@dataclass(frozen=True)
class CompletionFailure:
    kind: str  # not_configured | transport | http_status | error_response | malformed
    detail: str
    code: int | None = None
    status: str | None = None


@dataclass(frozen=True)
class CompletionResult:
    text: str | None = None
    failure: CompletionFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.text)


def strip_code_fences(text: str | None) -> str:
    """Remove a surrounding ```lang ... ``` block, including an unterminated one."""
    if not text:
        return ""
    value = text.strip()
    match = _FENCE_RE.match(value)
    if match:
        return match.group(1).strip()
    if value.startswith("```"):
        # Truncated completion: opening fence without a closing one.
        value = value[3:]
        first_newline = value.find("\n")
        if first_newline != -1 and re.fullmatch(r"[A-Za-z0-9_-]*", value[:first_newline].strip()):
            value = value[first_newline + 1:]
    return value.strip().strip("`").strip()


class GeminiClient:
    """Single-shot client for the Gemini ``generateContent`` endpoint.

    ``complete`` never raises: every failure comes back as a
    :class:`CompletionFailure` so callers can switch to their local fallback.
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        api_url: str,
        model: str,
        temperature: float = 0.2,
        max_output_tokens: int = 1024,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = (api_key or "").strip() or None
        self.api_url = api_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._transport = transport
        self._missing_key_logged = False

    @classmethod
    def from_settings(cls, settings: Settings, *, transport: httpx.BaseTransport | None = None) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            api_url=settings.gemini_api_url,
            model=settings.gemini_model,
            temperature=settings.gemini_temperature,
            max_output_tokens=settings.gemini_max_output_tokens,
            timeout=settings.gemini_timeout_seconds,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/models/{self.model}:generateContent"

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
            "safetySettings": [
                {"category": category, "threshold": SAFETY_THRESHOLD} for category in SAFETY_CATEGORIES
            ],
        }

    def complete(self, prompt: str, *, purpose: str = "analysis") -> CompletionResult:
        if not self.is_configured:
            if not self._missing_key_logged:
                logger.info("Gemini API key not configured; %s uses the local fallback", purpose)
                self._missing_key_logged = True
            return CompletionResult(failure=CompletionFailure(kind="not_configured", detail="GEMINI_API_KEY is not set"))

        try:
            with httpx.Client(
                timeout=self.timeout,
                headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
                transport=self._transport,
            ) as client:
                response = client.post(self.endpoint, json=self.build_payload(prompt))
        except httpx.TimeoutException as exc:
            logger.warning("Gemini request timed out during %s: %s", purpose, exc)
            return CompletionResult(failure=CompletionFailure(kind="transport", detail=f"timeout: {exc}"))
        except httpx.HTTPError as exc:
            logger.warning("Gemini request failed during %s: %s", purpose, exc)
            return CompletionResult(failure=CompletionFailure(kind="transport", detail=str(exc)))

        return self._parse_response(response, purpose=purpose)

    def _parse_response(self, response: httpx.Response, *, purpose: str) -> CompletionResult:
        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            failure = CompletionFailure(
                kind="error_response",
                detail=str(error.get("message") or "unknown error"),
                code=_as_int(error.get("code")) or response.status_code,
                status=error.get("status"),
            )
            logger.error(
                "Gemini API error during %s: code=%s status=%s message=%s",
                purpose,
                failure.code,
                failure.status,
                failure.detail,
            )
            return CompletionResult(failure=failure)

        if response.status_code >= 400:
            logger.error("Gemini API returned HTTP %s during %s", response.status_code, purpose)
            return CompletionResult(
                failure=CompletionFailure(
                    kind="http_status",
                    detail=response.text[:500],
                    code=response.status_code,
                )
            )

        if not isinstance(body, dict):
            logger.error("Gemini response for %s was not a JSON object", purpose)
            return CompletionResult(failure=CompletionFailure(kind="malformed", detail="response is not a JSON object"))

        feedback = body.get("promptFeedback")
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            logger.warning("Gemini blocked the %s prompt: %s", purpose, feedback.get("blockReason"))

        text = _extract_text(body)
        if not text:
            logger.error("Gemini response for %s had no candidate text", purpose)
            return CompletionResult(failure=CompletionFailure(kind="malformed", detail="no candidate text in response"))

        return CompletionResult(text=text)


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _extract_text(body: dict[str, Any]) -> str | None:
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    if not isinstance(first, dict):
        return None

    content = first.get("content")
    # The API returns an object; some proxies wrap it in a list.
    if isinstance(content, list):
        content = content[0] if content else None
    if not isinstance(content, dict):
        return None

    parts = content.get("parts")
    if not isinstance(parts, list):
        return None
    texts = [p.get("text") for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    joined = "".join(texts).strip()
    return joined or None
