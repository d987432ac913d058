"""Transcript summarization through the Gemini generateContent REST API."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx

from scribe.core.config import Settings
from scribe.core.constants import MAX_TRANSCRIPT_CHARS, MIN_SUMMARY_CHARS, SUMMARY_PROMPT_TEMPLATE
from scribe.core.errors import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

# Captures everything after SUMMARY: up to the TOPICS: marker or the end of the text.
SUMMARY_SECTION_RE = re.compile(r"SUMMARY:\s*(.+?)(?=TOPICS:|$)", re.DOTALL)

# Response bodies can be large; keep diagnostics bounded.
_ERROR_BODY_LOG_CHARS = 2000


class SummarizationError(ExternalServiceError):
    retryable = False


class EmptyTranscriptError(SummarizationError):
    pass


class UpstreamAuthError(SummarizationError):
    pass


class UpstreamForbiddenError(SummarizationError):
    pass


class UpstreamRateLimitError(SummarizationError):
    retryable = True


class UpstreamTimeoutError(SummarizationError):
    retryable = True


class UpstreamUnavailableError(SummarizationError):
    retryable = True


class UpstreamResponseError(SummarizationError):
    pass


class EmptyResponseError(SummarizationError):
    pass


class InvalidSummaryError(SummarizationError):
    pass


@dataclass(frozen=True)
class SummaryResult:
    """Outcome of a non-raising generation attempt."""

    summary: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.summary is not None


def truncate_transcript(text: str, limit: int = MAX_TRANSCRIPT_CHARS) -> str:
    return text[:limit] if len(text) > limit else text


def build_summary_prompt(transcript: str) -> str:
    return SUMMARY_PROMPT_TEMPLATE.format(transcript=transcript)


def extract_summary(generated_text: str) -> str | None:
    """Return the trimmed SUMMARY: section, or None when the marker is missing."""
    match = SUMMARY_SECTION_RE.search(generated_text)
    if not match:
        return None
    return match.group(1).strip()


def _extract_generated_text(payload: Any) -> str:
    """Pull candidates[0].content.parts[0].text out of a generateContent response."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return

    body = response.text
    logger.error(
        "Gemini API error",
        extra={
            "status_code": response.status_code,
            "reason": response.reason_phrase,
            "response_body": body[:_ERROR_BODY_LOG_CHARS],
        },
    )

    status = response.status_code
    if status == 401:
        raise UpstreamAuthError("Invalid API key - please check GEMINI_API_KEY configuration.")
    if status == 403:
        raise UpstreamForbiddenError("API access forbidden - please check API key permissions.")
    if status == 429:
        raise UpstreamRateLimitError("API rate limit exceeded - please try again later.")
    raise UpstreamResponseError(f"Gemini API error: {status} - {body}")


class GeminiSummarizer:
    """
    Summarizes transcripts with a single generateContent call.

    The API key is required at construction; a summarizer without one cannot
    be built. Pass a shared ``httpx.AsyncClient`` to reuse connections, or
    leave it out to open a short-lived client per call.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1",
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("AI service not configured. Please set up GEMINI_API_KEY.")

        self._api_key = api_key
        self.model = model.removeprefix("models/")
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None) -> GeminiSummarizer:
        return cls(
            settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout_seconds=settings.gemini_timeout_seconds,
            client=client,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def _post(self, prompt: str) -> httpx.Response:
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        # The key travels as a query parameter; never log the full URL.
        params = {"key": self._api_key}

        try:
            if self._client is not None:
                return await self._client.post(
                    self.endpoint,
                    params=params,
                    json=payload,
                    timeout=self.timeout_seconds,
                )
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                return await client.post(self.endpoint, params=params, json=payload)
        except httpx.TimeoutException as exc:
            raise UpstreamTimeoutError("Gemini API request timed out.") from exc
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError("Failed to reach Gemini API.") from exc

    async def _summarize(self, transcript: str) -> str:
        prompt = build_summary_prompt(transcript)
        logger.info("requesting summary", extra={"model": self.model, "prompt_chars": len(prompt)})
        response = await self._post(prompt)
        _raise_for_status(response)

        try:
            data = response.json()
        except ValueError as exc:
            raise EmptyResponseError("Empty response from AI service.") from exc

        generated_text = _extract_generated_text(data)
        if not generated_text:
            logger.error("No generated text in Gemini response")
            raise EmptyResponseError("Empty response from AI service.")
        logger.debug("generated text", extra={"generated_chars": len(generated_text)})

        summary = extract_summary(generated_text)
        if summary is None:
            logger.error("Could not extract summary from generated text")
        if not summary or len(summary) < MIN_SUMMARY_CHARS:
            logger.error("Summary too short or invalid", extra={"summary_chars": len(summary or "")})
            raise InvalidSummaryError("Generated summary is too short or invalid.")

        return summary

    async def generate(self, text: str) -> str:
        """Summarize ``text``, truncated to the transcript budget; raises SummarizationError."""
        if not text or not text.strip():
            raise EmptyTranscriptError("No transcript text provided.")

        truncated = truncate_transcript(text)
        logger.info(
            "summary generation start",
            extra={"transcript_chars": len(text), "truncated": len(truncated) < len(text)},
        )
        summary = await self._summarize(truncated)
        logger.info("summary generation complete", extra={"summary_chars": len(summary)})
        return summary

    async def generate_with_fallback(self, text: str) -> SummaryResult:
        """Summarize the full ``text`` without truncation; failures come back as a result, not an exception."""
        if not text or not text.strip():
            return SummaryResult(error="No transcript text provided.")

        try:
            summary = await self._summarize(text)
        except SummarizationError as exc:
            logger.warning(
                "fallback summary generation failed",
                extra={"error_type": type(exc).__name__, "retryable": exc.retryable},
            )
            return SummaryResult(error=exc.detail)

        return SummaryResult(summary=summary)
