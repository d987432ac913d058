from __future__ import annotations

import logging

from scribe.api.deps.auth import AuthContext
from scribe.api.deps.services import SummarizerFactory
from scribe.core.constants import DEFAULT_TOPIC
from scribe.core.errors import (
    ConfigurationError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    PersistenceError,
    SummaryGenerationError,
)
from scribe.core.logging import log_context
from scribe.crud.stores import Stores
from scribe.schemas.files import RegenerateSummaryRequest, RegenerateSummaryResponse
from scribe.services.summarizer import SummarizationError

logger = logging.getLogger(__name__)


async def regenerate_file_summary(
    request: RegenerateSummaryRequest,
    auth: AuthContext,
    stores: Stores,
    summarizer_factory: SummarizerFactory,
) -> RegenerateSummaryResponse:
    """
    Regenerate the AI summary of one of the caller's files and persist it.

    Every precondition is checked before the summarizer is built, so a
    rejected request never reaches the Gemini API and never writes.
    """
    file_id = (request.file_id or "").strip()
    with log_context(user_id=auth.user_id, file_id=file_id or None):
        if not file_id:
            logger.warning("regenerate summary rejected: missing file id")
            raise InvalidRequestError("File ID is required.")

        file = await stores.files.find_by_id(file_id)
        if not file:
            logger.warning("regenerate summary rejected: file not found")
            raise NotFoundError("File not found.")

        if str(file.get("user_id")) != auth.user_id:
            logger.warning("regenerate summary rejected: file owned by another user")
            raise ForbiddenError("Not authorized to update this file.")

        transcript = file.get("transcript")
        if not isinstance(transcript, str) or not transcript.strip():
            logger.warning("regenerate summary rejected: file has no transcript")
            raise InvalidRequestError("File has no transcript to summarize.")

        try:
            summarizer = summarizer_factory()
        except ConfigurationError:
            logger.error("GEMINI_API_KEY is not configured")
            raise

        logger.info("regenerating summary", extra={"transcript_chars": len(transcript)})
        try:
            summary = await summarizer.generate(transcript)
        except SummarizationError as exc:
            logger.error(
                "summary generation failed",
                extra={"error_type": type(exc).__name__, "retryable": exc.retryable},
            )
            raise SummaryGenerationError("Failed to regenerate summary.", details=exc.detail) from exc

        updated = await stores.files.update(
            file_id,
            {
                "summary": summary,
                "topic": file.get("topic") or DEFAULT_TOPIC,
            },
        )
        if not updated:
            raise PersistenceError("Failed to save updated summary.")

        logger.info("summary regenerated", extra={"summary_chars": len(summary)})
        return RegenerateSummaryResponse(summary=summary)
