from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import Annotated

from fastapi import Depends, Request

from scribe.core.config import Settings, get_settings
from scribe.crud.stores import Stores, build_stores
from scribe.services.summarizer import GeminiSummarizer

SummarizerFactory = Callable[[], GeminiSummarizer]


async def get_stores(settings: Annotated[Settings, Depends(get_settings)]) -> Stores:
    return await build_stores(settings)


def get_summarizer_factory(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> SummarizerFactory:
    """
    Return a constructor for the summarizer rather than the summarizer itself.

    Construction fails without GEMINI_API_KEY, and the request handler must
    validate the caller and the file before reporting that.
    """
    client = getattr(request.app.state, "http_client", None)
    return partial(GeminiSummarizer.from_settings, settings, client)
