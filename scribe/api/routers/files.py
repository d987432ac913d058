from typing import Annotated

from fastapi import APIRouter, Depends

from scribe.api.deps.auth import AuthContext, get_auth_context
from scribe.api.deps.services import SummarizerFactory, get_stores, get_summarizer_factory
from scribe.application.summaries import regenerate_file_summary
from scribe.crud.stores import Stores
from scribe.schemas.errors import ErrorResponse
from scribe.schemas.files import RegenerateSummaryRequest, RegenerateSummaryResponse

router = APIRouter(prefix="/api/ai-settings", tags=["files"])


@router.post(
    "/regenerate-summary",
    response_model=RegenerateSummaryResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing file id or file has no transcript."},
        401: {"model": ErrorResponse, "description": "Missing or invalid auth token, or unknown user."},
        403: {"model": ErrorResponse, "description": "File belongs to another user."},
        404: {"model": ErrorResponse, "description": "File not found."},
        405: {"model": ErrorResponse, "description": "Only POST is allowed."},
        500: {"model": ErrorResponse, "description": "AI service misconfigured, generation or save failed."},
    },
)
async def regenerate_summary(
    request: RegenerateSummaryRequest,
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    stores: Annotated[Stores, Depends(get_stores)],
    summarizer_factory: Annotated[SummarizerFactory, Depends(get_summarizer_factory)],
) -> RegenerateSummaryResponse:
    return await regenerate_file_summary(request, auth, stores, summarizer_factory)
