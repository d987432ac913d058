from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RegenerateSummaryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing id gets its own 400 message instead of a generic validation error.
    file_id: str | None = Field(default=None, alias="fileId")


class RegenerateSummaryResponse(BaseModel):
    success: bool = True
    message: str = "Summary regenerated successfully"
    summary: str
