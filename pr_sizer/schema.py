"""Schema contract for the persisted score artifact."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

SCORE_ARTIFACT_FIELDS = (
    "schema_version",
    "repository",
    "pull_request_number",
    "author",
    "draft",
    "opted_in",
    "score",
    "category",
    "evaluated_at",
)


class ScoreArtifact(BaseModel):
    """One evaluation result with the pull request it belongs to."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default="v1", pattern=r"^v\d+$")
    repository: str = Field(min_length=3)
    pull_request_number: int = Field(ge=1)
    author: str = Field(min_length=1)
    draft: bool
    opted_in: bool
    score: int = Field(ge=0)
    category: str = Field(min_length=1)
    evaluated_at: datetime
