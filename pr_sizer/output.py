"""Comment, label and artifact rendering for an evaluation result."""

from __future__ import annotations

import csv
import io
import re
from datetime import UTC, datetime

from pr_sizer.config import LabelingConfig
from pr_sizer.context import PullRequestContext
from pr_sizer.schema import SCORE_ARTIFACT_FIELDS, ScoreArtifact
from pr_sizer.scoring import EvaluationResult

TEMPLATE_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(?P<name>[a-z_]+)\s*\}\}")
SCORE_ARTIFACT_BASENAME = "sizeup-score"


def category_label_name(labeling: LabelingConfig, category: str) -> str:
    return f"{labeling.category_label_prefix}{category}"


def category_label_color(labeling: LabelingConfig, category: str) -> str | None:
    return labeling.colors.get(category)


def render_comment(
    template: str,
    *,
    pull: PullRequestContext,
    result: EvaluationResult,
    threshold: float | None,
) -> str:
    """Fill `{{name}}` placeholders; unknown placeholders are left untouched."""
    values = {
        "author": pull.author_login,
        "score": str(result.score),
        "category": result.category,
        "threshold": "" if threshold is None else f"{threshold:g}",
    }

    def replace(match: re.Match[str]) -> str:
        name = match.group("name")
        return values.get(name, match.group(0))

    return TEMPLATE_PLACEHOLDER_PATTERN.sub(replace, template)


def build_score_artifact(
    *,
    pull: PullRequestContext,
    result: EvaluationResult,
    opted_in: bool,
    evaluated_at: datetime | None = None,
) -> ScoreArtifact:
    """Build the artifact payload for an evaluation result."""
    return ScoreArtifact(
        repository=pull.repo_full_name,
        pull_request_number=pull.number,
        author=pull.author_login,
        draft=pull.draft,
        opted_in=opted_in,
        score=result.score,
        category=result.category,
        evaluated_at=evaluated_at or datetime.now(tz=UTC),
    )


def serialize_score_artifact(artifact: ScoreArtifact, artifact_format: str) -> tuple[str, str]:
    """Return (filename, content) for the artifact in the requested format."""
    if artifact_format == "json":
        return f"{SCORE_ARTIFACT_BASENAME}.json", artifact.model_dump_json(indent=2) + "\n"
    if artifact_format == "csv":
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=SCORE_ARTIFACT_FIELDS, lineterminator="\n")
        writer.writeheader()
        row = artifact.model_dump(mode="json")
        writer.writerow({field: row[field] for field in SCORE_ARTIFACT_FIELDS})
        return f"{SCORE_ARTIFACT_BASENAME}.csv", buffer.getvalue()
    raise ValueError(f"Unsupported score artifact format '{artifact_format}'.")
