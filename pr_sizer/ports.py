"""Capability interfaces for the collaborators an evaluation run drives."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from pr_sizer.scoring import EvaluationResult
from pr_sizer.github_client import Comment, Label


class RepositoryClient(Protocol):
    """Source control access for the repository under evaluation."""

    def clone(self) -> None:
        """Clone the repository; raises RepositoryAccessError on failure."""

    def diff(self, base_ref: str, head_ref: str) -> str:
        """Return the unified diff between two refs."""


class ScoringEngine(Protocol):
    """Turns a unified diff into a score and category."""

    def evaluate(self, diff: str) -> EvaluationResult:
        """Evaluate a diff; raises ScoringError when it cannot."""


class ReviewPlatformClient(Protocol):
    """Label and comment operations against one repository."""

    def get_label(self, name: str) -> Label | None:
        """Return the label, or None when it does not exist."""

    def create_label(self, name: str, color: str | None = None) -> Label:
        """Create a repository label."""

    def add_labels(self, pr_number: int, names: Sequence[str]) -> None:
        """Add labels to a pull request."""

    def list_comments(self, pr_number: int) -> Sequence[Comment]:
        """List the pull request's comments, oldest first."""

    def add_comment(self, pr_number: int, body: str) -> None:
        """Post a comment on a pull request."""


class ArtifactWriter(Protocol):
    """Persists a serialized score artifact."""

    def write(self, filename: str, content: str) -> str:
        """Write the artifact and return its location."""


class RunReporter(Protocol):
    """Sink for informational messages, step outputs and the failure status."""

    def info(self, message: str) -> None:
        """Emit a human-readable progress or skip message."""

    def set_output(self, name: str, value: object) -> None:
        """Publish a named step output."""

    def set_failed(self, message: str) -> None:
        """Mark the run as failed with a human-readable message."""
