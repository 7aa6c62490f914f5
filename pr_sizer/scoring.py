"""Default scoring engine: sizes a unified diff by its changed lines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from fnmatch import fnmatch

from pr_sizer.config import DEFAULT_CATEGORIES, CategoryConfig, ScoringConfig
from pr_sizer.errors import ScoringError

HUNK_HEADER_PATTERN = re.compile(
    r"^@@ -(?P<base_start>\d+)(?:,(?P<base_count>\d+))? "
    r"\+(?P<head_start>\d+)(?:,(?P<head_count>\d+))? @@"
)
DIFF_GIT_HEADER_PATTERN = re.compile(r"^diff --git a/(?P<base_path>.+) b/(?P<head_path>.+)$")
NULL_PATH = "/dev/null"


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Score and size category computed for one diff."""

    score: int
    category: str


def _header_path(line: str, *, prefix: str) -> str:
    """Extract the file path from a '--- ' or '+++ ' header line."""
    path = line[4:].split("\t", 1)[0].strip()
    if path.startswith(prefix):
        path = path[len(prefix):]
    return path


def categorize(score: int, categories: tuple[CategoryConfig, ...] = DEFAULT_CATEGORIES) -> str:
    """Return the first category whose bound covers the score, else the last one."""
    if not categories:
        raise ScoringError("No categories are configured for scoring.")
    for category in categories:
        if category.lte is not None and score <= category.lte:
            return category.name
    return categories[-1].name


class LineCountScoringEngine:
    """Scores a diff as the number of added plus removed lines."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or ScoringConfig()

    def evaluate(self, diff: str) -> EvaluationResult:
        """Evaluate a unified diff into a score and category."""
        if not isinstance(diff, str):
            raise ScoringError(f"Expected diff text, got {type(diff).__name__}.")
        score = self._count_changed_lines(diff)
        return EvaluationResult(
            score=score,
            category=categorize(score, self._config.categories),
        )

    def _is_ignored(self, path: str | None) -> bool:
        if path is None:
            return False
        return any(fnmatch(path, pattern) for pattern in self._config.ignored_file_patterns)

    def _count_changed_lines(self, diff: str) -> int:
        total = 0
        current_path: str | None = None
        base_path: str | None = None
        base_remaining = 0
        head_remaining = 0

        for line in diff.splitlines():
            in_hunk = base_remaining > 0 or head_remaining > 0
            if in_hunk:
                if line.startswith("\\"):
                    continue
                marker = line[:1]
                if marker == "+":
                    head_remaining -= 1
                elif marker == "-":
                    base_remaining -= 1
                else:
                    base_remaining -= 1
                    head_remaining -= 1
                    continue
                if not self._is_ignored(current_path):
                    total += 1
                continue

            git_header = DIFF_GIT_HEADER_PATTERN.match(line)
            if git_header is not None:
                base_path = git_header.group("base_path")
                current_path = git_header.group("head_path")
                continue
            if line.startswith("--- "):
                base_path = _header_path(line, prefix="a/")
                continue
            if line.startswith("+++ "):
                head_path = _header_path(line, prefix="b/")
                current_path = base_path if head_path == NULL_PATH else head_path
                continue

            hunk_header = HUNK_HEADER_PATTERN.match(line)
            if hunk_header is not None:
                base_count = hunk_header.group("base_count")
                head_count = hunk_header.group("head_count")
                base_remaining = int(base_count) if base_count is not None else 1
                head_remaining = int(head_count) if head_count is not None else 1

        return total
