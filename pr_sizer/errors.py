"""Error taxonomy for pull request evaluation runs."""

from __future__ import annotations


class PrSizerError(RuntimeError):
    """Base class for fatal run errors."""


class UnsupportedEventError(PrSizerError):
    """Raised when the workflow was triggered by a non pull request event."""

    def __init__(self, event_name: str) -> None:
        super().__init__(
            "This action is only supported on the 'pull_request' event, "
            f"but it was triggered for '{event_name}'"
        )
        self.event_name = event_name


class EventContextError(PrSizerError):
    """Raised when the triggering event payload is missing required fields."""


class ConfigurationError(PrSizerError):
    """Raised when a configuration file cannot be read or fails validation."""


class RepositoryAccessError(PrSizerError):
    """Raised when cloning or diffing the repository fails."""


class ScoringError(PrSizerError):
    """Raised when the scoring engine rejects a diff."""


class PlatformApiError(PrSizerError):
    """Raised when a review platform read or write fails."""

    def __init__(self, message: str, *, status_code: int, endpoint: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class GitHubAuthError(PrSizerError):
    """Raised when required GitHub authentication is missing."""


class ArtifactError(PrSizerError):
    """Raised when the score artifact cannot be written."""
