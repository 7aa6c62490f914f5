"""Triggering event context for one evaluation run."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pr_sizer.errors import EventContextError

PULL_REQUEST_EVENT = "pull_request"
GITHUB_EVENT_NAME_ENV_VAR = "GITHUB_EVENT_NAME"
GITHUB_EVENT_PATH_ENV_VAR = "GITHUB_EVENT_PATH"
GITHUB_REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"


@dataclass(frozen=True, slots=True)
class EventContext:
    """Raw event name and payload as delivered by the CI runner."""

    event_name: str
    payload: dict[str, Any]
    repository: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequestContext:
    """Immutable snapshot of the pull request that triggered the run."""

    owner: str
    repo: str
    number: int
    base_ref: str
    head_ref: str
    author_login: str
    draft: bool

    @property
    def repo_full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def load_event_context() -> EventContext:
    """Read the event name and payload from the GitHub Actions environment."""
    event_name = os.getenv(GITHUB_EVENT_NAME_ENV_VAR, "")
    payload: dict[str, Any] = {}
    event_path = os.getenv(GITHUB_EVENT_PATH_ENV_VAR)
    if event_path:
        try:
            loaded = json.loads(Path(event_path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as error:
            raise EventContextError(
                f"Unable to read event payload from '{event_path}': {error}"
            ) from error
        if not isinstance(loaded, dict):
            raise EventContextError(f"Event payload in '{event_path}' must be a JSON object.")
        payload = loaded
    return EventContext(
        event_name=event_name,
        payload=payload,
        repository=os.getenv(GITHUB_REPOSITORY_ENV_VAR),
    )


def _require(mapping: Any, key: str, *, path: str) -> Any:
    """Read a required key from a payload fragment."""
    if not isinstance(mapping, dict) or key not in mapping or mapping[key] is None:
        raise EventContextError(f"Pull request event payload is missing '{path}'.")
    return mapping[key]


def _require_str(mapping: Any, key: str, *, path: str) -> str:
    value = _require(mapping, key, path=path)
    if not isinstance(value, str):
        raise EventContextError(f"Expected '{path}' to be a string in the event payload.")
    return value


def pull_request_context_from_event(event: EventContext) -> PullRequestContext:
    """Build the pull request snapshot from a `pull_request` event payload."""
    pull = _require(event.payload, "pull_request", path="pull_request")
    base = _require(pull, "base", path="pull_request.base")
    head = _require(pull, "head", path="pull_request.head")
    user = _require(pull, "user", path="pull_request.user")

    number = _require(pull, "number", path="pull_request.number")
    if not isinstance(number, int) or isinstance(number, bool) or number <= 0:
        raise EventContextError("Expected 'pull_request.number' to be a positive integer.")

    owner, repo = _resolve_repository(event, base)
    draft = pull.get("draft", False)
    if not isinstance(draft, bool):
        raise EventContextError("Expected 'pull_request.draft' to be a boolean.")

    return PullRequestContext(
        owner=owner,
        repo=repo,
        number=number,
        base_ref=_require_str(base, "ref", path="pull_request.base.ref"),
        head_ref=_require_str(head, "ref", path="pull_request.head.ref"),
        author_login=_require_str(user, "login", path="pull_request.user.login"),
        draft=draft,
    )


def _resolve_repository(event: EventContext, base: dict[str, Any]) -> tuple[str, str]:
    """Prefer the base repository from the payload, then GITHUB_REPOSITORY."""
    base_repo = base.get("repo")
    if isinstance(base_repo, dict):
        owner_payload = base_repo.get("owner")
        name = base_repo.get("name")
        if isinstance(owner_payload, dict):
            login = owner_payload.get("login")
            if isinstance(login, str) and isinstance(name, str):
                return login, name

    if event.repository:
        owner, separator, repo = event.repository.partition("/")
        if separator and owner and repo:
            return owner, repo

    raise EventContextError(
        "Unable to determine the repository from the event payload or "
        f"{GITHUB_REPOSITORY_ENV_VAR}."
    )
