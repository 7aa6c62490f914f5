"""GitHub API wrapper for label and comment operations."""

from __future__ import annotations

import os
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx
from dotenv import load_dotenv

from pr_sizer.errors import GitHubAuthError, PlatformApiError, PrSizerError

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
GITHUB_JSON_ACCEPT = "application/vnd.github+json"
GITHUB_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF_SECONDS = 0.5
DEFAULT_LABEL_COLOR = "ededed"
COMMENTS_PER_PAGE = 100


class GitHubApiError(PlatformApiError):
    """Raised when a GitHub API request fails."""


class GitHubRateLimitError(GitHubApiError):
    """Raised when GitHub API rate limiting prevents request completion."""


class GitHubInputError(PrSizerError):
    """Raised when repository or PR input values are invalid."""


@dataclass(frozen=True, slots=True)
class Label:
    """Repository label."""

    name: str
    color: str
    description: str = ""


@dataclass(frozen=True, slots=True)
class Comment:
    """Issue comment on a pull request."""

    id: int
    body: str
    author_login: str | None = None


def _ensure_mapping(value: object, *, context: str) -> dict[str, Any]:
    """Ensure a response fragment is a JSON object."""
    if not isinstance(value, dict):
        raise GitHubApiError(
            f"Expected JSON object for {context}.",
            status_code=500,
            endpoint=context,
        )
    return value


def _require_str(payload: dict[str, Any], *, key: str, endpoint: str) -> str:
    """Read a required string field from payload."""
    value = payload.get(key)
    if not isinstance(value, str):
        raise GitHubApiError(
            f"Expected string field '{key}' in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _require_int(payload: dict[str, Any], *, key: str, endpoint: str) -> int:
    """Read a required integer field from payload."""
    value = payload.get(key)
    if not isinstance(value, int) or isinstance(value, bool):
        raise GitHubApiError(
            f"Expected integer field '{key}' in GitHub response.",
            status_code=500,
            endpoint=endpoint,
        )
    return value


def _is_retryable_status(status_code: int) -> bool:
    """Return whether a status code is retryable under policy."""
    return status_code == 429 or 500 <= status_code < 600


def _parse_retry_after_seconds(response: httpx.Response) -> float | None:
    """Parse Retry-After header as seconds if present and valid."""
    retry_after = response.headers.get("Retry-After")
    if retry_after is None:
        return None
    try:
        parsed_value = float(retry_after)
    except ValueError:
        return None
    if parsed_value < 0:
        return None
    return parsed_value


def _compute_retry_delay_seconds(response: httpx.Response, *, attempt_number: int) -> float:
    """Compute retry delay from Retry-After header or exponential backoff."""
    retry_after_seconds = _parse_retry_after_seconds(response)
    if retry_after_seconds is not None:
        return retry_after_seconds
    return DEFAULT_RETRY_BACKOFF_SECONDS * (2 ** (attempt_number - 1))


def _sleep_for_retry(seconds: float) -> None:
    """Sleep helper for retry delays (wrapped for deterministic tests)."""
    time.sleep(seconds)


def _raise_http_error(response: httpx.Response, endpoint: str) -> None:
    """Raise a typed error for a non-success GitHub API response."""
    message = f"GitHub API request failed with status {response.status_code} for '{endpoint}'."
    if response.status_code == 429:
        raise GitHubRateLimitError(
            message,
            status_code=response.status_code,
            endpoint=endpoint,
        )
    raise GitHubApiError(
        message,
        status_code=response.status_code,
        endpoint=endpoint,
    )


def _json_body(response: httpx.Response, endpoint: str) -> Any:
    """Decode a JSON response body, treating anything else as an API failure."""
    try:
        return response.json()
    except ValueError as error:
        raise GitHubApiError(
            f"GitHub API returned a non-JSON response for '{endpoint}'.",
            status_code=response.status_code,
            endpoint=endpoint,
        ) from error


def _send(
    client: httpx.Client,
    method: str,
    endpoint: str,
    *,
    json_body: dict[str, Any] | None = None,
) -> httpx.Response:
    """Send one request, mapping transport failures to GitHubApiError."""
    try:
        return client.request(
            method,
            endpoint,
            json=json_body,
            headers={"Accept": GITHUB_JSON_ACCEPT},
        )
    except httpx.TransportError as error:
        raise GitHubApiError(
            f"GitHub API request to '{endpoint}' failed: network error ({error}).",
            status_code=0,
            endpoint=endpoint,
        ) from error


def _request_with_retries(
    client: httpx.Client,
    endpoint: str,
    *,
    max_attempts: int = GITHUB_MAX_RETRIES,
    allow_not_found: bool = False,
) -> httpx.Response:
    """Perform a GET request with retry handling for 429/5xx responses."""
    for attempt_number in range(1, max_attempts + 1):
        response = _send(client, "GET", endpoint)
        if response.status_code < 400:
            return response
        if allow_not_found and response.status_code == 404:
            return response

        should_retry = _is_retryable_status(response.status_code) and attempt_number < max_attempts
        if not should_retry:
            _raise_http_error(response, endpoint)

        delay_seconds = _compute_retry_delay_seconds(response, attempt_number=attempt_number)
        _sleep_for_retry(delay_seconds)

    raise RuntimeError("Unexpected retry loop exit without a response.")


def _request_write(
    client: httpx.Client,
    endpoint: str,
    json_body: dict[str, Any],
) -> httpx.Response:
    """Perform a POST request. Writes are never retried."""
    response = _send(client, "POST", endpoint, json_body=json_body)
    if response.status_code >= 400:
        _raise_http_error(response, endpoint)
    return response


def _label_from_payload(payload: dict[str, Any], *, endpoint: str) -> Label:
    description = payload.get("description")
    return Label(
        name=_require_str(payload, key="name", endpoint=endpoint),
        color=_require_str(payload, key="color", endpoint=endpoint),
        description=description if isinstance(description, str) else "",
    )


def get_label(*, client: httpx.Client, repo_full_name: str, name: str) -> Label | None:
    """Fetch a repository label, returning None when it does not exist."""
    owner, repo = parse_repo_full_name(repo_full_name)
    endpoint = f"/repos/{owner}/{repo}/labels/{quote(name, safe='')}"
    response = _request_with_retries(client, endpoint, allow_not_found=True)
    if response.status_code == 404:
        return None
    payload = _ensure_mapping(_json_body(response, endpoint), context=endpoint)
    return _label_from_payload(payload, endpoint=endpoint)


def create_label(
    *,
    client: httpx.Client,
    repo_full_name: str,
    name: str,
    color: str | None = None,
    description: str | None = None,
) -> Label:
    """Create a repository label."""
    owner, repo = parse_repo_full_name(repo_full_name)
    endpoint = f"/repos/{owner}/{repo}/labels"
    body: dict[str, Any] = {"name": name, "color": color or DEFAULT_LABEL_COLOR}
    if description:
        body["description"] = description
    response = _request_write(client, endpoint, body)
    payload = _ensure_mapping(_json_body(response, endpoint), context=endpoint)
    return _label_from_payload(payload, endpoint=endpoint)


def add_labels(
    *,
    client: httpx.Client,
    repo_full_name: str,
    pr_number: int,
    names: Sequence[str],
) -> None:
    """Add labels to a pull request. Labels already present are left as-is."""
    owner, repo = parse_repo_full_name(repo_full_name)
    normalized_pr_number = validate_pr_number(pr_number)
    endpoint = f"/repos/{owner}/{repo}/issues/{normalized_pr_number}/labels"
    _request_write(client, endpoint, {"labels": list(names)})


def list_comments(
    *,
    client: httpx.Client,
    repo_full_name: str,
    pr_number: int,
) -> tuple[Comment, ...]:
    """Fetch all issue comments on a pull request with pagination."""
    owner, repo = parse_repo_full_name(repo_full_name)
    normalized_pr_number = validate_pr_number(pr_number)
    base_endpoint = f"/repos/{owner}/{repo}/issues/{normalized_pr_number}/comments"

    comments: list[Comment] = []
    page = 1
    while True:
        endpoint = f"{base_endpoint}?per_page={COMMENTS_PER_PAGE}&page={page}"
        response = _request_with_retries(client, endpoint)
        rows = _json_body(response, endpoint)
        if not isinstance(rows, list):
            raise GitHubApiError(
                "Expected JSON array in GitHub response.",
                status_code=500,
                endpoint=endpoint,
            )
        if not rows:
            break

        for item in rows:
            row = _ensure_mapping(item, context=endpoint)
            body = row.get("body")
            user = row.get("user")
            login = user.get("login") if isinstance(user, dict) else None
            comments.append(
                Comment(
                    id=_require_int(row, key="id", endpoint=endpoint),
                    body=body if isinstance(body, str) else "",
                    author_login=login if isinstance(login, str) else None,
                )
            )

        if len(rows) < COMMENTS_PER_PAGE:
            break
        page += 1

    return tuple(comments)


def add_comment(
    *,
    client: httpx.Client,
    repo_full_name: str,
    pr_number: int,
    body: str,
) -> None:
    """Post an issue comment on a pull request."""
    owner, repo = parse_repo_full_name(repo_full_name)
    normalized_pr_number = validate_pr_number(pr_number)
    endpoint = f"/repos/{owner}/{repo}/issues/{normalized_pr_number}/comments"
    _request_write(client, endpoint, {"body": body})


@dataclass
class GitHubReviewPlatform:
    """Review platform client bound to one repository."""

    client: httpx.Client
    repo_full_name: str

    def get_label(self, name: str) -> Label | None:
        return get_label(client=self.client, repo_full_name=self.repo_full_name, name=name)

    def create_label(self, name: str, color: str | None = None) -> Label:
        return create_label(
            client=self.client,
            repo_full_name=self.repo_full_name,
            name=name,
            color=color,
        )

    def add_labels(self, pr_number: int, names: Sequence[str]) -> None:
        add_labels(
            client=self.client,
            repo_full_name=self.repo_full_name,
            pr_number=pr_number,
            names=names,
        )

    def list_comments(self, pr_number: int) -> tuple[Comment, ...]:
        return list_comments(
            client=self.client,
            repo_full_name=self.repo_full_name,
            pr_number=pr_number,
        )

    def add_comment(self, pr_number: int, body: str) -> None:
        add_comment(
            client=self.client,
            repo_full_name=self.repo_full_name,
            pr_number=pr_number,
            body=body,
        )


def parse_repo_full_name(repo_full_name: str) -> tuple[str, str]:
    """Parse and validate repository input in owner/repo format."""
    owner, separator, repo = repo_full_name.strip().partition("/")
    if not separator or not owner or not repo or "/" in repo:
        raise GitHubInputError(
            f"Invalid repo '{repo_full_name}'. Expected format is owner/repo."
        )
    return owner, repo


def validate_pr_number(pr_number: int) -> int:
    """Validate and normalize pull request number input."""
    if pr_number <= 0:
        raise GitHubInputError(f"Invalid PR number '{pr_number}'. Expected a positive integer.")
    return pr_number


def get_github_token(explicit_token: str | None = None) -> str:
    """Return the explicit token or read one from the environment."""
    token, _source = get_github_token_with_source(explicit_token)
    return token


def get_github_token_with_source(explicit_token: str | None = None) -> tuple[str, str]:
    """Read GitHub token and return token value with its source."""
    if explicit_token:
        return explicit_token, "input"

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    github_token = os.getenv("GITHUB_TOKEN")
    if github_token:
        return github_token, "GITHUB_TOKEN"

    gh_token = os.getenv("GH_TOKEN")
    if gh_token:
        return gh_token, "GH_TOKEN"

    message = "Missing GitHub token. Provide the 'token' input or set GITHUB_TOKEN or GH_TOKEN."
    raise GitHubAuthError(message)


def build_github_client(
    token: str,
    timeout_seconds: int = 20,
    *,
    trust_env: bool = True,
) -> httpx.Client:
    """Build an authenticated GitHub HTTP client."""
    headers = {
        "Accept": GITHUB_JSON_ACCEPT,
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    return httpx.Client(
        base_url=GITHUB_API_BASE_URL,
        headers=headers,
        timeout=timeout_seconds,
        trust_env=trust_env,
    )
