"""Git subprocess adapter used to produce the pull request diff."""

from __future__ import annotations

import subprocess
from pathlib import Path

from pr_sizer.errors import RepositoryAccessError

GITHUB_SERVER_URL = "https://github.com"
REMOTE_NAME = "origin"


class GitRepository:
    """Clones one GitHub repository and diffs refs within it."""

    def __init__(
        self,
        owner: str,
        repo: str,
        workdir: Path | str,
        *,
        token: str | None = None,
        pull_number: int | None = None,
        server_url: str = GITHUB_SERVER_URL,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.workdir = Path(workdir)
        self.pull_number = pull_number
        self._token = token
        self._server_url = server_url.rstrip("/")

    @property
    def clone_url(self) -> str:
        host = self._server_url
        if self._token:
            scheme, separator, rest = host.partition("://")
            if separator:
                host = f"{scheme}://x-access-token:{self._token}@{rest}"
        return f"{host}/{self.owner}/{self.repo}.git"

    def clone(self) -> None:
        """Blobless clone without a checkout; only history is needed for diffing."""
        self.workdir.parent.mkdir(parents=True, exist_ok=True)
        self._run(
            [
                "git",
                "clone",
                "--filter=blob:none",
                "--no-checkout",
                "--origin",
                REMOTE_NAME,
                self.clone_url,
                str(self.workdir),
            ],
            cwd=None,
            action=f"clone {self.owner}/{self.repo}",
        )

    def diff(self, base_ref: str, head_ref: str) -> str:
        """Return the diff of the head ref against its merge base with the base ref.

        When a pull number is known the head is fetched from the pull request ref,
        which also covers branches that live in a fork.
        """
        if self.pull_number is not None:
            head_source = f"refs/pull/{self.pull_number}/head"
            head_tracking = f"{REMOTE_NAME}/pull/{self.pull_number}"
        else:
            head_source = f"refs/heads/{head_ref}"
            head_tracking = f"{REMOTE_NAME}/{head_ref}"
        base_tracking = f"{REMOTE_NAME}/{base_ref}"

        self._run(
            [
                "git",
                "fetch",
                REMOTE_NAME,
                f"+refs/heads/{base_ref}:refs/remotes/{base_tracking}",
                f"+{head_source}:refs/remotes/{head_tracking}",
            ],
            cwd=self.workdir,
            action=f"fetch '{base_ref}' and '{head_ref}'",
        )
        return self._run(
            ["git", "diff", f"{base_tracking}...{head_tracking}"],
            cwd=self.workdir,
            action=f"diff '{base_ref}'...'{head_ref}'",
        )

    def _run(self, cmd: list[str], *, cwd: Path | None, action: str) -> str:
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except FileNotFoundError as error:
            raise RepositoryAccessError(f"Failed to {action}: git is not installed.") from error
        except subprocess.CalledProcessError as e:
            raise RepositoryAccessError(
                f"Failed to {action}: {self._redact(e.stderr or '').strip()}"
            ) from None
        return result.stdout

    def _redact(self, text: str) -> str:
        if self._token:
            return text.replace(self._token, "***")
        return text
