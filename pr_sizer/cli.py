"""Typer CLI for the pull request size evaluation action."""

from __future__ import annotations

import tempfile
from contextlib import ExitStack
from pathlib import Path
from typing import Annotated

import typer

from pr_sizer.actions import ActionsRuntime
from pr_sizer.artifacts import FileArtifactWriter
from pr_sizer.config import load_configuration
from pr_sizer.context import PullRequestContext, load_event_context
from pr_sizer.errors import ConfigurationError, PrSizerError
from pr_sizer.git_client import GitRepository
from pr_sizer.github_client import GitHubReviewPlatform, build_github_client, get_github_token
from pr_sizer.orchestrator import EvaluationOrchestrator
from pr_sizer.scoring import LineCountScoringEngine

app = typer.Typer(help="Score pull requests by size and label, comment or record the result.")


@app.command("run")
def run_command(
    config_file: Annotated[
        str | None,
        typer.Option(
            "--config-file",
            envvar="INPUT_CONFIGURATION-FILE-PATH",
            help="Path to the YAML configuration file.",
        ),
    ] = None,
    token: Annotated[
        str | None,
        typer.Option(
            envvar="INPUT_TOKEN",
            show_envvar=False,
            help="GitHub token. Falls back to GITHUB_TOKEN or GH_TOKEN.",
        ),
    ] = None,
    workdir: Annotated[
        Path | None,
        typer.Option(help="Directory to clone into. A temporary directory by default."),
    ] = None,
    timeout_seconds: Annotated[
        int, typer.Option(help="GitHub API timeout in seconds.")
    ] = 20,
) -> None:
    """Evaluate the pull request that triggered this workflow run."""
    runtime = ActionsRuntime()
    try:
        config = load_configuration(config_file)
        event = load_event_context()
    except PrSizerError as error:
        runtime.set_failed(str(error))
        raise typer.Exit(code=1) from error

    with ExitStack() as stack:
        clone_root = workdir or Path(
            stack.enter_context(tempfile.TemporaryDirectory(prefix="pr-sizer-"))
        )

        def repository_factory(pull: PullRequestContext) -> GitRepository:
            return GitRepository(
                pull.owner,
                pull.repo,
                clone_root / pull.repo,
                token=get_github_token(token),
                pull_number=pull.number,
            )

        def platform_factory(pull: PullRequestContext) -> GitHubReviewPlatform:
            client = stack.enter_context(
                build_github_client(get_github_token(token), timeout_seconds=timeout_seconds)
            )
            return GitHubReviewPlatform(client=client, repo_full_name=pull.repo_full_name)

        orchestrator = EvaluationOrchestrator(
            event=event,
            config=config,
            reporter=runtime,
            scoring_engine=LineCountScoringEngine(config.scoring),
            repository_factory=repository_factory,
            platform_factory=platform_factory,
            artifact_writer_factory=FileArtifactWriter,
        )
        report = orchestrator.run()

    if report.failed:
        raise typer.Exit(code=1)


@app.command("check-config")
def check_config_command(
    config_file: Annotated[str, typer.Argument(help="Path to the YAML configuration file.")],
) -> None:
    """Validate a configuration file and print the effective policy."""
    try:
        config = load_configuration(config_file)
    except ConfigurationError as error:
        typer.echo(f"Configuration check failed: {error}")
        raise typer.Exit(code=1) from error

    typer.echo(config.model_dump_json(by_alias=True, indent=2))
