"""Evaluation orchestration: score a pull request, then apply gated side effects."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from pr_sizer.config import Configuration
from pr_sizer.context import (
    PULL_REQUEST_EVENT,
    EventContext,
    PullRequestContext,
    pull_request_context_from_event,
)
from pr_sizer.errors import PrSizerError, UnsupportedEventError
from pr_sizer.gates import (
    artifact_gate,
    commenting_gate,
    is_opted_in,
    labeling_gate,
    opt_in_gate,
)
from pr_sizer.observability import Feature, RunReport, RunState
from pr_sizer.output import (
    build_score_artifact,
    category_label_color,
    category_label_name,
    render_comment,
    serialize_score_artifact,
)
from pr_sizer.ports import (
    ArtifactWriter,
    RepositoryClient,
    ReviewPlatformClient,
    RunReporter,
    ScoringEngine,
)
from pr_sizer.scoring import EvaluationResult

DUPLICATE_COMMENT_MESSAGE = (
    "Skipping commenting because an equivalent comment is already present"
)


@dataclass
class EvaluationOrchestrator:
    """Runs one evaluation for the triggering event.

    Collaborators that depend on the repository are created from the pull
    request context once the event has been validated.
    """

    event: EventContext
    config: Configuration
    reporter: RunReporter
    scoring_engine: ScoringEngine
    repository_factory: Callable[[PullRequestContext], RepositoryClient]
    platform_factory: Callable[[PullRequestContext], ReviewPlatformClient]
    artifact_writer_factory: Callable[[str], ArtifactWriter]

    # ============================================================
    # Public API
    # ============================================================

    def run(self) -> RunReport:
        """Run the evaluation; fatal errors are reported once as a failed status."""
        report = RunReport()
        try:
            self._run(report)
        except PrSizerError as error:
            report.state = RunState.FAILED
            report.failure_message = str(error)
            self.reporter.set_failed(str(error))
        return report

    # ============================================================
    # Steps
    # ============================================================

    def _run(self, report: RunReport) -> None:
        pull = self._validate_event()
        result = self._evaluate(pull)

        self.reporter.set_output("score", result.score)
        self.reporter.set_output("category", result.category)
        report.score = result.score
        report.category = result.category

        decision = opt_in_gate(self.config, pull)
        if not decision.proceed:
            self.reporter.info(decision.reason)
            report.state = RunState.OPTED_OUT
            return

        platform = self.platform_factory(pull)
        self._apply_category_label(pull, result, report, platform)
        self._add_score_comment(pull, result, report, platform)
        self._create_score_artifact(pull, result, report)
        report.state = RunState.COMPLETED

    def _validate_event(self) -> PullRequestContext:
        if self.event.event_name != PULL_REQUEST_EVENT:
            raise UnsupportedEventError(self.event.event_name)
        return pull_request_context_from_event(self.event)

    def _evaluate(self, pull: PullRequestContext) -> EvaluationResult:
        self.reporter.info(
            f"Evaluating pull request #{pull.number} by @{pull.author_login} "
            f"({pull.base_ref}...{pull.head_ref})"
        )
        repository = self.repository_factory(pull)
        repository.clone()
        diff = repository.diff(pull.base_ref, pull.head_ref)
        result = self.scoring_engine.evaluate(diff)
        self.reporter.info(
            f"Pull request #{pull.number} scored {result.score} ({result.category})"
        )
        return result

    def _apply_category_label(
        self,
        pull: PullRequestContext,
        result: EvaluationResult,
        report: RunReport,
        platform: ReviewPlatformClient,
    ) -> None:
        decision = labeling_gate(self.config, pull)
        if not decision.proceed:
            self._skip(report, Feature.LABELING, decision.reason)
            return

        labeling = self.config.labeling
        name = category_label_name(labeling, result.category)
        if platform.get_label(name) is None:
            platform.create_label(name, category_label_color(labeling, result.category))
            self.reporter.info(f"Created label '{name}'")
        platform.add_labels(pull.number, [name])
        self.reporter.info(f"Applied label '{name}' to pull request #{pull.number}")
        report.record_applied(Feature.LABELING)

    def _add_score_comment(
        self,
        pull: PullRequestContext,
        result: EvaluationResult,
        report: RunReport,
        platform: ReviewPlatformClient,
    ) -> None:
        decision = commenting_gate(self.config, pull, result)
        if not decision.proceed:
            self._skip(report, Feature.COMMENTING, decision.reason)
            return

        commenting = self.config.commenting
        body = render_comment(
            commenting.comment_template,
            pull=pull,
            result=result,
            threshold=commenting.score_threshold,
        )
        existing = platform.list_comments(pull.number)
        if any(comment.body == body for comment in existing):
            self._skip(report, Feature.COMMENTING, DUPLICATE_COMMENT_MESSAGE)
            return

        platform.add_comment(pull.number, body)
        self.reporter.info(f"Added score comment to pull request #{pull.number}")
        report.record_applied(Feature.COMMENTING)

    def _create_score_artifact(
        self,
        pull: PullRequestContext,
        result: EvaluationResult,
        report: RunReport,
    ) -> None:
        decision = artifact_gate(self.config, pull)
        score_config = self.config.artifacts.score
        if not decision.proceed or score_config is None:
            self._skip(report, Feature.ARTIFACT, decision.reason)
            return

        artifact = build_score_artifact(
            pull=pull,
            result=result,
            opted_in=is_opted_in(self.config, pull),
        )
        filename, content = serialize_score_artifact(artifact, score_config.format)
        location = self.artifact_writer_factory(score_config.directory).write(filename, content)
        self.reporter.info(f"Wrote score artifact to {location}")
        report.record_applied(Feature.ARTIFACT)

    def _skip(self, report: RunReport, feature: Feature, reason: str) -> None:
        self.reporter.info(reason)
        report.record_skipped(feature, reason)
