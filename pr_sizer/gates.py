"""Gate predicates deciding which side effects a run applies.

Every gate is a pure function of the configuration, the pull request and,
where relevant, the evaluation result. None of them touch the network.
"""

from __future__ import annotations

from dataclasses import dataclass

from pr_sizer.config import Configuration
from pr_sizer.context import PullRequestContext
from pr_sizer.scoring import EvaluationResult

SHADOW_LABELING_MESSAGE = "Skipping labeling because this workflow is running in shadow mode"
DRAFT_LABELING_MESSAGE = "Skipping labeling of a draft pull request"
SHADOW_COMMENTING_MESSAGE = "Skipping commenting because this workflow is running in shadow mode"
DISABLED_COMMENTING_MESSAGE = "Skipping commenting because it has not been enabled"
DRAFT_COMMENTING_MESSAGE = "Skipping commenting on a draft pull request"
DISABLED_ARTIFACT_MESSAGE = "Skipping score artifact creation because it has not been enabled"
DRAFT_ARTIFACT_MESSAGE = "Skipping score artifact creation on a draft pull request"


@dataclass(frozen=True, slots=True)
class GateDecision:
    """Outcome of a gate: proceed, or skip with the reason to report."""

    proceed: bool
    reason: str = ""

    @classmethod
    def allow(cls) -> GateDecision:
        return cls(proceed=True)

    @classmethod
    def skip(cls, reason: str) -> GateDecision:
        return cls(proceed=False, reason=reason)


def opt_out_message(author_login: str) -> str:
    return (
        f"Skipping evaluation because pull request author @{author_login} "
        "has not opted into this workflow"
    )


def below_threshold_message(score: int, threshold: float) -> str:
    return (
        f"Skipping commenting because the score {score} is below "
        f"the configured threshold of {threshold:g}"
    )


def is_opted_in(config: Configuration, pull: PullRequestContext) -> bool:
    """An empty allow-list opts everyone in."""
    if not config.opt_ins:
        return True
    return pull.author_login in config.opt_ins


def is_shadow_mode(config: Configuration, pull: PullRequestContext) -> bool:
    return config.shadow_opt_outs and not is_opted_in(config, pull)


def opt_in_gate(config: Configuration, pull: PullRequestContext) -> GateDecision:
    """Stop the run for authors outside the allow-list unless shadow mode covers them."""
    if is_opted_in(config, pull) or config.shadow_opt_outs:
        return GateDecision.allow()
    return GateDecision.skip(opt_out_message(pull.author_login))


def labeling_gate(config: Configuration, pull: PullRequestContext) -> GateDecision:
    if is_shadow_mode(config, pull):
        return GateDecision.skip(SHADOW_LABELING_MESSAGE)
    if pull.draft and config.labeling.exclude_draft_pull_requests:
        return GateDecision.skip(DRAFT_LABELING_MESSAGE)
    return GateDecision.allow()


def commenting_gate(
    config: Configuration,
    pull: PullRequestContext,
    result: EvaluationResult,
) -> GateDecision:
    """Commenting requires a threshold; drafts are excluded unless configured otherwise."""
    commenting = config.commenting
    if is_shadow_mode(config, pull):
        return GateDecision.skip(SHADOW_COMMENTING_MESSAGE)
    if commenting.score_threshold is None:
        return GateDecision.skip(DISABLED_COMMENTING_MESSAGE)
    if pull.draft and commenting.exclude_draft_pull_requests:
        return GateDecision.skip(DRAFT_COMMENTING_MESSAGE)
    if result.score < commenting.score_threshold:
        return GateDecision.skip(below_threshold_message(result.score, commenting.score_threshold))
    return GateDecision.allow()


def artifact_gate(config: Configuration, pull: PullRequestContext) -> GateDecision:
    """Shadow mode does not apply to artifacts."""
    score_artifact = config.artifacts.score
    if score_artifact is None:
        return GateDecision.skip(DISABLED_ARTIFACT_MESSAGE)
    if pull.draft and score_artifact.exclude_draft_pull_requests:
        return GateDecision.skip(DRAFT_ARTIFACT_MESSAGE)
    return GateDecision.allow()
