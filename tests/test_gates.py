"""Tests for the pure gate predicates."""

from __future__ import annotations

import pytest
from pr_sizer.config import Configuration, parse_configuration
from pr_sizer.context import PullRequestContext
from pr_sizer.gates import (
    DISABLED_ARTIFACT_MESSAGE,
    DISABLED_COMMENTING_MESSAGE,
    DRAFT_ARTIFACT_MESSAGE,
    DRAFT_COMMENTING_MESSAGE,
    DRAFT_LABELING_MESSAGE,
    SHADOW_COMMENTING_MESSAGE,
    SHADOW_LABELING_MESSAGE,
    GateDecision,
    artifact_gate,
    commenting_gate,
    is_opted_in,
    is_shadow_mode,
    labeling_gate,
    opt_in_gate,
)
from pr_sizer.scoring import EvaluationResult


def make_pull(*, author: str = "lerebear", draft: bool = False) -> PullRequestContext:
    return PullRequestContext(
        owner="acme",
        repo="rocket",
        number=42,
        base_ref="main",
        head_ref="topic",
        author_login=author,
        draft=draft,
    )


RESULT = EvaluationResult(score=12, category="small")


@pytest.mark.unit
@pytest.mark.parametrize("author", ["lerebear", "glortho", "octocat"])
def test_opt_in_gate_is_a_no_op_without_opt_ins(author: str) -> None:
    config = Configuration()
    assert is_opted_in(config, make_pull(author=author))
    assert opt_in_gate(config, make_pull(author=author)) == GateDecision.allow()


@pytest.mark.unit
def test_opt_in_gate_skips_authors_outside_allow_list() -> None:
    config = parse_configuration({"optIns": ["glortho"]})

    decision = opt_in_gate(config, make_pull())

    assert not decision.proceed
    assert decision.reason == (
        "Skipping evaluation because pull request author @lerebear has not opted into this workflow"
    )


@pytest.mark.unit
def test_opt_in_gate_allows_opted_out_authors_in_shadow_mode() -> None:
    config = parse_configuration({"optIns": ["glortho"], "shadowOptOuts": True})

    assert opt_in_gate(config, make_pull()).proceed
    assert is_shadow_mode(config, make_pull())
    assert not is_shadow_mode(config, make_pull(author="glortho"))


@pytest.mark.unit
def test_shadow_mode_requires_an_allow_list() -> None:
    config = parse_configuration({"shadowOptOuts": True})

    assert not is_shadow_mode(config, make_pull())
    assert labeling_gate(config, make_pull()).proceed


@pytest.mark.unit
def test_labeling_gate_shadow_mode_takes_precedence_over_draft() -> None:
    config = parse_configuration(
        {
            "optIns": ["glortho"],
            "shadowOptOuts": True,
            "labeling": {"excludeDraftPullRequests": True},
        }
    )

    decision = labeling_gate(config, make_pull(draft=True))

    assert decision == GateDecision.skip(SHADOW_LABELING_MESSAGE)


@pytest.mark.unit
def test_labeling_gate_excludes_drafts_only_when_configured() -> None:
    excluding = parse_configuration({"labeling": {"excludeDraftPullRequests": True}})

    assert labeling_gate(excluding, make_pull(draft=True)) == GateDecision.skip(
        DRAFT_LABELING_MESSAGE
    )
    assert labeling_gate(excluding, make_pull(draft=False)).proceed
    assert labeling_gate(Configuration(), make_pull(draft=True)).proceed


@pytest.mark.unit
def test_commenting_gate_requires_threshold() -> None:
    decision = commenting_gate(Configuration(), make_pull(), RESULT)
    assert decision == GateDecision.skip(DISABLED_COMMENTING_MESSAGE)


@pytest.mark.unit
def test_commenting_gate_shadow_and_draft_reasons() -> None:
    shadow = parse_configuration(
        {"optIns": ["glortho"], "shadowOptOuts": True, "commenting": {"scoreThreshold": 0}}
    )
    drafts = parse_configuration({"commenting": {"scoreThreshold": 0}})

    assert commenting_gate(shadow, make_pull(), RESULT) == GateDecision.skip(
        SHADOW_COMMENTING_MESSAGE
    )
    assert commenting_gate(drafts, make_pull(draft=True), RESULT) == GateDecision.skip(
        DRAFT_COMMENTING_MESSAGE
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("threshold", "expected"),
    [(11, True), (12, True), (12.5, False), (100, False)],
)
def test_commenting_gate_threshold_is_inclusive(threshold: float, expected: bool) -> None:
    config = parse_configuration({"commenting": {"scoreThreshold": threshold}})

    assert commenting_gate(config, make_pull(), RESULT).proceed is expected


@pytest.mark.unit
def test_artifact_gate_requires_configuration() -> None:
    assert artifact_gate(Configuration(), make_pull()) == GateDecision.skip(
        DISABLED_ARTIFACT_MESSAGE
    )


@pytest.mark.unit
def test_artifact_gate_draft_exclusion_and_override() -> None:
    default = parse_configuration({"artifacts": {"score": {"format": "csv"}}})
    override = parse_configuration(
        {"artifacts": {"score": {"format": "csv", "excludeDraftPullRequests": False}}}
    )

    assert artifact_gate(default, make_pull(draft=True)) == GateDecision.skip(
        DRAFT_ARTIFACT_MESSAGE
    )
    assert artifact_gate(override, make_pull(draft=True)).proceed
    assert artifact_gate(default, make_pull(draft=False)).proceed


@pytest.mark.unit
def test_artifact_gate_ignores_shadow_mode() -> None:
    config = parse_configuration(
        {"optIns": ["glortho"], "shadowOptOuts": True, "artifacts": {"score": {}}}
    )

    assert artifact_gate(config, make_pull()).proceed


@pytest.mark.unit
def test_every_skip_decision_carries_a_reason() -> None:
    config = parse_configuration(
        {
            "optIns": ["glortho"],
            "shadowOptOuts": False,
            "labeling": {"excludeDraftPullRequests": True},
            "commenting": {"scoreThreshold": 100},
            "artifacts": {"score": {}},
        }
    )
    draft = make_pull(draft=True)

    decisions = [
        opt_in_gate(config, draft),
        labeling_gate(config, draft),
        commenting_gate(config, draft, RESULT),
        artifact_gate(config, draft),
    ]

    assert all(not decision.proceed for decision in decisions)
    assert all(decision.reason for decision in decisions)
    assert GateDecision.allow().reason == ""
