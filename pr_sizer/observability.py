"""Run report models describing how an evaluation run ended."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class RunState(StrEnum):
    """Terminal states of an evaluation run."""

    COMPLETED = "completed"
    OPTED_OUT = "opted_out"
    FAILED = "failed"


class Feature(StrEnum):
    """Side effects an evaluation run may apply."""

    LABELING = "labeling"
    COMMENTING = "commenting"
    ARTIFACT = "artifact"


@dataclass(frozen=True, slots=True)
class FeatureOutcome:
    """Whether a feature was applied, and why not when it was skipped."""

    feature: Feature
    applied: bool
    reason: str | None = None


@dataclass(slots=True)
class RunReport:
    """Summary of one evaluation run."""

    state: RunState = RunState.COMPLETED
    score: int | None = None
    category: str | None = None
    failure_message: str | None = None
    outcomes: list[FeatureOutcome] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.state is RunState.FAILED

    def outcome(self, feature: Feature) -> FeatureOutcome | None:
        for outcome in self.outcomes:
            if outcome.feature is feature:
                return outcome
        return None

    def record_applied(self, feature: Feature) -> None:
        self.outcomes.append(FeatureOutcome(feature=feature, applied=True))

    def record_skipped(self, feature: Feature, reason: str) -> None:
        self.outcomes.append(FeatureOutcome(feature=feature, applied=False, reason=reason))
