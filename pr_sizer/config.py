"""Configuration contract for pull request evaluation policy."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from pr_sizer.errors import ConfigurationError

DEFAULT_CATEGORY_LABEL_PREFIX = "sizeup/"
DEFAULT_ARTIFACT_DIRECTORY = "sizeup-score"
DEFAULT_COMMENT_TEMPLATE = (
    "👋 @{{author}} this pull request exceeds the configured reviewability score "
    "threshold of {{threshold}}. Its score is {{score}}, which places it in the "
    "**{{category}}** category.\n\n"
    "Smaller pull requests are easier to review well. Consider splitting this one "
    "into a series of smaller, independently reviewable changes."
)


class _PolicyModel(BaseModel):
    """Base for configuration sections keyed by camelCase names."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class LabelingConfig(_PolicyModel):
    """Policy for applying the category label."""

    exclude_draft_pull_requests: bool = False
    category_label_prefix: str = DEFAULT_CATEGORY_LABEL_PREFIX
    colors: dict[str, str] = Field(default_factory=dict)

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, value: dict[str, str]) -> dict[str, str]:
        """Normalize colors to the six-digit hex form GitHub expects."""
        normalized: dict[str, str] = {}
        for category, color in value.items():
            hex_color = color.lstrip("#").lower()
            if len(hex_color) != 6 or any(ch not in "0123456789abcdef" for ch in hex_color):
                raise ValueError(f"color for '{category}' must be a hex value like 'ededed'.")
            normalized[category] = hex_color
        return normalized


class CommentingConfig(_PolicyModel):
    """Policy for posting the score comment."""

    # Drafts are excluded unless a workflow explicitly opts back in.
    exclude_draft_pull_requests: bool = True
    score_threshold: float | None = None
    comment_template: str = Field(default=DEFAULT_COMMENT_TEMPLATE, min_length=1)


class ScoreArtifactConfig(_PolicyModel):
    """Policy for persisting the evaluation result as a build artifact."""

    format: Literal["csv", "json"] = "csv"
    exclude_draft_pull_requests: bool = True
    directory: str = Field(default=DEFAULT_ARTIFACT_DIRECTORY, min_length=1)


class ArtifactsConfig(_PolicyModel):
    """Container for artifact sub-configurations."""

    score: ScoreArtifactConfig | None = None


class CategoryConfig(_PolicyModel):
    """One size bucket: scores up to and including `lte` fall into it."""

    name: str = Field(min_length=1)
    lte: int | None = Field(default=None, ge=0)


DEFAULT_CATEGORIES: tuple[CategoryConfig, ...] = (
    CategoryConfig(name="extra small", lte=10),
    CategoryConfig(name="small", lte=30),
    CategoryConfig(name="medium", lte=100),
    CategoryConfig(name="large", lte=500),
    CategoryConfig(name="extra large"),
)


class ScoringConfig(_PolicyModel):
    """Inputs to the default scoring engine."""

    categories: tuple[CategoryConfig, ...] = DEFAULT_CATEGORIES
    ignored_file_patterns: tuple[str, ...] = ()

    @field_validator("categories")
    @classmethod
    def validate_categories(
        cls, value: tuple[CategoryConfig, ...]
    ) -> tuple[CategoryConfig, ...]:
        """Require ascending bounds where only the last category may be unbounded."""
        if not value:
            raise ValueError("at least one category is required.")
        previous_bound = -1
        for index, category in enumerate(value):
            if category.lte is None:
                if index != len(value) - 1:
                    raise ValueError(
                        f"category '{category.name}' has no 'lte' bound but is not last."
                    )
                continue
            if category.lte <= previous_bound:
                raise ValueError("category 'lte' bounds must be strictly ascending.")
            previous_bound = category.lte
        return value


class Configuration(_PolicyModel):
    """Top-level evaluation policy. Every section is optional."""

    opt_ins: tuple[str, ...] = ()
    shadow_opt_outs: bool = False
    labeling: LabelingConfig = Field(default_factory=LabelingConfig)
    commenting: CommentingConfig = Field(default_factory=CommentingConfig)
    artifacts: ArtifactsConfig = Field(default_factory=ArtifactsConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @field_validator("opt_ins", mode="before")
    @classmethod
    def validate_opt_ins(cls, value: Any) -> Any:
        """Accept null as an empty allow-list and strip leading '@' from logins."""
        if value is None:
            return ()
        if isinstance(value, str):
            raise ValueError("optIns must be a list of logins.")
        return tuple(str(login).strip().lstrip("@") for login in value)


def parse_configuration(payload: Any, *, source: str = "<configuration>") -> Configuration:
    """Validate an already-parsed configuration mapping."""
    if payload is None:
        return Configuration()
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Configuration in {source} must be a mapping.")
    try:
        return Configuration.model_validate(payload)
    except ValidationError as error:
        raise ConfigurationError(f"Invalid configuration in {source}: {error}") from error


def load_configuration(path: Path | str | None) -> Configuration:
    """Load configuration from a YAML file; no path means the default policy."""
    if path is None or str(path) == "":
        return Configuration()

    config_path = Path(path)
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as error:
        raise ConfigurationError(
            f"Unable to read configuration file '{config_path}': {error}"
        ) from error

    try:
        payload = yaml.safe_load(raw_text)
    except yaml.YAMLError as error:
        raise ConfigurationError(
            f"Configuration file '{config_path}' is not valid YAML: {error}"
        ) from error

    return parse_configuration(payload, source=f"'{config_path}'")
