"""Pydantic models for patchbridge configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Matching modes accepted by the applier (values of ApplyMode)
ApplyModeName = Literal["strict", "tolerant", "fuzzy"]

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class DiffConfig(BaseModel):
    """Defaults for diff synthesis.

    Example in config.json:
        "diff": {"context_lines": 5}
    """

    model_config = ConfigDict(extra="forbid")

    context_lines: int = Field(
        default=3,
        ge=0,
        description="Unchanged lines of context around each change",
    )


class ApplyConfig(BaseModel):
    """Defaults for applying diffs."""

    model_config = ConfigDict(extra="forbid")

    mode: ApplyModeName = "strict"
    fuzzy_threshold: float = Field(
        default=0.8,
        ge=0.5,
        le=1.0,
        description="Similarity threshold for fuzzy mode",
    )
    search_window: int = Field(
        default=50,
        ge=0,
        description="Lines searched on each side of a hunk's hinted position",
    )
    ignore_case: bool = False


class Config(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    diff: DiffConfig = Field(default_factory=DiffConfig)
    apply: ApplyConfig = Field(default_factory=ApplyConfig)
    log_level: LogLevel = "WARNING"
