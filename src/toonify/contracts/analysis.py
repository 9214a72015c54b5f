"""Structural analysis, eligibility and token-cost models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StructuralStats(BaseModel):
    """Tabularity statistics of one value tree."""

    model_config = ConfigDict(frozen=True)

    percent_tabular: float = 0.0
    nested_depth: int = 0
    uniformity_score: float = 1.0


class EligibilityReport(BaseModel):
    """Outcome of checking structural stats against the eligibility thresholds."""

    model_config = ConfigDict(frozen=True)

    percent_tabular: float
    nested_depth: int
    uniformity_score: float
    should_use_toon: bool
    reason: str


class EligibilityConfig(BaseModel):
    """Thresholds that decide whether a payload is worth encoding as TOON.

    Instances are immutable; derive a new one with ``model_copy(update=...)``
    instead of mutating fields.
    """

    model_config = ConfigDict(frozen=True)

    min_tabular_percent: float = Field(default=60, ge=0, le=100)
    max_nested_depth: int = Field(default=4, ge=0)
    min_uniformity_score: float = Field(default=0.8, ge=0, le=1)


class ToonConfig(BaseModel):
    """Configuration held by a long-lived processor."""

    model_config = ConfigDict(frozen=True)

    eligibility: EligibilityConfig = Field(default_factory=EligibilityConfig)


class TokenMetrics(BaseModel):
    """Approximate token cost of a payload as JSON vs. TOON."""

    model_config = ConfigDict(frozen=True)

    original: int
    toon: int
    savings: int
    percent_saved: float
