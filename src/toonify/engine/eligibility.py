"""Eligibility decision: apply thresholds to structural stats."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from toonify.contracts.analysis import EligibilityConfig, EligibilityReport, StructuralStats
from toonify.engine.analyzer import analyze_structure

HIGHLY_TABULAR_PERCENT = 80
MODERATELY_TABULAR_PERCENT = 60


def _format_percent(value: float) -> str:
    """Render a percentage the way it was computed, without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _format_score(value: float) -> str:
    """Two decimals, ties rounded away from zero."""
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def explain(stats: StructuralStats, config: EligibilityConfig) -> str:
    """Build the human-readable reason string for a decision."""
    reasons: list[str] = []

    if stats.percent_tabular >= HIGHLY_TABULAR_PERCENT:
        reasons.append("highly tabular data")
    elif stats.percent_tabular >= MODERATELY_TABULAR_PERCENT:
        reasons.append("moderately tabular data")
    else:
        reasons.append(f"only {_format_percent(stats.percent_tabular)}% tabular (less beneficial)")

    if stats.nested_depth > config.max_nested_depth:
        reasons.append(f"deep nesting ({stats.nested_depth} levels)")

    if stats.uniformity_score < config.min_uniformity_score:
        reasons.append(f"low uniformity score ({_format_score(stats.uniformity_score)})")

    return "; ".join(reasons)


def decide(stats: StructuralStats, config: EligibilityConfig | None = None) -> EligibilityReport:
    """Decide whether TOON is worthwhile for a payload with these stats."""
    config = config or EligibilityConfig()
    should_use_toon = (
        stats.percent_tabular >= config.min_tabular_percent
        and stats.nested_depth <= config.max_nested_depth
        and stats.uniformity_score >= config.min_uniformity_score
    )
    return EligibilityReport(
        percent_tabular=stats.percent_tabular,
        nested_depth=stats.nested_depth,
        uniformity_score=stats.uniformity_score,
        should_use_toon=should_use_toon,
        reason=explain(stats, config),
    )


def analyze_eligibility(value: Any, config: EligibilityConfig | None = None) -> EligibilityReport:
    """Analyze a value and decide its eligibility in one step."""
    return decide(analyze_structure(value), config)
