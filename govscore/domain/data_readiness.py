"""
Data readiness audit: weighted dimension scores, a readiness level, a data
quality rollup and a three-phase remediation roadmap.

Dimensions are rated 0-100. The roadmap visits the weakest dimension first
and pulls progressively deeper remediation items as a score falls below each
phase threshold.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType

from ..infrastructure.content import load_recommendation_templates
from .models import DataReadinessAudit, DataReadinessDimensionScore, RemediationPhase
from .schemas import DataQualityMetric, DataReadinessScore, RoadmapTemplates
from .services import (
    band_lookup,
    clamp,
    dedupe,
    round_int,
    validate_descending_bands,
    validate_weights,
)

READINESS_DIMENSIONS = (
    "availability",
    "quality",
    "accessibility",
    "governance",
    "security",
    "operations",
)

READINESS_DIMENSION_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "availability": 0.25,
        "quality": 0.25,
        "accessibility": 0.20,
        "governance": 0.15,
        "security": 0.10,
        "operations": 0.05,
    }
)

READINESS_DIMENSION_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "availability": "Availability",
        "quality": "Quality",
        "accessibility": "Accessibility",
        "governance": "Governance",
        "security": "Security",
        "operations": "Operations",
    }
)

READINESS_LEVEL_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "optimized": "Optimized",
        "managed": "Managed",
        "defined": "Defined",
        "developing": "Developing",
        "initial": "Initial",
    }
)

QUALITY_DIMENSION_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "accuracy": "Accuracy",
        "completeness": "Completeness",
        "consistency": "Consistency",
        "timeliness": "Timeliness",
        "validity": "Validity",
        "uniqueness": "Uniqueness",
    }
)

READINESS_LEVEL_BANDS: tuple[tuple[float, str], ...] = (
    (85, "optimized"),
    (70, "managed"),
    (55, "defined"),
    (40, "developing"),
)

ROADMAP_PHASES = ("quick_wins", "foundation", "advanced")


@dataclass(frozen=True, slots=True)
class DataReadinessConfig:
    """
    Weights, level bands and roadmap thresholds.

    A dimension contributes to a roadmap phase while its score is strictly
    below that phase's threshold, so the thresholds must not increase from
    ``quick_wins`` to ``advanced``.
    """

    templates: Mapping[str, RoadmapTemplates]
    weights: Mapping[str, float] = field(default_factory=lambda: READINESS_DIMENSION_WEIGHTS)
    level_bands: tuple[tuple[float, str], ...] = READINESS_LEVEL_BANDS
    lowest_level: str = "initial"
    quick_wins_below: float = 70
    foundation_below: float = 60
    advanced_below: float = 50

    def __post_init__(self) -> None:
        validate_weights(dict(self.weights), "Data readiness weights")
        validate_descending_bands(self.level_bands, "Data readiness level bands")
        if not self.quick_wins_below >= self.foundation_below >= self.advanced_below:
            raise ValueError("Roadmap thresholds must not increase from quick wins to advanced")

    def phase_thresholds(self) -> tuple[tuple[str, float], ...]:
        return (
            ("quick_wins", self.quick_wins_below),
            ("foundation", self.foundation_below),
            ("advanced", self.advanced_below),
        )


@lru_cache(maxsize=1)
def default_data_readiness_config() -> DataReadinessConfig:
    return DataReadinessConfig(templates=load_recommendation_templates().data_readiness)


def calculate_dimension_score(raw_score: float) -> int:
    return round_int(clamp(raw_score, 0, 100))


def score_readiness_dimension(
    entry: DataReadinessScore, config: DataReadinessConfig | None = None
) -> DataReadinessDimensionScore:
    config = config or default_data_readiness_config()
    return DataReadinessDimensionScore(
        dimension=entry.dimension,
        score=calculate_dimension_score(entry.score),
        weight=config.weights.get(entry.dimension, 0.0),
        findings=list(entry.findings),
        recommendations=list(entry.recommendations),
    )


def calculate_overall_readiness(
    dimension_scores: Sequence[DataReadinessDimensionScore],
    config: DataReadinessConfig | None = None,
) -> int:
    """
    Weighted mean of the dimension scores, normalised by the weights present.

    Dimensions without a configured weight are ignored; with no weighted
    dimension at all the result is 0.
    """
    weights = config.weights if config else READINESS_DIMENSION_WEIGHTS
    weighted_sum = 0.0
    total_weight = 0.0
    for ds in dimension_scores:
        weight = weights.get(ds.dimension, 0.0)
        weighted_sum += ds.score * weight
        total_weight += weight

    if total_weight == 0:
        return 0
    return round_int(weighted_sum / total_weight)


def classify_readiness_level(score: float, config: DataReadinessConfig | None = None) -> str:
    """
    Map a 0-100 overall score to a readiness level.

    | Score  | Level      |
    |--------|------------|
    | 85+    | optimized  |
    | 70-84  | managed    |
    | 55-69  | defined    |
    | 40-54  | developing |
    | < 40   | initial    |
    """
    if config is None:
        return band_lookup(score, READINESS_LEVEL_BANDS, "initial")
    return band_lookup(score, config.level_bands, config.lowest_level)


def calculate_data_quality(metrics: Sequence[DataQualityMetric]) -> int:
    """Unweighted mean of the quality metric scores; 0 when there are none."""
    if not metrics:
        return 0
    return round_int(sum(clamp(m.score, 0, 100) for m in metrics) / len(metrics))


def generate_remediation_roadmap(
    dimension_scores: Sequence[DataReadinessDimensionScore],
    config: DataReadinessConfig | None = None,
) -> list[RemediationPhase]:
    """
    Three phases, always in ``quick_wins``, ``foundation``, ``advanced`` order.

    Items are gathered weakest dimension first and deduplicated within a phase.
    A phase with nothing to do is still returned with an empty item list.
    """
    config = config or default_data_readiness_config()
    weakest_first = sorted(dimension_scores, key=lambda ds: ds.score)

    roadmap = []
    for phase, threshold in config.phase_thresholds():
        items = dedupe(
            item
            for ds in weakest_first
            if ds.score < threshold and ds.dimension in config.templates
            for item in getattr(config.templates[ds.dimension], phase)
        )
        roadmap.append(RemediationPhase(phase=phase, items=items))
    return roadmap


def assess_data_readiness(
    scores: Sequence[DataReadinessScore],
    quality_metrics: Sequence[DataQualityMetric] = (),
    config: DataReadinessConfig | None = None,
) -> DataReadinessAudit:
    """Score every supplied dimension and build the full audit."""
    config = config or default_data_readiness_config()
    # Known dimensions keep their canonical order; extra ones follow as given
    ordered = sorted(
        scores,
        key=lambda s: (
            READINESS_DIMENSIONS.index(s.dimension)
            if s.dimension in READINESS_DIMENSIONS
            else len(READINESS_DIMENSIONS)
        ),
    )
    dimension_scores = [score_readiness_dimension(s, config) for s in ordered]
    overall = calculate_overall_readiness(dimension_scores, config)

    return DataReadinessAudit(
        dimension_scores=dimension_scores,
        overall_score=overall,
        readiness_level=classify_readiness_level(overall, config),
        data_quality_score=calculate_data_quality(quality_metrics),
        remediation_roadmap=generate_remediation_roadmap(dimension_scores, config),
    )
