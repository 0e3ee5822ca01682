from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType

from ..infrastructure.content import load_recommendation_templates
from .models import MaturityAssessment, MaturityDimensionScore
from .schemas import MaturitySubScores
from .services import band_lookup, clamp, dedupe, round_int, validate_descending_bands

MATURITY_DIMENSIONS = (
    "policy_standards",
    "risk_management",
    "data_governance",
    "access_controls",
    "vendor_management",
    "training_awareness",
)

MATURITY_LEVEL_LABELS: Mapping[int, str] = MappingProxyType(
    {1: "Ad Hoc", 2: "Developing", 3: "Defined", 4: "Managed", 5: "Optimized"}
)

MATURITY_DIMENSION_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "policy_standards": "Policy & Standards",
        "risk_management": "Risk Management",
        "data_governance": "Data Governance",
        "access_controls": "Access Controls",
        "vendor_management": "Vendor Management",
        "training_awareness": "Training & Awareness",
    }
)

LEVEL_BANDS: tuple[tuple[float, int], ...] = ((80, 5), (60, 4), (40, 3), (20, 2))
SUBSCORE_FIELDS = ("documentation", "implementation", "enforcement", "measurement", "improvement")
SUBSCORE_MAX = 20


@dataclass(frozen=True, slots=True)
class MaturityConfig:
    """Level bands and the canned recommendations for dimensions below ``recommend_below_level``."""

    recommendations: Mapping[str, tuple[str, ...]]
    level_bands: tuple[tuple[float, int], ...] = LEVEL_BANDS
    recommend_below_level: int = 3

    def __post_init__(self) -> None:
        validate_descending_bands(self.level_bands, "Maturity level bands")


@lru_cache(maxsize=1)
def default_maturity_config() -> MaturityConfig:
    return MaturityConfig(recommendations=load_recommendation_templates().maturity)


def calculate_maturity_level(score: float, config: MaturityConfig | None = None) -> int:
    """
    Map a 0-100 score to a level.

    | Score  | Level |
    |--------|-------|
    | 0-19   | 1     |
    | 20-39  | 2     |
    | 40-59  | 3     |
    | 60-79  | 4     |
    | 80-100 | 5     |
    """
    bands = config.level_bands if config else LEVEL_BANDS
    return band_lookup(score, bands, 1)


def calculate_dimension_score(
    subscores: MaturitySubScores, config: MaturityConfig | None = None
) -> tuple[int, int]:
    """Return ``(score, level)``; each sub-score is clamped to 0-20 first."""
    total = sum(clamp(getattr(subscores, name), 0, SUBSCORE_MAX) for name in SUBSCORE_FIELDS)
    score = round_int(total)
    return score, calculate_maturity_level(score, config)


def score_dimension(
    dimension: str,
    subscores: MaturitySubScores,
    key_gap: str = "",
    config: MaturityConfig | None = None,
) -> MaturityDimensionScore:
    score, level = calculate_dimension_score(subscores, config)
    return MaturityDimensionScore(
        dimension=dimension, level=level, score=score, subscores=subscores, key_gap=key_gap
    )


def calculate_overall_maturity(
    dimension_scores: Sequence[MaturityDimensionScore], config: MaturityConfig | None = None
) -> tuple[int, int]:
    """Equal-weighted mean of the dimension scores as ``(score, level)``."""
    if not dimension_scores:
        return 0, 1

    weight = 1 / len(dimension_scores)
    score = round_int(sum(ds.score * weight for ds in dimension_scores))
    return score, calculate_maturity_level(score, config)


def get_maturity_recommendations(
    dimension_scores: Sequence[MaturityDimensionScore], config: MaturityConfig | None = None
) -> list[str]:
    """Recommendations for immature dimensions, weakest dimension first."""
    config = config or default_maturity_config()
    weakest_first = sorted(dimension_scores, key=lambda ds: ds.score)
    return dedupe(
        rec
        for ds in weakest_first
        if ds.level < config.recommend_below_level
        for rec in config.recommendations.get(ds.dimension, ())
    )


def assess_maturity(
    subscores_by_dimension: Mapping[str, MaturitySubScores],
    industry: str | None = None,
    key_gaps: Mapping[str, str] | None = None,
    config: MaturityConfig | None = None,
) -> MaturityAssessment:
    """Score every supplied dimension and roll them up into one assessment."""
    config = config or default_maturity_config()
    key_gaps = key_gaps or {}
    # Known dimensions keep their canonical order; extra ones follow as given
    ordered = [d for d in MATURITY_DIMENSIONS if d in subscores_by_dimension]
    ordered += [d for d in subscores_by_dimension if d not in MATURITY_DIMENSIONS]

    dimension_scores = [
        score_dimension(d, subscores_by_dimension[d], key_gaps.get(d, ""), config) for d in ordered
    ]
    overall_score, overall_level = calculate_overall_maturity(dimension_scores, config)

    return MaturityAssessment(
        dimension_scores=dimension_scores,
        overall_score=overall_score,
        overall_level=overall_level,
        industry=industry,
        recommendations=get_maturity_recommendations(dimension_scores, config),
    )
