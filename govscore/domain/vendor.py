from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from .schemas import VendorEvaluation, VendorScore
from .services import band_lookup, round_half_up, validate_descending_bands, validate_weights

VENDOR_DIMENSIONS = (
    "capabilities",
    "security",
    "compliance",
    "integration",
    "economics",
    "viability",
    "support",
)

VENDOR_DIMENSION_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "capabilities": 0.25,
        "security": 0.25,
        "compliance": 0.20,
        "integration": 0.15,
        "economics": 0.10,
        "viability": 0.03,
        "support": 0.02,
    }
)

VENDOR_DIMENSION_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "capabilities": "Technical Capabilities",
        "security": "Security Posture",
        "compliance": "Compliance Coverage",
        "integration": "Integration Ease",
        "economics": "Cost & Economics",
        "viability": "Vendor Viability",
        "support": "Support Quality",
    }
)

RECOMMENDATION_BANDS: tuple[tuple[float, str], ...] = ((70, "recommended"), (50, "alternative"))


@dataclass(frozen=True, slots=True)
class VendorScoringConfig:
    weights: Mapping[str, float] = field(default_factory=lambda: VENDOR_DIMENSION_WEIGHTS)
    recommendation_bands: tuple[tuple[float, str], ...] = RECOMMENDATION_BANDS

    def __post_init__(self) -> None:
        validate_weights(dict(self.weights), "Vendor dimension weights")
        validate_descending_bands(self.recommendation_bands, "Vendor recommendation bands")


DEFAULT_VENDOR_SCORING = VendorScoringConfig()


def calculate_vendor_score(
    scores: Sequence[VendorScore], config: VendorScoringConfig = DEFAULT_VENDOR_SCORING
) -> float:
    """
    Weighted 0-100 vendor score.

    Each dimension is first expressed as ``score / max_score * 100`` (0 when
    ``max_score`` is not positive); dimensions without a weight are ignored and
    the result is normalised by the weights present.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for entry in scores:
        weight = config.weights.get(entry.dimension)
        if weight is None:
            continue
        percentage = entry.score / entry.max_score * 100 if entry.max_score > 0 else 0.0
        weighted_sum += percentage * weight
        total_weight += weight

    if total_weight == 0:
        return 0.0
    return round_half_up(weighted_sum / total_weight, 2)


def get_vendor_recommendation(
    score: float, config: VendorScoringConfig = DEFAULT_VENDOR_SCORING
) -> str:
    return band_lookup(score, config.recommendation_bands, "not_recommended")


def compare_vendors(
    vendors: Sequence[VendorEvaluation], config: VendorScoringConfig = DEFAULT_VENDOR_SCORING
) -> list[VendorEvaluation]:
    """Score each vendor and return new evaluations ordered best first."""
    scored = []
    for vendor in vendors:
        overall = calculate_vendor_score(vendor.dimension_scores, config)
        scored.append(
            vendor.model_copy(
                update={
                    "overall_score": overall,
                    "recommendation": get_vendor_recommendation(overall, config),
                }
            )
        )
    return sorted(scored, key=lambda v: v.overall_score, reverse=True)
