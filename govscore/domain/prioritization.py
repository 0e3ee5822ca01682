"""
Use-case prioritization.

Composite scores live on a 0-10 scale. Every dimension score is clamped to
that range and the weighted sum is normalised by the weights actually
present, so a use case scored on a subset of dimensions still lands on 0-10.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from .schemas import UseCaseDimensionScore, UseCasePriority
from .services import band_lookup, clamp, round_half_up, validate_descending_bands, validate_weights

PRIORITY_DIMENSIONS = (
    "strategic_value",
    "technical_feasibility",
    "implementation_risk",
    "time_to_value",
)

PRIORITY_DIMENSION_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "strategic_value": 0.40,
        "technical_feasibility": 0.25,
        "implementation_risk": 0.20,
        "time_to_value": 0.15,
    }
)

PRIORITY_DIMENSION_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "strategic_value": "Strategic Value",
        "technical_feasibility": "Technical Feasibility",
        "implementation_risk": "Implementation Risk",
        "time_to_value": "Time to Value",
    }
)

QUADRANT_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "strategic_imperative": "Strategic Imperative",
        "high_value": "High-Value Opportunity",
        "foundation_builder": "Foundation Builder",
        "watch_list": "Watch List",
    }
)

QUADRANT_BANDS: tuple[tuple[float, str], ...] = (
    (8.0, "strategic_imperative"),
    (6.5, "high_value"),
    (5.0, "foundation_builder"),
)
WAVE_BANDS: tuple[tuple[float, int], ...] = ((7.0, 1), (5.0, 2))

SCORE_MAX = 10


@dataclass(frozen=True, slots=True)
class PrioritizationConfig:
    weights: Mapping[str, float] = field(default_factory=lambda: PRIORITY_DIMENSION_WEIGHTS)
    quadrant_bands: tuple[tuple[float, str], ...] = QUADRANT_BANDS
    lowest_quadrant: str = "watch_list"
    wave_bands: tuple[tuple[float, int], ...] = WAVE_BANDS
    last_wave: int = 3

    def __post_init__(self) -> None:
        validate_weights(dict(self.weights), "Priority dimension weights")
        validate_descending_bands(self.quadrant_bands, "Quadrant bands")
        validate_descending_bands(self.wave_bands, "Wave bands")


DEFAULT_PRIORITIZATION = PrioritizationConfig()


def calculate_composite_score(
    dimension_scores: Sequence[UseCaseDimensionScore],
    config: PrioritizationConfig = DEFAULT_PRIORITIZATION,
) -> float:
    weighted_sum = 0.0
    total_weight = 0.0
    for entry in dimension_scores:
        weight = config.weights.get(entry.dimension)
        if weight is None:
            continue
        weighted_sum += clamp(entry.score, 0, SCORE_MAX) * weight
        total_weight += weight

    if total_weight == 0:
        return 0.0
    return round_half_up(weighted_sum / total_weight, 2)


def get_quadrant(score: float, config: PrioritizationConfig = DEFAULT_PRIORITIZATION) -> str:
    return band_lookup(score, config.quadrant_bands, config.lowest_quadrant)


def get_implementation_wave(
    score: float, config: PrioritizationConfig = DEFAULT_PRIORITIZATION
) -> int:
    return band_lookup(score, config.wave_bands, config.last_wave)


def prioritize_use_cases(
    cases: Sequence[UseCasePriority], config: PrioritizationConfig = DEFAULT_PRIORITIZATION
) -> list[UseCasePriority]:
    """
    Score, classify and rank use cases, highest composite first.

    Returns new objects; the input sequence and its items are left untouched.
    Equal scores keep their input order.
    """
    scored = []
    for case in cases:
        composite = calculate_composite_score(case.dimension_scores, config)
        scored.append(
            case.model_copy(
                update={
                    "composite_score": composite,
                    "quadrant": get_quadrant(composite, config),
                    "implementation_wave": get_implementation_wave(composite, config),
                }
            )
        )
    return sorted(scored, key=lambda c: c.composite_score, reverse=True)
