"""
Risk scoring, heat map construction and portfolio summaries.

Two scores exist side by side. :func:`calculate_risk_score` is the residual
score, discounted by control effectiveness. The heat map, the tier counts in
:func:`summarize_risks` and the top-risk ordering use the inherent score
(likelihood x impact) so the register reads the same before and after
controls are recorded.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from .models import RiskAssessmentSummary, RiskHeatMapCell
from .schemas import RiskClassification
from .services import band_lookup, clamp, round_half_up

RISK_CATEGORIES = (
    "model_algorithm",
    "operational",
    "ethical_fairness",
    "regulatory_compliance",
    "security_privacy",
    "strategic_business",
    "third_party",
)

RISK_CATEGORY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "model_algorithm": "Model & Algorithm",
        "operational": "Operational",
        "ethical_fairness": "Ethical & Fairness",
        "regulatory_compliance": "Regulatory & Compliance",
        "security_privacy": "Security & Privacy",
        "strategic_business": "Strategic & Business",
        "third_party": "Third Party",
    }
)

RISK_TIERS = ("critical", "high", "medium", "low")
TIER_BANDS: tuple[tuple[float, str], ...] = ((16, "critical"), (10, "high"), (5, "medium"))

SCALE_MIN = 1
SCALE_MAX = 5
TOP_RISK_COUNT = 5


def calculate_risk_score(
    likelihood: float, impact: float, control_effectiveness: float | None = None
) -> float:
    """
    Residual risk score in ``[0, 25]``.

    ``likelihood`` and ``impact`` are clamped to 1-5 and
    ``control_effectiveness`` to 0-1 before multiplying.
    """
    effectiveness = clamp(control_effectiveness or 0.0, 0, 1)
    score = (
        clamp(likelihood, SCALE_MIN, SCALE_MAX)
        * clamp(impact, SCALE_MIN, SCALE_MAX)
        * (1 - effectiveness)
    )
    return round_half_up(score, 2)


def get_risk_tier(score: float) -> str:
    return band_lookup(score, TIER_BANDS, "low")


def inherent_score(risk: RiskClassification) -> float:
    return clamp(risk.likelihood, SCALE_MIN, SCALE_MAX) * clamp(risk.impact, SCALE_MIN, SCALE_MAX)


def effective_tier(risk: RiskClassification) -> str:
    """The recorded tier, or the inherent tier when none was recorded."""
    return risk.tier or get_risk_tier(inherent_score(risk))


def _cell_index(value: float) -> int:
    # Clamp before rounding so inf/NaN ratings still land in an edge cell
    bounded = clamp(value, SCALE_MIN, SCALE_MAX)
    return int(math.floor(bounded + 0.5)) - 1


def build_heat_map(risks: Sequence[RiskClassification]) -> list[list[RiskHeatMapCell]]:
    """
    5x5 matrix; row ``i`` is likelihood ``i + 1`` and column ``j`` impact ``j + 1``.
    """
    matrix = [
        [
            RiskHeatMapCell(
                likelihood=likelihood,
                impact=impact,
                score=likelihood * impact,
                rating=get_risk_tier(likelihood * impact),
            )
            for impact in range(SCALE_MIN, SCALE_MAX + 1)
        ]
        for likelihood in range(SCALE_MIN, SCALE_MAX + 1)
    ]

    for risk in risks:
        matrix[_cell_index(risk.likelihood)][_cell_index(risk.impact)].risks.append(
            risk.description
        )

    return matrix


def summarize_risks(risks: Sequence[RiskClassification]) -> RiskAssessmentSummary:
    by_tier = dict.fromkeys(RISK_TIERS, 0)
    for risk in risks:
        by_tier[get_risk_tier(inherent_score(risk))] += 1

    by_category = dict.fromkeys(RISK_CATEGORIES, 0)
    for risk in risks:
        # unknown categories are counted in the total only
        if risk.category in by_category:
            by_category[risk.category] += 1

    top_risks = sorted(risks, key=inherent_score, reverse=True)[:TOP_RISK_COUNT]

    return RiskAssessmentSummary(
        total_risks=len(risks),
        by_tier=by_tier,
        by_category=by_category,
        heat_map=build_heat_map(risks),
        top_risks=list(top_risks),
    )
