"""
Decision synthesis for the decision hub.

Combines KPI attainment, risk posture and gate status into a go /
conditional-go / no-go recommendation with a confidence level. The executive
brief in :mod:`govscore.application.brief` reaches its own verdict with a
different threshold table. The two are not merged; each keeps its
thresholds in a named object.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..domain.models import DecisionRecommendation, OutcomeSummary
from ..domain.schemas import DecisionSupportContext, OutcomeMetric
from ..domain.services import format_number, round_int, safe_divide
from ..infrastructure.logging import get_logger, log_operation

logger = get_logger(__name__)

DECISION_NEXT_STEPS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "go": (
            "Prepare production deployment plan",
            "Schedule broader rollout with additional teams",
            "Archive pilot evidence for compliance record",
        ),
        "conditional_go": (
            "Resolve listed risk factors and evidence gaps",
            "Assign owners and due dates for each open condition",
            "Schedule follow-up decision review",
        ),
        "no_go": (
            "Document root causes behind the risk factors",
            "Close evidence gaps before re-evaluation",
            "Schedule retrospective with stakeholders",
        ),
    }
)


@dataclass(frozen=True, slots=True)
class DecisionThresholds:
    """Cut-offs used by :func:`generate_decision_recommendation`."""

    kpi_attainment_pct: float = 80
    control_pass_strong: float = 90
    control_pass_acceptable: float = 70
    max_conditional_risk_factors: int = 2
    max_conditional_evidence_gaps: int = 1
    high_confidence_sources: int = 4
    medium_confidence_sources: int = 2
    next_steps: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: DECISION_NEXT_STEPS)


DEFAULT_DECISION_THRESHOLDS = DecisionThresholds()


def _outcome_summary(metric: OutcomeMetric) -> OutcomeSummary:
    if metric.actual_value is None:
        attainment = "Not measured"
    else:
        attainment = f"{round_int(safe_divide(metric.actual_value, metric.target_value) * 100)}%"
    return OutcomeSummary(
        metric=metric.name,
        target=metric.target_value,
        actual=metric.actual_value,
        attainment=attainment,
    )


def count_data_sources(ctx: DecisionSupportContext) -> int:
    """How many of the five expected signals carry data."""
    return sum(
        (
            ctx.kpi_summary.overall_attainment_pct is not None,
            ctx.risk_posture.total > 0,
            ctx.gate_status.total > 0,
            ctx.evidence_complete,
            len(ctx.outcome_metrics) > 0,
        )
    )


@log_operation("generate_decision_recommendation")
def generate_decision_recommendation(
    ctx: DecisionSupportContext,
    thresholds: DecisionThresholds = DEFAULT_DECISION_THRESHOLDS,
) -> DecisionRecommendation:
    rationale: list[str] = []
    evidence_gaps: list[str] = []
    risk_factors: list[str] = []

    attainment = ctx.kpi_summary.overall_attainment_pct
    kpi_target = format_number(thresholds.kpi_attainment_pct)
    if attainment is None:
        evidence_gaps.append("KPI tracking not started or data unavailable")
    elif attainment >= thresholds.kpi_attainment_pct:
        rationale.append(
            f"KPI attainment at {format_number(attainment)}% meets the {kpi_target}% threshold"
        )
    else:
        risk_factors.append(
            f"KPI attainment at {format_number(attainment)}% is below the {kpi_target}% threshold"
        )

    posture = ctx.risk_posture
    if posture.high_critical_open == 0:
        rationale.append("No open high/critical risks")
    else:
        risk_factors.append(f"{posture.high_critical_open} high/critical risk(s) remain open")

    pass_rate = format_number(posture.control_pass_rate)
    if posture.control_pass_rate >= thresholds.control_pass_strong:
        rationale.append(f"Control pass rate at {pass_rate}%")
    elif posture.control_pass_rate >= thresholds.control_pass_acceptable:
        risk_factors.append(f"Control pass rate at {pass_rate}%, room for improvement")
    else:
        risk_factors.append(f"Control pass rate critically low at {pass_rate}%")

    gates = ctx.gate_status
    if gates.passed == gates.total:
        rationale.append("All governance gates approved")
    else:
        evidence_gaps.append(f"{gates.total - gates.passed} gate(s) pending approval")

    if not ctx.evidence_complete:
        evidence_gaps.append("Evidence package is incomplete")

    if not risk_factors and not evidence_gaps:
        recommendation = "go"
    elif (
        len(risk_factors) <= thresholds.max_conditional_risk_factors
        and len(evidence_gaps) <= thresholds.max_conditional_evidence_gaps
    ):
        recommendation = "conditional_go"
    else:
        recommendation = "no_go"

    sources = count_data_sources(ctx)
    if sources >= thresholds.high_confidence_sources:
        confidence = "high"
    elif sources >= thresholds.medium_confidence_sources:
        confidence = "medium"
    else:
        confidence = "low"

    logger.info(
        "Decision %s with %s confidence (%d risk factor(s), %d evidence gap(s))",
        recommendation,
        confidence,
        len(risk_factors),
        len(evidence_gaps),
    )

    return DecisionRecommendation(
        recommendation=recommendation,
        confidence=confidence,
        rationale=rationale,
        evidence_gaps=evidence_gaps,
        risk_factors=risk_factors,
        outcome_summary=[_outcome_summary(m) for m in ctx.outcome_metrics],
        next_steps=list(thresholds.next_steps[recommendation]),
    )
