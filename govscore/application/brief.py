"""
Executive decision brief.

Produces the single-page go / conditional-go / no-go brief shown to
executives. Its verdict logic is narrower than the decision hub's: hard
blockers force a no-go, any remaining condition yields a conditional go.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType

from ..domain.financial import DEFAULT_ASSUMPTIONS, FinancialAssumptions, calculate_roi
from ..domain.models import (
    ExecutiveDecisionBrief,
    GovernanceStatus,
    RiskPosture,
    ValueSummary,
)
from ..domain.schemas import (
    BriefControlData,
    BriefGateData,
    BriefInput,
    BriefRiskData,
    KpiAttainment,
    KpiSummary,
)
from ..domain.services import format_number
from ..infrastructure.logging import LogContext, get_logger, log_operation
from .governance import control_pass_rate

logger = get_logger(__name__)

BRIEF_NEXT_STEPS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "go": (
            "Prepare production deployment plan",
            "Schedule broader rollout with additional teams",
            "Archive pilot evidence for compliance record",
        ),
        "conditional_go": (
            "Address remaining control failures within 14 days",
            "Close open high-risk findings before scaling",
            "Schedule follow-up review in 2 weeks",
        ),
        "no_go": (
            "Document root causes for pilot challenges",
            "Review pilot scope and success criteria",
            "Schedule retrospective with stakeholders",
        ),
    }
)


@dataclass(frozen=True, slots=True)
class BriefThresholds:
    """Cut-offs used by :func:`generate_executive_brief`."""

    no_go_high_critical_open: int = 3
    no_go_control_pass_rate: float = 50
    conditional_control_pass_rate: float = 80
    conditional_kpi_attainment: float = 70
    highlight_count: int = 3
    next_steps: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: BRIEF_NEXT_STEPS)


DEFAULT_BRIEF_THRESHOLDS = BriefThresholds()


def compute_brief_recommendation(
    data: BriefInput,
    pass_rate: int,
    kpi_attainment: float | None,
    thresholds: BriefThresholds = DEFAULT_BRIEF_THRESHOLDS,
) -> str:
    risks = data.risk_data.high_critical_open

    if risks >= thresholds.no_go_high_critical_open:
        return "no_go"
    if pass_rate < thresholds.no_go_control_pass_rate:
        return "no_go"
    if not data.data_classified:
        return "no_go"

    if risks > 0:
        return "conditional_go"
    if pass_rate < thresholds.conditional_control_pass_rate:
        return "conditional_go"
    if data.gate_data.gates_passed < data.gate_data.gates_total:
        return "conditional_go"
    if kpi_attainment is not None and kpi_attainment < thresholds.conditional_kpi_attainment:
        return "conditional_go"

    return "go"


def build_rationale(
    recommendation: str,
    data: BriefInput,
    pass_rate: int,
    kpi_attainment: float | None,
    thresholds: BriefThresholds = DEFAULT_BRIEF_THRESHOLDS,
) -> str:
    risks = data.risk_data.high_critical_open
    parts: list[str] = []

    if recommendation == "go":
        parts.append("All governance criteria met.")
        if kpi_attainment is not None:
            parts.append(f"KPI attainment at {format_number(kpi_attainment)}%.")
        parts.append(f"Security controls at {pass_rate}% pass rate.")
        parts.append("Recommend proceeding to production path.")
    elif recommendation == "conditional_go":
        parts.append("Most criteria met with conditions.")
        if risks > 0:
            parts.append(f"{risks} high/critical risk(s) require remediation.")
        if pass_rate < thresholds.conditional_control_pass_rate:
            parts.append(f"Control pass rate ({pass_rate}%) needs improvement.")
        parts.append("Recommend proceeding with documented remediation timeline.")
    else:
        parts.append("Critical blockers prevent safe progression.")
        if not data.data_classified:
            parts.append("Data classification not completed.")
        if pass_rate < thresholds.no_go_control_pass_rate:
            parts.append(f"Control pass rate critically low ({pass_rate}%).")
        if risks >= thresholds.no_go_high_critical_open:
            parts.append(f"{risks} high/critical open risks.")
        parts.append("Recommend addressing root causes before re-evaluation.")

    return " ".join(parts)


def _value_summary(
    data: BriefInput,
    pass_rate: int,
    kpi_attainment: float | None,
    thresholds: BriefThresholds,
    assumptions: FinancialAssumptions,
) -> ValueSummary:
    top_wins: list[str] = []
    concerns: list[str] = []
    limit = thresholds.highlight_count

    if data.kpi_summary is not None:
        met = [k for k in data.kpi_summary.kpis if k.status == "met"]
        for kpi in met[:limit]:
            top_wins.append(
                f"{kpi.kpi_name}: {format_number(kpi.current or 0)} "
                f"(target: {format_number(kpi.target)})"
            )
        lagging = [k for k in data.kpi_summary.kpis if k.status in ("at_risk", "missed")]
        for kpi in lagging[:limit]:
            concerns.append(f"{kpi.kpi_name}: {format_number(kpi.attainment_pct or 0)}% attainment")

    if data.risk_data.high_critical_open > 0:
        concerns.append(f"{data.risk_data.high_critical_open} high/critical risks remain open")
    if pass_rate < thresholds.conditional_control_pass_rate:
        concerns.append(
            f"Control pass rate ({pass_rate}%) below "
            f"{format_number(thresholds.conditional_control_pass_rate)}% threshold"
        )

    return ValueSummary(
        kpi_attainment_pct=kpi_attainment,
        top_wins=top_wins,
        concerns=concerns,
        roi=calculate_roi(data.roi, assumptions) if data.roi is not None else None,
    )


@log_operation("generate_executive_brief")
def generate_executive_brief(
    data: BriefInput,
    thresholds: BriefThresholds = DEFAULT_BRIEF_THRESHOLDS,
    assumptions: FinancialAssumptions = DEFAULT_ASSUMPTIONS,
    now: datetime | None = None,
    trace_id: str | None = None,
) -> ExecutiveDecisionBrief:
    """
    Build the executive brief for one project.

    ``now`` and ``trace_id`` default to the current UTC time and a fresh
    UUID4; pass them explicitly for reproducible output.
    """
    trace_id = trace_id or str(uuid.uuid4())
    with LogContext(project_id=data.project_id, trace_id=trace_id):
        controls = data.control_data
        pass_rate = control_pass_rate(controls.passed, controls.total_controls)
        kpi_attainment = (
            data.kpi_summary.overall_attainment_pct if data.kpi_summary is not None else None
        )

        recommendation = compute_brief_recommendation(data, pass_rate, kpi_attainment, thresholds)
        logger.info("Executive brief recommendation: %s", recommendation)

        return ExecutiveDecisionBrief(
            project_id=data.project_id,
            generated_at=now or datetime.now(timezone.utc),
            trace_id=trace_id,
            recommendation=recommendation,
            rationale=build_rationale(recommendation, data, pass_rate, kpi_attainment, thresholds),
            value_summary=_value_summary(data, pass_rate, kpi_attainment, thresholds, assumptions),
            risk_posture=RiskPosture(
                total_risks=data.risk_data.total_risks,
                high_critical_open=data.risk_data.high_critical_open,
                control_pass_rate=pass_rate,
                unresolved_items=list(data.risk_data.unresolved_items),
            ),
            governance_status=GovernanceStatus(
                gates_passed=data.gate_data.gates_passed,
                gates_total=data.gate_data.gates_total,
                data_classified=data.data_classified,
                evidence_exported=data.evidence_exported,
            ),
            next_steps=list(thresholds.next_steps[recommendation]),
        )


def _demo_kpi(kpi_id, name, category, baseline, target, current, attainment, status, confidence):
    return KpiAttainment(
        kpi_id=kpi_id,
        kpi_name=name,
        category=category,
        baseline=baseline,
        target=target,
        current=current,
        attainment_pct=attainment,
        trend="improving",
        status=status,
        confidence=confidence,
    )


def demo_brief_input(project_id: str) -> BriefInput:
    """Showcase pilot state: strong adoption, one open high risk, one gate outstanding."""
    return BriefInput(
        project_id=project_id,
        kpi_summary=KpiSummary(
            project_id=project_id,
            total_kpis=6,
            met=2,
            at_risk=1,
            missed=0,
            tracking=3,
            not_started=0,
            overall_attainment_pct=72,
            kpis=[
                _demo_kpi("1", "Active Pilot Users", "adoption", 0, 10, 12, 120, "met", "high"),
                _demo_kpi("2", "Developer Satisfaction", "satisfaction", None, 40, 52, 130, "met", "high"),
                _demo_kpi("3", "Developer Time Saved", "time_saved", 0, 8, 5.2, 65, "tracking", "high"),
                _demo_kpi("4", "Test Coverage", "quality_lift", 62, 77, 74, 80, "tracking", "high"),
                _demo_kpi("5", "Defect Rate", "error_rate", 4.5, 2.5, 3.1, 70, "tracking", "medium"),
                _demo_kpi("6", "Cost Per Feature", "cost_reduction", 1200, 800, 920, 70, "at_risk", "medium"),
            ],
        ),
        risk_data=BriefRiskData(
            total_risks=5,
            high_critical_open=1,
            unresolved_items=["Prompt injection mitigation review pending"],
        ),
        control_data=BriefControlData(total_controls=30, passed=26, failed=4),
        gate_data=BriefGateData(gates_passed=3, gates_total=4),
        data_classified=True,
        evidence_exported=True,
    )


def generate_demo_executive_brief(
    project_id: str, now: datetime | None = None, trace_id: str | None = None
) -> ExecutiveDecisionBrief:
    return generate_executive_brief(demo_brief_input(project_id), now=now, trace_id=trace_id)
