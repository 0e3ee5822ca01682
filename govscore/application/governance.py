"""
Governance readiness evaluation.

Reads gate, control, risk and exception records and reports whether the
project may progress, with the list of blockers when it may not.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.models import GateReadiness, GovernanceReadiness
from ..domain.risk import effective_tier
from ..domain.schemas import GovernanceControlContext
from ..domain.services import round_int
from ..infrastructure.logging import get_logger, log_operation

logger = get_logger(__name__)

OPEN_RISK_STATUSES = frozenset({"open", "mitigating"})
BLOCKING_TIERS = frozenset({"high", "critical"})
BLOCKING_GATE_DECISIONS = frozenset({"pending", "rejected"})


@dataclass(frozen=True, slots=True)
class ReadinessThresholds:
    min_control_pass_rate: int = 80


DEFAULT_READINESS_THRESHOLDS = ReadinessThresholds()


def control_pass_rate(passed: int, total: int) -> int:
    """Whole-number pass percentage; 0 when nothing was checked."""
    return round_int(passed / total * 100) if total > 0 else 0


@log_operation("evaluate_governance_readiness")
def evaluate_governance_readiness(
    ctx: GovernanceControlContext,
    thresholds: ReadinessThresholds = DEFAULT_READINESS_THRESHOLDS,
) -> GovernanceReadiness:
    gates_status = [
        GateReadiness(
            gate_type=gate.gate_type,
            decision=gate.decision,
            evidence_complete=all(a.provided for a in gate.required_artifacts),
            missing_artifacts=[a.name for a in gate.required_artifacts if not a.provided],
        )
        for gate in ctx.gates
    ]

    passed = sum(1 for c in ctx.controls if c.result == "pass")
    pass_rate = control_pass_rate(passed, len(ctx.controls))

    open_risks = [r for r in ctx.risks if r.status in OPEN_RISK_STATUSES]
    approved_exceptions = [e for e in ctx.exceptions if e.status == "approved"]

    blockers: list[str] = []
    for gs in gates_status:
        if gs.decision in BLOCKING_GATE_DECISIONS:
            blockers.append(f'Gate "{gs.gate_type}" is {gs.decision}')
        if not gs.evidence_complete and gs.decision != "pending":
            blockers.append(f'Gate "{gs.gate_type}" has incomplete evidence')

    if pass_rate < thresholds.min_control_pass_rate:
        blockers.append(
            f"Control pass rate ({pass_rate}%) below {thresholds.min_control_pass_rate}% threshold"
        )

    excepted_risk_ids = {e.risk_id for e in approved_exceptions if e.risk_id}
    unexcepted = [
        r
        for r in open_risks
        if effective_tier(r) in BLOCKING_TIERS and r.id not in excepted_risk_ids
    ]
    if unexcepted:
        blockers.append(f"{len(unexcepted)} high/critical risk(s) without exception or mitigation")

    if blockers:
        logger.info("Governance readiness blocked by %d item(s)", len(blockers))

    return GovernanceReadiness(
        ready=not blockers,
        gates_status=gates_status,
        control_pass_rate=pass_rate,
        open_risks=len(open_risks),
        open_exceptions=len(approved_exceptions),
        blockers=blockers,
    )
