"""
Tests for governance readiness evaluation.
"""

from govscore.application.governance import (
    ReadinessThresholds,
    control_pass_rate,
    evaluate_governance_readiness,
)
from govscore.domain.schemas import (
    ControlCheck,
    GateArtifact,
    GovernanceControlContext,
    GovernanceGate,
    RiskClassification,
    RiskException,
)


def gate(gate_type, decision="approved", artifacts=None):
    artifacts = artifacts if artifacts is not None else {"Risk assessment": True}
    return GovernanceGate(
        gate_type=gate_type,
        decision=decision,
        required_artifacts=[GateArtifact(name=n, provided=p) for n, p in artifacts.items()],
    )


def controls(passed, failed=0, warnings=0):
    return (
        [ControlCheck(result="pass") for _ in range(passed)]
        + [ControlCheck(result="fail") for _ in range(failed)]
        + [ControlCheck(result="warning") for _ in range(warnings)]
    )


def risk(risk_id, likelihood, impact, status="open", tier=None):
    return RiskClassification(
        id=risk_id,
        category="security_privacy",
        description=f"Risk {risk_id}",
        likelihood=likelihood,
        impact=impact,
        status=status,
        tier=tier,
    )


class TestControlPassRate:
    def test_rounded_percentage(self):
        assert control_pass_rate(26, 30) == 87
        assert control_pass_rate(1, 8) == 13  # 12.5 rounds half up

    def test_no_controls(self):
        assert control_pass_rate(0, 0) == 0


class TestGovernanceReadiness:
    def test_clean_project_is_ready(self):
        ctx = GovernanceControlContext(
            gates=[gate("intake"), gate("pilot_launch")],
            controls=controls(9, 1),
            risks=[risk("r1", 2, 2)],
        )
        result = evaluate_governance_readiness(ctx)

        assert result.ready is True
        assert result.blockers == []
        assert result.control_pass_rate == 90
        assert result.open_risks == 1
        assert [g.gate_type for g in result.gates_status] == ["intake", "pilot_launch"]

    def test_pending_gate_blocks(self):
        ctx = GovernanceControlContext(
            gates=[gate("scale_review", decision="pending", artifacts={"ROI": False})],
            controls=controls(10),
        )
        result = evaluate_governance_readiness(ctx)

        assert result.ready is False
        assert result.blockers == ['Gate "scale_review" is pending']
        status = result.gates_status[0]
        assert status.evidence_complete is False
        assert status.missing_artifacts == ["ROI"]

    def test_approved_gate_with_missing_evidence_blocks(self):
        ctx = GovernanceControlContext(
            gates=[gate("pilot_launch", artifacts={"Runbook": True, "DPIA": False})],
            controls=controls(10),
        )
        result = evaluate_governance_readiness(ctx)
        assert result.blockers == ['Gate "pilot_launch" has incomplete evidence']

    def test_rejected_gate_reports_both_blockers(self):
        ctx = GovernanceControlContext(
            gates=[gate("intake", decision="rejected", artifacts={"Charter": False})],
            controls=controls(10),
        )
        result = evaluate_governance_readiness(ctx)
        assert result.blockers == [
            'Gate "intake" is rejected',
            'Gate "intake" has incomplete evidence',
        ]

    def test_low_control_pass_rate_blocks(self):
        ctx = GovernanceControlContext(controls=controls(3, 1))
        result = evaluate_governance_readiness(ctx)
        assert result.control_pass_rate == 75
        assert result.blockers == ["Control pass rate (75%) below 80% threshold"]

    def test_no_controls_counts_as_zero_pass_rate(self):
        result = evaluate_governance_readiness(GovernanceControlContext())
        assert result.control_pass_rate == 0
        assert result.ready is False

    def test_threshold_is_configurable(self):
        ctx = GovernanceControlContext(controls=controls(3, 1))
        result = evaluate_governance_readiness(ctx, ReadinessThresholds(min_control_pass_rate=70))
        assert result.ready is True

    def test_high_risks_without_exception_block(self):
        ctx = GovernanceControlContext(
            controls=controls(10),
            risks=[
                risk("r1", 4, 4),
                risk("r2", 1, 1, tier="high"),
                risk("r3", 5, 5, status="mitigated"),
                risk("r4", 2, 2),
            ],
        )
        result = evaluate_governance_readiness(ctx)
        assert result.open_risks == 3
        assert result.blockers == ["2 high/critical risk(s) without exception or mitigation"]

    def test_approved_exception_covers_risk(self):
        ctx = GovernanceControlContext(
            controls=controls(10),
            risks=[risk("r1", 4, 4), risk("r2", 4, 3)],
            exceptions=[
                RiskException(risk_id="r1", status="approved"),
                RiskException(risk_id="r2", status="requested"),
            ],
        )
        result = evaluate_governance_readiness(ctx)
        assert result.open_exceptions == 1
        assert result.blockers == ["1 high/critical risk(s) without exception or mitigation"]

    def test_all_exceptions_approved_is_ready(self):
        ctx = GovernanceControlContext(
            controls=controls(10),
            risks=[risk("r1", 4, 4)],
            exceptions=[RiskException(risk_id="r1", status="approved")],
        )
        assert evaluate_governance_readiness(ctx).ready is True
