"""
Pydantic schemas for the records the scoring core consumes.

Every record is an immutable value object. Shape validation (types, required
fields) happens here; numeric range handling is left to the engines, which
clamp instead of rejecting so that extreme but well-typed input never raises.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

ScoreDomain = Literal["infrastructure", "security", "governance", "engineering", "business"]
QuestionType = Literal["single_select", "multi_select", "number", "text"]
FeasibilityRating = Literal["high", "moderate", "conditional", "not_ready"]

RiskCategory = Literal[
    "model_algorithm",
    "operational",
    "ethical_fairness",
    "regulatory_compliance",
    "security_privacy",
    "strategic_business",
    "third_party",
]
RiskTier = Literal["low", "medium", "high", "critical"]
RiskStatus = Literal["open", "mitigating", "mitigated", "accepted", "closed"]

MaturityDimension = Literal[
    "policy_standards",
    "risk_management",
    "data_governance",
    "access_controls",
    "vendor_management",
    "training_awareness",
]

PriorityDimension = Literal[
    "strategic_value",
    "technical_feasibility",
    "implementation_risk",
    "time_to_value",
]
PortfolioQuadrant = Literal["strategic_imperative", "high_value", "foundation_builder", "watch_list"]

GateDecision = Literal["pending", "approved", "conditionally_approved", "rejected"]
ControlResult = Literal["pass", "fail", "warning", "not_applicable", "pending"]
ExceptionStatus = Literal["requested", "approved", "rejected", "expired", "revoked"]

KpiStatus = Literal["met", "at_risk", "missed", "tracking", "not_started"]
Recommendation = Literal["go", "conditional_go", "no_go"]

VendorDimension = Literal[
    "capabilities",
    "security",
    "compliance",
    "integration",
    "economics",
    "viability",
    "support",
]

DataReadinessDimension = Literal[
    "availability",
    "quality",
    "accessibility",
    "governance",
    "security",
    "operations",
]
QualityDimension = Literal[
    "accuracy",
    "completeness",
    "consistency",
    "timeliness",
    "validity",
    "uniqueness",
]


class RecordSchema(BaseModel):
    """Base for immutable input records."""

    model_config = {"frozen": True, "str_strip_whitespace": True, "extra": "ignore"}


# ---------------------------------------------------------------------------
# Feasibility assessment
# ---------------------------------------------------------------------------


class AssessmentQuestion(RecordSchema):
    """A weighted question in the feasibility question bank."""

    id: str = Field(..., min_length=1)
    section: str
    domain: ScoreDomain
    text: str
    type: QuestionType
    options: list[str] | None = None
    weight: float = Field(..., gt=0)
    scoring: dict[str, float] | None = None
    branches: dict[str, list[str]] | None = None
    help_text: str | None = None
    required: bool = True
    order: int = Field(..., ge=1)

    @model_validator(mode="after")
    def validate_scoring_map(self):
        """Select questions are only scoreable through their scoring map."""
        if self.type in ("single_select", "multi_select") and not self.scoring:
            raise ValueError(f"Question {self.id} is a select question without a scoring map")
        return self


class TemplateBands(RecordSchema):
    """Canned strings for the low (<40), mid (<70) and high score bands."""

    low: tuple[str, ...] = ()
    mid: tuple[str, ...] = ()
    high: tuple[str, ...] = ()


class FeasibilityTemplates(RecordSchema):
    recommendations: dict[ScoreDomain, TemplateBands]
    remediation_tasks: dict[ScoreDomain, TemplateBands]


class RoadmapTemplates(RecordSchema):
    """Remediation items per roadmap phase for one data readiness dimension."""

    quick_wins: tuple[str, ...] = ()
    foundation: tuple[str, ...] = ()
    advanced: tuple[str, ...] = ()


class RecommendationTemplates(RecordSchema):
    feasibility: FeasibilityTemplates
    maturity: dict[MaturityDimension, tuple[str, ...]]
    data_readiness: dict[DataReadinessDimension, RoadmapTemplates]


class AssessmentResponse(RecordSchema):
    id: str
    project_id: str
    question_id: str
    value: str | list[str] | float
    responded_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------


class RiskClassification(RecordSchema):
    """
    A single entry in the risk register.

    ``likelihood`` and ``impact`` are nominally 1-5 but are not bounded here;
    the risk engine clamps them. ``tier`` is optional because it is derivable
    from likelihood and impact.
    """

    id: str | None = None
    project_id: str | None = None
    category: str
    description: str
    likelihood: float
    impact: float
    mitigation: str = ""
    owner: str | None = None
    tier: RiskTier | None = None
    status: RiskStatus = "open"


# ---------------------------------------------------------------------------
# Maturity
# ---------------------------------------------------------------------------


class MaturitySubScores(RecordSchema):
    """Five sub-scores on a 0-20 scale, summing to a 0-100 dimension score."""

    documentation: float = 0
    implementation: float = 0
    enforcement: float = 0
    measurement: float = 0
    improvement: float = 0


# ---------------------------------------------------------------------------
# Use-case prioritization
# ---------------------------------------------------------------------------


class UseCaseDimensionScore(RecordSchema):
    dimension: str
    score: float
    rationale: str | None = None


class UseCasePriority(RecordSchema):
    """A candidate use case; the derived fields are filled by the prioritization engine."""

    id: str
    name: str
    description: str | None = None
    dimension_scores: list[UseCaseDimensionScore] = Field(default_factory=list)
    composite_score: float | None = None
    quadrant: PortfolioQuadrant | None = None
    implementation_wave: Literal[1, 2, 3] | None = None


# ---------------------------------------------------------------------------
# Financial model
# ---------------------------------------------------------------------------


class RoiInputs(RecordSchema):
    team_size: float
    avg_salary: float
    current_velocity: float = 0
    projected_velocity_lift: float
    license_cost_per_user: float
    implementation_cost: float = 0
    training_cost: float = 0


class EnhancedRoiInputs(RoiInputs):
    """Base ROI inputs plus the lifecycle costs and secondary benefits used for TCO."""

    infrastructure_cost: float = 0
    data_engineering_cost: float = 0
    change_management_cost: float = 0
    ongoing_infrastructure: float = 0
    ongoing_support_fte: float = 0
    support_fte_salary: float = 0
    revenue_increase_pct: float = 0
    error_reduction_pct: float = 0
    error_cost_annual: float = 0


# ---------------------------------------------------------------------------
# Governance records (read-only to this core)
# ---------------------------------------------------------------------------


class GateArtifact(RecordSchema):
    name: str
    provided: bool = False


class GovernanceGate(RecordSchema):
    id: str | None = None
    gate_type: str
    decision: GateDecision = "pending"
    required_artifacts: list[GateArtifact] = Field(default_factory=list)


class ControlCheck(RecordSchema):
    id: str | None = None
    control_id: str | None = None
    result: ControlResult


class RiskException(RecordSchema):
    id: str | None = None
    risk_id: str | None = None
    status: ExceptionStatus
    expires_at: datetime | None = None


class GovernanceControlContext(RecordSchema):
    gates: list[GovernanceGate] = Field(default_factory=list)
    controls: list[ControlCheck] = Field(default_factory=list)
    risks: list[RiskClassification] = Field(default_factory=list)
    exceptions: list[RiskException] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# KPI summary and decision inputs
# ---------------------------------------------------------------------------


class KpiAttainment(RecordSchema):
    kpi_id: str
    kpi_name: str
    category: str | None = None
    baseline: float | None = None
    target: float
    current: float | None = None
    attainment_pct: float | None = None
    trend: Literal["improving", "stable", "declining", "unknown"] = "unknown"
    status: KpiStatus = "not_started"
    confidence: Literal["low", "medium", "high"] = "low"


class KpiSummary(RecordSchema):
    """Pre-aggregated KPI state supplied by the KPI aggregation module."""

    project_id: str = ""
    total_kpis: int = 0
    met: int = 0
    at_risk: int = 0
    missed: int = 0
    tracking: int = 0
    not_started: int = 0
    overall_attainment_pct: float | None = None
    kpis: list[KpiAttainment] = Field(default_factory=list)


class OutcomeMetric(RecordSchema):
    name: str
    target_value: float
    actual_value: float | None = None


class RiskPostureInput(RecordSchema):
    total: int = 0
    high_critical_open: int = 0
    control_pass_rate: float = 0


class GateStatusInput(RecordSchema):
    passed: int = 0
    total: int = 0


class DecisionSupportContext(RecordSchema):
    kpi_summary: KpiSummary
    risk_posture: RiskPostureInput
    gate_status: GateStatusInput
    evidence_complete: bool = False
    outcome_metrics: list[OutcomeMetric] = Field(default_factory=list)


class BriefRiskData(RecordSchema):
    total_risks: int = 0
    high_critical_open: int = 0
    unresolved_items: list[str] = Field(default_factory=list)


class BriefControlData(RecordSchema):
    total_controls: int = 0
    passed: int = 0
    failed: int = 0


class BriefGateData(RecordSchema):
    gates_passed: int = 0
    gates_total: int = 0


class BriefInput(RecordSchema):
    project_id: str
    kpi_summary: KpiSummary | None = None
    risk_data: BriefRiskData = Field(default_factory=BriefRiskData)
    control_data: BriefControlData = Field(default_factory=BriefControlData)
    gate_data: BriefGateData = Field(default_factory=BriefGateData)
    data_classified: bool = False
    evidence_exported: bool = False
    roi: RoiInputs | None = None


# ---------------------------------------------------------------------------
# Vendor evaluation
# ---------------------------------------------------------------------------


class VendorScore(RecordSchema):
    dimension: str
    score: float
    max_score: float = 10
    notes: str | None = None


class VendorEvaluation(RecordSchema):
    id: str
    vendor_name: str
    dimension_scores: list[VendorScore] = Field(default_factory=list)
    overall_score: float | None = None
    recommendation: Literal["recommended", "alternative", "not_recommended"] | None = None


# ---------------------------------------------------------------------------
# Data readiness
# ---------------------------------------------------------------------------


class DataReadinessScore(RecordSchema):
    """A raw 0-100 rating for one data readiness dimension plus audit notes."""

    dimension: str
    score: float
    findings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class DataQualityMetric(RecordSchema):
    dimension: QualityDimension
    score: float
    target: float = 0
    domain: str = ""
