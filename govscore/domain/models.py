from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .schemas import MaturitySubScores, RiskClassification


@dataclass(slots=True)
class DomainScore:
    domain: str
    score: float  # weighted points earned
    max_score: float  # sum of question weights
    percentage: int  # 0..100
    pass_threshold: int
    passed: bool
    recommendations: list[str] = field(default_factory=list)
    remediation_tasks: list[str] = field(default_factory=list)


@dataclass(slots=True)
class FeasibilityScore:
    domain_scores: list[DomainScore]
    overall_score: int  # 0..100
    rating: str
    recommendations: list[str] = field(default_factory=list)
    remediation_tasks: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RiskHeatMapCell:
    likelihood: int  # 1..5
    impact: int  # 1..5
    score: int
    rating: str
    risks: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RiskAssessmentSummary:
    total_risks: int
    by_tier: dict[str, int]
    by_category: dict[str, int]
    heat_map: list[list[RiskHeatMapCell]]
    top_risks: list[RiskClassification]


@dataclass(slots=True)
class MaturityDimensionScore:
    dimension: str
    level: int  # 1..5
    score: int  # 0..100
    subscores: MaturitySubScores
    key_gap: str = ""


@dataclass(slots=True)
class MaturityAssessment:
    dimension_scores: list[MaturityDimensionScore]
    overall_score: int
    overall_level: int
    industry: str | None = None
    recommendations: list[str] = field(default_factory=list)


@dataclass(slots=True)
class DataReadinessDimensionScore:
    dimension: str
    score: int  # 0..100
    weight: float
    findings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass(slots=True)
class RemediationPhase:
    phase: str  # quick_wins | foundation | advanced
    items: list[str]


@dataclass(slots=True)
class DataReadinessAudit:
    dimension_scores: list[DataReadinessDimensionScore]
    overall_score: int
    readiness_level: str
    data_quality_score: int
    remediation_roadmap: list[RemediationPhase]


@dataclass(slots=True)
class RoiResults:
    monthly_savings: int
    annual_savings: int
    annual_license_cost: int
    total_annual_cost: int
    net_annual_benefit: int
    payback_months: int  # sentinel when the investment never pays back
    three_year_npv: int
    roi_percentage: float  # one decimal


@dataclass(slots=True)
class SensitivityRow:
    velocity_lift: float
    monthly_savings: int
    annual_savings: int
    payback_months: int
    three_year_npv: int


@dataclass(slots=True)
class BenefitBreakdown:
    productivity: int
    revenue: int
    error_savings: int
    cost_reduction: int
    total_annual_benefit: int


@dataclass(slots=True)
class ScenarioAnalysis:
    scenario: str
    probability: float
    revenue_multiplier: float
    cost_multiplier: float
    npv: int
    roi: float


@dataclass(slots=True)
class IrrSolution:
    rate: float  # decimal, e.g. 0.35
    iterations: int
    converged: bool
    method: str  # "newton" or "bisection"


@dataclass(slots=True)
class EnhancedRoiResults:
    base: RoiResults
    tco_initial: int
    tco_annual: int
    tco_three_year: int
    benefit_breakdown: BenefitBreakdown
    net_annual_benefit: int
    five_year_cashflows: list[int]
    irr: float  # percent, one decimal
    irr_solution: IrrSolution
    scenarios: list[ScenarioAnalysis]
    expected_npv: int


@dataclass(slots=True)
class GateReadiness:
    gate_type: str
    decision: str
    evidence_complete: bool
    missing_artifacts: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GovernanceReadiness:
    ready: bool
    gates_status: list[GateReadiness]
    control_pass_rate: int
    open_risks: int
    open_exceptions: int
    blockers: list[str] = field(default_factory=list)


@dataclass(slots=True)
class OutcomeSummary:
    metric: str
    target: float
    actual: float | None
    attainment: str  # "85%" or "Not measured"


@dataclass(slots=True)
class DecisionRecommendation:
    recommendation: str
    confidence: str
    rationale: list[str]
    evidence_gaps: list[str]
    risk_factors: list[str]
    outcome_summary: list[OutcomeSummary]
    next_steps: list[str]


@dataclass(slots=True)
class ValueSummary:
    kpi_attainment_pct: float | None
    top_wins: list[str]
    concerns: list[str]
    roi: RoiResults | None = None


@dataclass(slots=True)
class RiskPosture:
    total_risks: int
    high_critical_open: int
    control_pass_rate: int
    unresolved_items: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GovernanceStatus:
    gates_passed: int
    gates_total: int
    data_classified: bool
    evidence_exported: bool


@dataclass(slots=True)
class ExecutiveDecisionBrief:
    project_id: str
    generated_at: datetime
    trace_id: str
    recommendation: str
    rationale: str
    value_summary: ValueSummary
    risk_posture: RiskPosture
    governance_status: GovernanceStatus
    next_steps: list[str]

