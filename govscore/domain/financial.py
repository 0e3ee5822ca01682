"""
ROI and total-cost-of-ownership model.

The base model values developer capacity freed by the tool against licence
and one-off costs. The enhanced model adds lifecycle costs, secondary
benefits, a five-year cash-flow series with its IRR, and a probability
weighted scenario table.

Nothing here raises on extreme numbers: zero denominators yield 0, a payback
that never happens yields ``payback_sentinel``, and the IRR solver always
returns a finite rate inside its clamp range.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from .models import (
    BenefitBreakdown,
    EnhancedRoiResults,
    IrrSolution,
    RoiResults,
    ScenarioAnalysis,
    SensitivityRow,
)
from .schemas import EnhancedRoiInputs, RoiInputs
from .services import clamp, round_half_up, round_int, safe_divide

MONTHS_PER_YEAR = 12


@dataclass(frozen=True, slots=True)
class IrrSolverConfig:
    """
    Bounds of the Newton-Raphson IRR search.

    Newton stops when ``|NPV| < tolerance`` or ``|dNPV/dr| < derivative_floor``
    (both count as converged). The rate is clamped to
    ``[min_rate, max_rate]`` after every step. When Newton runs out of
    iterations, or its derivative vanishes while NPV is still far from zero,
    and ``bisection_fallback`` is set, the root is bisected inside the clamp
    range provided NPV changes sign there.
    """

    initial_guess: float = 0.10
    max_iterations: int = 100
    tolerance: float = 1e-4
    derivative_floor: float = 1e-10
    min_rate: float = -0.99
    max_rate: float = 10.0
    bisection_fallback: bool = True
    bisection_max_iterations: int = 200

    def __post_init__(self) -> None:
        if self.min_rate <= -1:
            raise ValueError("min_rate must be greater than -1")
        if self.min_rate >= self.max_rate:
            raise ValueError("min_rate must be lower than max_rate")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")


@dataclass(frozen=True, slots=True)
class ScenarioDefinition:
    name: str
    probability: float
    revenue_multiplier: float
    cost_multiplier: float


DEFAULT_SCENARIOS = (
    ScenarioDefinition("optimistic", 0.20, 1.30, 0.90),
    ScenarioDefinition("base", 0.50, 1.00, 1.00),
    ScenarioDefinition("conservative", 0.25, 0.75, 1.10),
    ScenarioDefinition("pessimistic", 0.05, 0.50, 1.25),
)

SENSITIVITY_LIFTS = (10, 20, 30, 40, 50, 60, 70, 80)


@dataclass(frozen=True, slots=True)
class FinancialAssumptions:
    discount_rate: float = 0.10
    npv_years: int = 3
    payback_sentinel: int = 999
    currency_symbol: str = "$"
    irr: IrrSolverConfig = field(default_factory=IrrSolverConfig)
    sensitivity_lifts: tuple[float, ...] = SENSITIVITY_LIFTS
    ramp_factor: float = 0.5  # share of a full year's benefit realised in year 0
    cashflow_years: int = 5
    scenarios: tuple[ScenarioDefinition, ...] = DEFAULT_SCENARIOS

    def __post_init__(self) -> None:
        total = sum(s.probability for s in self.scenarios)
        if self.scenarios and abs(total - 1.0) > 1e-9:
            raise ValueError(f"Scenario probabilities must sum to 1.0 (got {total:.6f})")
        if self.cashflow_years < 2:
            raise ValueError("cashflow_years must be at least 2")


DEFAULT_ASSUMPTIONS = FinancialAssumptions()


# ---------------------------------------------------------------------------
# Discounting helpers
# ---------------------------------------------------------------------------


def calculate_npv(annual_benefit: float, upfront_cost: float, years: int, rate: float) -> float:
    """NPV of a constant annual benefit after an upfront cost at year 0."""
    return -upfront_cost + sum(annual_benefit / (1 + rate) ** year for year in range(1, years + 1))


def net_present_value(rate: float, cashflows: Sequence[float]) -> float:
    """NPV of a cash-flow series whose first entry falls at year 0."""
    return sum(cf / (1 + rate) ** t for t, cf in enumerate(cashflows))


def _npv_derivative(rate: float, cashflows: Sequence[float]) -> float:
    return sum(-t * cf / (1 + rate) ** (t + 1) for t, cf in enumerate(cashflows))


def _bisect_irr(cashflows: Sequence[float], config: IrrSolverConfig) -> IrrSolution | None:
    low, high = config.min_rate, config.max_rate
    f_low = net_present_value(low, cashflows)
    f_high = net_present_value(high, cashflows)
    if f_low * f_high > 0:
        return None

    mid = (low + high) / 2
    for iteration in range(1, config.bisection_max_iterations + 1):
        mid = (low + high) / 2
        f_mid = net_present_value(mid, cashflows)
        if abs(f_mid) < config.tolerance or (high - low) / 2 < 1e-12:
            return IrrSolution(rate=mid, iterations=iteration, converged=True, method="bisection")
        if (f_mid < 0) == (f_low < 0):
            low, f_low = mid, f_mid
        else:
            high = mid
    return IrrSolution(
        rate=mid, iterations=config.bisection_max_iterations, converged=False, method="bisection"
    )


def solve_irr(cashflows: Sequence[float], config: IrrSolverConfig | None = None) -> IrrSolution:
    """
    Internal rate of return of ``cashflows`` as a decimal rate.

    Never raises and never returns NaN: when no root is found the last Newton
    iterate is returned with ``converged=False``.
    """
    config = config or IrrSolverConfig()
    rate = clamp(config.initial_guess, config.min_rate, config.max_rate)

    for iteration in range(1, config.max_iterations + 1):
        value = net_present_value(rate, cashflows)
        if abs(value) < config.tolerance:
            return IrrSolution(rate=rate, iterations=iteration, converged=True, method="newton")

        derivative = _npv_derivative(rate, cashflows)
        if abs(derivative) < config.derivative_floor:
            if config.bisection_fallback:
                bisected = _bisect_irr(cashflows, config)
                if bisected is not None and bisected.converged:
                    return bisected
            return IrrSolution(rate=rate, iterations=iteration, converged=True, method="newton")

        rate = clamp(rate - value / derivative, config.min_rate, config.max_rate)

    if config.bisection_fallback:
        bisected = _bisect_irr(cashflows, config)
        if bisected is not None:
            return bisected

    return IrrSolution(
        rate=rate, iterations=config.max_iterations, converged=False, method="newton"
    )


# ---------------------------------------------------------------------------
# Base ROI
# ---------------------------------------------------------------------------


def calculate_roi(
    inputs: RoiInputs, assumptions: FinancialAssumptions = DEFAULT_ASSUMPTIONS
) -> RoiResults:
    effective_additional_capacity = inputs.team_size * (inputs.projected_velocity_lift / 100)
    monthly_savings = effective_additional_capacity * (inputs.avg_salary / MONTHS_PER_YEAR)
    monthly_rounded = round_int(monthly_savings)
    # Reported annual figure is an exact multiple of the reported monthly one
    annual_savings = monthly_rounded * MONTHS_PER_YEAR

    annual_license_cost = inputs.license_cost_per_user * inputs.team_size * MONTHS_PER_YEAR
    upfront = inputs.implementation_cost + inputs.training_cost
    total_annual_cost = annual_license_cost + upfront
    raw_net_benefit = monthly_savings * MONTHS_PER_YEAR - total_annual_cost

    monthly_net = monthly_savings - annual_license_cost / MONTHS_PER_YEAR
    months = upfront / monthly_net if monthly_net > 0 else math.inf
    if math.isfinite(months):
        payback = min(math.ceil(months), assumptions.payback_sentinel)
    else:
        payback = assumptions.payback_sentinel

    npv = calculate_npv(raw_net_benefit, upfront, assumptions.npv_years, assumptions.discount_rate)
    roi = raw_net_benefit / total_annual_cost * 100 if total_annual_cost > 0 else 0.0

    rounded_total_cost = round_int(total_annual_cost)
    return RoiResults(
        monthly_savings=monthly_rounded,
        annual_savings=annual_savings,
        annual_license_cost=round_int(annual_license_cost),
        total_annual_cost=rounded_total_cost,
        net_annual_benefit=annual_savings - rounded_total_cost,
        payback_months=int(payback),
        three_year_npv=round_int(npv),
        roi_percentage=round_half_up(roi, 1),
    )


def calculate_sensitivity(
    inputs: RoiInputs, assumptions: FinancialAssumptions = DEFAULT_ASSUMPTIONS
) -> list[SensitivityRow]:
    """Re-run :func:`calculate_roi` for each velocity lift in the sweep."""
    rows = []
    for lift in assumptions.sensitivity_lifts:
        result = calculate_roi(inputs.model_copy(update={"projected_velocity_lift": lift}), assumptions)
        rows.append(
            SensitivityRow(
                velocity_lift=lift,
                monthly_savings=result.monthly_savings,
                annual_savings=result.annual_savings,
                payback_months=result.payback_months,
                three_year_npv=result.three_year_npv,
            )
        )
    return rows


# ---------------------------------------------------------------------------
# Enhanced ROI / TCO
# ---------------------------------------------------------------------------


def _scenario(
    definition: ScenarioDefinition,
    tco_initial: float,
    tco_annual: float,
    annual_benefit: float,
    assumptions: FinancialAssumptions,
) -> ScenarioAnalysis:
    years = assumptions.npv_years
    initial = tco_initial * definition.cost_multiplier
    annual_cost = tco_annual * definition.cost_multiplier
    benefit = annual_benefit * definition.revenue_multiplier

    npv = calculate_npv(benefit - annual_cost, initial, years, assumptions.discount_rate)
    horizon_cost = initial + annual_cost * years
    roi = safe_divide(benefit * years - horizon_cost, horizon_cost) * 100

    return ScenarioAnalysis(
        scenario=definition.name,
        probability=definition.probability,
        revenue_multiplier=definition.revenue_multiplier,
        cost_multiplier=definition.cost_multiplier,
        npv=round_int(npv),
        roi=round_half_up(roi, 1),
    )


def calculate_enhanced_roi(
    inputs: EnhancedRoiInputs, assumptions: FinancialAssumptions = DEFAULT_ASSUMPTIONS
) -> EnhancedRoiResults:
    base = calculate_roi(inputs, assumptions)

    tco_initial = (
        inputs.implementation_cost
        + inputs.training_cost
        + inputs.infrastructure_cost
        + inputs.data_engineering_cost
        + inputs.change_management_cost
    )
    annual_license_cost = inputs.license_cost_per_user * inputs.team_size * MONTHS_PER_YEAR
    tco_annual = (
        annual_license_cost
        + inputs.ongoing_infrastructure
        + inputs.ongoing_support_fte * inputs.support_fte_salary
    )
    tco_three_year = tco_initial + tco_annual * 3

    productivity = base.annual_savings
    revenue = inputs.revenue_increase_pct / 100 * productivity
    error_savings = inputs.error_reduction_pct / 100 * inputs.error_cost_annual
    total_benefit = productivity + revenue + error_savings
    net_annual = total_benefit - tco_annual

    cashflows = [-tco_initial + net_annual * assumptions.ramp_factor]
    cashflows += [net_annual] * (assumptions.cashflow_years - 1)
    irr = solve_irr(cashflows, assumptions.irr)

    scenarios = [
        _scenario(s, tco_initial, tco_annual, total_benefit, assumptions)
        for s in assumptions.scenarios
    ]
    expected_npv = round_int(sum(s.probability * s.npv for s in scenarios))

    return EnhancedRoiResults(
        base=base,
        tco_initial=round_int(tco_initial),
        tco_annual=round_int(tco_annual),
        tco_three_year=round_int(tco_three_year),
        benefit_breakdown=BenefitBreakdown(
            productivity=round_int(productivity),
            revenue=round_int(revenue),
            error_savings=round_int(error_savings),
            cost_reduction=round_int(productivity - revenue),
            total_annual_benefit=round_int(total_benefit),
        ),
        net_annual_benefit=round_int(net_annual),
        five_year_cashflows=[round_int(cf) for cf in cashflows],
        irr=round_half_up(irr.rate * 100, 1),
        irr_solution=irr,
        scenarios=scenarios,
        expected_npv=expected_npv,
    )


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_currency(value: float, symbol: str = "$") -> str:
    """Whole-unit currency with thousands separators, e.g. ``-$1,234``."""
    amount = round_int(abs(value))
    if amount == 0:
        return f"{symbol}0"
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{amount:,}"


def format_percent(value: float) -> str:
    """One decimal with an explicit sign; anything rounding to zero is ``+0.0%``."""
    rounded = round_half_up(abs(value), 1)
    if rounded == 0:
        return "+0.0%"
    sign = "+" if value > 0 else "-"
    return f"{sign}{rounded:.1f}%"
