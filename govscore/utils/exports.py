from __future__ import annotations

import dataclasses
import io
import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

import pandas as pd
from pydantic import BaseModel

from ..domain.financial import (
    DEFAULT_ASSUMPTIONS,
    FinancialAssumptions,
    format_currency,
    format_percent,
)
from ..domain.models import RoiResults, SensitivityRow
from ..domain.schemas import RoiInputs
from ..domain.services import format_number

SENSITIVITY_COLUMNS = [
    "VelocityLift",
    "MonthlySavings",
    "AnnualSavings",
    "PaybackMonths",
    "ThreeYearNPV",
]


def to_jsonable(value: Any) -> Any:
    """Turn result dataclasses, schema models and datetimes into plain JSON values."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def make_json_export_payload(project_id: str, **sections: Any) -> str:
    """
    Serialize computed results for one project.

    Example:
        >>> make_json_export_payload("p-1", feasibility=score, roi=roi_results)
    """
    payload = {"project_id": project_id}
    payload.update({name: to_jsonable(result) for name, result in sections.items()})
    return json.dumps(payload, indent=2)


def sensitivity_frame(rows: Sequence[SensitivityRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            [r.velocity_lift, r.monthly_savings, r.annual_savings, r.payback_months, r.three_year_npv]
            for r in rows
        ],
        columns=SENSITIVITY_COLUMNS,
    )


def payback_label(months: int, sentinel: int = 999) -> str:
    if months >= sentinel:
        return "N/A"
    if months <= 1:
        return "< 1 month"
    return f"{months} months"


def make_roi_text_export(
    inputs: RoiInputs,
    results: RoiResults,
    sensitivity: Sequence[SensitivityRow],
    assumptions: FinancialAssumptions = DEFAULT_ASSUMPTIONS,
) -> str:
    """
    Plain-text ROI report: inputs, headline results and the sensitivity sweep.

    Money is rendered with the assumptions' currency symbol and payback months
    at or beyond its sentinel read as "N/A".
    """
    sentinel = assumptions.payback_sentinel

    def money(value: float) -> str:
        return format_currency(value, assumptions.currency_symbol)

    lines = [
        "ROI Calculator Export",
        "====================",
        "",
        "Input Parameters:",
        f"  Team Size: {format_number(inputs.team_size)}",
        f"  Average Salary: {money(inputs.avg_salary)}",
        f"  Current Velocity: {format_number(inputs.current_velocity)} pts/sprint",
        f"  Projected Velocity Lift: {format_number(inputs.projected_velocity_lift)}%",
        f"  License Cost/User/Month: {money(inputs.license_cost_per_user)}",
        f"  Implementation Cost: {money(inputs.implementation_cost)}",
        f"  Training Cost: {money(inputs.training_cost)}",
        "",
        "Results:",
        f"  Monthly Savings: {money(results.monthly_savings)}",
        f"  Annual Savings: {money(results.annual_savings)}",
        f"  Total Annual Cost: {money(results.total_annual_cost)}",
        f"  Net Annual Benefit: {money(results.net_annual_benefit)}",
        f"  Payback Period: {payback_label(results.payback_months, sentinel)}",
        f"  ROI: {format_percent(results.roi_percentage)}",
        f"  3-Year NPV: {money(results.three_year_npv)}",
        "",
        "Sensitivity Analysis:",
        "Velocity Lift | Monthly Savings | Annual Savings | Payback | 3-Year NPV",
    ]
    for row in sensitivity:
        lines.append(
            f"  {format_number(row.velocity_lift)}% | {money(row.monthly_savings)} | "
            f"{money(row.annual_savings)} | {payback_label(row.payback_months, sentinel)} | "
            f"{money(row.three_year_npv)}"
        )
    return "\n".join(lines)


def make_xlsx_export_bytes(sensitivity_df: pd.DataFrame, results: RoiResults | None = None) -> bytes:
    """Excel workbook with the sensitivity sweep and, when given, a results summary sheet."""
    if sensitivity_df is None:
        sensitivity_df = pd.DataFrame(columns=SENSITIVITY_COLUMNS)

    sensitivity_df = sensitivity_df.copy()
    # Guarantee column ordering and presence for consumers opening the sheet in Excel
    for column in SENSITIVITY_COLUMNS:
        if column not in sensitivity_df.columns:
            sensitivity_df[column] = pd.NA
    sensitivity_df = sensitivity_df[SENSITIVITY_COLUMNS]

    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        sensitivity_df.to_excel(writer, index=False, sheet_name="Sensitivity")
        if results is not None:
            summary = pd.DataFrame(
                list(to_jsonable(results).items()), columns=["Metric", "Value"]
            )
            summary.to_excel(writer, index=False, sheet_name="Summary")
    return bio.getvalue()
