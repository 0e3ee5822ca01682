"""
Feasibility scoring of assessment responses.

Each response is scored against its question's weight, questions are
aggregated per domain into a percentage, and the domain percentages are
combined with fixed domain weights into a 0-100 overall score.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType

from ..infrastructure.content import load_recommendation_templates
from .models import DomainScore, FeasibilityScore
from .schemas import AssessmentQuestion, AssessmentResponse, FeasibilityTemplates
from .services import (
    band_lookup,
    clamp,
    dedupe,
    round_half_up,
    round_int,
    validate_descending_bands,
    validate_weights,
)

DOMAINS = ("infrastructure", "security", "governance", "engineering", "business")

DOMAIN_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "infrastructure": 0.25,
        "security": 0.25,
        "governance": 0.20,
        "engineering": 0.15,
        "business": 0.15,
    }
)

PASS_THRESHOLDS: Mapping[str, int] = MappingProxyType(
    {
        "infrastructure": 60,
        "security": 60,
        "governance": 50,
        "engineering": 50,
        "business": 50,
    }
)

RATING_BANDS: tuple[tuple[float, str], ...] = (
    (80, "high"),
    (60, "moderate"),
    (40, "conditional"),
)
LOWEST_RATING = "not_ready"


@dataclass(frozen=True, slots=True)
class FeasibilityConfig:
    """
    Everything the feasibility engine needs besides the responses.

    ``low_band_below`` and ``mid_band_below`` split domain percentages into
    the template bands: below 40 is "low", below 70 is "mid", the rest "high".
    """

    templates: FeasibilityTemplates
    domain_weights: Mapping[str, float] = field(default_factory=lambda: DOMAIN_WEIGHTS)
    pass_thresholds: Mapping[str, int] = field(default_factory=lambda: PASS_THRESHOLDS)
    rating_bands: tuple[tuple[float, str], ...] = RATING_BANDS
    lowest_rating: str = LOWEST_RATING
    low_band_below: int = 40
    mid_band_below: int = 70

    def __post_init__(self) -> None:
        validate_weights(dict(self.domain_weights), "Domain weights")
        validate_descending_bands(self.rating_bands, "Rating bands")
        missing = set(self.domain_weights) - set(self.pass_thresholds)
        if missing:
            raise ValueError(f"Pass thresholds missing for domains: {sorted(missing)}")
        if not self.low_band_below < self.mid_band_below:
            raise ValueError("low_band_below must be lower than mid_band_below")

    @property
    def domains(self) -> tuple[str, ...]:
        return tuple(self.domain_weights)


@lru_cache(maxsize=1)
def default_feasibility_config() -> FeasibilityConfig:
    return FeasibilityConfig(templates=load_recommendation_templates().feasibility)


def select_latest_responses(
    responses: Iterable[AssessmentResponse],
) -> dict[str, AssessmentResponse]:
    """
    Keep one response per question.

    A later ``updated_at`` (falling back to ``created_at``) wins; when either
    side has no timestamp the response appearing later in the input wins.
    """
    latest: dict[str, AssessmentResponse] = {}
    for response in responses:
        current = latest.get(response.question_id)
        if current is not None:
            new_ts = response.updated_at or response.created_at
            old_ts = current.updated_at or current.created_at
            if new_ts is not None and old_ts is not None and new_ts < old_ts:
                continue
        latest[response.question_id] = response
    return latest


def score_response(question: AssessmentQuestion, response: AssessmentResponse | None) -> float:
    """Points earned by one response, in ``[0, question.weight]``."""
    if response is None:
        return 0.0

    value = response.value
    scoring = question.scoring or {}

    if question.type == "single_select":
        if not isinstance(value, str):
            return 0.0
        return scoring.get(value, 0) / 100 * question.weight

    if question.type == "multi_select":
        if not isinstance(value, list) or not value:
            return 0.0
        average = sum(scoring.get(option, 0) for option in value) / len(value)
        return average / 100 * question.weight

    if question.type == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        return clamp(float(value), 0, 100) / 100 * question.weight

    # text answers are informational only
    return 0.0


def _band(percentage: int, config: FeasibilityConfig) -> str:
    if percentage < config.low_band_below:
        return "low"
    if percentage < config.mid_band_below:
        return "mid"
    return "high"


def calculate_domain_score(
    domain: str,
    responses: Sequence[AssessmentResponse],
    questions: Sequence[AssessmentQuestion],
    config: FeasibilityConfig | None = None,
) -> DomainScore:
    config = config or default_feasibility_config()
    threshold = config.pass_thresholds[domain]
    domain_questions = [q for q in questions if q.domain == domain]

    if not domain_questions:
        return DomainScore(
            domain=domain,
            score=0,
            max_score=0,
            percentage=0,
            pass_threshold=threshold,
            passed=False,
        )

    latest = select_latest_responses(responses)
    total = sum(score_response(q, latest.get(q.id)) for q in domain_questions)
    max_score = sum(q.weight for q in domain_questions)
    percentage = round_int(total / max_score * 100)

    band = _band(percentage, config)
    recommendations = getattr(config.templates.recommendations.get(domain), band, ())
    remediation = getattr(config.templates.remediation_tasks.get(domain), band, ())

    return DomainScore(
        domain=domain,
        score=round_half_up(total, 2),
        max_score=max_score,
        percentage=percentage,
        pass_threshold=threshold,
        passed=percentage >= threshold,
        recommendations=list(recommendations),
        remediation_tasks=list(remediation),
    )


def get_overall_rating(score: float, config: FeasibilityConfig | None = None) -> str:
    config = config or default_feasibility_config()
    return band_lookup(score, config.rating_bands, config.lowest_rating)


def calculate_overall_score(
    domain_scores: Sequence[DomainScore], config: FeasibilityConfig | None = None
) -> int:
    config = config or default_feasibility_config()
    weighted = sum(ds.percentage * config.domain_weights.get(ds.domain, 0) for ds in domain_scores)
    return round_int(weighted)


def _weakest_first(domain_scores: Sequence[DomainScore]) -> list[DomainScore]:
    return sorted(domain_scores, key=lambda ds: ds.percentage)


def generate_recommendations(domain_scores: Sequence[DomainScore]) -> list[str]:
    return dedupe(rec for ds in _weakest_first(domain_scores) for rec in ds.recommendations)


def generate_remediation_tasks(domain_scores: Sequence[DomainScore]) -> list[str]:
    return dedupe(task for ds in _weakest_first(domain_scores) for task in ds.remediation_tasks)


def calculate_feasibility_score(
    responses: Sequence[AssessmentResponse],
    questions: Sequence[AssessmentQuestion],
    config: FeasibilityConfig | None = None,
) -> FeasibilityScore:
    config = config or default_feasibility_config()
    domain_scores = [
        calculate_domain_score(domain, responses, questions, config) for domain in config.domains
    ]
    overall = calculate_overall_score(domain_scores, config)

    return FeasibilityScore(
        domain_scores=domain_scores,
        overall_score=overall,
        rating=get_overall_rating(overall, config),
        recommendations=generate_recommendations(domain_scores),
        remediation_tasks=generate_remediation_tasks(domain_scores),
    )
