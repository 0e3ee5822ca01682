"""
Project-level entry points for the feasibility assessment.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..domain.feasibility import FeasibilityConfig, calculate_feasibility_score
from ..domain.models import FeasibilityScore
from ..domain.schemas import AssessmentQuestion, AssessmentResponse
from ..infrastructure.content import load_question_bank
from ..infrastructure.logging import LogContext, get_logger, log_operation

logger = get_logger(__name__)


@log_operation("score_project")
def score_project(
    project_id: str,
    responses: Sequence[AssessmentResponse],
    questions: Sequence[AssessmentQuestion] | None = None,
    config: FeasibilityConfig | None = None,
) -> FeasibilityScore:
    """
    Score one project's feasibility assessment.

    Responses belonging to other projects are ignored, and when a question was
    answered more than once the latest answer counts.

    Args:
        project_id: Project whose responses are scored
        responses: Stored responses, possibly for several projects
        questions: Question bank; the packaged bank when omitted
        config: Feasibility weights, thresholds and templates

    Example:
        >>> result = score_project("p-1", responses)
        >>> print(result.overall_score, result.rating)
    """
    with LogContext(project_id=project_id):
        bank = questions if questions is not None else load_question_bank()
        own = [r for r in responses if r.project_id == project_id]
        if len(own) != len(responses):
            logger.debug("Ignored %d response(s) from other projects", len(responses) - len(own))

        result = calculate_feasibility_score(own, bank, config)
        logger.info(
            "Project feasibility %d (%s), %d of %d domains passed",
            result.overall_score,
            result.rating,
            sum(ds.passed for ds in result.domain_scores),
            len(result.domain_scores),
        )
        return result
