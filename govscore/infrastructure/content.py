"""
Loading of the declarative assessment content.

The question bank and recommendation templates ship as JSON files under
``govscore/data``. They are parsed once per path, validated into immutable
schema objects and cached; call :func:`clear_content_cache` after swapping
files at runtime.
"""

from __future__ import annotations

import json
from collections import Counter
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..domain.schemas import AssessmentQuestion, RecommendationTemplates
from .config import get_settings
from .exceptions import ContentError, QuestionNotFoundError
from .logging import get_logger

logger = get_logger(__name__)

EXPECTED_QUESTION_COUNT = 30
QUESTIONS_PER_DOMAIN = 6


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ContentError(f"Content file not found: {path}", file_path=str(path)) from e
    except json.JSONDecodeError as e:
        raise ContentError(
            f"Content file is not valid JSON: {path} (line {e.lineno})", file_path=str(path)
        ) from e


def validate_question_bank(
    questions: tuple[AssessmentQuestion, ...],
    expected_total: int = EXPECTED_QUESTION_COUNT,
    per_domain: int = QUESTIONS_PER_DOMAIN,
) -> None:
    """
    Check the structural rules of a question bank.

    Raises:
        ContentError: On a wrong question count, an unbalanced domain, or a
            duplicated id or order value.
    """
    if len(questions) != expected_total:
        raise ContentError(f"Question bank must hold {expected_total} questions, found {len(questions)}")

    per_domain_counts = Counter(q.domain for q in questions)
    unbalanced = {d: n for d, n in per_domain_counts.items() if n != per_domain}
    if unbalanced:
        raise ContentError(
            f"Each domain needs {per_domain} questions",
            details={"counts": dict(per_domain_counts)},
        )

    for attr in ("id", "order"):
        duplicates = [v for v, n in Counter(getattr(q, attr) for q in questions).items() if n > 1]
        if duplicates:
            raise ContentError(f"Duplicate question {attr} values: {duplicates}")


@lru_cache(maxsize=8)
def _load_question_bank(path: Path) -> tuple[AssessmentQuestion, ...]:
    raw = _read_json(path)
    items = raw.get("questions") if isinstance(raw, dict) else None
    if not isinstance(items, list):
        raise ContentError("Question bank must contain a 'questions' list", file_path=str(path))

    try:
        questions = tuple(AssessmentQuestion.model_validate(item) for item in items)
    except PydanticValidationError as e:
        raise ContentError(
            f"Invalid question in {path.name}: {e.errors()[0]['msg']}",
            file_path=str(path),
            details={"errors": e.errors(include_url=False)},
        ) from e

    validate_question_bank(questions)
    logger.debug("Loaded %d questions from %s", len(questions), path)
    return tuple(sorted(questions, key=lambda q: q.order))


@lru_cache(maxsize=8)
def _load_recommendations(path: Path) -> RecommendationTemplates:
    raw = _read_json(path)
    try:
        templates = RecommendationTemplates.model_validate(raw)
    except PydanticValidationError as e:
        raise ContentError(
            f"Invalid recommendation templates in {path.name}",
            file_path=str(path),
            details={"errors": e.errors(include_url=False)},
        ) from e
    logger.debug("Loaded recommendation templates from %s", path)
    return templates


def load_question_bank(path: str | Path | None = None) -> tuple[AssessmentQuestion, ...]:
    """Return the validated question bank ordered by ``order``."""
    resolved = Path(path) if path is not None else get_settings().content.question_bank_path
    return _load_question_bank(resolved.resolve())


def load_recommendation_templates(path: str | Path | None = None) -> RecommendationTemplates:
    resolved = Path(path) if path is not None else get_settings().content.recommendations_path
    return _load_recommendations(resolved.resolve())


def clear_content_cache() -> None:
    _load_question_bank.cache_clear()
    _load_recommendations.cache_clear()


# ---------------------------------------------------------------------------
# Question bank lookups
# ---------------------------------------------------------------------------


def get_questions_by_domain(
    domain: str, questions: tuple[AssessmentQuestion, ...] | None = None
) -> list[AssessmentQuestion]:
    bank = questions if questions is not None else load_question_bank()
    return [q for q in bank if q.domain == domain]


def get_questions_by_section(
    section: str, questions: tuple[AssessmentQuestion, ...] | None = None
) -> list[AssessmentQuestion]:
    bank = questions if questions is not None else load_question_bank()
    return [q for q in bank if q.section == section]


def get_sections(questions: tuple[AssessmentQuestion, ...] | None = None) -> list[str]:
    """Unique section names in display order."""
    bank = questions if questions is not None else load_question_bank()
    return list(dict.fromkeys(q.section for q in bank))


def get_question_by_id(
    question_id: str, questions: tuple[AssessmentQuestion, ...] | None = None
) -> AssessmentQuestion | None:
    bank = questions if questions is not None else load_question_bank()
    return next((q for q in bank if q.id == question_id), None)


def get_question_required(
    question_id: str, questions: tuple[AssessmentQuestion, ...] | None = None
) -> AssessmentQuestion:
    """
    Like :func:`get_question_by_id` but for callers that cannot continue without it.

    Raises:
        QuestionNotFoundError: If the id is not part of the bank.
    """
    question = get_question_by_id(question_id, questions)
    if question is None:
        raise QuestionNotFoundError(question_id)
    return question
