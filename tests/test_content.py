"""
Tests for the packaged question bank and recommendation templates.
"""

import json

import pytest

from govscore.domain.data_readiness import READINESS_DIMENSIONS
from govscore.domain.feasibility import DOMAINS
from govscore.domain.maturity import MATURITY_DIMENSIONS
from govscore.infrastructure.content import (
    get_question_by_id,
    get_question_required,
    get_questions_by_domain,
    get_questions_by_section,
    get_sections,
    load_question_bank,
    load_recommendation_templates,
    validate_question_bank,
)
from govscore.infrastructure.exceptions import ContentError, QuestionNotFoundError


class TestQuestionBank:
    """Structure of the packaged question bank."""

    def test_has_thirty_questions_six_per_domain(self):
        bank = load_question_bank()
        assert len(bank) == 30
        for domain in DOMAINS:
            assert len(get_questions_by_domain(domain)) == 6

    def test_ids_and_order_are_unique(self):
        bank = load_question_bank()
        assert len({q.id for q in bank}) == 30
        assert sorted(q.order for q in bank) == list(range(1, 31))

    def test_select_questions_carry_scoring(self):
        for q in load_question_bank():
            if q.type in ("single_select", "multi_select"):
                assert q.scoring
                assert all(0 <= v <= 100 for v in q.scoring.values())
            assert q.weight > 0

    def test_sections_in_display_order(self):
        assert get_sections() == [
            "Infrastructure Readiness",
            "Security Posture",
            "Governance Maturity",
            "Engineering Culture",
            "Business Alignment",
        ]
        assert len(get_questions_by_section("Security Posture")) == 6

    def test_lookup_by_id(self):
        question = get_question_by_id("gov-002")
        assert question is not None
        assert question.type == "multi_select"
        assert question.weight == 8
        assert get_question_by_id("missing") is None

    def test_required_lookup_raises_typed_error(self):
        with pytest.raises(QuestionNotFoundError) as exc_info:
            get_question_required("missing")
        assert exc_info.value.question_id == "missing"

    def test_branches_are_preserved(self):
        question = get_question_required("biz-001")
        assert question.branches == {"No executive sponsorship": ["biz-001-blocker"]}


class TestQuestionBankValidation:
    """Malformed content raises ContentError."""

    def test_truncated_bank_is_rejected(self):
        bank = load_question_bank()
        with pytest.raises(ContentError, match="30 questions"):
            validate_question_bank(bank[:29])

    def test_duplicate_ids_are_rejected(self):
        bank = load_question_bank()
        duplicated = bank[:-1] + (bank[-1].model_copy(update={"id": bank[0].id}),)
        with pytest.raises(ContentError, match="Duplicate question id"):
            validate_question_bank(duplicated)

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ContentError) as exc_info:
            load_question_bank(path)
        assert exc_info.value.file_path.endswith("questions.json")

    def test_missing_questions_key(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps({"items": []}), encoding="utf-8")
        with pytest.raises(ContentError, match="'questions' list"):
            load_question_bank(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ContentError, match="not found"):
            load_question_bank(tmp_path / "absent.json")


class TestRecommendationTemplates:
    """Packaged recommendation templates."""

    def test_every_domain_has_banded_templates(self):
        templates = load_recommendation_templates().feasibility
        for domain in DOMAINS:
            assert templates.recommendations[domain].low
            assert templates.recommendations[domain].mid
            assert templates.recommendations[domain].high
            assert templates.remediation_tasks[domain].high == ()

    def test_every_maturity_dimension_has_three_recommendations(self):
        templates = load_recommendation_templates()
        for dimension in MATURITY_DIMENSIONS:
            assert len(templates.maturity[dimension]) == 3

    def test_every_data_readiness_dimension_has_phased_templates(self):
        templates = load_recommendation_templates().data_readiness
        for dimension in READINESS_DIMENSIONS:
            phases = templates[dimension]
            assert len(phases.quick_wins) == 2
            assert len(phases.foundation) == 2
            assert len(phases.advanced) == 2
