"""
Tests for feasibility scoring: response scoring, domain aggregation and the
overall weighted score.
"""

from datetime import datetime, timedelta, timezone

import pytest

from govscore.application.scoring import score_project
from govscore.domain.feasibility import (
    DOMAIN_WEIGHTS,
    DOMAINS,
    PASS_THRESHOLDS,
    FeasibilityConfig,
    calculate_domain_score,
    calculate_feasibility_score,
    calculate_overall_score,
    default_feasibility_config,
    generate_recommendations,
    get_overall_rating,
    score_response,
    select_latest_responses,
)
from govscore.domain.models import DomainScore
from govscore.domain.schemas import AssessmentQuestion, AssessmentResponse
from govscore.infrastructure.content import load_question_bank


def make_question(qid="q-1", domain="security", qtype="single_select", weight=10, scoring=None, order=1):
    if scoring is None and qtype in ("single_select", "multi_select"):
        scoring = {"A": 100, "B": 50, "C": 0}
    return AssessmentQuestion(
        id=qid,
        section="Section",
        domain=domain,
        text="Question?",
        type=qtype,
        options=list(scoring) if scoring else None,
        weight=weight,
        scoring=scoring,
        order=order,
    )


def make_response(question_id, value, project_id="p-1", updated_at=None, rid=None):
    return AssessmentResponse(
        id=rid or f"r-{question_id}",
        project_id=project_id,
        question_id=question_id,
        value=value,
        updated_at=updated_at,
    )


def best_answer(question):
    best = max(question.scoring, key=question.scoring.get)
    return [best] if question.type == "multi_select" else best


class TestScoreResponse:
    """Scoring of a single response against its question."""

    def test_no_response_scores_zero(self):
        assert score_response(make_question(), None) == 0

    def test_single_select_uses_scoring_map(self):
        q = make_question(weight=10)
        assert score_response(q, make_response(q.id, "B")) == pytest.approx(5.0)
        assert score_response(q, make_response(q.id, "A")) == pytest.approx(10.0)

    def test_single_select_unknown_option_scores_zero(self):
        q = make_question()
        assert score_response(q, make_response(q.id, "Z")) == 0

    def test_multi_select_averages_selected_options(self):
        q = make_question(qtype="multi_select", weight=10)
        assert score_response(q, make_response(q.id, ["A", "B"])) == pytest.approx(7.5)

    def test_multi_select_unknown_options_count_as_zero(self):
        q = make_question(qtype="multi_select", weight=10)
        assert score_response(q, make_response(q.id, ["A", "Z"])) == pytest.approx(5.0)

    def test_multi_select_empty_selection_scores_zero(self):
        q = make_question(qtype="multi_select")
        assert score_response(q, make_response(q.id, [])) == 0

    @pytest.mark.parametrize("value,expected", [(40, 4.0), (150, 10.0), (-5, 0.0), (100, 10.0)])
    def test_number_is_clamped_percentage(self, value, expected):
        q = make_question(qtype="number", weight=10)
        assert score_response(q, make_response(q.id, value)) == pytest.approx(expected)

    def test_text_scores_zero(self):
        q = make_question(qtype="text")
        assert score_response(q, make_response(q.id, "free text")) == 0

    def test_score_never_exceeds_weight(self):
        q = make_question(qtype="number", weight=7)
        assert score_response(q, make_response(q.id, 10_000)) <= q.weight

    def test_select_question_requires_scoring_map(self):
        with pytest.raises(ValueError):
            AssessmentQuestion(
                id="bad",
                section="S",
                domain="security",
                text="?",
                type="single_select",
                weight=5,
                scoring={},
                order=1,
            )


class TestLatestResponses:
    """Only the latest response per question is scored."""

    def test_later_input_wins_without_timestamps(self):
        latest = select_latest_responses(
            [make_response("q-1", "A", rid="r1"), make_response("q-1", "C", rid="r2")]
        )
        assert latest["q-1"].id == "r2"

    def test_newer_timestamp_wins_regardless_of_order(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        newer = make_response("q-1", "A", updated_at=now, rid="newer")
        older = make_response("q-1", "C", updated_at=now - timedelta(days=1), rid="older")
        latest = select_latest_responses([newer, older])
        assert latest["q-1"].id == "newer"

    def test_domain_score_uses_latest_answer(self):
        q = make_question()
        responses = [make_response(q.id, "C", rid="r1"), make_response(q.id, "A", rid="r2")]
        result = calculate_domain_score("security", responses, [q])
        assert result.percentage == 100


class TestDomainScore:
    """Per-domain aggregation."""

    def test_weighted_percentage(self):
        questions = [
            make_question("q-1", weight=10, order=1),
            make_question("q-2", weight=30, order=2),
        ]
        responses = [make_response("q-1", "A"), make_response("q-2", "B")]
        result = calculate_domain_score("security", responses, questions)

        assert result.score == pytest.approx(25.0)
        assert result.max_score == 40
        assert result.percentage == 63  # 62.5 rounds half up
        assert result.pass_threshold == PASS_THRESHOLDS["security"]
        assert result.passed is True

    def test_no_responses_scores_zero_and_fails(self):
        result = calculate_domain_score("security", [], [make_question()])
        assert result.percentage == 0
        assert result.passed is False

    def test_low_band_emits_low_templates(self):
        templates = default_feasibility_config().templates
        result = calculate_domain_score("security", [], [make_question()])
        assert result.recommendations == list(templates.recommendations["security"].low)
        assert result.remediation_tasks == list(templates.remediation_tasks["security"].low)

    def test_high_band_has_no_remediation(self):
        q = make_question()
        result = calculate_domain_score("security", [make_response(q.id, "A")], [q])
        assert result.remediation_tasks == []
        assert len(result.recommendations) == 1

    def test_domain_without_questions(self):
        result = calculate_domain_score("business", [], [make_question(domain="security")])
        assert result.max_score == 0
        assert result.percentage == 0
        assert result.recommendations == []
        assert result.remediation_tasks == []


class TestOverallScore:
    """Overall weighting, rating bands and aggregation of recommendations."""

    def test_domain_weights_sum_to_one(self):
        assert sum(DOMAIN_WEIGHTS.values()) == pytest.approx(1.0)
        assert tuple(DOMAIN_WEIGHTS) == DOMAINS

    def test_reference_domain_mix_rounds_to_61(self):
        percentages = dict(zip(DOMAINS, [80, 40, 55, 70, 60]))
        domain_scores = [
            DomainScore(
                domain=d,
                score=0,
                max_score=0,
                percentage=p,
                pass_threshold=PASS_THRESHOLDS[d],
                passed=p >= PASS_THRESHOLDS[d],
            )
            for d, p in percentages.items()
        ]
        overall = calculate_overall_score(domain_scores)
        assert overall == 61
        assert get_overall_rating(overall) == "moderate"

    @pytest.mark.parametrize(
        "score,rating",
        [
            (100, "high"),
            (80, "high"),
            (79, "moderate"),
            (60, "moderate"),
            (59, "conditional"),
            (40, "conditional"),
            (39, "not_ready"),
            (0, "not_ready"),
        ],
    )
    def test_rating_bands(self, score, rating):
        assert get_overall_rating(score) == rating

    def test_recommendations_weakest_domain_first_without_duplicates(self):
        weak = DomainScore("security", 0, 0, 10, 60, False, ["fix a", "shared"], ["task a"])
        strong = DomainScore("business", 0, 0, 90, 50, True, ["shared", "keep going"], [])
        assert generate_recommendations([strong, weak]) == ["fix a", "shared", "keep going"]

    def test_empty_responses_over_full_bank(self):
        result = calculate_feasibility_score([], load_question_bank())
        assert [ds.domain for ds in result.domain_scores] == list(DOMAINS)
        assert result.overall_score == 0
        assert result.rating == "not_ready"
        assert len(result.recommendations) == len(set(result.recommendations))

    def test_best_answers_over_full_bank(self):
        bank = load_question_bank()
        responses = [make_response(q.id, best_answer(q)) for q in bank]
        result = calculate_feasibility_score(responses, bank)

        assert all(ds.passed for ds in result.domain_scores)
        assert result.overall_score >= 80
        assert result.rating == "high"
        assert result.remediation_tasks == []

    def test_config_rejects_weights_not_summing_to_one(self):
        templates = default_feasibility_config().templates
        with pytest.raises(ValueError, match="sum to 1.0"):
            FeasibilityConfig(
                templates=templates,
                domain_weights={"security": 0.5, "business": 0.4},
                pass_thresholds={"security": 60, "business": 50},
            )

    def test_alternate_weighting_is_injectable(self):
        templates = default_feasibility_config().templates
        config = FeasibilityConfig(
            templates=templates,
            domain_weights={"security": 1.0},
            pass_thresholds={"security": 60},
        )
        q = make_question()
        result = calculate_feasibility_score([make_response(q.id, "B")], [q], config)
        assert [ds.domain for ds in result.domain_scores] == ["security"]
        assert result.overall_score == 50


class TestScoreProject:
    """Project-level scoring entry point."""

    def test_other_projects_are_ignored(self):
        q = make_question()
        responses = [
            make_response(q.id, "C", project_id="p-1", rid="mine"),
            make_response(q.id, "A", project_id="p-2", rid="theirs"),
        ]
        result = score_project("p-1", responses, questions=[q])
        security = next(ds for ds in result.domain_scores if ds.domain == "security")
        assert security.percentage == 0

    def test_defaults_to_packaged_question_bank(self):
        result = score_project("p-1", [])
        assert len(result.domain_scores) == 5
