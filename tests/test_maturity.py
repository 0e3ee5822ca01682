"""
Tests for governance maturity scoring.
"""

import pytest

from govscore.domain.maturity import (
    MATURITY_DIMENSION_LABELS,
    MATURITY_DIMENSIONS,
    MaturityConfig,
    assess_maturity,
    calculate_dimension_score,
    calculate_maturity_level,
    calculate_overall_maturity,
    default_maturity_config,
    score_dimension,
)
from govscore.domain.schemas import MaturitySubScores


def subscores(value):
    return MaturitySubScores(
        documentation=value,
        implementation=value,
        enforcement=value,
        measurement=value,
        improvement=value,
    )


class TestMaturityLevel:
    @pytest.mark.parametrize(
        "score,level",
        [(0, 1), (19, 1), (20, 2), (39, 2), (40, 3), (59, 3), (60, 4), (79, 4), (80, 5), (100, 5)],
    )
    def test_level_bands(self, score, level):
        assert calculate_maturity_level(score) == level

    def test_fractional_scores_below_floor(self):
        assert calculate_maturity_level(19.99) == 1

    def test_custom_bands(self):
        config = MaturityConfig(recommendations={}, level_bands=((50, 5), (10, 2)))
        assert calculate_maturity_level(55, config) == 5
        assert calculate_maturity_level(45, config) == 2
        assert calculate_maturity_level(5, config) == 1

    def test_bands_must_descend(self):
        with pytest.raises(ValueError, match="descending"):
            MaturityConfig(recommendations={}, level_bands=((20, 2), (80, 5)))


class TestDimensionScore:
    """Dimension score is the sum of five sub-scores."""

    def test_sum_of_subscores(self):
        score, level = calculate_dimension_score(
            MaturitySubScores(
                documentation=12, implementation=10, enforcement=8, measurement=6, improvement=4
            )
        )
        assert (score, level) == (40, 3)

    def test_subscores_are_clamped(self):
        assert calculate_dimension_score(subscores(25)) == (100, 5)
        assert calculate_dimension_score(subscores(-3)) == (0, 1)

    def test_defaults_score_zero(self):
        assert calculate_dimension_score(MaturitySubScores()) == (0, 1)

    def test_score_dimension_keeps_key_gap(self):
        result = score_dimension("data_governance", subscores(10), key_gap="No data catalogue")
        assert result.score == 50
        assert result.level == 3
        assert result.key_gap == "No data catalogue"


class TestOverallMaturity:
    def test_equal_weighted_mean(self):
        scores = [
            score_dimension("policy_standards", subscores(16)),  # 80
            score_dimension("risk_management", subscores(9)),  # 45
        ]
        assert calculate_overall_maturity(scores) == (63, 4)  # 62.5 rounds half up

    def test_empty_dimensions(self):
        assert calculate_overall_maturity([]) == (0, 1)


class TestAssessMaturity:
    def test_full_assessment(self):
        by_dimension = {d: subscores(12) for d in MATURITY_DIMENSIONS}
        by_dimension["vendor_management"] = subscores(2)
        by_dimension["training_awareness"] = subscores(6)

        result = assess_maturity(
            by_dimension,
            industry="financial_services",
            key_gaps={"vendor_management": "No vendor register"},
        )

        assert [ds.dimension for ds in result.dimension_scores] == list(MATURITY_DIMENSIONS)
        assert result.industry == "financial_services"
        # (60 * 4 + 10 + 30) / 6
        assert result.overall_score == 47
        assert result.overall_level == 3

        vendor = next(ds for ds in result.dimension_scores if ds.dimension == "vendor_management")
        assert vendor.key_gap == "No vendor register"

        templates = default_maturity_config().recommendations
        expected = list(templates["vendor_management"]) + list(templates["training_awareness"])
        assert result.recommendations == expected

    def test_mature_organisation_gets_no_recommendations(self):
        result = assess_maturity({d: subscores(20) for d in MATURITY_DIMENSIONS})
        assert result.recommendations == []
        assert result.overall_level == 5

    def test_dimensions_follow_canonical_order(self):
        result = assess_maturity(
            {"training_awareness": subscores(5), "policy_standards": subscores(5)}
        )
        assert [ds.dimension for ds in result.dimension_scores] == [
            "policy_standards",
            "training_awareness",
        ]

    def test_every_dimension_has_a_label(self):
        assert set(MATURITY_DIMENSION_LABELS) == set(MATURITY_DIMENSIONS)
