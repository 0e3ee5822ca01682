"""
Tests for the data readiness audit.
"""

import math

import pytest

from govscore.domain.data_readiness import (
    READINESS_DIMENSION_LABELS,
    READINESS_DIMENSION_WEIGHTS,
    READINESS_DIMENSIONS,
    DataReadinessConfig,
    assess_data_readiness,
    calculate_data_quality,
    calculate_dimension_score,
    calculate_overall_readiness,
    classify_readiness_level,
    default_data_readiness_config,
    generate_remediation_roadmap,
    score_readiness_dimension,
)
from govscore.domain.models import DataReadinessDimensionScore
from govscore.domain.schemas import DataQualityMetric, DataReadinessScore, RoadmapTemplates


def dimension(name, score):
    return DataReadinessDimensionScore(
        dimension=name, score=score, weight=READINESS_DIMENSION_WEIGHTS.get(name, 0.0)
    )


@pytest.fixture
def audit_scores():
    """A mid-maturity estate: strong security, weak operations."""
    raw = {
        "availability": 72,
        "quality": 58,
        "accessibility": 65,
        "governance": 55,
        "security": 78,
        "operations": 48,
    }
    return [DataReadinessScore(dimension=d, score=s) for d, s in raw.items()]


@pytest.fixture
def quality_metrics():
    return [
        DataQualityMetric(dimension="accuracy", score=88, target=95, domain="customer"),
        DataQualityMetric(dimension="completeness", score=72, target=90),
        DataQualityMetric(dimension="consistency", score=65, target=85),
        DataQualityMetric(dimension="timeliness", score=82, target=90),
    ]


class TestDimensionScore:
    """Raw ratings are clamped to 0-100 and rounded half-up."""

    @pytest.mark.parametrize(
        "raw,expected",
        [(72, 72), (72.5, 73), (140, 100), (-5, 0), (math.nan, 0), (math.inf, 100)],
    )
    def test_clamped_and_rounded(self, raw, expected):
        assert calculate_dimension_score(raw) == expected

    def test_score_carries_weight_and_notes(self):
        entry = DataReadinessScore(
            dimension="quality", score=58.4, findings=["Duplicate customer rows"]
        )
        scored = score_readiness_dimension(entry)
        assert scored.score == 58
        assert scored.weight == 0.25
        assert scored.findings == ["Duplicate customer rows"]

    def test_unknown_dimension_has_no_weight(self):
        scored = score_readiness_dimension(DataReadinessScore(dimension="lineage", score=10))
        assert scored.weight == 0.0


class TestOverallReadiness:
    """Weighted overall readiness."""

    def test_weighted_mean(self):
        scores = [dimension(d, s) for d, s in zip(READINESS_DIMENSIONS, (72, 58, 65, 55, 78, 48))]
        # 18 + 14.5 + 13 + 8.25 + 7.8 + 2.4 = 63.95
        assert calculate_overall_readiness(scores) == 64

    def test_normalised_by_weights_present(self):
        scores = [dimension("availability", 80), dimension("operations", 40)]
        # (20 + 2) / 0.30
        assert calculate_overall_readiness(scores) == 73

    def test_unweighted_dimensions_are_ignored(self):
        scores = [dimension("quality", 60), dimension("lineage", 0)]
        assert calculate_overall_readiness(scores) == 60

    def test_empty_or_unweighted_only(self):
        assert calculate_overall_readiness([]) == 0
        assert calculate_overall_readiness([dimension("lineage", 90)]) == 0


class TestReadinessLevel:
    """Score to readiness level bands."""

    @pytest.mark.parametrize(
        "score,level",
        [
            (100, "optimized"),
            (85, "optimized"),
            (84, "managed"),
            (70, "managed"),
            (69, "defined"),
            (55, "defined"),
            (54, "developing"),
            (40, "developing"),
            (39, "initial"),
            (0, "initial"),
        ],
    )
    def test_level_bands(self, score, level):
        assert classify_readiness_level(score) == level

    def test_custom_bands(self):
        config = DataReadinessConfig(
            templates={}, level_bands=((50, "ready"),), lowest_level="not_ready"
        )
        assert classify_readiness_level(50, config) == "ready"
        assert classify_readiness_level(49, config) == "not_ready"


class TestDataQuality:
    """Mean of the data quality metrics."""

    def test_mean_of_metrics(self, quality_metrics):
        # (88 + 72 + 65 + 82) / 4 = 76.75
        assert calculate_data_quality(quality_metrics) == 77

    def test_no_metrics(self):
        assert calculate_data_quality([]) == 0

    def test_out_of_range_metrics_are_clamped(self):
        metrics = [
            DataQualityMetric(dimension="validity", score=150),
            DataQualityMetric(dimension="uniqueness", score=math.nan),
        ]
        assert calculate_data_quality(metrics) == 50


class TestRemediationRoadmap:
    """Three-phase roadmap, weakest dimension first."""

    def test_phases_follow_thresholds_weakest_first(self):
        scores = [dimension(d, s) for d, s in zip(READINESS_DIMENSIONS, (72, 58, 65, 55, 78, 48))]
        roadmap = generate_remediation_roadmap(scores)

        assert [p.phase for p in roadmap] == ["quick_wins", "foundation", "advanced"]
        quick_wins, foundation, advanced = roadmap
        # operations, governance, quality and accessibility are below 70
        assert len(quick_wins.items) == 8
        assert quick_wins.items[0] == (
            "Document current data pipeline schedules and failure handling procedures"
        )
        assert len(foundation.items) == 6
        assert advanced.items == [
            "Deploy automated data pipeline orchestration with self-healing capabilities",
            "Implement cost optimization for data storage and compute resources",
        ]

    def test_mature_estate_has_empty_phases(self):
        scores = [dimension(d, 90) for d in READINESS_DIMENSIONS]
        roadmap = generate_remediation_roadmap(scores)
        assert [p.items for p in roadmap] == [[], [], []]

    def test_threshold_is_exclusive(self):
        quick_wins, foundation, _ = generate_remediation_roadmap([dimension("quality", 60)])
        assert len(quick_wins.items) == 2
        assert foundation.items == []

    def test_items_are_deduplicated_within_a_phase(self):
        shared = RoadmapTemplates(quick_wins=("Appoint a data steward",))
        config = DataReadinessConfig(templates={"quality": shared, "governance": shared})
        roadmap = generate_remediation_roadmap(
            [dimension("quality", 10), dimension("governance", 20)], config
        )
        assert roadmap[0].items == ["Appoint a data steward"]

    def test_dimensions_without_templates_add_nothing(self):
        roadmap = generate_remediation_roadmap([dimension("lineage", 0)])
        assert all(p.items == [] for p in roadmap)


class TestDataReadinessConfig:
    """Config validation and packaged defaults."""

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            DataReadinessConfig(templates={}, weights={"quality": 0.5})

    def test_bands_must_descend(self):
        with pytest.raises(ValueError, match="descending"):
            DataReadinessConfig(templates={}, level_bands=((40, "developing"), (70, "managed")))

    def test_thresholds_must_not_increase(self):
        with pytest.raises(ValueError, match="Roadmap thresholds"):
            DataReadinessConfig(templates={}, quick_wins_below=50, advanced_below=60)

    def test_default_config_loads_packaged_templates(self):
        config = default_data_readiness_config()
        assert set(config.templates) == set(READINESS_DIMENSIONS)


class TestAssessDataReadiness:
    """End-to-end audit."""

    def test_full_audit(self, audit_scores, quality_metrics):
        audit = assess_data_readiness(audit_scores, quality_metrics)

        assert [ds.dimension for ds in audit.dimension_scores] == list(READINESS_DIMENSIONS)
        assert audit.overall_score == 64
        assert audit.readiness_level == "defined"
        assert audit.data_quality_score == 77
        assert [len(p.items) for p in audit.remediation_roadmap] == [8, 6, 2]

    def test_dimensions_follow_canonical_order(self):
        scores = [
            DataReadinessScore(dimension="lineage", score=50),
            DataReadinessScore(dimension="operations", score=50),
            DataReadinessScore(dimension="availability", score=50),
        ]
        audit = assess_data_readiness(scores)
        assert [ds.dimension for ds in audit.dimension_scores] == [
            "availability",
            "operations",
            "lineage",
        ]

    def test_empty_audit(self):
        audit = assess_data_readiness([])
        assert audit.overall_score == 0
        assert audit.readiness_level == "initial"
        assert audit.data_quality_score == 0
        assert [p.items for p in audit.remediation_roadmap] == [[], [], []]

    def test_every_dimension_has_a_label(self):
        assert set(READINESS_DIMENSION_LABELS) == set(READINESS_DIMENSIONS)
