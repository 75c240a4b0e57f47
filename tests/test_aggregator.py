"""Tests for blend aggregation and the confidence score."""

import pytest

from blending.aggregator import aggregate, calculate_confidence, compute_blend, round_half_away_from_zero
from blending.models import MetricValues, SurveyRow
from blending.weights import compute_weights
from errors import EmptySelection, InvalidInput


class TestRounding:
    @pytest.mark.parametrize("value, expected", [
        (2.675, 2.68),
        (0.125, 0.13),
        (1.005, 1.01),
        (334029.126214, 334029.13),
        (10.0, 10.0),
    ])
    def test_half_away_from_zero(self, value, expected):
        assert round_half_away_from_zero(value) == expected


class TestAggregate:
    def test_weighted_tcc_median(self, scenario_rows):
        result = compute_blend(scenario_rows, 'weighted')
        expected = (300000 * 135 + 320000 * 28 + 450000 * 43) / 206
        assert result.tcc_p50 == round_half_away_from_zero(expected)
        assert result.tcc_p50 == pytest.approx(334029.13)
        assert result.method == 'weighted'
        assert result.warnings == ()

    def test_every_output_is_weighted_sum(self, scenario_rows):
        weights = compute_weights('custom', scenario_rows, {0: 20, 1: 30, 2: 50})
        result = aggregate(scenario_rows, weights)
        for metric in ('tcc', 'wrvu', 'cf'):
            for percentile in ('p25', 'p50', 'p75', 'p90'):
                expected = sum(
                    row.metric(metric).percentile(percentile) * weight
                    for row, weight in zip(scenario_rows, weights)
                )
                assert getattr(result, f"{metric}_{percentile}") == round_half_away_from_zero(expected)

    def test_total_records_is_unweighted_org_sum(self, scenario_rows):
        result = compute_blend(scenario_rows, 'custom', {0: 1})
        assert result.total_records == 100

    def test_incomplete_metric_contributes_zero(self, make_row):
        rows = [
            make_row("Cardiology", tcc_p50=300000, incumbents=10, orgs=10, wrvu_p50=7000),
            make_row("Neurology", tcc_p50=280000, incumbents=10, orgs=10),
        ]
        result = compute_blend(rows, 'simple')
        assert result.tcc_p50 == 290000.0
        assert result.wrvu_p50 == 3500.0
        assert result.cf_p50 == 0.0

    def test_no_complete_metrics_anywhere(self, make_row):
        result = compute_blend([make_row("Cardiology"), make_row("Neurology")], 'simple')
        assert result.as_dict()['tcc_p50'] == 0.0
        assert result.total_records == 0
        assert result.confidence == 0.0

    def test_specialties_unique_in_order(self, make_row):
        rows = [
            make_row("Neurology", tcc_p50=280000, orgs=5),
            make_row("Cardiology", tcc_p50=300000, orgs=5),
            make_row("Neurology", tcc_p50=290000, orgs=5, vendor="ECG"),
        ]
        assert compute_blend(rows, 'simple').specialties == ("Neurology", "Cardiology")

    def test_degraded_weighting_warning_on_result(self, make_row):
        rows = [make_row("Cardiology", tcc_p50=300000), make_row("Neurology", tcc_p50=200000)]
        result = compute_blend(rows, 'weighted')
        assert result.tcc_p50 == 250000.0
        assert len(result.warnings) == 1

    def test_empty_selection(self):
        with pytest.raises(EmptySelection):
            compute_blend([], 'simple')
        with pytest.raises(InvalidInput):
            aggregate([], [])

    def test_weights_must_line_up(self, scenario_rows):
        with pytest.raises(InvalidInput):
            aggregate(scenario_rows, [0.5, 0.5])
        with pytest.raises(InvalidInput):
            aggregate(scenario_rows, [1.5, -0.25, -0.25])


class TestConfidence:
    def test_complete_rows(self, scenario_rows):
        # 100 records over 3 specialties, every row complete
        assert calculate_confidence(scenario_rows, 100) == pytest.approx((100 / 3 / 100 + 1) / 2)

    def test_sample_score_capped(self, scenario_rows):
        assert calculate_confidence(scenario_rows, 10000) == 1.0

    def test_partial_completeness(self, make_row):
        rows = [
            make_row("Cardiology", tcc_p50=300000, orgs=40, wrvu_p50=7000, cf_p50=55.0),
            make_row("cardiology", tcc_p50=310000, orgs=60),
        ]
        # one distinct specialty with 100 records; half the rows complete
        assert calculate_confidence(rows, 100) == pytest.approx(0.75)

    def test_confidence_on_result(self, scenario_rows):
        result = compute_blend(scenario_rows, 'simple')
        assert 0.0 <= result.confidence <= 1.0
        assert result.confidence == pytest.approx(calculate_confidence(scenario_rows, 100))


class TestMetricCompleteness:
    @pytest.mark.parametrize("p50", [0.0, -1.0, float('nan'), float('inf')])
    def test_unusable_median_is_incomplete(self, p50):
        assert not MetricValues(p25=1.0, p50=p50).is_complete

    def test_nan_median_is_left_out_of_the_blend(self, make_row):
        nan_metrics = {'tcc': MetricValues(p25=1.0, p50=float('nan'), p75=1.0, p90=1.0, org_count=5)}
        rows = [make_row("Cardiology", tcc_p50=300000, orgs=5), SurveyRow("Neurology", metrics=nan_metrics)]
        result = compute_blend(rows, 'simple')
        assert result.tcc_p50 == 150000.0
        assert result.total_records == 5
