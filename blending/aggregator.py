"""
Blend Aggregator
Combines selected survey rows into one synthetic percentile distribution.
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from blending.models import BlendedResult
from blending.weights import select_weights
from config import PERCENTILES, SAMPLE_SIZE_TARGET, TRACKED_METRICS
from errors import EmptySelection, InvalidInput

logger = logging.getLogger(__name__)


def round_half_away_from_zero(value: float, places: int = 2) -> float:
    """Round like Math.round(x * 100) / 100 does for positive values, without banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def _ordered_unique(names: Iterable[str]):
    seen = set()
    ordered = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return tuple(ordered)


def calculate_confidence(rows: Sequence, total_records: int, metrics=TRACKED_METRICS) -> float:
    """
    Average of a sample-size score and a completeness score.

    sample-size: average records per distinct specialty / 100, capped at 1
    completeness: share of rows complete on every metric
    """
    if not any(row.metric(name) is not None for row in rows for name in metrics):
        return 0.0

    distinct = {(row.specialty or "").strip().lower() for row in rows}
    sample_score = _clamp((total_records / len(distinct)) / SAMPLE_SIZE_TARGET)
    completeness = _clamp(sum(1 for row in rows if row.is_complete(metrics)) / len(rows))
    return (sample_score + completeness) / 2


def aggregate(rows: Sequence, weights: Sequence[float], *, method: str = "custom",
              warnings: Iterable[str] = (), metrics=TRACKED_METRICS) -> BlendedResult:
    """
    Weighted percentile blend.

    Each output is sum(row value * weight), rounded to 2 decimals. An
    incomplete metric (missing or p50 == 0) contributes 0 for that row; the
    row stays in the selection and weights are not renormalized.

    Args:
        rows: Selected SurveyRow objects
        weights: One non-negative weight per row
        method: Blend method recorded on the result
        warnings: Warnings to carry on the result (e.g. degraded weighting)
        metrics: Metrics to blend; others are reported as 0

    Raises:
        EmptySelection: no rows
        InvalidInput: weights do not line up with rows or are negative
    """
    if not rows:
        raise EmptySelection("At least one row must be selected for blending")
    if len(weights) != len(rows):
        raise InvalidInput(f"Expected {len(rows)} weights, got {len(weights)}")
    for weight in weights:
        if not math.isfinite(weight) or weight < 0:
            raise InvalidInput(f"Weights must be non-negative numbers, got {weight}")

    values = {}
    for metric in TRACKED_METRICS:
        for percentile in PERCENTILES:
            total = 0.0
            if metric in metrics:
                for row, weight in zip(rows, weights):
                    metric_values = row.metric(metric)
                    if metric_values is not None:
                        total += metric_values.percentile(percentile) * weight
            values[f"{metric}_{percentile}"] = round_half_away_from_zero(total)

    total_records = sum(row.org_count for row in rows)
    confidence = calculate_confidence(rows, total_records, metrics)

    result = BlendedResult(
        **values,
        total_records=total_records,
        confidence=confidence,
        specialties=_ordered_unique(row.specialty for row in rows),
        method=method,
        weights=tuple(weights),
        warnings=tuple(warnings),
    )
    logger.debug("Blended %d rows (%s): tcc_p50=%s confidence=%.2f",
                 len(rows), method, result.tcc_p50, confidence)
    return result


def compute_blend(selected_rows: Sequence, method: str,
                  custom_weights: Optional[dict] = None) -> BlendedResult:
    """
    Blend the selected rows with the chosen weighting method.

    Raises:
        EmptySelection: no rows selected
        InvalidInput: unknown method or malformed custom weights
    """
    if not selected_rows:
        raise EmptySelection("At least one row must be selected for blending")
    weights, warnings = select_weights(method, selected_rows, custom_weights)
    return aggregate(selected_rows, weights, method=method, warnings=warnings)
