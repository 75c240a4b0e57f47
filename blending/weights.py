"""
Weighting Policy Selector
Turns a blend method into a normalized weight vector over the selected rows.
"""

from __future__ import annotations

import logging
import math
from typing import List, Mapping, Optional, Sequence, Tuple

from config import BLEND_METHODS
from errors import DEGRADED_WEIGHTING_WARNING, InvalidInput

logger = logging.getLogger(__name__)


def simple_weights(count: int) -> List[float]:
    return [1.0 / count] * count


def _custom_values(custom_weights, count: int) -> List[float]:
    if custom_weights is None:
        return [0.0] * count
    if not isinstance(custom_weights, Mapping):
        custom_weights = dict(enumerate(custom_weights))

    values = [0.0] * count
    for index, weight in custom_weights.items():
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < count:
            raise InvalidInput(f"Custom weight index {index!r} is outside the selection (0..{count - 1})")
        if weight is None:
            continue
        weight = float(weight)
        if not math.isfinite(weight) or weight < 0:
            raise InvalidInput(f"Custom weight for row {index} must be a non-negative number, got {weight}")
        values[index] = weight
    return values


def select_weights(method: str, rows: Sequence, custom_weights=None) -> Tuple[List[float], List[str]]:
    """
    Compute blend weights and any degradation warning.

    Args:
        method: 'simple', 'weighted' (by incumbent count) or 'custom'
        rows: Selected SurveyRow objects
        custom_weights: {row index: weight} for the custom method; rows
            without an entry weigh 0

    Returns:
        (weights summing to 1.0, warnings)

    Raises:
        InvalidInput: empty selection, unknown method or bad custom weights
    """
    if method not in BLEND_METHODS:
        raise InvalidInput(f"Unknown blend method '{method}'. Expected one of: {', '.join(BLEND_METHODS)}")
    count = len(rows)
    if count == 0:
        raise InvalidInput("At least one row must be selected to compute weights")

    if method == 'simple':
        return simple_weights(count), []

    if method == 'weighted':
        raw = [float(max(row.incumbent_count or 0, 0)) for row in rows]
    else:
        raw = _custom_values(custom_weights, count)

    total = sum(raw)
    if total <= 0:
        warning = DEGRADED_WEIGHTING_WARNING.format(method=method)
        logger.warning(warning)
        return simple_weights(count), [warning]

    return [value / total for value in raw], []


def compute_weights(method: str, rows: Sequence, custom_weights: Optional[Mapping[int, float]] = None) -> List[float]:
    """Normalized weight vector for the selected rows (see select_weights)."""
    weights, _ = select_weights(method, rows, custom_weights)
    return weights
