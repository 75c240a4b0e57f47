"""
Blend configuration checks and weight helpers for the blending screen.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Sequence

from blending.aggregator import round_half_away_from_zero
from config import WEIGHT_TOLERANCE, WEIGHT_TOTAL


@dataclass
class BlendValidation:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    total_weight: float = 0.0
    duplicate_specialties: List[str] = field(default_factory=list)


def validate_blend(items: Sequence) -> BlendValidation:
    """Check a list of SpecialtyItem before blending."""
    errors = []
    warnings = []

    if not items:
        errors.append("At least one specialty must be selected for blending")

    seen = set()
    duplicates = []
    for item in items:
        if item.name in seen and item.name not in duplicates:
            duplicates.append(item.name)
        seen.add(item.name)
    if duplicates:
        errors.append(f"Duplicate specialties found: {', '.join(duplicates)}")

    total_weight = sum(item.weight for item in items)
    if items and total_weight == 0:
        errors.append("Total weight cannot be zero")
    elif items and abs(total_weight - WEIGHT_TOTAL) > WEIGHT_TOLERANCE:
        warnings.append(f"Total weight is {total_weight:.2f}%. Consider normalizing to 100%")

    if any(item.weight < 0 for item in items):
        errors.append("Weights cannot be negative")
    if any(item.weight == 0 for item in items):
        warnings.append("Some specialties have zero weight and will not contribute to the blend")

    return BlendValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        total_weight=total_weight,
        duplicate_specialties=duplicates,
    )


def normalize_weights(items: Sequence) -> list:
    """Rescale item weights to sum to 100 (2 decimals). Unchanged when the total is 0."""
    total_weight = sum(item.weight for item in items)
    if total_weight == 0:
        return list(items)
    return [
        replace(item, weight=round_half_away_from_zero(item.weight / total_weight * WEIGHT_TOTAL))
        for item in items
    ]


def are_weights_balanced(items: Sequence) -> bool:
    return abs(sum(item.weight for item in items) - WEIGHT_TOTAL) < WEIGHT_TOLERANCE


def custom_weights_from_items(items: Sequence) -> Dict[int, float]:
    """{row index: weight} in the shape compute_blend expects for the custom method."""
    return {index: item.weight for index, item in enumerate(items)}


def format_weight(weight: float, precision: int = 2) -> str:
    return f"{weight:.{precision}f}%"
