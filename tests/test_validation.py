"""Tests for blend configuration checks."""

import pytest

from blending.models import SpecialtyItem
from blending.validation import (
    are_weights_balanced,
    custom_weights_from_items,
    format_weight,
    normalize_weights,
    validate_blend,
)


def items(*pairs):
    return [SpecialtyItem(id=str(i), name=name, weight=weight) for i, (name, weight) in enumerate(pairs)]


def test_valid_blend():
    result = validate_blend(items(("Cardiology", 60), ("Neurology", 40)))
    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []
    assert result.total_weight == 100


def test_empty_selection():
    result = validate_blend([])
    assert not result.is_valid
    assert result.errors == ["At least one specialty must be selected for blending"]


def test_duplicates_reported_once():
    result = validate_blend(items(("Cardiology", 30), ("Cardiology", 30), ("Cardiology", 40)))
    assert not result.is_valid
    assert result.duplicate_specialties == ["Cardiology"]
    assert "Duplicate specialties found: Cardiology" in result.errors


def test_zero_total():
    result = validate_blend(items(("Cardiology", 0), ("Neurology", 0)))
    assert "Total weight cannot be zero" in result.errors
    assert "Some specialties have zero weight and will not contribute to the blend" in result.warnings


def test_unbalanced_total_is_a_warning():
    result = validate_blend(items(("Cardiology", 50), ("Neurology", 25)))
    assert result.is_valid
    assert result.warnings == ["Total weight is 75.00%. Consider normalizing to 100%"]


def test_negative_weight():
    result = validate_blend(items(("Cardiology", 120), ("Neurology", -20)))
    assert result.errors == ["Weights cannot be negative"]


def test_normalize_weights():
    normalized = normalize_weights(items(("Cardiology", 1), ("Neurology", 1), ("Urology", 1)))
    assert [item.weight for item in normalized] == [33.33, 33.33, 33.33]
    assert normalized[0].name == "Cardiology"


def test_normalize_leaves_zero_total_alone():
    original = items(("Cardiology", 0))
    assert normalize_weights(original) == original


def test_are_weights_balanced():
    assert are_weights_balanced(items(("Cardiology", 33.333), ("Neurology", 66.667)))
    assert not are_weights_balanced(items(("Cardiology", 50)))


def test_custom_weights_from_items():
    assert custom_weights_from_items(items(("Cardiology", 70), ("Neurology", 30))) == {0: 70, 1: 30}


@pytest.mark.parametrize("weight, precision, expected", [(33.333, 2, "33.33%"), (50, 0, "50%")])
def test_format_weight(weight, precision, expected):
    assert format_weight(weight, precision) == expected
