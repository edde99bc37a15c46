"""
Tests for combination normalization.
"""

import pytest

from toggles.core.errors import (
    DuplicateValueError,
    InvalidShapeError,
    InvalidValueError,
    MixedNegationError,
    TypeMismatchError,
    UnknownSegmentKeyError,
)
from toggles.core.targeting import SegmentRegistry, is_untargeted, normalize_combination


@pytest.fixture
def registry() -> SegmentRegistry:
    registry = SegmentRegistry()
    registry.create("country", "Country code", ["IN", "US", "MX"])
    registry.create("tier", "Subscription tier", ["gold", "silver"])
    return registry


def test_keys_follow_registry_order_and_tokens_are_sorted(registry):
    combo = normalize_combination({"tier": ["gold"], "country": ["US", "IN"]}, registry)

    assert combo == {"country": ["IN", "US"], "tier": ["gold"]}
    assert list(combo) == ["country", "tier"]


def test_empty_and_null_axes_are_dropped(registry):
    combo = normalize_combination({"country": [], "tier": None}, registry)

    assert combo == {}
    assert is_untargeted(combo)


def test_same_audience_in_any_order_compares_equal(registry):
    first = normalize_combination({"country": ["MX", "IN"], "tier": ["silver"]}, registry)
    second = normalize_combination({"tier": ["silver"], "country": ["IN", "MX"]}, registry)

    assert first == second


def test_normalizing_twice_changes_nothing(registry):
    once = normalize_combination({"tier": ["gold"], "country": ["US", "IN"]}, registry)

    assert normalize_combination(once, registry) == once


def test_all_negated_axis_is_accepted(registry):
    combo = normalize_combination({"country": ["!US", "!IN"]}, registry)

    assert combo == {"country": ["!IN", "!US"]}


def test_non_mapping_is_rejected(registry):
    with pytest.raises(InvalidShapeError):
        normalize_combination(["IN"], registry)


def test_unknown_key_is_rejected(registry):
    with pytest.raises(UnknownSegmentKeyError) as exc_info:
        normalize_combination({"region": ["apac"]}, registry)

    assert exc_info.value.value == "region"


def test_axis_must_be_a_list(registry):
    with pytest.raises(InvalidShapeError) as exc_info:
        normalize_combination({"country": "IN"}, registry)

    assert exc_info.value.field == "country"


def test_duplicate_tokens_are_rejected(registry):
    with pytest.raises(DuplicateValueError):
        normalize_combination({"country": ["IN", "IN"]}, registry)


def test_token_kind_must_match_segment(registry):
    with pytest.raises(TypeMismatchError):
        normalize_combination({"country": [1]}, registry)


def test_mixed_negation_is_rejected(registry):
    with pytest.raises(MixedNegationError):
        normalize_combination({"country": ["!IN", "US"]}, registry)


def test_value_and_its_negation_are_rejected_together(registry):
    with pytest.raises(MixedNegationError):
        normalize_combination({"country": ["IN", "!IN"]}, registry)


def test_unregistered_value_is_rejected(registry):
    with pytest.raises(InvalidValueError) as exc_info:
        normalize_combination({"country": ["FR"]}, registry)

    assert "Invalid value" in exc_info.value.message


def test_unregistered_negated_value_is_rejected(registry):
    with pytest.raises(InvalidValueError) as exc_info:
        normalize_combination({"country": ["!FR"]}, registry)

    assert "negated value" in exc_info.value.message
    assert exc_info.value.value == "!FR"
