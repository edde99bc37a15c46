"""
Tests for targeting rule list operations.
"""

import pytest

from toggles.core.errors import (
    IndexOutOfRangeError,
    InvalidRolloutError,
    InvalidShapeError,
    InvalidValueError,
    LengthMismatchError,
    NotFoundError,
    TypeMismatchError,
)
from toggles.core.targeting import (
    Feature,
    Rollout,
    delete_rule,
    reorder_rules,
    set_or_insert,
    validate_rollout,
    validate_value_type,
)

INDIA = {"country": ["IN"]}
US = {"country": ["US"]}
GOLD = {"tier": ["gold"]}


@pytest.fixture
def feature() -> Feature:
    return Feature(id="new_cart", description="New cart page", type="boolean", value=False)


@pytest.fixture
def targeted(feature: Feature) -> Feature:
    """Feature with rules [GOLD, US, INDIA] (highest priority first)."""
    set_or_insert(feature, INDIA, True)
    set_or_insert(feature, US, False)
    set_or_insert(feature, GOLD, True)
    return feature


def combos(feature: Feature) -> list[dict]:
    return [rule.combo for rule in feature.segments]


# ============ Value validation ============


@pytest.mark.parametrize(
    "expected, value",
    [("boolean", True), ("number", 3), ("number", 2.5), ("string", "blue")],
)
def test_value_matches_type(expected, value):
    validate_value_type(expected, value)


@pytest.mark.parametrize(
    "expected, value",
    [("boolean", 1), ("number", True), ("number", "3"), ("string", None)],
)
def test_value_type_mismatch(expected, value):
    with pytest.raises(TypeMismatchError):
        validate_value_type(expected, value)


def test_unknown_feature_type():
    with pytest.raises(InvalidValueError):
        validate_value_type("json", {})


def test_rollout_absent_is_none():
    assert validate_rollout("boolean", None) is None


def test_rollout_is_parsed():
    rollout = validate_rollout("string", {"percentage": 25, "secondaryValue": "blue"})

    assert rollout == Rollout(percentage=25, secondary_value="blue")
    assert rollout.to_dict() == {"percentage": 25, "secondaryValue": "blue"}


@pytest.mark.parametrize(
    "rollout",
    [
        "half",
        {"percentage": 50},
        {"secondaryValue": True},
        {"percentage": -1, "secondaryValue": True},
        {"percentage": 100.5, "secondaryValue": True},
        {"percentage": "50", "secondaryValue": True},
        {"percentage": True, "secondaryValue": True},
    ],
)
def test_invalid_rollout(rollout):
    with pytest.raises(InvalidRolloutError):
        validate_rollout("boolean", rollout)


def test_rollout_secondary_value_type():
    with pytest.raises(TypeMismatchError) as exc_info:
        validate_rollout("boolean", {"percentage": 10, "secondaryValue": "yes"})

    assert exc_info.value.field == "rollout.secondaryValue"


# ============ set_or_insert ============


def test_untargeted_sets_base_value(feature):
    position = set_or_insert(feature, {}, True, {"percentage": 50, "secondaryValue": False})

    assert position is None
    assert feature.value is True
    assert feature.rollout == Rollout(percentage=50, secondary_value=False)
    assert feature.segments == []


def test_new_combination_is_inserted_first(targeted):
    assert combos(targeted) == [GOLD, US, INDIA]


def test_existing_combination_is_updated_in_place(targeted):
    position = set_or_insert(targeted, US, True)

    assert position == 1
    assert combos(targeted) == [GOLD, US, INDIA]
    assert targeted.segments[1].value is True


def test_absent_rollout_clears_previous_rollout(feature):
    set_or_insert(feature, INDIA, True, {"percentage": 30, "secondaryValue": False})
    assert feature.segments[0].rollout is not None

    set_or_insert(feature, INDIA, True)

    assert feature.segments[0].rollout is None


def test_wrong_value_type_leaves_feature_untouched(targeted):
    with pytest.raises(TypeMismatchError):
        set_or_insert(targeted, {"country": ["MX"]}, "yes")

    assert combos(targeted) == [GOLD, US, INDIA]


def test_stored_combo_is_a_copy(feature):
    combo = {"country": ["IN"]}
    set_or_insert(feature, combo, True)
    combo["country"].append("US")

    assert feature.segments[0].combo == {"country": ["IN"]}


# ============ delete_rule ============


def test_delete_rule(targeted):
    removed = delete_rule(targeted, US)

    assert removed.combo == US
    assert combos(targeted) == [GOLD, INDIA]


def test_delete_missing_rule(targeted):
    with pytest.raises(NotFoundError):
        delete_rule(targeted, {"country": ["MX"]})

    assert combos(targeted) == [GOLD, US, INDIA]


def test_delete_untargeted_combination(targeted):
    with pytest.raises(InvalidValueError):
        delete_rule(targeted, {})


# ============ reorder_rules ============


def test_reorder_applies_permutation(targeted):
    reorder_rules(targeted, [2, 0, 1])

    assert combos(targeted) == [INDIA, GOLD, US]


def test_reorder_accepts_integral_floats(targeted):
    reorder_rules(targeted, [2.0, 1, 0])

    assert combos(targeted) == [INDIA, US, GOLD]


def test_reorder_with_repeated_index_duplicates_a_rule(targeted):
    reorder_rules(targeted, [0, 0, 1])

    assert combos(targeted) == [GOLD, GOLD, US]


def test_reorder_requires_list(targeted):
    with pytest.raises(InvalidShapeError):
        reorder_rules(targeted, "0,1,2")


def test_reorder_length_mismatch(targeted):
    with pytest.raises(LengthMismatchError):
        reorder_rules(targeted, [0, 1])


@pytest.mark.parametrize("order", [[0, 1, 3], [0, 1, -1], [0, 1, True], [0, 1, "2"], [0, 1, 1.5]])
def test_reorder_index_out_of_range(targeted, order):
    with pytest.raises(IndexOutOfRangeError):
        reorder_rules(targeted, order)

    assert combos(targeted) == [GOLD, US, INDIA]


def test_reorder_empty_feature(feature):
    reorder_rules(feature, [])

    assert feature.segments == []
