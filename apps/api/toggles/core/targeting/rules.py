"""
Targeting Rule List.

A feature's ``segments`` is an ordered list of rules, highest priority
first. The operations here keep that order deterministic:

- set_or_insert: update a matching rule in place, or insert a new rule at
  the front (the most recently targeted combination wins by default)
- delete_rule: remove the matching rule
- reorder_rules: apply an explicit permutation of current indices

Every function takes an already-canonical combination; run
``normalize_combination`` first.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from toggles.core.errors import (
    IndexOutOfRangeError,
    InvalidRolloutError,
    InvalidShapeError,
    InvalidValueError,
    LengthMismatchError,
    NotFoundError,
    TypeMismatchError,
)
from .models import VALID_TYPES, Combination, Feature, Rollout, TargetingRule, scalar_kind
from .normalizer import is_untargeted


# ============================================================
# VALUE VALIDATION
# ============================================================

def validate_value_type(expected_type: str, value: Any, *, field: str = "featureValue") -> None:
    """Check a value against a feature's declared type."""
    if expected_type not in VALID_TYPES:
        raise InvalidValueError(
            f"Invalid feature type: {expected_type}",
            field="type",
            value=expected_type,
        )

    actual = scalar_kind(value)
    if actual != expected_type:
        raise TypeMismatchError(
            f"Type mismatch: expected {expected_type} but got {actual}",
            field=field,
            value=value,
        )


def validate_rollout(expected_type: str, rollout: Any) -> Rollout | None:
    """
    Validate a rollout payload and build a Rollout.

    None means "no rollout". Anything else must carry both ``percentage``
    (a number in [0, 100]) and ``secondaryValue`` (of the feature type).
    """
    if rollout is None:
        return None

    if not isinstance(rollout, Mapping):
        raise InvalidRolloutError(
            "Rollout must be an object with percentage and secondaryValue",
            field="rollout",
            value=rollout,
        )

    if "percentage" not in rollout or "secondaryValue" not in rollout:
        raise InvalidRolloutError(
            "Rollout object must have percentage and secondaryValue properties",
            field="rollout",
            value=dict(rollout),
        )

    percentage = rollout["percentage"]
    if scalar_kind(percentage) != "number" or not 0 <= percentage <= 100:
        raise InvalidRolloutError(
            "Rollout percentage must be a number between 0 and 100",
            field="rollout.percentage",
            value=percentage,
        )

    validate_value_type(expected_type, rollout["secondaryValue"], field="rollout.secondaryValue")

    return Rollout(percentage=percentage, secondary_value=rollout["secondaryValue"])


# ============================================================
# RULE LIST OPERATIONS
# ============================================================

def find_rule_index(feature: Feature, combo: Combination) -> int:
    """Index of the first rule structurally equal to combo, or -1."""
    for index, rule in enumerate(feature.segments):
        if rule.matches(combo):
            return index
    return -1


def set_or_insert(
    feature: Feature,
    combo: Combination,
    value: Any,
    rollout: Any = None,
) -> int | None:
    """
    Set a value for a combination.

    The untargeted combination overwrites the feature's base value and
    rollout. Any other combination updates its existing rule in place or is
    inserted at index 0. An absent rollout clears the previous one.

    Returns:
        Index of the affected rule, or None when the base value changed.
    """
    validate_value_type(feature.type, value)
    parsed_rollout = validate_rollout(feature.type, rollout)

    if is_untargeted(combo):
        feature.value = value
        feature.rollout = parsed_rollout
        return None

    index = find_rule_index(feature, combo)
    if index != -1:
        rule = feature.segments[index]
        rule.value = value
        rule.rollout = parsed_rollout
        return index

    feature.segments.insert(
        0,
        TargetingRule(
            combo={key: list(tokens) for key, tokens in combo.items()},
            value=value,
            rollout=parsed_rollout,
        ),
    )
    return 0


def delete_rule(feature: Feature, combo: Combination) -> TargetingRule:
    """Remove and return the rule for combo."""
    if is_untargeted(combo):
        raise InvalidValueError(
            "The untargeted combination has no rule to delete",
            field="segmentCombination",
            value=combo,
        )

    index = find_rule_index(feature, combo)
    if index == -1:
        raise NotFoundError(
            f"Segment combination does not exist for feature with id {feature.id}.",
            field="segmentCombination",
            value=combo,
        )

    return feature.segments.pop(index)


def reorder_rules(feature: Feature, new_order: Any) -> None:
    """
    Permute a feature's rules by current index.

    Result is ``[old[i] for i in new_order]``. Repeated indices are not
    rejected: they duplicate one rule and drop another.
    """
    if not isinstance(new_order, list):
        raise InvalidShapeError(
            "newSegmentOrder must be a list of indexes",
            field="newSegmentOrder",
            value=new_order,
        )

    count = len(feature.segments)
    if len(new_order) != count:
        raise LengthMismatchError(
            "The new segment order length must match the number of segments "
            f"in the feature ({len(new_order)} != {count}).",
            field="newSegmentOrder",
            value=new_order,
        )

    indexes = []
    for index in new_order:
        # JSON clients may send 1.0 for 1
        if isinstance(index, float) and index.is_integer():
            index = int(index)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < count:
            raise IndexOutOfRangeError(
                f"Invalid index: {index} in newSegmentOrder.",
                field="newSegmentOrder",
                value=index,
            )
        indexes.append(index)

    feature.segments = [feature.segments[index] for index in indexes]
