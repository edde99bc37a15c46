"""
Combination Normalizer.

Turns an untrusted segment combination into its canonical form:

    registry order: country, tier
    raw:        {"tier": ["gold"], "country": ["US", "IN"], "beta": []}
    canonical:  {"country": ["IN", "US"], "tier": ["gold"]}

Keys come out in registry order, empty or missing axes are dropped, and
each token list is sorted, so two combinations that select the same
audience compare equal with plain ``==``. The function is pure: the
registry is an argument, and re-normalizing a canonical combination
returns it unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from toggles.core.errors import (
    DuplicateValueError,
    InvalidShapeError,
    InvalidValueError,
    MixedNegationError,
    UnknownSegmentKeyError,
)
from .models import Combination
from .segments import NEGATION_PREFIX, SegmentRegistry, validate_segment_value_type


def is_negated(token: str) -> bool:
    return token.startswith(NEGATION_PREFIX)


def strip_negation(token: str) -> str:
    return token[len(NEGATION_PREFIX):] if is_negated(token) else token


def is_untargeted(combo: Combination) -> bool:
    """True for the combination that selects everyone (the base value)."""
    return all(len(tokens) == 0 for tokens in combo.values())


def _dedupe(tokens: list[Any]) -> list[Any]:
    unique: list[Any] = []
    for token in tokens:
        if token not in unique:
            unique.append(token)
    return unique


def normalize_combination(raw: Any, registry: SegmentRegistry) -> Combination:
    """
    Validate a raw combination against the registry and canonicalize it.

    Raises:
        InvalidShapeError: raw is not a mapping, or an axis is not a list
        UnknownSegmentKeyError: a key is not a registered segment
        DuplicateValueError: a token repeats within one axis
        TypeMismatchError: a token's kind differs from the segment's kind
        MixedNegationError: an axis mixes "!value" and "value" tokens
        InvalidValueError: a token (after stripping "!") is not registered
    """
    if not isinstance(raw, Mapping):
        raise InvalidShapeError(
            "segmentCombination must be an object",
            field="segmentCombination",
            value=raw,
        )

    known_keys = registry.names()
    for key in raw:
        if key not in registry:
            raise UnknownSegmentKeyError(
                f"Invalid segment key: {key}",
                field="segmentCombination",
                value=key,
            )

    canonical: Combination = {}

    for key in known_keys:
        tokens = raw.get(key)

        # Missing, null and empty axes mean "no targeting on this segment"
        if not tokens:
            continue

        if not isinstance(tokens, list):
            raise InvalidShapeError(
                f'Segment values for "{key}" must be an array.',
                field=key,
                value=tokens,
            )

        unique = _dedupe(tokens)
        if len(unique) != len(tokens):
            raise DuplicateValueError(
                f"Duplicate values found for segment {key}",
                field=key,
                value=tokens,
            )

        segment = registry.get(key)
        validate_segment_value_type(unique, segment)

        negated = [t for t in tokens if is_negated(t)]
        if negated and len(negated) != len(tokens):
            raise MixedNegationError(
                f"Mixed negated and non-negated values are not allowed for segment {key}",
                field=key,
                value=tokens,
            )

        for token in tokens:
            pure = strip_negation(token)
            if pure not in segment.values:
                label = "negated value" if is_negated(token) else "value"
                raise InvalidValueError(
                    f"Invalid {label} for segment {key}: {pure}",
                    field=key,
                    value=token,
                )

        canonical[key] = sorted(unique)

    return canonical
