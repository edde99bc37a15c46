"""
Segment Registry.

A segment is a named, typed set of allowed audience values (e.g. country
codes). The registry keeps segments in creation order; that order is the
canonical key order of every normalized combination, so it is preserved
through ``to_document``/``from_document``.

Values are append-only: a segment's description can change and new values
can be added, but nothing is ever removed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from toggles.core.errors import (
    DuplicateSegmentError,
    InvalidShapeError,
    InvalidValueError,
    NotFoundError,
    TypeMismatchError,
)
from .models import scalar_kind


NEGATION_PREFIX = "!"
MAX_VALUE_LENGTH = 30
FORBIDDEN_CHARACTERS = (",", '"')


@dataclass
class Segment:
    """
    Named audience segment.

    Attributes:
        name: Unique registry key
        description: Human-readable description
        values: Allowed values, in insertion order, all of one scalar kind
    """
    name: str
    description: str
    values: list[Any] = field(default_factory=list)

    @property
    def value_kind(self) -> str | None:
        """Scalar kind shared by every value (the kind of the first one)."""
        if not self.values:
            return None
        return scalar_kind(self.values[0])

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "values": list(self.values)}


# ============================================================
# VALIDATION
# ============================================================

def validate_token_format(token: str, *, field: str) -> None:
    """Check the format shared by segment names and segment values."""
    if token.startswith(NEGATION_PREFIX):
        raise InvalidValueError(
            f'Segment value "{token}" cannot start with "{NEGATION_PREFIX}"',
            field=field,
            value=token,
        )
    for char in FORBIDDEN_CHARACTERS:
        if char in token:
            raise InvalidValueError(
                f'Segment value "{token}" cannot contain ({char})',
                field=field,
                value=token,
            )
    if len(token) > MAX_VALUE_LENGTH:
        raise InvalidValueError(
            f'Segment value "{token}" is too long (max {MAX_VALUE_LENGTH} characters)',
            field=field,
            value=token,
        )


def validate_segment_name(name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise InvalidShapeError(
            "segmentName must be a non-empty string",
            field="segmentName",
            value=name,
        )
    validate_token_format(name, field="segmentName")


def validate_segment_values(values: Any) -> None:
    """Values must be a non-empty list of well-formed strings."""
    if not isinstance(values, list):
        raise InvalidShapeError(
            "segmentValues must be a list",
            field="segmentValues",
            value=values,
        )
    if not values:
        raise InvalidValueError(
            "segmentValues must not be empty",
            field="segmentValues",
            value=values,
        )
    for value in values:
        if not isinstance(value, str):
            raise InvalidShapeError(
                f"Segment value {value!r} must be a string",
                field="segmentValues",
                value=value,
            )
        validate_token_format(value, field="segmentValues")


def validate_segment_value_type(values: Iterable[Any], segment: Segment) -> None:
    """
    Check every value has the scalar kind of the segment's registered values.

    Raises:
        InvalidValueError: The segment has no values to compare against
        TypeMismatchError: A value's kind differs
    """
    expected = segment.value_kind
    if expected is None:
        raise InvalidValueError(
            f"Cannot validate types for segment {segment.name} because it has no existing values.",
            field=segment.name,
        )

    for index, value in enumerate(values):
        actual = scalar_kind(value)
        if actual != expected:
            raise TypeMismatchError(
                f"Segment value type mismatch at index {index} for segment "
                f"{segment.name}: expected {expected} but got {actual}",
                field=segment.name,
                value=value,
            )


def _validate_description(description: Any) -> None:
    if not isinstance(description, str) or not description:
        raise InvalidShapeError(
            "segmentDescription must be a non-empty string",
            field="segmentDescription",
            value=description,
        )


# ============================================================
# REGISTRY
# ============================================================

class SegmentRegistry:
    """
    Ordered collection of segments.

    Passed explicitly to the combination normalizer; nothing reads it from
    global state.
    """

    def __init__(self, segments: Iterable[Segment] = ()):
        self._segments: dict[str, Segment] = {}
        for segment in segments:
            self._segments[segment.name] = segment

    def __contains__(self, name: object) -> bool:
        return name in self._segments

    def names(self) -> list[str]:
        """Segment names in registry order."""
        return list(self._segments)

    def get(self, name: str) -> Segment:
        if not isinstance(name, str) or not name:
            raise InvalidShapeError(
                "segmentName must be a non-empty string",
                field="segmentName",
                value=name,
            )
        segment = self._segments.get(name)
        if segment is None:
            raise NotFoundError(
                f'Segment with name "{name}" does not exist.',
                field="segmentName",
                value=name,
            )
        return segment

    # ============================================================
    # MUTATIONS
    # ============================================================

    def create(self, name: str, description: str, values: list[Any]) -> Segment:
        """Register a new segment with values in caller order."""
        validate_segment_name(name)
        _validate_description(description)
        validate_segment_values(values)

        if name in self._segments:
            raise DuplicateSegmentError(
                f'Segment with name "{name}" already exists.',
                field="segmentName",
                value=name,
            )

        segment = Segment(name=name, description=description, values=list(values))
        self._segments[name] = segment
        return segment

    def update_description(self, name: str, description: str) -> Segment:
        """Change a segment's description; values are untouched."""
        _validate_description(description)
        segment = self.get(name)
        segment.description = description
        return segment

    def add_values(self, name: str, values: list[Any]) -> Segment:
        """
        Union new values into a segment.

        Existing values keep their position; new unique values are appended
        in caller order. Values already present are absorbed silently.
        """
        segment = self.get(name)

        if not isinstance(values, list):
            raise InvalidShapeError(
                "segmentValues must be a list",
                field="segmentValues",
                value=values,
            )
        if not values:
            raise InvalidValueError(
                "segmentValues must not be empty",
                field="segmentValues",
                value=values,
            )

        validate_segment_value_type(values, segment)
        validate_segment_values(values)

        for value in values:
            if value not in segment.values:
                segment.values.append(value)
        return segment

    # ============================================================
    # SERIALIZATION
    # ============================================================

    def to_document(self) -> dict[str, Any]:
        return {name: segment.to_dict() for name, segment in self._segments.items()}

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> SegmentRegistry:
        return cls(
            Segment(
                name=name,
                description=data.get("description", ""),
                values=list(data.get("values", [])),
            )
            for name, data in document.items()
        )
