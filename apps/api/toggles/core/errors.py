"""
Typed failures for toggle configuration operations.

Every failure carries a machine-readable code plus the offending field and
value so an operator can see exactly what was rejected. The HTTP shell maps
``http_status`` onto the response; the core never retries.
"""

from __future__ import annotations

from typing import Any


class ToggleError(Exception):
    """Base exception for all toggle configuration errors."""

    code: str = "TOGGLE_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str = "",
        *,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.message = message or self.code
        self.field = field
        self.value = value
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "value": self.value,
        }


# ── Lookup errors ──────────────────────────────────────────────────────────


class NotFoundError(ToggleError):
    code = "NOT_FOUND"
    http_status = 404


class DuplicateSegmentError(ToggleError):
    code = "DUPLICATE_SEGMENT"
    http_status = 409


class DuplicateFeatureError(ToggleError):
    code = "DUPLICATE_FEATURE"
    http_status = 409


class DuplicateGroupError(ToggleError):
    code = "DUPLICATE_GROUP"
    http_status = 409


class DuplicatePlatformError(ToggleError):
    code = "DUPLICATE_PLATFORM"
    http_status = 409


# ── Input errors ───────────────────────────────────────────────────────────


class InvalidValueError(ToggleError):
    code = "INVALID_VALUE"


class InvalidShapeError(ToggleError):
    code = "INVALID_SHAPE"


class InvalidRolloutError(ToggleError):
    code = "INVALID_ROLLOUT"


class TypeMismatchError(ToggleError):
    code = "TYPE_MISMATCH"


# ── Combination errors ─────────────────────────────────────────────────────


class UnknownSegmentKeyError(ToggleError):
    code = "UNKNOWN_SEGMENT_KEY"


class MixedNegationError(ToggleError):
    code = "MIXED_NEGATION"


class DuplicateValueError(ToggleError):
    code = "DUPLICATE_VALUE"


# ── Reorder errors ─────────────────────────────────────────────────────────


class LengthMismatchError(ToggleError):
    code = "LENGTH_MISMATCH"


class IndexOutOfRangeError(ToggleError):
    code = "INDEX_OUT_OF_RANGE"


# ── Security errors ────────────────────────────────────────────────────────


class UnauthenticatedError(ToggleError):
    code = "UNAUTHENTICATED"
    http_status = 401
