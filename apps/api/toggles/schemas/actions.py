"""Action envelope schemas."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ActionRequest(BaseModel):
    """
    Request envelope for ``POST /api/actions``.

    Only ``action`` is typed here. Payload fields stay loosely typed so the
    service layer reports malformed input with its own error codes (and the
    offending field) instead of a generic 422.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str
    platform: Any = None
    feature: Any = None
    feature_value: Any = Field(default=None, alias="featureValue")
    feature_group: Any = Field(default=None, alias="featureGroup")
    segment_name: Any = Field(default=None, alias="segmentName")
    segment_description: Any = Field(default=None, alias="segmentDescription")
    segment_values: Any = Field(default=None, alias="segmentValues")
    segment_combination: Any = Field(default=None, alias="segmentCombination")
    rollout: Any = None
    new_segment_order: Any = Field(default=None, alias="newSegmentOrder")
    new_platforms: Any = Field(default=None, alias="newPlatforms")

    def has(self, field_name: str) -> bool:
        """True if the client sent the field, even as null."""
        return field_name in self.model_fields_set


class ActionResponse(BaseModel):
    """Response for a completed action."""

    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    message: str
    timestamp: str
    version: str
    environment: Optional[str] = None
