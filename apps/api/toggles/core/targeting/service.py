"""
Toggle Service - configuration mutations.

Every operation follows the same shape:

1. Validate the platform (platform-scoped operations)
2. Load the whole document(s) it touches
3. Validate and mutate in memory
4. Write the document back once
5. Append an audit entry (group and feature operations)

A failure before step 4 leaves storage untouched. There is no version
check at step 4: concurrent writers to one platform race, last write wins.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from toggles.core.errors import (
    DuplicateFeatureError,
    DuplicateGroupError,
    DuplicatePlatformError,
    InvalidShapeError,
    InvalidValueError,
    NotFoundError,
)
from toggles.core.interfaces.storage import DocumentStore
from toggles.services.audit import AuditLogService
from toggles.services.auth import Identity
from toggles.utils.storage import (
    PLATFORMS_FILE,
    SEGMENTS_FILE,
    load_document,
    platform_key,
    save_document,
)

from .models import Combination, Feature, Group, PlatformConfig
from .normalizer import normalize_combination
from .rules import delete_rule, reorder_rules, set_or_insert, validate_rollout, validate_value_type
from .segments import FORBIDDEN_CHARACTERS, MAX_VALUE_LENGTH, Segment, SegmentRegistry

logger = structlog.get_logger()


class Action:
    """Action names accepted by the dispatch shell."""

    HEALTH_CHECK = "health-check"
    ADD_PLATFORM = "add-platform"
    CREATE_SEGMENT = "create-segment"
    UPDATE_SEGMENT = "update-segment"
    ADD_SEGMENT_VALUES = "add-segment-values"
    CREATE_GROUP = "create-group"
    DELETE_GROUP = "delete-group"
    CREATE_FEATURE = "create-feature"
    DELETE_FEATURE = "delete-feature"
    CHANGE_FEATURE_VALUE = "change-feature-value"
    DELETE_SEGMENT_FOR_FEATURE = "delete-segment-for-feature"
    REORDER_FEATURE_SEGMENTS = "reorder-feature-segments"


def validate_platform_name(name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise InvalidShapeError(
            "Platform name must be a non-empty string",
            field="newPlatforms",
            value=name,
        )
    validate_path_part(name, field="newPlatforms")
    for char in FORBIDDEN_CHARACTERS:
        if char in name:
            raise InvalidValueError(
                f'Platform name "{name}" cannot contain ({char})',
                field="newPlatforms",
                value=name,
            )
    if len(name) > MAX_VALUE_LENGTH:
        raise InvalidValueError(
            f'Platform name "{name}" is too long',
            field="newPlatforms",
            value=name,
        )


def validate_path_part(value: str, *, field: str) -> None:
    """Platform names and group/feature ids become document key segments."""
    if "/" in value or value in (".", ".."):
        raise InvalidValueError(
            f'"{value}" cannot contain "/" or be a relative path part',
            field=field,
            value=value,
        )


def _require_string(payload: Mapping[str, Any], key: str, field: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidShapeError(
            f"{field}.{key} is required and must be a non-empty string",
            field=f"{field}.{key}",
            value=value,
        )
    return value


def _require_mapping(payload: Any, field: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise InvalidShapeError(f"{field} must be an object", field=field, value=payload)
    return payload


class ToggleService:
    """
    Feature toggle configuration service.

    Owns no state beyond its collaborators; every call re-reads storage.
    """

    def __init__(
        self,
        store: DocumentStore,
        audit: AuditLogService | None = None,
    ):
        self.store = store
        self.audit = audit or AuditLogService(store)

    # ============================================================
    # LOADING
    # ============================================================

    async def list_platforms(self) -> list[str]:
        return await load_document(self.store, PLATFORMS_FILE)

    async def load_registry(self) -> SegmentRegistry:
        return SegmentRegistry.from_document(await load_document(self.store, SEGMENTS_FILE))

    async def _save_registry(self, registry: SegmentRegistry) -> None:
        await save_document(self.store, SEGMENTS_FILE, registry.to_document())

    async def validate_platform(self, platform: Any) -> None:
        """Raise NotFoundError unless platform is registered."""
        if not isinstance(platform, str) or not platform:
            raise InvalidShapeError("platform is required", field="platform", value=platform)

        platforms = await self.list_platforms()
        if platform not in platforms:
            raise NotFoundError(
                f"Invalid platform: {platform}. Valid platforms are: {', '.join(platforms)}",
                field="platform",
                value=platform,
            )

    async def load_platform(self, platform: str) -> PlatformConfig:
        await self.validate_platform(platform)
        return PlatformConfig.from_dict(await load_document(self.store, platform_key(platform)))

    async def _save_platform(self, platform: str, config: PlatformConfig) -> None:
        await save_document(self.store, platform_key(platform), config.to_dict())

    async def normalize(self, raw_combination: Any) -> Combination:
        """Canonicalize a raw combination against the current registry."""
        return normalize_combination(raw_combination, await self.load_registry())

    def _resolve_feature(
        self,
        config: PlatformConfig,
        platform: str,
        feature_id: Any,
    ) -> tuple[Group, Feature]:
        found = config.find_feature(feature_id)
        if found is None:
            raise NotFoundError(
                f"Feature with id {feature_id} does not exist in platform {platform}.",
                field="feature.id",
                value=feature_id,
            )
        return found

    # ============================================================
    # PLATFORMS
    # ============================================================

    async def add_platform(self, new_platforms: Any) -> list[str]:
        """Register one or more platform names."""
        if not isinstance(new_platforms, list):
            raise InvalidShapeError(
                "newPlatforms is required and must be an array.",
                field="newPlatforms",
                value=new_platforms,
            )
        if not new_platforms:
            raise InvalidValueError(
                "At least one platform name is required.",
                field="newPlatforms",
                value=new_platforms,
            )

        for name in new_platforms:
            validate_platform_name(name)

        platforms = await self.list_platforms()
        seen: set[str] = set()
        for name in new_platforms:
            if name in platforms or name in seen:
                raise DuplicatePlatformError(
                    f'Platform "{name}" already exists.',
                    field="newPlatforms",
                    value=name,
                )
            seen.add(name)

        platforms.extend(new_platforms)
        await save_document(self.store, PLATFORMS_FILE, platforms)

        logger.info("Platforms added", platforms=new_platforms)
        return platforms

    # ============================================================
    # SEGMENTS
    # ============================================================

    async def create_segment(self, name: Any, description: Any, values: Any) -> Segment:
        registry = await self.load_registry()
        segment = registry.create(name, description, values)
        await self._save_registry(registry)

        logger.info("Segment created", segment=name, values=len(segment.values))
        return segment

    async def update_segment(self, name: Any, description: Any) -> Segment:
        registry = await self.load_registry()
        segment = registry.update_description(name, description)
        await self._save_registry(registry)

        logger.info("Segment updated", segment=name)
        return segment

    async def add_segment_values(self, name: Any, values: Any) -> Segment:
        registry = await self.load_registry()
        segment = registry.add_values(name, values)
        await self._save_registry(registry)

        logger.info("Segment values added", segment=name, values=len(segment.values))
        return segment

    # ============================================================
    # GROUPS
    # ============================================================

    async def create_group(
        self,
        platform: str,
        group: Any,
        user: Identity,
        action: str = Action.CREATE_GROUP,
    ) -> Group:
        config = await self.load_platform(platform)

        payload = _require_mapping(group, "featureGroup")
        group_id = _require_string(payload, "id", "featureGroup")
        validate_path_part(group_id, field="featureGroup.id")
        description = _require_string(payload, "description", "featureGroup")

        if "features" in payload:
            raise InvalidShapeError(
                "Features cannot be provided during group creation.",
                field="featureGroup.features",
                value=payload["features"],
            )

        if config.find_group(group_id) is not None:
            raise DuplicateGroupError(
                f"Group with id {group_id} already exists in platform {platform}.",
                field="featureGroup.id",
                value=group_id,
            )

        new_group = Group(id=group_id, description=description)
        config.groups.append(new_group)
        await self._save_platform(platform, config)

        await self.audit.log_group_action(platform, group_id, user.user_email, action)
        logger.info("Group created", platform=platform, group_id=group_id)
        return new_group

    async def delete_group(
        self,
        platform: str,
        group_id: Any,
        user: Identity,
        action: str = Action.DELETE_GROUP,
    ) -> None:
        config = await self.load_platform(platform)

        group = config.find_group(group_id)
        if group is None:
            raise NotFoundError(
                f"Group with id {group_id} does not exist in platform {platform}.",
                field="featureGroup.id",
                value=group_id,
            )

        config.groups.remove(group)
        await self._save_platform(platform, config)

        await self.audit.log_group_action(platform, group.id, user.user_email, action)
        logger.info("Group deleted", platform=platform, group_id=group.id)

    # ============================================================
    # FEATURES
    # ============================================================

    async def create_feature(
        self,
        platform: str,
        feature: Any,
        user: Identity,
        action: str = Action.CREATE_FEATURE,
    ) -> Feature:
        config = await self.load_platform(platform)

        payload = _require_mapping(feature, "feature")
        feature_id = _require_string(payload, "id", "feature")
        validate_path_part(feature_id, field="feature.id")
        group_id = _require_string(payload, "groupId", "feature")
        description = payload.get("description")
        if not isinstance(description, str):
            raise InvalidShapeError(
                "feature.description is required and must be a string",
                field="feature.description",
                value=description,
            )
        if "value" not in payload:
            raise InvalidShapeError("feature.value is required", field="feature.value")

        feature_type = payload.get("type")
        validate_value_type(feature_type, payload["value"], field="feature.value")
        rollout = validate_rollout(feature_type, payload.get("rollout"))

        if "segments" in payload:
            raise InvalidShapeError(
                "Segments cannot be provided during feature creation.",
                field="feature.segments",
                value=payload["segments"],
            )

        if config.find_feature(feature_id) is not None:
            raise DuplicateFeatureError(
                f"Feature with id {feature_id} already exists in platform {platform}.",
                field="feature.id",
                value=feature_id,
            )

        group = config.find_group(group_id)
        if group is None:
            raise NotFoundError(
                f"Group with id {group_id} does not exist in platform {platform}.",
                field="feature.groupId",
                value=group_id,
            )

        new_feature = Feature(
            id=feature_id,
            description=description,
            type=feature_type,
            value=payload["value"],
            rollout=rollout,
        )
        group.features.append(new_feature)
        await self._save_platform(platform, config)

        await self.audit.log_feature_action(
            platform, group.id, feature_id, user.user_email, action
        )
        logger.info("Feature created", platform=platform, group_id=group.id, feature_id=feature_id)
        return new_feature

    async def delete_feature(
        self,
        platform: str,
        feature_id: Any,
        user: Identity,
        action: str = Action.DELETE_FEATURE,
    ) -> None:
        config = await self.load_platform(platform)
        group, feature = self._resolve_feature(config, platform, feature_id)

        group.features.remove(feature)
        await self._save_platform(platform, config)

        await self.audit.log_feature_action(
            platform, group.id, feature.id, user.user_email, action
        )
        logger.info("Feature deleted", platform=platform, group_id=group.id, feature_id=feature.id)

    # ============================================================
    # TARGETING
    # ============================================================

    async def change_feature_value(
        self,
        platform: str,
        segment_combination: Any,
        feature_id: Any,
        feature_value: Any,
        rollout: Any,
        user: Identity,
        action: str = Action.CHANGE_FEATURE_VALUE,
    ) -> Feature:
        """Set a feature's base value, or the value for one combination."""
        if segment_combination is None:
            raise InvalidShapeError(
                "segmentCombination is required",
                field="segmentCombination",
            )

        config = await self.load_platform(platform)
        combo = await self.normalize(segment_combination)
        group, feature = self._resolve_feature(config, platform, feature_id)

        position = set_or_insert(feature, combo, feature_value, rollout)
        await self._save_platform(platform, config)

        await self.audit.log_feature_action(
            platform,
            group.id,
            feature.id,
            user.user_email,
            action,
            segment=combo or None,
            value=feature_value,
            rollout=rollout,
        )
        logger.info(
            "Feature value changed",
            platform=platform,
            feature_id=feature.id,
            combo=combo,
            position=position,
        )
        return feature

    async def delete_segment_for_feature(
        self,
        platform: str,
        segment_combination: Any,
        feature_id: Any,
        user: Identity,
        action: str = Action.DELETE_SEGMENT_FOR_FEATURE,
    ) -> None:
        """Remove the targeting rule for one combination."""
        if segment_combination is None:
            raise InvalidShapeError(
                "segmentCombination is required",
                field="segmentCombination",
            )

        config = await self.load_platform(platform)
        combo = await self.normalize(segment_combination)
        group, feature = self._resolve_feature(config, platform, feature_id)

        delete_rule(feature, combo)
        await self._save_platform(platform, config)

        await self.audit.log_feature_action(
            platform, group.id, feature.id, user.user_email, action, segment=combo
        )
        logger.info("Targeting rule deleted", platform=platform, feature_id=feature.id, combo=combo)

    async def reorder_feature_segments(
        self,
        platform: str,
        feature_id: Any,
        new_segment_order: Any,
        user: Identity,
        action: str = Action.REORDER_FEATURE_SEGMENTS,
    ) -> Feature:
        """Apply an explicit permutation to a feature's targeting rules."""
        config = await self.load_platform(platform)
        group, feature = self._resolve_feature(config, platform, feature_id)

        reorder_rules(feature, new_segment_order)
        await self._save_platform(platform, config)

        await self.audit.log_feature_action(
            platform, group.id, feature.id, user.user_email, action, order=new_segment_order
        )
        logger.info("Targeting rules reordered", platform=platform, feature_id=feature.id)
        return feature
