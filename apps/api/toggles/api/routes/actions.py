"""
Action dispatch route.

One endpoint, one action name per operation:

    POST /api/actions
    Authorization: Bearer <token>
    {"action": "change-feature-value", "platform": "web",
     "feature": {"id": "new_cart"}, "featureValue": true,
     "segmentCombination": {"country": ["IN"]}}

``health-check`` is answered without a credential; every other action
verifies the bearer token first.
"""

from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse

from toggles.api.dependencies.auth import Auth
from toggles.core.config import settings
from toggles.core.errors import InvalidShapeError
from toggles.core.targeting import Action, ToggleService
from toggles.core.targeting.dependencies import Toggles
from toggles.schemas.actions import ActionRequest, ActionResponse, HealthResponse
from toggles.services.auth import Identity
from toggles.utils.timezone import to_iso8601, utc_now

router = APIRouter()

Handler = Callable[[ToggleService, ActionRequest, Identity], Awaitable[Any]]


def health_payload() -> HealthResponse:
    return HealthResponse(
        message="Feature Toggle API is healthy",
        timestamp=to_iso8601(utc_now()),
        version=settings.app_version,
        environment=settings.environment,
    )


def _object_id(payload: Any, field: str) -> Any:
    if not isinstance(payload, dict) or "id" not in payload:
        raise InvalidShapeError(f"{field}.id is required", field=f"{field}.id", value=payload)
    return payload["id"]


# ============================================================
# HANDLERS
# ============================================================

async def _add_platform(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    await service.add_platform(req.new_platforms)


async def _create_segment(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    await service.create_segment(req.segment_name, req.segment_description, req.segment_values)


async def _update_segment(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    await service.update_segment(req.segment_name, req.segment_description)


async def _add_segment_values(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    await service.add_segment_values(req.segment_name, req.segment_values)


async def _create_group(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    await service.create_group(req.platform, req.feature_group, user, req.action)


async def _delete_group(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    group_id = _object_id(req.feature_group, "featureGroup")
    await service.delete_group(req.platform, group_id, user, req.action)


async def _create_feature(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    await service.create_feature(req.platform, req.feature, user, req.action)


async def _delete_feature(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    feature_id = _object_id(req.feature, "feature")
    await service.delete_feature(req.platform, feature_id, user, req.action)


async def _change_feature_value(service: ToggleService, req: ActionRequest, user: Identity) -> None:
    feature_id = _object_id(req.feature, "feature")
    if not req.has("feature_value"):
        raise InvalidShapeError("featureValue is required", field="featureValue")
    await service.change_feature_value(
        req.platform,
        req.segment_combination,
        feature_id,
        req.feature_value,
        req.rollout,
        user,
        req.action,
    )


async def _delete_segment_for_feature(
    service: ToggleService, req: ActionRequest, user: Identity
) -> None:
    feature_id = _object_id(req.feature, "feature")
    await service.delete_segment_for_feature(
        req.platform, req.segment_combination, feature_id, user, req.action
    )


async def _reorder_feature_segments(
    service: ToggleService, req: ActionRequest, user: Identity
) -> None:
    feature_id = _object_id(req.feature, "feature")
    await service.reorder_feature_segments(
        req.platform, feature_id, req.new_segment_order, user, req.action
    )


HANDLERS: dict[str, Handler] = {
    Action.ADD_PLATFORM: _add_platform,
    Action.CREATE_SEGMENT: _create_segment,
    Action.UPDATE_SEGMENT: _update_segment,
    Action.ADD_SEGMENT_VALUES: _add_segment_values,
    Action.CREATE_GROUP: _create_group,
    Action.DELETE_GROUP: _delete_group,
    Action.CREATE_FEATURE: _create_feature,
    Action.DELETE_FEATURE: _delete_feature,
    Action.CHANGE_FEATURE_VALUE: _change_feature_value,
    Action.DELETE_SEGMENT_FOR_FEATURE: _delete_segment_for_feature,
    Action.REORDER_FEATURE_SEGMENTS: _reorder_feature_segments,
}


# ============================================================
# ENDPOINT
# ============================================================

@router.post("", response_model=None)
async def dispatch_action(
    request: ActionRequest,
    service: Toggles,
    auth: Auth,
    authorization: str | None = Header(default=None),
) -> ActionResponse | HealthResponse | JSONResponse:
    """
    Run one configuration action.

    Errors raised by the service are turned into typed JSON responses by
    the application's exception handler.
    """
    if request.action == Action.HEALTH_CHECK:
        return health_payload()

    user = auth.verify(authorization)

    handler = HANDLERS.get(request.action)
    if handler is None:
        return JSONResponse(status_code=400, content={"message": "Invalid action"})

    await handler(service, request, user)
    return ActionResponse(message="Operation successful")
