"""
Segment targeting for feature toggles.

Features hold a base value plus an ordered list of targeting rules, each
keyed by a canonical segment combination:

Level 1 - Register segments:
    registry = SegmentRegistry()
    registry.create("country", "Country code", ["IN", "US", "MX"])

Level 2 - Canonicalize a combination:
    combo = normalize_combination({"country": ["US", "IN"]}, registry)
    # {"country": ["IN", "US"]}

Level 3 - Target a feature:
    set_or_insert(feature, combo, True)
    reorder_rules(feature, [1, 0])
    delete_rule(feature, combo)

Level 4 - Persisted operations (load, validate, write, audit):
    service = ToggleService(store)
    await service.change_feature_value("web", {"country": ["IN"]}, "new_cart", True, None, user)
"""

from .models import (
    VALID_TYPES,
    Combination,
    Feature,
    Group,
    PlatformConfig,
    Rollout,
    TargetingRule,
    scalar_kind,
)
from .segments import (
    Segment,
    SegmentRegistry,
    validate_segment_value_type,
    validate_segment_values,
)
from .normalizer import is_untargeted, normalize_combination
from .rules import (
    delete_rule,
    find_rule_index,
    reorder_rules,
    set_or_insert,
    validate_rollout,
    validate_value_type,
)
from .service import Action, ToggleService

__all__ = [
    # Models
    "VALID_TYPES",
    "Combination",
    "Feature",
    "Group",
    "PlatformConfig",
    "Rollout",
    "TargetingRule",
    "scalar_kind",
    # Segments
    "Segment",
    "SegmentRegistry",
    "validate_segment_value_type",
    "validate_segment_values",
    # Normalizer
    "is_untargeted",
    "normalize_combination",
    # Rules
    "delete_rule",
    "find_rule_index",
    "reorder_rules",
    "set_or_insert",
    "validate_rollout",
    "validate_value_type",
    # Service
    "Action",
    "ToggleService",
]
