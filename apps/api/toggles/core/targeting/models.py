"""
Targeting data model.

Platform -> Groups -> Features -> Targeting Rules. Each class converts to
and from the JSON shape stored in the platform document, so the stored
layout stays stable:

    {
        "groups": [
            {
                "id": "checkout",
                "description": "...",
                "features": [
                    {
                        "id": "new_cart",
                        "description": "...",
                        "type": "boolean",
                        "value": false,
                        "rollout": null,
                        "segments": [
                            {"combo": {"country": ["IN"]}, "value": true, "rollout": null}
                        ]
                    }
                ]
            }
        ]
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


VALID_TYPES = ("boolean", "number", "string")

# Canonical combination: segment name -> sorted tokens, keys in registry order
Combination = dict[str, list[str]]


def scalar_kind(value: Any) -> str:
    """
    Name the scalar kind of a JSON value.

    bool is checked before int because bool subclasses int.
    """
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return type(value).__name__


@dataclass
class Rollout:
    """
    Percentage split between a primary and a secondary value.

    Stored as metadata only; nothing evaluates it.
    """
    percentage: float
    secondary_value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"percentage": self.percentage, "secondaryValue": self.secondary_value}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Rollout | None:
        if data is None:
            return None
        return cls(percentage=data["percentage"], secondary_value=data["secondaryValue"])


@dataclass
class TargetingRule:
    """
    Override of a feature's value for one canonical combination.

    Attributes:
        combo: Canonical combination this rule applies to
        value: Override value, of the feature's type
        rollout: Optional rollout metadata for this rule
    """
    combo: Combination
    value: Any
    rollout: Rollout | None = None

    def matches(self, combo: Combination) -> bool:
        """Structural equality against another canonical combination."""
        return self.combo == combo

    def to_dict(self) -> dict[str, Any]:
        return {
            "combo": {key: list(tokens) for key, tokens in self.combo.items()},
            "value": self.value,
            "rollout": self.rollout.to_dict() if self.rollout else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TargetingRule:
        return cls(
            combo={key: list(tokens) for key, tokens in data["combo"].items()},
            value=data["value"],
            rollout=Rollout.from_dict(data.get("rollout")),
        )


@dataclass
class Feature:
    """
    A toggle value with its ordered targeting rules.

    Attributes:
        id: Unique within the platform
        description: What this feature controls
        type: One of VALID_TYPES
        value: Base value when no rule applies
        rollout: Optional rollout for the base value
        segments: Targeting rules, highest priority first
    """
    id: str
    description: str
    type: str
    value: Any
    rollout: Rollout | None = None
    segments: list[TargetingRule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "type": self.type,
            "value": self.value,
            "segments": [rule.to_dict() for rule in self.segments],
            "rollout": self.rollout.to_dict() if self.rollout else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Feature:
        return cls(
            id=data["id"],
            description=data.get("description", ""),
            type=data["type"],
            value=data["value"],
            rollout=Rollout.from_dict(data.get("rollout")),
            segments=[TargetingRule.from_dict(s) for s in data.get("segments", [])],
        )


@dataclass
class Group:
    """A named collection of features within a platform."""
    id: str
    description: str
    features: list[Feature] = field(default_factory=list)

    def find_feature(self, feature_id: str) -> Feature | None:
        for feature in self.features:
            if feature.id == feature_id:
                return feature
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "features": [f.to_dict() for f in self.features],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Group:
        return cls(
            id=data["id"],
            description=data.get("description", ""),
            features=[Feature.from_dict(f) for f in data.get("features", [])],
        )


@dataclass
class PlatformConfig:
    """Whole configuration document of one platform."""
    groups: list[Group] = field(default_factory=list)

    def find_group(self, group_id: str) -> Group | None:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def find_feature(self, feature_id: str) -> tuple[Group, Feature] | None:
        """Locate a feature and its owning group."""
        for group in self.groups:
            feature = group.find_feature(feature_id)
            if feature is not None:
                return group, feature
        return None

    def to_dict(self) -> dict[str, Any]:
        return {"groups": [g.to_dict() for g in self.groups]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlatformConfig:
        return cls(groups=[Group.from_dict(g) for g in data.get("groups", [])])
