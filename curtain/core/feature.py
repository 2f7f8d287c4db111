"""Feature view object and store key naming."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet

KEY_NAMESPACE = "feature"


def percentage_key(feature: str) -> str:
    """Key holding the rollout percentage, e.g. ``feature:checkout:percentage``."""
    return f"{KEY_NAMESPACE}:{feature}:percentage"


def members_key(feature: str) -> str:
    """Key holding the allow-listed user ids, e.g. ``feature:checkout:users``."""
    return f"{KEY_NAMESPACE}:{feature}:users"


@dataclass(frozen=True)
class Feature:
    """Read-only snapshot of a feature's configuration at query time.

    Built by ``FeatureGate.get_feature``; never cached or written back.
    """

    name: str
    percentage: int = 0
    members: FrozenSet[str] = field(default_factory=frozenset)

    def has_member(self, user: str) -> bool:
        return user in self.members

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "percentage": self.percentage,
            "members": sorted(self.members),
        }


__all__ = ["Feature", "KEY_NAMESPACE", "members_key", "percentage_key"]
