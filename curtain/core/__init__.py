"""Feature gate core.

Provides feature evaluation with:
- Percentage rollouts drawn per call
- User allow-lists stored as Redis sets
- Safe defaults when the store is unavailable
"""

from curtain.core.feature import Feature
from curtain.core.gate import (
    FeatureGate,
    get_feature_gate,
    is_open,
    reset_feature_gate,
    set_feature_gate,
)
from curtain.core.store import (
    FeatureStore,
    InMemoryFeatureStore,
    RedisFeatureStore,
    StoreError,
)

__all__ = [
    "Feature",
    "FeatureGate",
    "FeatureStore",
    "InMemoryFeatureStore",
    "RedisFeatureStore",
    "StoreError",
    "get_feature_gate",
    "is_open",
    "reset_feature_gate",
    "set_feature_gate",
]
