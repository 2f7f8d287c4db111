"""curtain: Redis-backed feature gate with percentage rollouts and allow-lists."""

from __future__ import annotations

from curtain.core.feature import Feature
from curtain.core.gate import FeatureGate, get_feature_gate, is_open

__all__ = [
    "Feature",
    "FeatureGate",
    "get_feature_gate",
    "is_open",
]

__version__ = "0.1.0"
