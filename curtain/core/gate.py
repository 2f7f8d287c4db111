"""Feature Gate Implementation.

Evaluates features stored in Redis under two keys per feature:
- ``feature:<name>:percentage``: rollout percentage, 0 to 100
- ``feature:<name>:users``: set of allow-listed user ids

A feature is open for a user on the allow-list. Otherwise each call draws a
random number R in [1, 100] and the feature is open when R <= percentage, so
subsequent calls may give different answers.

Store failures never reach the caller: every public method logs them and
returns its safe default (closed, no-op, or None).
"""

from __future__ import annotations

import logging
import random
import re
import threading
from typing import Any, Callable, Optional

import redis

from curtain.core.config import get_settings
from curtain.core.errors import ErrorCode
from curtain.core.feature import Feature, members_key, percentage_key
from curtain.core.result import LookupResult, LookupStatus
from curtain.core.store import FeatureStore, RedisFeatureStore, StoreError
from curtain.utils.metrics import record_evaluation, record_store_error

logger = logging.getLogger(__name__)

MIN_DRAW = 1
MAX_DRAW = 100

# Optional sign followed by ASCII digits only; no whitespace or underscores
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class FeatureGate:
    """Feature gate over a shared key-value store."""

    def __init__(
        self,
        store: FeatureStore,
        rng: Optional[Any] = None,
        metrics_enabled: Optional[bool] = None,
    ):
        """Initialize feature gate.

        Args:
            store: Backing store (Redis in production)
            rng: Object exposing ``randint(a, b)``; defaults to a
                ``random.SystemRandom`` instance
            metrics_enabled: Record Prometheus counters; read from settings
                when omitted, so invalid settings fail here and not per call
        """
        self.store = store
        self._rng = rng if rng is not None else random.SystemRandom()
        if metrics_enabled is None:
            metrics_enabled = get_settings().METRICS_ENABLED
        self._metrics_enabled = metrics_enabled

    @classmethod
    def from_url(cls, url: str, rng: Optional[Any] = None, **pool_kwargs: Any) -> "FeatureGate":
        """Create a gate from a Redis URI, e.g. ``redis://:p4ssw0rd@10.0.1.1:6380/15``."""
        return cls(RedisFeatureStore.from_url(url, **pool_kwargs), rng=rng)

    @classmethod
    def from_pool(cls, pool: redis.ConnectionPool, rng: Optional[Any] = None) -> "FeatureGate":
        """Create a gate borrowing connections from a pre-configured pool."""
        return cls(RedisFeatureStore(pool), rng=rng)

    def is_open(self, feature: str, user: Optional[str] = None) -> bool:
        """Check if a feature is open.

        Users on the feature's allow-list always get True, even with a
        percentage of 0, and no random number is drawn for them. Everyone else
        goes through the percentage rollout.

        Args:
            feature: Feature name
            user: Unique user identifier (email, login, sequential id...)

        Returns:
            True if open; False on any store error
        """
        if user is not None:
            membership = self._is_member(feature, user)
            if membership.status is LookupStatus.FAILED:
                return self._closed_on_error("is_open", membership, feature, user)
            if membership.value:
                self._record_evaluation("is_open", "member")
                return True

        rollout = self._rollout(feature)
        if rollout.status is LookupStatus.FAILED:
            return self._closed_on_error("is_open", rollout, feature, user)

        self._record_evaluation("is_open", "open" if rollout.value else "closed")
        return rollout.value

    def open_feature_for_user(self, feature: str, user: str) -> None:
        """Add a user to the feature's allow-list.

        Adding an existing member changes nothing. Failures are logged and
        otherwise ignored.
        """
        result = self._call_store(self.store.sadd, members_key(feature), user)
        if result.status is LookupStatus.FAILED:
            self._log_failure("open_feature_for_user", result, feature, user)
            return
        self._record_evaluation("open_feature_for_user", "added")

    def get_feature(self, name: str) -> Optional[Feature]:
        """Get a snapshot of the feature's percentage and members.

        Returns:
            The feature view, or None if the store could not be read
        """
        percentage = self._percentage(name)
        if percentage.status is LookupStatus.FAILED:
            self._log_failure("get_feature", percentage, name)
            return None

        members = self._call_store(self.store.smembers, members_key(name))
        if members.status is LookupStatus.FAILED:
            self._log_failure("get_feature", members, name)
            return None

        self._record_evaluation("get_feature", "found")
        return Feature(
            name=name,
            percentage=percentage.value,
            members=frozenset(members.value or ()),
        )

    def _call_store(self, command: Callable[..., Any], *args: Any) -> LookupResult:
        try:
            value = command(*args)
        except StoreError as e:
            return LookupResult.failed(e, ErrorCode.STORE_UNAVAILABLE)
        if value is None:
            return LookupResult.absent()
        return LookupResult.found(value)

    def _is_member(self, feature: str, user: str) -> LookupResult:
        result = self._call_store(self.store.sismember, members_key(feature), user)
        if result.status is LookupStatus.ABSENT:
            return LookupResult.found(False)
        return result

    def _percentage(self, feature: str) -> LookupResult:
        result = self._call_store(self.store.get, percentage_key(feature))
        if result.status is LookupStatus.FAILED:
            return result
        if result.status is LookupStatus.ABSENT:
            return LookupResult.found(0)

        raw = result.value
        if not isinstance(raw, str) or not _INTEGER_PATTERN.fullmatch(raw):
            error = ValueError(f"Invalid percentage {raw!r} for feature '{feature}'")
            return LookupResult.failed(error, ErrorCode.MALFORMED_PERCENTAGE)
        percentage = int(raw)

        if not 0 <= percentage <= 100:
            logger.warning(
                f"Percentage {percentage} for feature '{feature}' is outside 0-100",
                extra={"feature": feature, "percentage": percentage},
            )
        return LookupResult.found(percentage)

    def _rollout(self, feature: str) -> LookupResult:
        percentage = self._percentage(feature)
        if percentage.status is LookupStatus.FAILED:
            return percentage
        return LookupResult.found(self._draw() <= percentage.value)

    def _draw(self) -> int:
        return self._rng.randint(MIN_DRAW, MAX_DRAW)

    def _record_evaluation(self, operation: str, result: str) -> None:
        if self._metrics_enabled:
            record_evaluation(operation, result)

    def _closed_on_error(
        self,
        operation: str,
        result: LookupResult,
        feature: str,
        user: Optional[str] = None,
    ) -> bool:
        self._log_failure(operation, result, feature, user)
        self._record_evaluation(operation, "default")
        return False

    def _log_failure(
        self,
        operation: str,
        result: LookupResult,
        feature: str,
        user: Optional[str] = None,
    ) -> None:
        error_code = result.error_code or ErrorCode.STORE_UNAVAILABLE
        target = f"feature={feature}" if user is None else f"user={user},feature={feature}"
        logger.error(
            f"{operation} failed with {error_code.value}, returning safe default for [{target}]",
            extra={
                "feature": feature,
                "user": user,
                "operation": operation,
                "error_code": error_code.value,
            },
            exc_info=result.error,
        )
        if self._metrics_enabled:
            record_store_error(operation, error_code.value)


# Global gate instance
_gate: Optional[FeatureGate] = None
_gate_lock = threading.Lock()
# True when the global gate created its own pool
_owns_pool = False


def get_feature_gate() -> FeatureGate:
    """Get global feature gate built from settings."""
    global _gate, _owns_pool
    if _gate is None:
        with _gate_lock:
            if _gate is None:
                settings = get_settings()
                _gate = FeatureGate.from_url(
                    settings.REDIS_URL,
                    max_connections=settings.REDIS_MAX_CONNECTIONS,
                    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
                    socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
                )
                _owns_pool = True
    return _gate


def set_feature_gate(gate: Optional[FeatureGate]) -> None:
    """Install a host-built gate as the global one."""
    global _gate, _owns_pool
    with _gate_lock:
        _gate = gate
        _owns_pool = False


def reset_feature_gate() -> None:
    """Drop the global gate, disconnecting its pool if the gate created it."""
    global _gate, _owns_pool
    with _gate_lock:
        gate, _gate = _gate, None
        owned, _owns_pool = _owns_pool, False
    if owned and gate is not None and isinstance(gate.store, RedisFeatureStore):
        gate.store.pool.disconnect()


def is_open(feature: str, user: Optional[str] = None) -> bool:
    """Check if a feature is open on the global gate (convenience function)."""
    return get_feature_gate().is_open(feature, user)
