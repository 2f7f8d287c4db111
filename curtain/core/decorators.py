"""Feature gate decorators."""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from curtain.core.gate import FeatureGate, get_feature_gate

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def feature_gate(
    feature: str,
    fallback: Optional[Callable[..., Any]] = None,
    user_extractor: Optional[Callable[..., Optional[str]]] = None,
    gate: Optional[FeatureGate] = None,
) -> Callable[[F], F]:
    """Decorator to run a function only while a feature is open.

    Args:
        feature: Feature name
        fallback: Function called with the same arguments if the feature is closed
        user_extractor: Function returning the user id from the call arguments
        gate: Gate to evaluate against; the global gate when omitted

    Example:
        @feature_gate("new_checkout", fallback=old_checkout)
        def new_checkout(cart):
            return checkout_v2(cart)

        @feature_gate("beta_reports", user_extractor=lambda request: request.user_id)
        def beta_reports(request):
            return render_reports(request)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            user = None
            if user_extractor:
                try:
                    user = user_extractor(*args, **kwargs)
                except Exception as e:
                    logger.warning(f"Failed to extract user for feature '{feature}': {e}")

            evaluator = gate or get_feature_gate()
            if evaluator.is_open(feature, user):
                return func(*args, **kwargs)
            elif fallback:
                return fallback(*args, **kwargs)
            else:
                logger.debug(f"Feature '{feature}' is closed, skipping {func.__name__}")
                return None

        return wrapper  # type: ignore

    return decorator
