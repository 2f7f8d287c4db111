import os
import pytest


# List of environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "CURTAIN_REDIS_URL",
    "CURTAIN_REDIS_MAX_CONNECTIONS",
    "CURTAIN_REDIS_SOCKET_TIMEOUT",
    "CURTAIN_LOG_LEVEL",
    "CURTAIN_METRICS_ENABLED",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v


@pytest.fixture(autouse=True)
def global_gate_isolation():
    """Drop the cached settings and global gate around each test."""
    from curtain.core.config import reset_settings
    from curtain.core.gate import reset_feature_gate

    reset_settings()
    reset_feature_gate()
    try:
        yield
    finally:
        reset_feature_gate()
        reset_settings()


class SequenceRandom:
    """randint stub returning queued values and recording each call."""

    def __init__(self, *values: int):
        self.values = list(values)
        self.calls = []

    def randint(self, a: int, b: int) -> int:
        self.calls.append((a, b))
        return self.values.pop(0)


@pytest.fixture
def store():
    from curtain.core.store import InMemoryFeatureStore

    return InMemoryFeatureStore()


@pytest.fixture
def sequence_random():
    return SequenceRandom
