"""Runtime settings for the process-wide feature gate."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50
    # Seconds; applied to connect and read on pooled connections
    REDIS_SOCKET_TIMEOUT: float = 2.0

    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True

    model_config = {
        "env_prefix": "CURTAIN_",
        "env_file": ".env",
        "case_sensitive": False,
    }


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is None:
        _settings_cache = Settings()
    return _settings_cache


def reset_settings() -> None:
    global _settings_cache
    _settings_cache = None
