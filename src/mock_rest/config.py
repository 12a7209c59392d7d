"""Server configuration read from MOCK_REST_* environment variables."""

import os
from dataclasses import dataclass, replace


class ConfigError(ValueError):
    """An environment variable holds a value that cannot be used."""


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _prefix(value: str) -> str:
    value = "/" + value.strip().strip("/")
    return value if value != "/" else ""


@dataclass(frozen=True)
class ServerConfig:
    """Server settings, read from MOCK_REST_* environment variables."""

    host: str = "127.0.0.1"
    port: int = 9002
    mock_prefix: str = "/api/mock"
    admin_prefix: str = "/api/admin"
    model: str | None = None
    log_level: str = "info"

    @staticmethod
    def from_env() -> "ServerConfig":
        defaults = ServerConfig()
        return ServerConfig(
            host=(os.environ.get("MOCK_REST_HOST") or defaults.host).strip(),
            port=_env_int("MOCK_REST_PORT", defaults.port),
            mock_prefix=_prefix(os.environ.get("MOCK_REST_MOCK_PREFIX") or defaults.mock_prefix),
            admin_prefix=_prefix(os.environ.get("MOCK_REST_ADMIN_PREFIX") or defaults.admin_prefix),
            model=(os.environ.get("MOCK_REST_MODEL") or "").strip() or None,
            log_level=(os.environ.get("MOCK_REST_LOG_LEVEL") or defaults.log_level).strip().lower(),
        )

    def override(self, **changes) -> "ServerConfig":
        """Copy with the given non-None values replaced (CLI options)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
