# relay/config.py
"""
Process configuration for the relay.

Env vars (all optional, defaults in parentheses):
- NODE_PORT / RELAY_PORT (3000), RELAY_HOST (0.0.0.0)
- GO_SERVER_HOST (go-server), GO_SERVER_PORT (8086)
- COMPUTE_TIMEOUT_SECONDS (30)
- POSTGRES_USER (postgres), POSTGRES_HOST (postgres-db), POSTGRES_DB (logs),
  POSTGRES_PASSWORD (password), POSTGRES_PORT (5432)
- DATABASE_URL — overrides the URL built from the POSTGRES_* values
- DB_TIMEOUT_SECONDS (10), DB_POOL_SIZE (10)
- RELAY_INIT_DB (true) — create process_logs on startup if missing
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional


class ConfigError(RuntimeError):
    pass


def _get(env: Mapping[str, str], *names: str, default: Any) -> Any:
    for name in names:
        raw = env.get(name)
        if raw is not None and raw.strip() != "":
            return raw.strip()
    return default


def _as_int(value: Any, *, key: str) -> int:
    try:
        return int(value)
    except Exception as e:
        raise ConfigError(f"Invalid int for {key}: {value!r}") from e


def _as_float(value: Any, *, key: str) -> float:
    try:
        v = float(value)
    except Exception as e:
        raise ConfigError(f"Invalid float for {key}: {value!r}") from e
    if v <= 0:
        raise ConfigError(f"{key} must be positive, got {value!r}")
    return v


def _as_bool(value: Any) -> bool:
    return str(value).lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000

    compute_host: str = "go-server"
    compute_port: int = 8086
    compute_timeout: float = 30.0

    postgres_user: str = "postgres"
    postgres_host: str = "postgres-db"
    postgres_db: str = "logs"
    postgres_password: str = "password"
    postgres_port: int = 5432

    database_url_override: Optional[str] = None
    db_timeout: float = 10.0
    db_pool_size: int = 10
    init_db: bool = True

    @property
    def compute_url(self) -> str:
        return f"http://{self.compute_host}:{self.compute_port}/compute"

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            host=_get(env, "RELAY_HOST", default=cls.host),
            port=_as_int(_get(env, "NODE_PORT", "RELAY_PORT", default=cls.port), key="NODE_PORT"),
            compute_host=_get(env, "GO_SERVER_HOST", default=cls.compute_host),
            compute_port=_as_int(_get(env, "GO_SERVER_PORT", default=cls.compute_port), key="GO_SERVER_PORT"),
            compute_timeout=_as_float(
                _get(env, "COMPUTE_TIMEOUT_SECONDS", default=cls.compute_timeout),
                key="COMPUTE_TIMEOUT_SECONDS",
            ),
            postgres_user=_get(env, "POSTGRES_USER", default=cls.postgres_user),
            postgres_host=_get(env, "POSTGRES_HOST", default=cls.postgres_host),
            postgres_db=_get(env, "POSTGRES_DB", default=cls.postgres_db),
            postgres_password=_get(env, "POSTGRES_PASSWORD", default=cls.postgres_password),
            postgres_port=_as_int(_get(env, "POSTGRES_PORT", default=cls.postgres_port), key="POSTGRES_PORT"),
            database_url_override=_get(env, "DATABASE_URL", default=None),
            db_timeout=_as_float(_get(env, "DB_TIMEOUT_SECONDS", default=cls.db_timeout), key="DB_TIMEOUT_SECONDS"),
            db_pool_size=_as_int(_get(env, "DB_POOL_SIZE", default=cls.db_pool_size), key="DB_POOL_SIZE"),
            init_db=_as_bool(_get(env, "RELAY_INIT_DB", default="true")),
        )
