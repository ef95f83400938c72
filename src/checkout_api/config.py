from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Tuple

ENVIRONMENTS = ("sandbox", "live")


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_environment: str = "sandbox"
    paypal_timeout_seconds: float = 30.0
    catalog_path: Path = Path("products.json")
    catalog_timeout_seconds: float | None = None
    cors_origins: Tuple[str, ...] = ("*",)
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_json: bool = False

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if env is None else env

        environment = env.get("PAYPAL_ENVIRONMENT", "sandbox").strip().lower()
        if environment not in ENVIRONMENTS:
            raise ConfigError(
                f"PAYPAL_ENVIRONMENT must be one of {ENVIRONMENTS}, got {environment!r}"
            )

        catalog_timeout = env.get("CATALOG_TIMEOUT_SECONDS", "").strip()
        origins = tuple(
            o.strip() for o in env.get("CORS_ORIGINS", "*").split(",") if o.strip()
        )

        return Settings(
            paypal_client_id=env.get("PAYPAL_CLIENT_ID", ""),
            paypal_client_secret=env.get("PAYPAL_CLIENT_SECRET", ""),
            paypal_environment=environment,
            paypal_timeout_seconds=_positive_float(
                env, "PAYPAL_TIMEOUT_SECONDS", "30"
            ),
            catalog_path=Path(env.get("CATALOG_PATH", "products.json")),
            catalog_timeout_seconds=(
                _positive_float(env, "CATALOG_TIMEOUT_SECONDS", catalog_timeout)
                if catalog_timeout
                else None
            ),
            cors_origins=origins or ("*",),
            host=env.get("HOST", "0.0.0.0"),
            port=_port(env.get("PORT", "3000")),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_json=env.get("LOG_JSON", "false").strip().lower()
            in ("1", "true", "yes"),
        )


def _positive_float(env: Mapping[str, str], name: str, default: str) -> float:
    raw = env.get(name, default)
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be > 0, got {raw!r}")
    return value


def _port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {raw!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"PORT out of range: {port}")
    return port
