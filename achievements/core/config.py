"""Service settings, read once from the environment.

Invalid values fail at import with a ValueError naming the variable, so
a misconfigured container dies on start instead of serving with
surprising limits.  MAX_PER_OWNER and CREATION_FEE only seed the store;
after start the admin principal changes them through /admin/config.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_APP_ENVS = ("dev", "test", "prod")
_LOG_LEVELS = ("debug", "info", "warning", "error")
_BOOLS = {"true": True, "1": True, "false": False, "0": False}


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _choice(name: str, default: str, allowed: tuple[str, ...]) -> str:
    value = _getenv(name, default).lower()
    if value not in allowed:
        raise ValueError(f"{name} must be {'|'.join(allowed)} (got {value!r})")
    return value


def _getbool(name: str, default: str) -> bool:
    raw = _getenv(name, default).lower()
    if raw not in _BOOLS:
        raise ValueError(f"{name} must be true|false (got {raw!r})")
    return _BOOLS[raw]


def _getint(name: str, default: str, *, minimum: int) -> int:
    raw = _getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum} (got {value})")
    return value


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    redis_url: str | None
    ledger_url: str | None
    admin_principal: str
    max_per_owner: int
    creation_fee: int
    block_interval_seconds: int

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    admin_principal = _getenv("ADMIN_PRINCIPAL", "ST1TEST")
    if not admin_principal:
        raise ValueError("ADMIN_PRINCIPAL must be non-empty")

    return Settings(  # type: ignore[arg-type]
        app_env=_choice("APP_ENV", "dev", _APP_ENVS),
        log_level=_choice("LOG_LEVEL", "info", _LOG_LEVELS),
        log_json=_getbool("LOG_JSON", "false"),
        port=_getint("PORT", "8000", minimum=1),
        redis_url=_getenv("REDIS_URL", "") or None,
        ledger_url=_getenv("LEDGER_URL", "") or None,
        admin_principal=admin_principal,
        max_per_owner=_getint("MAX_PER_OWNER", "100", minimum=1),
        creation_fee=_getint("CREATION_FEE", "500", minimum=0),
        block_interval_seconds=_getint("BLOCK_INTERVAL_SECONDS", "600", minimum=1),
    )


SETTINGS = load_settings()
