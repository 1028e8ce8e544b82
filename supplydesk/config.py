"""Runtime configuration read from the environment and an optional .env file."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

DEFAULT_REQUEST_TIMEOUT = timedelta(seconds=15)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class ConfigError(ValueError):
    """Raised when an environment value cannot be used."""


@dataclass(frozen=True)
class Config:
    """Settings the service runs with."""

    request_timeout: timedelta = DEFAULT_REQUEST_TIMEOUT
    settings_password: str = ""
    admin_password: str = ""
    default_target_warehouse: str = ""
    default_source_warehouse: str = ""
    default_uom: str = ""
    default_erp_url: str = ""
    default_erp_api_key: str = ""
    default_erp_api_secret: str = ""
    adminka_phone: str = ""
    adminka_name: str = ""
    werka_phone: str = ""
    werka_name: str = ""
    werka_telegram_id: int = 0


def _parse_int64(raw: str) -> int | None:
    """Parse a strict base-10 64-bit integer, or return None."""
    if not _INT_PATTERN.fullmatch(raw):
        return None
    value = int(raw)
    if value < _INT64_MIN or value > _INT64_MAX:
        return None
    return value


def load_from_env(env_file: str | os.PathLike[str] = ".env") -> Config:
    """Load the optional env file (without overriding set variables) and build a Config."""
    load_dotenv(env_file, override=False)
    env = os.environ

    timeout = DEFAULT_REQUEST_TIMEOUT
    raw_timeout = env.get("ERP_TIMEOUT_SECONDS", "")
    if raw_timeout:
        seconds = _parse_int64(raw_timeout)
        if seconds is None or seconds <= 0:
            raise ConfigError(f"invalid ERP_TIMEOUT_SECONDS: {raw_timeout!r}")
        timeout = timedelta(seconds=seconds)

    werka_telegram_id = 0
    raw_telegram = env.get("WERKA_TELEGRAM_ID", "")
    if raw_telegram:
        parsed = _parse_int64(raw_telegram)
        if parsed is None:
            raise ConfigError(f"invalid WERKA_TELEGRAM_ID: {raw_telegram!r}")
        werka_telegram_id = parsed

    return Config(
        request_timeout=timeout,
        settings_password=env.get("SETTINGS_PASSWORD", ""),
        admin_password=env.get("ADMIN_PASSWORD", ""),
        default_target_warehouse=env.get("ERP_DEFAULT_TARGET_WAREHOUSE", ""),
        default_source_warehouse=env.get("ERP_DEFAULT_SOURCE_WAREHOUSE", ""),
        default_uom=env.get("ERP_DEFAULT_UOM", ""),
        default_erp_url=env.get("ERP_URL", ""),
        default_erp_api_key=env.get("ERP_API_KEY", ""),
        default_erp_api_secret=env.get("ERP_API_SECRET", ""),
        adminka_phone=env.get("ADMINKA_PHONE", ""),
        adminka_name=env.get("ADMINKA_NAME", ""),
        werka_phone=env.get("WERKA_PHONE", ""),
        werka_name=env.get("WERKA_NAME", ""),
        werka_telegram_id=werka_telegram_id,
    )