from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Literal, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, field_validator

DEFAULT_ADMIN_ID = "admin"
DEFAULT_ENV_PATH = Path(".env")

# Valid birth years are in (MIN_BIRTH_YEAR_EXCLUSIVE, MAX_BIRTH_YEAR].
MIN_BIRTH_YEAR_EXCLUSIVE = 1900
MAX_BIRTH_YEAR = 2024

_TRUTHY = {"1", "true", "yes", "on"}

NULL_PRINCIPAL = "0x" + "0" * 40


def is_null_principal(principal: Optional[str]) -> bool:
    if principal is None:
        return True
    text = principal.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    return text == "" or set(text) == {"0"}


def load_dotenv(path: Optional[str | Path] = None) -> Dict[str, str]:
    """Load variables from a .env file without overriding the environment.

    Returns only the variables that were actually set.
    """
    env_path = Path(path) if path is not None else DEFAULT_ENV_PATH
    if not env_path.exists():
        return {}
    loaded: Dict[str, str] = {}
    for key, value in dotenv_values(env_path).items():
        if value is None or key in os.environ:
            continue
        os.environ[key] = value
        loaded[key] = value
    return loaded


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


class LedgerSettings(BaseModel):
    admin_id: str = DEFAULT_ADMIN_ID
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    audit_emergency_access: bool = False
    allow_dual_roles: bool = True

    @field_validator("admin_id")
    @classmethod
    def _admin_not_null(cls, value: str) -> str:
        if is_null_principal(value):
            raise ValueError("admin_id must not be the null principal")
        return value

    @classmethod
    def from_env(cls, env_path: Optional[str | Path] = None) -> "LedgerSettings":
        load_dotenv(env_path)
        log_format = os.getenv("LEDGER_LOG_FORMAT", "json").strip().lower()
        return cls(
            admin_id=os.getenv("LEDGER_ADMIN_ID", "").strip() or DEFAULT_ADMIN_ID,
            log_level=os.getenv("LEDGER_LOG_LEVEL", "INFO").upper(),
            log_format="text" if log_format == "text" else "json",
            audit_emergency_access=_env_flag("LEDGER_AUDIT_EMERGENCY_ACCESS", False),
            allow_dual_roles=_env_flag("LEDGER_ALLOW_DUAL_ROLES", True),
        )


__all__ = [
    "DEFAULT_ADMIN_ID",
    "MAX_BIRTH_YEAR",
    "MIN_BIRTH_YEAR_EXCLUSIVE",
    "NULL_PRINCIPAL",
    "LedgerSettings",
    "is_null_principal",
    "load_dotenv",
]
