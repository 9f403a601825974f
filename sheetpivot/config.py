from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import os

from dotenv import load_dotenv

load_dotenv()


def _getenv_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _normalize_level(raw: str | None) -> str:
    value = (raw or "INFO").strip().upper()
    return value if value in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO"


def _split_origins(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ("http://localhost:5173", "http://127.0.0.1:5173")
    return tuple(o.strip() for o in raw.split(",") if o.strip())


@dataclass(frozen=True)
class Settings:
    log_level: str
    upload_dir: str
    projects_dir: str
    max_upload_mb: int
    cors_origins: tuple[str, ...]


settings = Settings(
    log_level=_normalize_level(os.getenv("LOG_LEVEL")),
    upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
    projects_dir=os.getenv("PROJECTS_DIR", "projects"),
    max_upload_mb=_getenv_int("MAX_UPLOAD_MB", 25),
    cors_origins=_split_origins(os.getenv("CORS_ORIGINS")),
)

_RUNTIME_OVERRIDES: dict[str, Any] = {}


def get_settings() -> Settings:
    if not _RUNTIME_OVERRIDES:
        return settings
    base = settings
    return Settings(
        log_level=_RUNTIME_OVERRIDES.get("log_level", base.log_level),
        upload_dir=_RUNTIME_OVERRIDES.get("upload_dir", base.upload_dir),
        projects_dir=_RUNTIME_OVERRIDES.get("projects_dir", base.projects_dir),
        max_upload_mb=_RUNTIME_OVERRIDES.get("max_upload_mb", base.max_upload_mb),
        cors_origins=_RUNTIME_OVERRIDES.get("cors_origins", base.cors_origins),
    )


def update_settings(overrides: dict[str, Any]) -> Settings:
    normalized: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "log_level":
            normalized[key] = _normalize_level(str(value))
        elif key == "max_upload_mb":
            normalized[key] = int(value)
        elif key == "cors_origins":
            normalized[key] = _split_origins(value) if isinstance(value, str) else tuple(value)
        else:
            normalized[key] = value
    _RUNTIME_OVERRIDES.update(normalized)
    return get_settings()


def reset_settings() -> Settings:
    _RUNTIME_OVERRIDES.clear()
    return settings
