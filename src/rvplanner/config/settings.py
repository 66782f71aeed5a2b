# src/rvplanner/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/rvplanner/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `RVPLANNER_DATA_DIR`, `RVPLANNER_REMOTE_URL`)
- an external YAML file via `RVPLANNER_CONFIG_PATH`

Rule:
- Tuning knobs (colors, paths, remote endpoint) live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from rvplanner.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `rvplanner.config`."""
    text = resources.files("rvplanner.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "RV Planner"
    timezone: str = "America/Denver"
    log_level: str = "INFO"


class RemoteStorageSettings(BaseModel):
    base_url: str | None = None
    timeout_seconds: float = 10
    user_id_key: str = "rv_user_id"


class StorageSettings(BaseModel):
    backend: Literal["local", "mirrored"] = "local"
    dir: str = ".data/rvplanner"
    remote: RemoteStorageSettings = Field(default_factory=RemoteStorageSettings)


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/parks.json"


class MapColors(BaseModel):
    success: str = "#10b981"
    alert: str = "#ef4444"
    info: str = "#3b82f6"


class MapSettings(BaseModel):
    center: tuple[float, float] = (39.8283, -98.5795)
    zoom: int = 4
    fit_padding: float = Field(0.1, ge=0, le=1)
    colors: MapColors = Field(default_factory=MapColors)


class ExportSettings(BaseModel):
    version: str = "1.0"
    filename_pattern: str = "{page}-backup-{date}.json"


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    map: MapSettings = Field(default_factory=MapSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)


# Environment variable -> path into the raw settings mapping.
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "RVPLANNER_LOG_LEVEL": ("app", "log_level"),
    "RVPLANNER_TIMEZONE": ("app", "timezone"),
    "RVPLANNER_DATA_DIR": ("storage", "dir"),
    "RVPLANNER_STORAGE_BACKEND": ("storage", "backend"),
    "RVPLANNER_REMOTE_URL": ("storage", "remote", "base_url"),
    "RVPLANNER_CATALOG_PATH": ("catalog", "path"),
}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay the whitelisted environment variables onto a raw settings payload."""
    load_dotenv_if_present()
    data = dict(data)
    for env_name, path in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if not value:
            continue
        section = data
        for key in path[:-1]:
            section[key] = dict(section.get(key) or {})
            section = section[key]
        section[path[-1]] = value
    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("RVPLANNER_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
