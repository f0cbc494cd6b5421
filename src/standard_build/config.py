# src/standard_build/config.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

# Defaults if config/standard_build.yml is missing or partial
_DEFAULTS = {
    "build_dir": "build",  # destination folder for the archive, relative to cwd
    "zip_name": "",  # empty = "<build_dir>/<cwd name>-<timestamp>.zip"
}


@dataclass(frozen=True)
class BuildPluginConfig:
    build_dir: str = _DEFAULTS["build_dir"]
    zip_name: str = _DEFAULTS["zip_name"]

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> BuildPluginConfig:
        """
        Merge caller options shallowly over the defaults.
        Unknown keys are ignored; values are not validated.
        """
        known = {f.name for f in fields(cls)}
        merged = {**_DEFAULTS, **{k: v for k, v in (options or {}).items() if k in known}}
        return cls(
            build_dir=str(merged["build_dir"] or ""),
            zip_name=str(merged["zip_name"] or ""),
        )


def _load_yaml(path: Path) -> Any:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_plugin_config(config_dir: Path | None = None) -> BuildPluginConfig:
    """
    Loads config from config/standard_build.yml or config/standard_build.yaml.
    Falls back to defaults if not found or keys are missing.
    """
    base = Path(config_dir) if config_dir else Path("config")
    yml = base / "standard_build.yml"
    yaml_ = base / "standard_build.yaml"

    path = yml if yml.exists() else yaml_
    user_cfg = _load_yaml(path) if base.exists() else {}
    if not isinstance(user_cfg, Mapping):
        raise ConfigError(f"{path} must hold a mapping of options, got {type(user_cfg).__name__}")
    return BuildPluginConfig.from_options(user_cfg)
