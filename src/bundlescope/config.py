"""Configuration management for bundlescope."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from bundlescope.exceptions import ConfigError

BUNDLESCOPE_DIR = ".bundlescope"
CONFIG_FILE = "config.json"


class AnalysisConfig(BaseModel):
    """Controls which outputs take part in initial/lazy classification."""

    preferred_entry: str = ""  # input path of the entry to prefer, empty = auto
    js_extensions: list[str] = Field(default_factory=lambda: [".js", ".cjs"])
    css_extensions: list[str] = Field(default_factory=lambda: [".css"])
    server_patterns: list[str] = Field(
        default_factory=lambda: [
            r"(^|/)server(/|$)",
            r"\.server\.",
            r"(^|/)server\.m?js(\?.*)?$",
        ]
    )
    exclude_suffixes: list[str] = Field(default_factory=lambda: [".map"])

    @field_validator("server_patterns")
    @classmethod
    def check_server_patterns(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid server pattern {pattern!r}: {e}") from e
        return patterns


class DisplayConfig(BaseModel):
    """Terminal output settings."""

    max_rows: int = 25


class ProjectConfig(BaseModel):
    """Full project configuration."""

    name: str = ""
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from `start` looking for a .bundlescope directory."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / BUNDLESCOPE_DIR).is_dir():
            return current
        current = current.parent
    if (current / BUNDLESCOPE_DIR).is_dir():
        return current
    return None


def get_bundlescope_dir(root: Path) -> Path:
    """Get the .bundlescope directory for a project root."""
    return root / BUNDLESCOPE_DIR


def load_config(root: Path) -> ProjectConfig:
    """Load configuration from .bundlescope/config.json."""
    config_path = get_bundlescope_dir(root) / CONFIG_FILE
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            return ProjectConfig(**data)
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise ConfigError(f"Invalid config file {config_path}: {e}") from e
    return ProjectConfig(name=root.name)


def save_config(root: Path, config: ProjectConfig) -> None:
    """Save configuration to .bundlescope/config.json."""
    bs_dir = get_bundlescope_dir(root)
    bs_dir.mkdir(parents=True, exist_ok=True)
    config_path = bs_dir / CONFIG_FILE
    config_path.write_text(json.dumps(config.model_dump(), indent=2))


def set_config_value(config: ProjectConfig, key: str, value: Any) -> ProjectConfig:
    """Set a nested config value using dot notation (e.g., 'analysis.preferred_entry')."""
    parts = key.split(".")
    data = config.model_dump()
    target = data
    for part in parts[:-1]:
        if part not in target or not isinstance(target[part], dict):
            raise KeyError(f"Invalid config key: {key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Invalid config key: {key}")
    target[parts[-1]] = value
    try:
        return ProjectConfig(**data)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
