# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Central configuration module for GenWizard.

Defines Pydantic models for config.json and provides load / save helpers
with a module-level singleton cache.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from genwizard.exceptions import ConfigValidationError

logger = logging.getLogger("genwizard.config")

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class SystemConfig(BaseModel):
    log_level: str = "INFO"
    console_log_level: str = "WARNING"


class WorkerConfig(BaseModel):
    """Settings for spawned worker processes."""

    python_executable: str | None = None  # None = sys.executable
    connect_timeout_sec: float = 10.0  # worker must connect back within this
    prompt_timeout_sec: float | None = None  # None = wait for the reply forever
    log_level: str = "INFO"

    @field_validator("connect_timeout_sec")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("connect_timeout_sec must be positive")
        return v

    @field_validator("prompt_timeout_sec")
    @classmethod
    def _positive_prompt_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("prompt_timeout_sec must be positive or null")
        return v


class GeneratorsConfig(BaseModel):
    """Where the generator engine looks for generators."""

    search_paths: list[str] = []
    workspace_subdir: str = ".genwizard/generators"

    def resolved_search_paths(self) -> list[Path]:
        return [Path(p).expanduser() for p in self.search_paths]


class GenWizardConfig(BaseModel):
    version: int = 1
    system: SystemConfig = SystemConfig()
    worker: WorkerConfig = WorkerConfig()
    generators: GeneratorsConfig = GeneratorsConfig()


# ---------------------------------------------------------------------------
# Singleton cache
# ---------------------------------------------------------------------------

_config: GenWizardConfig | None = None
_config_path: Path | None = None
_config_mtime: float = 0.0


def invalidate_cache() -> None:
    """Reset the module-level singleton cache."""
    global _config, _config_path, _config_mtime
    _config = None
    _config_path = None
    _config_mtime = 0.0


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def get_config_path(data_dir: Path | None = None) -> Path:
    """Return the path to config.json inside *data_dir*."""
    if data_dir is None:
        from genwizard.paths import get_data_dir

        data_dir = get_data_dir()
    return data_dir / "config.json"


# ---------------------------------------------------------------------------
# Load / Save
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> GenWizardConfig:
    """Load configuration from disk, returning cached instance when possible.

    When the file does not exist the default configuration is returned.
    The cache is invalidated when the file's mtime changes.

    Raises:
        ConfigValidationError: The file is not valid JSON or fails validation.
    """
    global _config, _config_path, _config_mtime

    if path is None:
        path = get_config_path()

    if _config is not None and _config_path == path:
        try:
            disk_mtime = path.stat().st_mtime
        except OSError:
            disk_mtime = 0.0
        if disk_mtime == _config_mtime:
            return _config
        logger.debug("Config file changed on disk (mtime %.3f → %.3f); reloading", _config_mtime, disk_mtime)

    if path.is_file():
        logger.debug("Loading config from %s", path)
        try:
            data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
            config = GenWizardConfig.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error("Failed to load config from %s: %s", path, exc)
            raise ConfigValidationError(f"Invalid config {path}: {exc}") from exc
    else:
        logger.debug("Config file not found at %s; using defaults", path)
        config = GenWizardConfig()

    _config = config
    _config_path = path
    try:
        _config_mtime = path.stat().st_mtime
    except OSError:
        _config_mtime = 0.0
    return config


def save_config(config: GenWizardConfig, path: Path | None = None) -> None:
    """Persist *config* to disk as pretty-printed JSON."""
    global _config, _config_path, _config_mtime

    if path is None:
        path = get_config_path()

    path.parent.mkdir(parents=True, exist_ok=True)
    payload = config.model_dump(mode="json")
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.debug("Config saved to %s", path)

    _config = config
    _config_path = path
    try:
        _config_mtime = path.stat().st_mtime
    except OSError:
        _config_mtime = 0.0
