"""
Unit tests for the config.json models and load/save helpers.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import os

import pytest
from pydantic import ValidationError

from genwizard.config import (
    GenWizardConfig,
    WorkerConfig,
    get_config_path,
    invalidate_cache,
    load_config,
    save_config,
)
from genwizard.exceptions import ConfigValidationError


@pytest.fixture(autouse=True)
def _fresh_cache():
    invalidate_cache()
    yield
    invalidate_cache()


def test_defaults_when_file_missing(tmp_path):
    config = load_config(tmp_path / "config.json")

    assert config == GenWizardConfig()
    assert config.worker.prompt_timeout_sec is None
    assert config.worker.connect_timeout_sec == 10.0
    assert config.generators.workspace_subdir == ".genwizard/generators"


def test_load_from_data_dir(data_dir):
    config = load_config()

    assert get_config_path() == data_dir.resolve() / "config.json"
    assert config.system.log_level == "DEBUG"
    assert config.worker.log_level == "DEBUG"


def test_save_then_load(tmp_path):
    path = tmp_path / "config.json"
    config = GenWizardConfig(worker=WorkerConfig(prompt_timeout_sec=30))

    save_config(config, path)
    invalidate_cache()

    loaded = load_config(path)
    assert loaded.worker.prompt_timeout_sec == 30
    assert json.loads(path.read_text())["worker"]["prompt_timeout_sec"] == 30


def test_cache_reloads_when_file_changes(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"system": {"log_level": "INFO"}}))
    first = load_config(path)
    assert load_config(path) is first

    path.write_text(json.dumps({"system": {"log_level": "DEBUG"}}))
    stat = path.stat()
    os.utime(path, (stat.st_atime, stat.st_mtime + 5))

    assert load_config(path).system.log_level == "DEBUG"


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"worker": {"connect_timeout_sec": 0}}),
    json.dumps({"worker": {"prompt_timeout_sec": -1}}),
    json.dumps({"generators": {"search_paths": "not-a-list"}}),
])
def test_invalid_config_raises(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)

    with pytest.raises(ConfigValidationError):
        load_config(path)


def test_worker_config_validation():
    with pytest.raises(ValidationError):
        WorkerConfig(connect_timeout_sec=-1)
    assert WorkerConfig(prompt_timeout_sec=None).prompt_timeout_sec is None
