# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0
"""Shared pytest fixtures for GenWizard tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers.filesystem import create_test_data_dir


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create an isolated GenWizard runtime data directory.

    - Redirects ``GENWIZARD_DATA_DIR`` to a temp directory
    - Invalidates the config cache before and after the test
    """
    from genwizard.config import invalidate_cache

    d = create_test_data_dir(tmp_path)
    monkeypatch.setenv("GENWIZARD_DATA_DIR", str(d))
    invalidate_cache()

    yield d

    invalidate_cache()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty workspace directory."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws
