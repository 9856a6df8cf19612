# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Centralized path resolution for GenWizard.

Runtime data directory can be overridden via GENWIZARD_DATA_DIR environment variable.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: where the code lives
PROJECT_DIR = Path(__file__).resolve().parent.parent

# Default runtime data directory
_DEFAULT_DATA_DIR = Path.home() / ".genwizard"


def get_data_dir() -> Path:
    """Return the runtime data directory, respecting GENWIZARD_DATA_DIR env var."""
    env_val = os.environ.get("GENWIZARD_DATA_DIR")
    if env_val:
        return Path(env_val).expanduser().resolve()
    return _DEFAULT_DATA_DIR


def get_generators_dir() -> Path:
    return get_data_dir() / "generators"


def get_log_dir() -> Path:
    return get_data_dir() / "logs"


def get_run_dir() -> Path:
    return get_data_dir() / "run"


def get_socket_dir() -> Path:
    return get_run_dir() / "sockets"
