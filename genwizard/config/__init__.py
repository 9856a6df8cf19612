# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from genwizard.config.models import (
    GeneratorsConfig,
    GenWizardConfig,
    SystemConfig,
    WorkerConfig,
    get_config_path,
    invalidate_cache,
    load_config,
    save_config,
)
