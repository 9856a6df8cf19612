# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from genwizard.ui.base import QuickPickItem, WizardUI
from genwizard.ui.console import ConsoleUI

__all__ = ["ConsoleUI", "QuickPickItem", "WizardUI"]
