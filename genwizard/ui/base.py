# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""UI surface the host renders wizard traffic through."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class QuickPickItem:
    label: str
    value: Any = None
    detail: str | None = None


class WizardUI(ABC):
    """Log view, notifications and the two prompt widgets."""

    @abstractmethod
    def append_output(self, prefix: str, message: str) -> None:
        """Append one line to the wizard output view."""

    @abstractmethod
    def show_information_message(self, message: str) -> None: ...

    @abstractmethod
    def show_error_message(self, message: str) -> None: ...

    @abstractmethod
    async def show_quick_pick(
        self,
        items: list[QuickPickItem],
        placeholder: str,
    ) -> QuickPickItem | None:
        """Let the user pick one item; None when nothing was picked."""

    @abstractmethod
    async def show_input_box(
        self,
        prompt: str,
        placeholder: str,
        value: Any = None,
    ) -> str | None:
        """Let the user type text; None when the box was dismissed."""
