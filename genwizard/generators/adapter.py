# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Capability surface the generator engine calls back into.

Generators only ever see :class:`GeneratorAdapter`: a blocking
``prompt()``, a fixed :class:`GeneratorLog` and ``diff()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from genwizard.supervisor.protocol import Question

OutputSink = Callable[[str, str], None]


class GeneratorLog:
    """Logger with one method per generator status tag.

    Every method forwards ``(prefix, text)`` to the single *sink*.
    """

    def __init__(self, sink: OutputSink):
        self._sink = sink

    def __call__(self, text: str = "") -> GeneratorLog:
        self._sink("", str(text))
        return self

    def skip(self, text: str) -> None:
        self._sink("[SKIP]", str(text))

    def force(self, text: str) -> None:
        self._sink("[FORCE]", str(text))

    def create(self, text: str) -> None:
        self._sink("[CREATE]", str(text))

    def invoke(self, text: str) -> None:
        self._sink("[INVOKE]", str(text))

    def conflict(self, text: str) -> None:
        self._sink("[CONFLICT]", str(text))

    def identical(self, text: str) -> None:
        self._sink("[IDENTICAL]", str(text))

    def info(self, text: str) -> None:
        self._sink("[INFO]", str(text))

    def write(self, text: str = "") -> None:
        self._sink("", str(text))

    def writeln(self, text: str = "") -> None:
        self._sink("", str(text))

    def ok(self, text: str) -> None:
        self._sink("[OK]", str(text))

    def error(self, text: str) -> None:
        self._sink("[ERROR]", str(text))


class GeneratorAdapter(ABC):
    """What a running generator may ask of its surroundings."""

    log: GeneratorLog

    @abstractmethod
    def prompt(
        self,
        questions: Question | dict[str, Any] | list[Question | dict[str, Any]],
    ) -> dict[str, Any]:
        """Ask every question in turn and return the merged answers.

        Blocks the calling thread until all answers arrived.
        """

    @abstractmethod
    def diff(self, actual: str, expected: str) -> None:
        """Show the difference between two file contents."""
