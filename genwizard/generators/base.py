# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Base class for generators and their discovery metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from genwizard.generators.adapter import GeneratorAdapter, GeneratorLog
from genwizard.supervisor.protocol import Question

logger = logging.getLogger(__name__)

# Stage methods run in this order when a generator defines them.
RUN_STAGES = ("initializing", "prompting", "configuring", "writing", "install", "end")


@dataclass(frozen=True)
class GeneratorMeta:
    """Discovery result: ``name`` is the selection key, ``resolved`` is for display."""

    name: str
    resolved: str


class Generator:
    """
    Subclass this in a generator module.

    Example::

        class AppGenerator(Generator):
            description = "Python application skeleton"

            def prompting(self):
                self.answers = self.prompt({"name": "project", "message": "Project name"})

            def writing(self):
                self.write("README.md", f"# {self.answers['project']}\\n")
    """

    description: str = ""

    def __init__(self, name: str, destination_root: Path, adapter: GeneratorAdapter):
        self.name = name
        self.destination_root = destination_root.resolve()
        self.adapter = adapter

    @property
    def log(self) -> GeneratorLog:
        return self.adapter.log

    def prompt(
        self,
        questions: Question | dict[str, Any] | list[Question | dict[str, Any]],
    ) -> dict[str, Any]:
        return self.adapter.prompt(questions)

    def run(self) -> None:
        for stage in RUN_STAGES:
            method = getattr(self, stage, None)
            if callable(method):
                logger.debug("Generator %s: stage %s", self.name, stage)
                method()

    # ── File helpers ──────────────────────────────────────────

    def destination_path(self, *parts: str | Path) -> Path:
        """Absolute path below the destination root.

        Raises:
            ValueError: The path escapes the destination root.
        """
        path = self.destination_root.joinpath(*parts).resolve()
        if not path.is_relative_to(self.destination_root):
            raise ValueError(f"Path outside destination root: {path}")
        return path

    def write(self, relative_path: str | Path, content: str, *, force: bool = False) -> bool:
        """Write a file, reporting what happened through the log.

        An existing file with different content is left alone unless
        *force* is set.  Returns True when the file was written.
        """
        path = self.destination_path(relative_path)
        display = str(path.relative_to(self.destination_root))

        if path.exists():
            current = path.read_text(encoding="utf-8")
            if current == content:
                self.log.identical(display)
                return False
            if not force:
                self.log.conflict(display)
                self.log.skip(display)
                return False
            path.write_text(content, encoding="utf-8")
            self.log.force(display)
            return True

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        self.log.create(display)
        return True
