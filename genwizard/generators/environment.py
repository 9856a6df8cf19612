# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Generator environment: looks generators up and runs one of them."""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType

from genwizard.exceptions import (
    GeneratorLoadError,
    GeneratorNotFoundError,
    GeneratorRunFailedError,
)
from genwizard.generators.adapter import GeneratorAdapter
from genwizard.generators.base import Generator, GeneratorMeta

logger = logging.getLogger(__name__)


class GeneratorEnvironment:
    """
    Discovers generators for one destination directory and runs them.

    Search order: the workspace-local generator directory, the configured
    extra search paths, then the user-wide generator directory.
    """

    def __init__(
        self,
        cwd: Path,
        search_paths: list[Path] | None = None,
        workspace_subdir: str = ".genwizard/generators",
        user_dir: Path | None = None,
    ):
        self.cwd = cwd
        self.search_paths = list(search_paths or [])
        self.workspace_subdir = workspace_subdir
        self.user_dir = user_dir
        self._generators: dict[str, GeneratorMeta] = {}

    @classmethod
    def from_config(cls, cwd: Path) -> GeneratorEnvironment:
        from genwizard.config import load_config
        from genwizard.paths import get_generators_dir

        config = load_config()
        return cls(
            cwd=cwd,
            search_paths=config.generators.resolved_search_paths(),
            workspace_subdir=config.generators.workspace_subdir,
            user_dir=get_generators_dir(),
        )

    def search_dirs(self) -> list[Path]:
        dirs = [self.cwd / self.workspace_subdir, *self.search_paths]
        if self.user_dir is not None:
            dirs.append(self.user_dir)
        return dirs

    def lookup(self) -> dict[str, GeneratorMeta]:
        """Refresh and return the generators metadata, keyed by name."""
        from genwizard.generators import discover_generators

        self._generators = discover_generators(self.search_dirs())
        return dict(self._generators)

    # ── Loading ──────────────────────────────────────────────

    def _load_module(self, meta: GeneratorMeta) -> ModuleType:
        path = Path(meta.resolved)
        module_name = f"genwizard_generator_{meta.name}"
        if path.is_dir():
            spec = importlib.util.spec_from_file_location(
                module_name,
                path / "__init__.py",
                submodule_search_locations=[str(path)],
            )
        else:
            spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise GeneratorLoadError(f"Cannot load generator '{meta.name}' from {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise GeneratorLoadError(f"Failed to import generator '{meta.name}': {e}") from e
        return module

    def load(self, name: str) -> type[Generator]:
        """Import generator *name* and return its Generator subclass.

        Raises:
            GeneratorNotFoundError: *name* was not discovered.
            GeneratorLoadError: Import failed or no subclass defined.
        """
        meta = self._generators.get(name)
        if meta is None:
            raise GeneratorNotFoundError(f"Generator not found: {name}")

        module = self._load_module(meta)
        for obj in vars(module).values():
            if (
                inspect.isclass(obj)
                and issubclass(obj, Generator)
                and obj is not Generator
                and obj.__module__ == module.__name__
            ):
                return obj
        raise GeneratorLoadError(f"Generator '{name}' defines no Generator subclass ({meta.resolved})")

    # ── Running ──────────────────────────────────────────────

    def run(self, name: str, adapter: GeneratorAdapter) -> None:
        """Run generator *name* to completion in the calling thread.

        Raises:
            GeneratorRunFailedError: Loading or running failed.
        """
        logger.info("Running generator %s in %s", name, self.cwd)
        try:
            generator_cls = self.load(name)
            generator = generator_cls(name=name, destination_root=self.cwd, adapter=adapter)
            generator.run()
        except GeneratorRunFailedError:
            raise
        except Exception as e:
            logger.exception("Generator %s failed", name)
            raise GeneratorRunFailedError(f"Generator '{name}' failed: {e}") from e
        logger.info("Generator %s finished", name)
