# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Generator engine: discovery, loading and running of generators."""

from __future__ import annotations

import logging
from pathlib import Path

from genwizard.generators.adapter import GeneratorAdapter, GeneratorLog
from genwizard.generators.base import RUN_STAGES, Generator, GeneratorMeta
from genwizard.generators.environment import GeneratorEnvironment

logger = logging.getLogger(__name__)


def scan_generator_dir(directory: Path) -> dict[str, Path]:
    """Scan *directory* for generator modules.

    A generator is either ``<name>.py`` or a package ``<name>/__init__.py``.
    Names starting with ``_`` or ``.`` are skipped.

    Returns: Mapping of generator name → module path.
    """
    if not directory.is_dir():
        return {}
    found: dict[str, Path] = {}
    for entry in sorted(directory.iterdir()):
        if entry.name.startswith(("_", ".")):
            continue
        if entry.is_file() and entry.suffix == ".py":
            found[entry.stem] = entry.resolve()
        elif entry.is_dir() and (entry / "__init__.py").is_file():
            found[entry.name] = entry.resolve()
    return found


def discover_generators(search_dirs: list[Path]) -> dict[str, GeneratorMeta]:
    """Discover generators across *search_dirs* in priority order.

    The first directory providing a name wins; later duplicates are
    logged and skipped.
    """
    discovered: dict[str, GeneratorMeta] = {}
    for directory in search_dirs:
        for name, path in scan_generator_dir(directory).items():
            if name in discovered:
                logger.warning(
                    "Generator '%s' at %s shadowed by %s; skipped",
                    name, path, discovered[name].resolved,
                )
                continue
            discovered[name] = GeneratorMeta(name=name, resolved=str(path))
    if discovered:
        logger.info("Discovered generators: %s", list(discovered.keys()))
    return discovered


__all__ = [
    "RUN_STAGES",
    "Generator",
    "GeneratorAdapter",
    "GeneratorEnvironment",
    "GeneratorLog",
    "GeneratorMeta",
    "discover_generators",
    "scan_generator_dir",
]
