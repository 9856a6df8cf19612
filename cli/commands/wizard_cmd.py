"""CLI commands for the generator wizard."""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def resolve_workspace_root(raw: str | None) -> Path | None:
    """Workspace from ``--workspace`` (default cwd); None when not a directory."""
    path = Path(raw).expanduser().resolve() if raw else Path.cwd()
    return path if path.is_dir() else None


async def run_wizard(workspace_root: Path | None, ui=None) -> int:
    """Run one wizard session to completion and return the worker exit code."""
    from genwizard.config import load_config
    from genwizard.exceptions import NoWorkspaceOpenError, WorkerSpawnError
    from genwizard.paths import get_log_dir, get_socket_dir
    from genwizard.supervisor import HostSupervisor, SessionLifecycleManager
    from genwizard.ui import ConsoleUI

    ui = ui or ConsoleUI()
    config = load_config()
    supervisor = HostSupervisor(
        ui=ui,
        socket_dir=get_socket_dir(),
        worker_config=config.worker,
        log_dir=get_log_dir(),
    )
    lifecycle = SessionLifecycleManager(supervisor)

    try:
        await lifecycle.replace_session(workspace_root)
    except NoWorkspaceOpenError:
        return 1
    except WorkerSpawnError as e:
        ui.show_error_message(str(e))
        return 1

    try:
        code = await supervisor.wait_session()
    finally:
        await lifecycle.shutdown()
    return 1 if code is None else code


def cmd_wizard(args: argparse.Namespace) -> None:
    """Start the wizard and wait for the generator to finish."""
    workspace_root = resolve_workspace_root(args.workspace)
    try:
        code = asyncio.run(run_wizard(workspace_root))
    except KeyboardInterrupt:
        print("\nWizard cancelled.")
        sys.exit(130)
    sys.exit(code)


def cmd_generators(args: argparse.Namespace) -> None:
    """List generators visible from the workspace."""
    from genwizard.generators import GeneratorEnvironment

    workspace_root = resolve_workspace_root(args.workspace)
    if workspace_root is None:
        print(f"Error: not a directory: {args.workspace}")
        sys.exit(1)

    generators = GeneratorEnvironment.from_config(workspace_root).lookup()
    if not generators:
        print("No generators installed.")
        return

    width = max(len(name) for name in generators)
    for name, meta in generators.items():
        print(f"  {name:<{width}}  {meta.resolved}")
