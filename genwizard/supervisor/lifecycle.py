"""
Session lifecycle - replaces the wizard session on each user request.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from genwizard.supervisor.host import HostSupervisor
from genwizard.supervisor.process_handle import WorkerHandle

logger = logging.getLogger(__name__)


class SessionLifecycleManager:
    """Serializes "start wizard" requests so at most one worker is ever live."""

    def __init__(self, supervisor: HostSupervisor):
        self.supervisor = supervisor
        self._lock = asyncio.Lock()

    @property
    def current(self) -> WorkerHandle | None:
        return self.supervisor.current

    async def replace_session(self, workspace_root: Path | None) -> WorkerHandle:
        """Destroy the current session, then start a new one.

        Raises:
            NoWorkspaceOpenError: No usable workspace; nothing is spawned.
        """
        if self._lock.locked():
            logger.info("Session start already in flight; queued")
        async with self._lock:
            await self.supervisor.destroy_session()
            return await self.supervisor.start_session(workspace_root)

    async def shutdown(self) -> None:
        async with self._lock:
            await self.supervisor.destroy_session()
