"""
Unit tests for WorkerHandle state tracking, with the subprocess mocked out.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from genwizard.supervisor.process_handle import ProcessState, WorkerHandle


def _handle(tmp_path: Path) -> WorkerHandle:
    return WorkerHandle(workspace_root=tmp_path, socket_path=tmp_path / "w.sock")


def _exited_process(code: int) -> MagicMock:
    process = MagicMock()
    process.pid = 4321
    process.returncode = code
    process.wait = AsyncMock(return_value=code)
    return process


@pytest.mark.asyncio
async def test_exit_after_kill_keeps_failed_state(tmp_path):
    handle = _handle(tmp_path)
    handle.process = _exited_process(-9)
    handle.state = ProcessState.FAILED

    await handle._watch_exit()

    assert handle.state == ProcessState.FAILED
    assert handle.stats.exit_code == -9


@pytest.mark.asyncio
async def test_exit_while_stopping_keeps_stopping(tmp_path):
    handle = _handle(tmp_path)
    handle.process = _exited_process(-9)
    handle.state = ProcessState.STOPPING

    await handle._watch_exit()

    assert handle.state == ProcessState.STOPPING


@pytest.mark.asyncio
async def test_normal_exit_marks_stopped(tmp_path):
    handle = _handle(tmp_path)
    handle.process = _exited_process(0)
    handle.state = ProcessState.RUNNING

    await handle._watch_exit()

    assert handle.state == ProcessState.STOPPED
    assert handle.stats.exit_code == 0
    assert handle.stats.stopped_at is not None


@pytest.mark.asyncio
async def test_kill_without_process_is_noop(tmp_path):
    handle = _handle(tmp_path)

    await handle.kill()

    assert handle.state == ProcessState.STOPPED
    assert not handle.is_alive()
    assert handle.get_pid() is None


def test_worker_env_carries_socket_path(tmp_path):
    env = _handle(tmp_path)._build_env()

    assert env["GENWIZARD_IPC_SOCKET"] == str(tmp_path / "w.sock")
    assert env["PYTHONUNBUFFERED"] == "1"
