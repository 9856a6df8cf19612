"""
Process handle for one wizard worker process.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from genwizard.exceptions import ChannelClosedError, WorkerSpawnError
from genwizard.paths import PROJECT_DIR
from genwizard.supervisor.ipc import SOCKET_ENV_VAR, IPCChannel, IPCServer
from genwizard.supervisor.protocol import Message

logger = logging.getLogger(__name__)

WORKER_MODULE = "genwizard.supervisor.runner"

MessageCallback = Callable[[Message], Awaitable[None] | None]
LineCallback = Callable[[str], None]


# ── Process State ──────────────────────────────────────────────────

class ProcessState(Enum):
    """State of a worker process."""
    STARTING = "starting"       # Process spawned, waiting for channel
    RUNNING = "running"          # Channel connected
    STOPPING = "stopping"        # Kill requested
    STOPPED = "stopped"          # Process exited on its own
    FAILED = "failed"            # Process killed or failed to start


@dataclass
class ProcessStats:
    """Process statistics."""
    started_at: datetime
    stopped_at: datetime | None = None
    exit_code: int | None = None


# ── Worker Handle ──────────────────────────────────────────────────

class WorkerHandle:
    """
    Handle for one worker process.

    Owns the listening socket, the spawned process, the channel once the
    worker connects back, and the tasks pumping the process's stdout and
    stderr.
    """

    def __init__(
        self,
        workspace_root: Path,
        socket_path: Path,
        python_executable: str | None = None,
        connect_timeout: float = 10.0,
        log_dir: Path | None = None,
        log_level: str = "INFO",
    ):
        self.workspace_root = workspace_root
        self.socket_path = socket_path
        self.python_executable = python_executable or sys.executable
        self.connect_timeout = connect_timeout
        self.log_dir = log_dir
        self.log_level = log_level

        self.state = ProcessState.STOPPED
        self.process: asyncio.subprocess.Process | None = None
        self.channel: IPCChannel | None = None
        self.stats = ProcessStats(started_at=datetime.now())
        self._server: IPCServer | None = None
        self._tasks: list[asyncio.Task] = []
        self._exited = asyncio.Event()

    def _build_command(self) -> list[str]:
        cmd = [self.python_executable, "-m", WORKER_MODULE, "--log-level", self.log_level]
        if self.log_dir:
            cmd += ["--log-dir", str(self.log_dir)]
        return cmd

    def _build_env(self) -> dict[str, str]:
        env = dict(os.environ)
        env[SOCKET_ENV_VAR] = str(self.socket_path)
        env["PYTHONUNBUFFERED"] = "1"
        python_path = env.get("PYTHONPATH")
        env["PYTHONPATH"] = (
            f"{PROJECT_DIR}{os.pathsep}{python_path}" if python_path else str(PROJECT_DIR)
        )
        return env

    async def start(
        self,
        on_message: MessageCallback,
        on_stdout: LineCallback,
        on_stderr: LineCallback,
    ) -> None:
        """
        Listen on the socket, then spawn the worker.

        Returns once the process is spawned; the channel is attached in
        the background when the worker connects.

        Raises:
            WorkerSpawnError: The process could not be started.
        """
        if self.state not in (ProcessState.STOPPED, ProcessState.FAILED) or self.process is not None:
            raise RuntimeError(f"Cannot start worker in state {self.state}")

        self.state = ProcessState.STARTING
        self.stats = ProcessStats(started_at=datetime.now())

        cmd = self._build_command()
        logger.info("Starting worker in %s", self.workspace_root)
        logger.debug("Command: %s", " ".join(cmd))

        try:
            self._server = IPCServer(self.socket_path)
            await self._server.start()
            self.process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self.workspace_root),
                env=self._build_env(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Failed to start worker in %s: %s", self.workspace_root, e)
            self.state = ProcessState.FAILED
            await self._cleanup()
            raise WorkerSpawnError(f"Cannot spawn worker: {e}") from e

        logger.info("Worker started (PID %s)", self.process.pid)

        assert self.process.stdout is not None and self.process.stderr is not None
        self._tasks = [
            asyncio.create_task(self._pump(self.process.stdout, on_stdout)),
            asyncio.create_task(self._pump(self.process.stderr, on_stderr)),
            asyncio.create_task(self._serve_channel(on_message), name="channel"),
            asyncio.create_task(self._watch_exit()),
        ]

    async def _pump(self, stream: asyncio.StreamReader, callback: LineCallback) -> None:
        """Forward raw output lines of the worker."""
        async for raw in stream:
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            try:
                callback(line)
            except Exception:
                logger.exception("Output callback failed")

    async def _serve_channel(self, on_message: MessageCallback) -> None:
        assert self._server is not None
        try:
            self.channel = await self._server.accept(timeout=self.connect_timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Worker (PID %s) did not connect within %.1fs",
                self.get_pid(), self.connect_timeout,
            )
            return
        if self.state == ProcessState.STARTING:
            self.state = ProcessState.RUNNING
        logger.info("Worker channel connected (PID %s)", self.get_pid())
        await self.channel.listen(on_message)

    async def _watch_exit(self) -> None:
        assert self.process is not None
        code = await self.process.wait()
        self.stats.exit_code = code
        self.stats.stopped_at = datetime.now()
        if self.state not in (ProcessState.STOPPING, ProcessState.FAILED):
            self.state = ProcessState.STOPPED
        logger.info("Worker exited (PID %s, code=%s)", self.process.pid, code)
        self._exited.set()

    async def send(self, message: Message) -> None:
        """Send *message* to the worker.

        Raises:
            ChannelClosedError: The worker is not connected.
        """
        if self.channel is None:
            raise ChannelClosedError("Worker channel not connected")
        await self.channel.send(message)

    async def wait(self) -> int | None:
        """Wait until the worker process exited and its output was drained."""
        if self.process is None:
            return self.stats.exit_code
        await self._exited.wait()
        if self.channel is None:
            # Exited without ever connecting back; stop waiting for it.
            for task in self._tasks:
                if task.get_name() == "channel":
                    task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._cleanup()
        return self.stats.exit_code

    async def kill(self) -> None:
        """Force kill the worker with SIGKILL and release its resources."""
        if self.process is None:
            await self._cleanup()
            return

        if self.process.returncode is None:
            logger.warning("Killing worker (PID %s)", self.process.pid)
            self.state = ProcessState.STOPPING
            try:
                self.process.kill()
            except ProcessLookupError:
                logger.debug("Worker already gone (PID %s)", self.process.pid)
            await self.process.wait()
            self.stats.exit_code = self.process.returncode
            self.stats.stopped_at = datetime.now()
            self.state = ProcessState.FAILED

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self._cleanup()

    async def _cleanup(self) -> None:
        """Close the channel and the listening socket."""
        if self.channel is not None:
            await self.channel.close()
            self.channel = None
        if self._server is not None:
            await self._server.stop()
            self._server = None
        if self.socket_path.exists():
            self.socket_path.unlink()

    def is_alive(self) -> bool:
        """Check if the worker process is alive."""
        return self.process is not None and self.process.returncode is None

    def get_pid(self) -> int | None:
        return self.process.pid if self.process else None
