"""
Host supervisor - owns the current worker session and renders its traffic.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path
from typing import Any

from genwizard.config import WorkerConfig
from genwizard.exceptions import ChannelClosedError, NoWorkspaceOpenError
from genwizard.supervisor.process_handle import WorkerHandle
from genwizard.supervisor.protocol import (
    Choice,
    ChoiceQuestion,
    ErrorMessage,
    FreeTextQuestion,
    InformationMessage,
    Message,
    OutputMessage,
    PromptMessage,
    ReplyMessage,
)
from genwizard.ui import QuickPickItem, WizardUI

logger = logging.getLogger(__name__)

NO_WORKSPACE_MESSAGE = "No workspace opened, Need to open a workspace first"
STDOUT_PREFIX = "[INFO]"
STDERR_PREFIX = "[WARN]"


class HostSupervisor:
    """
    Supervisor for the wizard worker.

    Responsibilities:
    - Start/destroy the single worker session (never two live workers)
    - Render output lines and notifications through the UI
    - Render prompts and send the replies back to the worker that asked
    """

    def __init__(
        self,
        ui: WizardUI,
        socket_dir: Path,
        worker_config: WorkerConfig | None = None,
        log_dir: Path | None = None,
    ):
        self.ui = ui
        self.socket_dir = socket_dir
        self.worker_config = worker_config or WorkerConfig()
        self.log_dir = log_dir

        self.current: WorkerHandle | None = None
        self._prompt_tasks: dict[WorkerHandle, set[asyncio.Task]] = {}

    # ── Session control ───────────────────────────────────────

    def _new_handle(self, workspace_root: Path) -> WorkerHandle:
        socket_path = self.socket_dir / f"wizard-{uuid.uuid4().hex[:8]}.sock"
        return WorkerHandle(
            workspace_root=workspace_root,
            socket_path=socket_path,
            python_executable=self.worker_config.python_executable,
            connect_timeout=self.worker_config.connect_timeout_sec,
            log_dir=self.log_dir,
            log_level=self.worker_config.log_level,
        )

    async def start_session(self, workspace_root: Path | None) -> WorkerHandle:
        """
        Start a worker bound to *workspace_root*.

        Any live session is destroyed before the new process is spawned.

        Raises:
            NoWorkspaceOpenError: No usable workspace; nothing is spawned.
            WorkerSpawnError: The worker process could not be started.
        """
        if workspace_root is None or not workspace_root.is_dir():
            self.ui.show_error_message(NO_WORKSPACE_MESSAGE)
            raise NoWorkspaceOpenError(f"No workspace: {workspace_root}")

        if self.current is not None:
            await self.destroy_session()

        handle = self._new_handle(workspace_root)
        self._prompt_tasks[handle] = set()
        self.current = handle
        try:
            await handle.start(
                on_message=lambda message: self.on_message(message, handle),
                on_stdout=lambda line: self.process_output(OutputMessage(STDOUT_PREFIX, line)),
                on_stderr=lambda line: self.process_output(OutputMessage(STDERR_PREFIX, line)),
            )
        except Exception:
            self.current = None
            self._prompt_tasks.pop(handle, None)
            raise
        return handle

    async def destroy_session(self) -> None:
        """Kill the current worker, if any. Idempotent."""
        handle, self.current = self.current, None
        if handle is None:
            return
        tasks = self._prompt_tasks.pop(handle, set())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await handle.kill()
        logger.info("Session destroyed (PID %s)", handle.get_pid())

    async def wait_session(self) -> int | None:
        """Wait for the current worker to exit and return its exit code."""
        handle = self.current
        if handle is None:
            return None
        code = await handle.wait()
        tasks = self._prompt_tasks.pop(handle, set())
        for task in tasks:
            task.cancel()
        if self.current is handle:
            self.current = None
        return code

    # ── Inbound dispatch ──────────────────────────────────────

    def on_message(self, message: Message, handle: WorkerHandle | None = None) -> None:
        """Dispatch one worker message by action."""
        handle = handle or self.current
        if isinstance(message, OutputMessage):
            self.process_output(message)
        elif isinstance(message, InformationMessage):
            self.ui.show_information_message(message.message)
        elif isinstance(message, ErrorMessage):
            self.ui.show_error_message(message.message)
        elif isinstance(message, PromptMessage):
            tasks = self._prompt_tasks.get(handle) if handle is not None else None
            if handle is not self.current or tasks is None:
                # Session already destroyed or replaced; nobody would collect the reply.
                logger.warning("Prompt %d from an inactive session dropped", message.promise_id)
                return
            task = asyncio.create_task(self.process_prompt(message, handle))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
        else:
            logger.debug("Ignoring %s message from worker", message.action)

    def process_output(self, message: OutputMessage) -> None:
        self.ui.append_output(message.prefix, message.message)

    async def process_prompt(self, message: PromptMessage, handle: WorkerHandle) -> None:
        """Ask the question through the UI and reply to *handle*."""
        question = message.question
        if isinstance(question, ChoiceQuestion):
            answer = await self.ask_choice(question)
        else:
            answer = await self.ask_value(question)
        await self.reply(handle, message.promise_id, {question.name: answer})

    async def ask_choice(self, question: ChoiceQuestion) -> Any:
        items = [
            QuickPickItem(label=c.name, value=c.value, detail=c.detail)
            for c in question.choices
        ]
        picked = await self.ui.show_quick_pick(items, placeholder=question.message)
        if picked is None:
            return question.resolve(None)
        return question.resolve(Choice(name=picked.label, value=picked.value, detail=picked.detail))

    async def ask_value(self, question: FreeTextQuestion) -> Any:
        answer = await self.ui.show_input_box(
            prompt=question.message,
            placeholder=question.effective_placeholder,
            value=question.effective_default,
        )
        return question.resolve(answer)

    async def reply(self, handle: WorkerHandle, promise_id: int, replies: dict[str, Any]) -> None:
        """Send the replies for *promise_id*; dropped when the worker is gone."""
        try:
            await handle.send(ReplyMessage(promise_id=promise_id, replies=replies))
        except ChannelClosedError as e:
            logger.warning("Reply %d not delivered: %s", promise_id, e)
