# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0
"""Test doubles for the channel, the generator environment and the UI.

Lets the worker runtime and the host supervisor be exercised without
sockets or subprocesses.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from pathlib import Path
from typing import Any

from genwizard.generators import GeneratorAdapter, GeneratorMeta
from genwizard.supervisor.protocol import Message, PromptMessage, ReplyMessage
from genwizard.ui import QuickPickItem, WizardUI


# ── Channel ───────────────────────────────────────────────


class FakeChannel:
    """In-memory stand-in for :class:`IPCChannel`.

    Records every outbound message in ``sent``.  Inbound messages are fed
    with :meth:`feed`; :meth:`hang_up` ends ``listen()`` like an EOF.
    ``answer`` (when set) is called for each outbound prompt and its
    return value is fed back as the reply.
    """

    def __init__(self, answer: Callable[[PromptMessage], dict[str, Any] | None] | None = None):
        self.sent: list[Message] = []
        self.closed = False
        self.answer = answer
        self._inbound: asyncio.Queue[Message | None] = asyncio.Queue()

    def write(self, message: Message) -> None:
        self.sent.append(message)
        if isinstance(message, PromptMessage) and self.answer is not None:
            replies = self.answer(message)
            if replies is not None:
                self.feed(ReplyMessage(promise_id=message.promise_id, replies=replies))

    async def send(self, message: Message) -> None:
        self.write(message)

    async def drain(self) -> None:
        pass

    def feed(self, message: Message) -> None:
        self._inbound.put_nowait(message)

    def hang_up(self) -> None:
        self._inbound.put_nowait(None)

    async def listen(self, handler) -> None:
        while True:
            message = await self._inbound.get()
            if message is None:
                break
            result = handler(message)
            if inspect.isawaitable(result):
                await result
        self.closed = True

    async def close(self) -> None:
        self.closed = True

    def of_type(self, cls: type) -> list[Any]:
        return [m for m in self.sent if isinstance(m, cls)]


# ── Generator environment ─────────────────────────────────


class FakeEnvironment:
    """Generator environment whose generators are plain callables.

    ``generators`` maps a name to ``fn(adapter)``; running a name calls it.
    """

    def __init__(self, generators: dict[str, Callable[[GeneratorAdapter], None]] | None = None):
        self.generators = generators or {}
        self.ran: list[str] = []

    def search_dirs(self) -> list[Path]:
        return [Path("/nonexistent/generators")]

    def lookup(self) -> dict[str, GeneratorMeta]:
        return {
            name: GeneratorMeta(name=name, resolved=f"/generators/{name}.py")
            for name in self.generators
        }

    def run(self, name: str, adapter: GeneratorAdapter) -> None:
        self.ran.append(name)
        self.generators[name](adapter)


# ── UI ────────────────────────────────────────────────────


class ScriptedUI(WizardUI):
    """Records everything rendered and answers prompts from queues.

    ``picks`` holds labels to pick (None = dismiss); ``inputs`` holds typed
    answers (None = dismiss).  An exhausted queue dismisses.
    """

    def __init__(self, picks: list[str | None] | None = None, inputs: list[str | None] | None = None):
        self.picks = list(picks or [])
        self.inputs = list(inputs or [])
        self.output: list[tuple[str, str]] = []
        self.infos: list[str] = []
        self.errors: list[str] = []
        self.quick_picks: list[tuple[list[QuickPickItem], str]] = []
        self.input_boxes: list[tuple[str, str, Any]] = []

    def append_output(self, prefix: str, message: str) -> None:
        self.output.append((prefix, message))

    def show_information_message(self, message: str) -> None:
        self.infos.append(message)

    def show_error_message(self, message: str) -> None:
        self.errors.append(message)

    async def show_quick_pick(self, items, placeholder):
        self.quick_picks.append((list(items), placeholder))
        label = self.picks.pop(0) if self.picks else None
        if label is None:
            return None
        return next(item for item in items if item.label == label)

    async def show_input_box(self, prompt, placeholder, value=None):
        self.input_boxes.append((prompt, placeholder, value))
        return self.inputs.pop(0) if self.inputs else None
