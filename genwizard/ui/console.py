# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Terminal implementation of the wizard UI."""

from __future__ import annotations

import asyncio
import os
import stat
import sys
from collections.abc import Callable
from typing import Any, TextIO

from genwizard.ui.base import QuickPickItem, WizardUI


class ConsoleUI(WizardUI):
    """Renders output and prompts on stdout, reads answers from stdin.

    When stdin is a terminal, pipe or socket, answers are read with
    ``os.read`` once the event loop reports the descriptor readable, so a
    prompt cancelled with its session leaves no reader behind.  With a
    custom *input_func*, or stdin redirected from a regular file, the
    blocking call runs in a thread instead; a cancelled prompt then keeps
    that thread waiting until the next line arrives.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] | None = None,
        stream: TextIO | None = None,
        stdin: TextIO | None = None,
    ):
        self._input = input_func
        self._stream = stream
        self._stdin = stdin
        self._buffer = b""
        self._eof = False

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream, flush=True)

    # ── Reading ───────────────────────────────────────────────

    def _selectable_fd(self) -> int | None:
        """Descriptor of stdin when the event loop can watch it."""
        if self._input is not None:
            return None
        stdin = self._stdin or sys.stdin
        try:
            fd = stdin.fileno()
            mode = os.fstat(fd).st_mode
        except (AttributeError, OSError, ValueError):
            return None
        if stat.S_ISCHR(mode) or stat.S_ISFIFO(mode) or stat.S_ISSOCK(mode):
            return fd
        return None

    async def _read(self, prompt: str) -> str | None:
        fd = self._selectable_fd()
        if fd is None:
            read = self._input or input
            try:
                return await asyncio.to_thread(read, prompt)
            except EOFError:
                return None

        self.stream.write(prompt)
        self.stream.flush()
        return await self._read_line(fd)

    async def _read_line(self, fd: int) -> str | None:
        """Next line from *fd*; None at end of input."""
        while b"\n" not in self._buffer and not self._eof:
            await self._wait_readable(fd)
            chunk = os.read(fd, 4096)
            if chunk:
                self._buffer += chunk
            else:
                self._eof = True

        if b"\n" in self._buffer:
            line, _, self._buffer = self._buffer.partition(b"\n")
        elif self._buffer:
            line, self._buffer = self._buffer, b""
        else:
            return None
        return line.decode("utf-8", errors="replace").rstrip("\r")

    async def _wait_readable(self, fd: int) -> None:
        loop = asyncio.get_running_loop()
        ready: asyncio.Future[None] = loop.create_future()

        def on_readable() -> None:
            if not ready.done():
                ready.set_result(None)

        loop.add_reader(fd, on_readable)
        try:
            await ready
        finally:
            loop.remove_reader(fd)

    # ── WizardUI ──────────────────────────────────────────────

    def append_output(self, prefix: str, message: str) -> None:
        text = message.rstrip("\n")
        self._print(f"{prefix} {text}" if prefix else text)

    def show_information_message(self, message: str) -> None:
        self._print(f"\nℹ {message}")

    def show_error_message(self, message: str) -> None:
        self._print(f"\n✖ {message}")

    async def show_quick_pick(
        self,
        items: list[QuickPickItem],
        placeholder: str,
    ) -> QuickPickItem | None:
        if not items:
            return None

        self._print()
        self._print(placeholder)
        for i, item in enumerate(items, 1):
            line = f"  {i}. {item.label}"
            if item.detail:
                line += f"  ({item.detail})"
            self._print(line)

        while True:
            answer = await self._read(f"Number [1-{len(items)}]: ")
            if answer is None or not answer.strip():
                return None
            try:
                idx = int(answer.strip())
            except ValueError:
                idx = 0
            if 1 <= idx <= len(items):
                return items[idx - 1]
            self._print(f"Invalid choice: {answer.strip()}")

    async def show_input_box(
        self,
        prompt: str,
        placeholder: str,
        value: Any = None,
    ) -> str | None:
        suffix = f" [{value}]" if value not in (None, "") else ""
        answer = await self._read(f"{prompt}{suffix}: ")
        if answer is None:
            return None
        return answer.strip()
