# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0
"""
Worker process entry point: picks a generator and runs it.

The host starts this module with the workspace root as working directory
and the channel socket in ``GENWIZARD_IPC_SOCKET``::

    python -m genwizard.supervisor.runner [--log-dir DIR] [--log-level LEVEL]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import threading
from pathlib import Path
from typing import Any

from genwizard.exceptions import ChannelClosedError, GeneratorRunFailedError
from genwizard.generators import GeneratorAdapter, GeneratorEnvironment, GeneratorLog
from genwizard.supervisor.ipc import SOCKET_ENV_VAR, IPCChannel, open_channel
from genwizard.supervisor.pending import PendingReplies
from genwizard.supervisor.protocol import (
    Choice,
    ChoiceQuestion,
    ErrorMessage,
    InformationMessage,
    Message,
    OutputMessage,
    PromptMessage,
    Question,
    ReplyMessage,
    as_question,
)

logger = logging.getLogger(__name__)

NO_GENERATORS_MESSAGE = "Unable to launch a wizard as no generators are installed."
DISCOVERY_FAILED_MESSAGE = "Unable to look up generators"
NO_SELECTION_MESSAGE = "No generator selected. Aborting."
COMPLETED_MESSAGE = "Generator successfully ended."
DIFF_UNSUPPORTED_MESSAGE = "Diff is not handled for now."
SELECT_QUESTION_NAME = "generator"
SELECT_QUESTION_MESSAGE = "Select generator"

EXIT_OK = 0
EXIT_NOTHING_RUN = 1
EXIT_CHANNEL_LOST = 2


# ── WorkerRuntime ───────────────────────────────────────────────

class WorkerRuntime(GeneratorAdapter):
    """
    Runs one generator and relays its prompts, logs and notifications.

    The event loop thread owns the channel and the pending table.  The
    generator itself runs in a separate thread so its blocking
    ``prompt()`` calls can wait on replies without stalling the loop.
    """

    def __init__(
        self,
        channel: IPCChannel,
        environment: GeneratorEnvironment,
        prompt_timeout: float | None = None,
    ):
        self.channel = channel
        self.environment = environment
        self.prompt_timeout = prompt_timeout
        self.pending = PendingReplies()
        self.log = GeneratorLog(self.output)
        self.exit_code = EXIT_OK
        self.channel_lost = False

        self._loop: asyncio.AbstractEventLoop | None = None
        self._loop_thread_id: int | None = None

    async def run(self) -> int:
        """Serve the session until the generator finished; return the exit code."""
        self._loop = asyncio.get_running_loop()
        self._loop_thread_id = threading.get_ident()

        listener = asyncio.create_task(self._listen())
        work = asyncio.create_task(self.select_and_run())
        try:
            done, _ = await asyncio.wait({listener, work}, return_when=asyncio.FIRST_COMPLETED)
            if work not in done:
                # Host went away first; unblock prompts and let the work task unwind.
                self.channel_lost = True
                self.pending.destroy("host channel closed")
                try:
                    await work
                except ChannelClosedError:
                    logger.warning("Generator run abandoned: host channel closed")
            else:
                work.result()
        finally:
            listener.cancel()
            try:
                await listener
            except asyncio.CancelledError:
                pass
            self.pending.destroy("worker finished")
            await self.channel.close()

        if self.channel_lost:
            return EXIT_CHANNEL_LOST
        return self.exit_code

    async def _listen(self) -> None:
        await self.channel.listen(self.on_message)
        logger.info("Host channel closed")

    # ── Inbound ───────────────────────────────────────────────

    def on_message(self, message: Message) -> None:
        """Single dispatcher for host messages; only replies are understood."""
        if isinstance(message, ReplyMessage):
            self.pending.resolve(message.promise_id, message.replies)
        else:
            logger.debug("Ignoring %s message from host", message.action)

    # ── Outbound (fire-and-forget) ────────────────────────────

    def _emit(self, message: Message) -> None:
        if self._loop is None or threading.get_ident() == self._loop_thread_id:
            self.channel.write(message)
        else:
            self._loop.call_soon_threadsafe(self.channel.write, message)

    def output(self, prefix: str, message: str) -> None:
        self._emit(OutputMessage(prefix=prefix, message=message))

    def show_information_message(self, message: str) -> None:
        self._emit(InformationMessage(message=str(message)))

    def show_error_message(self, message: str) -> None:
        self._emit(ErrorMessage(message=str(message)))

    def diff(self, actual: str, expected: str) -> None:
        self.show_error_message(DIFF_UNSUPPORTED_MESSAGE)

    # ── Prompts ───────────────────────────────────────────────

    async def ask(self, question: Question) -> dict[str, Any]:
        """Send one prompt and wait for its reply (loop thread only)."""
        promise_id, future = self.pending.register()
        logger.debug("Prompt %d: %s", promise_id, question.name)
        self.channel.write(PromptMessage(promise_id=promise_id, question=question))
        try:
            await self.channel.drain()
        except ChannelClosedError:
            self.pending.discard(promise_id)
            raise

        if self.prompt_timeout is None:
            return await future
        try:
            return await asyncio.wait_for(future, self.prompt_timeout)
        except asyncio.TimeoutError:
            self.pending.discard(promise_id)
            logger.warning("Prompt %d timed out after %.1fs", promise_id, self.prompt_timeout)
            raise

    async def ask_all(self, questions: list[Question]) -> dict[str, Any]:
        answers: dict[str, Any] = {}
        for question in questions:
            answers.update(await self.ask(question))
        return answers

    def prompt(
        self,
        questions: Question | dict[str, Any] | list[Question | dict[str, Any]],
    ) -> dict[str, Any]:
        """Blocking prompt for generator code running off the loop thread."""
        if self._loop is None:
            raise RuntimeError("Worker runtime is not running")
        if threading.get_ident() == self._loop_thread_id:
            raise RuntimeError("prompt() would block the event loop; use ask() instead")

        items = questions if isinstance(questions, list) else [questions]
        parsed = [as_question(q) for q in items]
        future = asyncio.run_coroutine_threadsafe(self.ask_all(parsed), self._loop)
        return future.result()

    # ── Generator selection ───────────────────────────────────

    async def select_and_run(self) -> None:
        try:
            generators = await asyncio.to_thread(self.environment.lookup)
        except Exception as e:
            logger.exception("Generator discovery failed")
            self.show_error_message(f"{DISCOVERY_FAILED_MESSAGE}: {e}")
            self.exit_code = EXIT_NOTHING_RUN
            return

        if not generators:
            logger.warning("No generators found under %s", self.environment.search_dirs())
            self.show_error_message(NO_GENERATORS_MESSAGE)
            self.exit_code = EXIT_NOTHING_RUN
            return

        if len(generators) == 1:
            name = next(iter(generators))
        else:
            question = ChoiceQuestion(
                name=SELECT_QUESTION_NAME,
                message=SELECT_QUESTION_MESSAGE,
                choices=[
                    Choice(name=key, value=key, detail=meta.resolved)
                    for key, meta in generators.items()
                ],
            )
            try:
                replies = await self.ask(question)
            except asyncio.TimeoutError:
                replies = {}
            name = replies.get(SELECT_QUESTION_NAME)
            if name not in generators:
                logger.info("No generator selected (reply=%r)", name)
                self.show_error_message(NO_SELECTION_MESSAGE)
                self.exit_code = EXIT_NOTHING_RUN
                return

        await self.run_generator(name)

    async def run_generator(self, name: str) -> None:
        try:
            await asyncio.to_thread(self.environment.run, name, self)
        except GeneratorRunFailedError as e:
            self.show_error_message(str(e))
        # Completion is announced after failures as well.
        self.show_information_message(COMPLETED_MESSAGE)
        self.exit_code = EXIT_OK


# ── CLI Entry Point ────────────────────────────────────────────────

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments (all optional)."""
    parser = argparse.ArgumentParser(
        description="Run a generator wizard worker (started by the host)"
    )
    parser.add_argument(
        "--socket-path",
        type=Path,
        default=None,
        help=f"Channel socket (default: ${SOCKET_ENV_VAR})",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for worker log files",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("GENWIZARD_LOG_LEVEL", "INFO"),
        help="Worker log level",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    from genwizard.config import load_config
    from genwizard.logging_config import setup_worker_logging
    from genwizard.paths import get_log_dir

    setup_worker_logging(args.log_dir or get_log_dir(), level=args.log_level)

    socket_path = args.socket_path or os.environ.get(SOCKET_ENV_VAR)
    if not socket_path:
        print(f"{SOCKET_ENV_VAR} is not set; this process must be started by the host", file=sys.stderr)
        return EXIT_CHANNEL_LOST

    config = load_config()
    try:
        channel = await open_channel(Path(socket_path), timeout=config.worker.connect_timeout_sec)
    except (OSError, asyncio.TimeoutError) as e:
        logger.error("Cannot connect to host at %s: %s", socket_path, e)
        return EXIT_CHANNEL_LOST

    environment = GeneratorEnvironment.from_config(Path.cwd())
    runtime = WorkerRuntime(
        channel=channel,
        environment=environment,
        prompt_timeout=config.worker.prompt_timeout_sec,
    )
    exit_code = await runtime.run()
    logger.info("Worker exiting with code %d", exit_code)
    return exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
