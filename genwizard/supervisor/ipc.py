"""
IPC channel between host and worker using Unix Domain Sockets and JSON Lines.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Union

from genwizard.exceptions import ChannelClosedError, MalformedMessageError
from genwizard.supervisor.protocol import Message, decode_message, encode_message

logger = logging.getLogger(__name__)

# ── Constants ──────────────────────────────────────────────────
IPC_BUFFER_LIMIT = 16 * 1024 * 1024  # 16MB; default asyncio limit is 64KB
SOCKET_ENV_VAR = "GENWIZARD_IPC_SOCKET"

MessageHandler = Callable[[Message], Union[Awaitable[None], None]]


# ── Channel ────────────────────────────────────────────────────

class IPCChannel:
    """
    Bidirectional message channel over one stream pair.

    Writes are buffered and never wait for the peer; call :meth:`drain`
    to flush.  :meth:`listen` decodes inbound lines and dispatches them
    until the peer closes the connection.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        name: str = "channel",
    ):
        self.reader = reader
        self.writer = writer
        self.name = name
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed or self.writer.is_closing()

    def write(self, message: Message) -> None:
        """Queue *message* for sending. Dropped when the channel is closed."""
        if self.closed:
            logger.debug("[%s] dropping %s on closed channel", self.name, message.action)
            return
        self.writer.write((encode_message(message) + "\n").encode("utf-8"))

    async def send(self, message: Message) -> None:
        """Write *message* and wait until it is flushed.

        Raises:
            ChannelClosedError: The channel is closed or the peer went away.
        """
        if self.closed:
            raise ChannelClosedError(f"{self.name}: channel closed")
        self.write(message)
        await self.drain()

    async def drain(self) -> None:
        try:
            await self.writer.drain()
        except (ConnectionError, BrokenPipeError) as e:
            self._closed = True
            raise ChannelClosedError(f"{self.name}: {e}") from e

    async def listen(self, handler: MessageHandler) -> None:
        """Dispatch inbound messages to *handler* until EOF."""
        try:
            while True:
                try:
                    line_bytes = await self.reader.readline()
                except (ConnectionError, asyncio.IncompleteReadError) as e:
                    logger.warning("[%s] read failed: %s", self.name, e)
                    break
                except ValueError as e:
                    # Line longer than IPC_BUFFER_LIMIT
                    logger.error("[%s] oversized line dropped: %s", self.name, e)
                    continue
                if not line_bytes:
                    break

                line = line_bytes.decode("utf-8", errors="replace").strip()
                if not line:
                    continue

                try:
                    message = decode_message(line)
                except MalformedMessageError as e:
                    logger.error("[%s] malformed message ignored: %s", self.name, e)
                    continue

                if message is None:
                    logger.debug("[%s] unknown action ignored: %.200s", self.name, line)
                    continue

                try:
                    result = handler(message)
                    if inspect.isawaitable(result):
                        await result
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("[%s] error dispatching %s", self.name, message.action)
        finally:
            self._closed = True
            logger.debug("[%s] listen loop finished", self.name)

    async def close(self) -> None:
        """Flush pending writes and close the connection."""
        if not self.writer.is_closing():
            try:
                await self.writer.drain()
            except (ConnectionError, BrokenPipeError):
                logger.debug("[%s] drain failed during close", self.name, exc_info=True)
            self.writer.close()
        self._closed = True
        try:
            await self.writer.wait_closed()
        except (ConnectionError, BrokenPipeError):
            logger.debug("[%s] wait_closed failed", self.name, exc_info=True)


# ── Server (Host Process) ──────────────────────────────────────

class IPCServer:
    """
    Unix Domain Socket listener owned by the host.

    Accepts exactly one worker connection; later connections are
    closed immediately.
    """

    def __init__(self, socket_path: Path):
        self.socket_path = socket_path
        self.server: asyncio.Server | None = None
        self._accepted: asyncio.Future[IPCChannel] | None = None

    async def start(self) -> None:
        """Start listening on the socket path."""
        if self.socket_path.exists():
            self.socket_path.unlink()
        self.socket_path.parent.mkdir(parents=True, exist_ok=True)

        self._accepted = asyncio.get_running_loop().create_future()
        self.server = await asyncio.start_unix_server(
            self._handle_connection,
            path=str(self.socket_path),
            limit=IPC_BUFFER_LIMIT,
        )
        logger.info("IPC server listening on %s", self.socket_path)

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        if self._accepted is None or self._accepted.done():
            logger.warning("Rejecting extra IPC connection on %s", self.socket_path)
            writer.close()
            return
        logger.debug("IPC connection accepted on %s", self.socket_path)
        self._accepted.set_result(IPCChannel(reader, writer, name="host"))

    async def accept(self, timeout: float) -> IPCChannel:
        """Wait for the worker to connect.

        Raises:
            asyncio.TimeoutError: No connection within *timeout*.
            RuntimeError: The server was not started.
        """
        if self._accepted is None:
            raise RuntimeError("IPC server not started")
        async with asyncio.timeout(timeout):
            return await asyncio.shield(self._accepted)

    async def stop(self) -> None:
        """Stop listening and remove the socket file."""
        if self.server:
            self.server.close()
            await self.server.wait_closed()
            self.server = None
            logger.debug("IPC server stopped: %s", self.socket_path)
        if self._accepted is not None and not self._accepted.done():
            self._accepted.cancel()
        if self.socket_path.exists():
            self.socket_path.unlink()


# ── Client (Worker Process) ────────────────────────────────────

async def open_channel(socket_path: Path, timeout: float = 5.0) -> IPCChannel:
    """Connect the worker end of the channel."""
    async with asyncio.timeout(timeout):
        reader, writer = await asyncio.open_unix_connection(
            path=str(socket_path),
            limit=IPC_BUFFER_LIMIT,
        )
    logger.debug("IPC client connected to %s", socket_path)
    return IPCChannel(reader, writer, name="worker")
