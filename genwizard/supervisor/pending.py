"""
Pending prompt table of the worker: correlation ids mapped to futures.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
from typing import Any

from genwizard.exceptions import ChannelClosedError

logger = logging.getLogger(__name__)


class PendingReplies:
    """
    Outstanding prompts keyed by promise id.

    Ids start at 1 and only ever grow, so an id is never reused even when
    its reply never arrives.  Must only be used from the event loop thread
    that owns it; no locking is done here.
    """

    def __init__(self) -> None:
        self._last_id = 0
        self._futures: dict[int, asyncio.Future[dict[str, Any]]] = {}
        self._destroyed = False

    @property
    def last_id(self) -> int:
        return self._last_id

    def __len__(self) -> int:
        return len(self._futures)

    def __contains__(self, promise_id: object) -> bool:
        return promise_id in self._futures

    def register(self) -> tuple[int, asyncio.Future[dict[str, Any]]]:
        """Allocate the next id and a future for its replies.

        Raises:
            ChannelClosedError: The table was destroyed.
        """
        if self._destroyed:
            raise ChannelClosedError("Pending reply table destroyed")
        self._last_id += 1
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._futures[self._last_id] = future
        return self._last_id, future

    def resolve(self, promise_id: int, replies: dict[str, Any]) -> bool:
        """Complete the future for *promise_id*.

        Returns False (and does nothing else) when no such prompt is pending.
        """
        future = self._futures.pop(promise_id, None)
        if future is None:
            logger.debug("Unmatched reply ignored: promiseId=%s", promise_id)
            return False
        if future.done():
            # Awaiting side was cancelled; the entry is gone either way.
            return False
        future.set_result(replies)
        return True

    def discard(self, promise_id: int) -> None:
        """Drop *promise_id* after its waiter gave up (prompt timeout)."""
        self._futures.pop(promise_id, None)

    def destroy(self, reason: str = "channel closed") -> None:
        """Fail every pending future and refuse new registrations."""
        self._destroyed = True
        futures, self._futures = self._futures, {}
        for promise_id, future in futures.items():
            if not future.done():
                future.set_exception(ChannelClosedError(f"Prompt {promise_id} abandoned: {reason}"))
        if futures:
            logger.warning("Abandoned %d pending prompt(s): %s", len(futures), reason)
