# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0
"""
Wizard session supervisor package.

Runs generators in a separate worker process and relays their prompts,
output and notifications to the host over a Unix Domain Socket.
"""

from __future__ import annotations

from genwizard.supervisor.protocol import (
    Choice,
    ChoiceQuestion,
    ErrorMessage,
    FreeTextQuestion,
    InformationMessage,
    OutputMessage,
    PromptMessage,
    ReplyMessage,
    decode_message,
    encode_message,
)
from genwizard.supervisor.ipc import IPCChannel, IPCServer, open_channel
from genwizard.supervisor.pending import PendingReplies
from genwizard.supervisor.process_handle import ProcessState, ProcessStats, WorkerHandle
from genwizard.supervisor.host import HostSupervisor
from genwizard.supervisor.lifecycle import SessionLifecycleManager

__all__ = [
    "Choice",
    "ChoiceQuestion",
    "ErrorMessage",
    "FreeTextQuestion",
    "HostSupervisor",
    "IPCChannel",
    "IPCServer",
    "InformationMessage",
    "OutputMessage",
    "PendingReplies",
    "ProcessState",
    "ProcessStats",
    "PromptMessage",
    "ReplyMessage",
    "SessionLifecycleManager",
    "WorkerHandle",
    "decode_message",
    "encode_message",
    "open_channel",
]
