# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

"""Unified exception hierarchy for GenWizard.

All domain-specific exceptions derive from :class:`GenWizardError`,
enabling callers to catch the entire family with a single clause::

    try:
        ...
    except GenWizardError as e:
        logger.error("Domain error: %s", e)
"""

from __future__ import annotations


class GenWizardError(Exception):
    """Base exception for all GenWizard errors."""


# ── Process / Session ────────────────────────────────────────


class ProcessError(GenWizardError):
    """Worker process and session errors."""


class NoWorkspaceOpenError(ProcessError):
    """A session was requested without a usable workspace root."""


class WorkerSpawnError(ProcessError):
    """The worker process could not be spawned."""


class ChannelClosedError(ProcessError):
    """The message channel to the peer process is gone."""


# ── Protocol ─────────────────────────────────────────────────


class ProtocolError(GenWizardError):
    """Message protocol errors."""


class MalformedMessageError(ProtocolError):
    """Inbound line could not be decoded into a message."""


# ── Generators ───────────────────────────────────────────────


class GeneratorError(GenWizardError):
    """Generator engine errors."""


class GeneratorNotFoundError(GeneratorError):
    """Requested generator is not among the discovered ones."""


class GeneratorLoadError(GeneratorError):
    """Generator module could not be imported or defines no generator."""


class GeneratorRunFailedError(GeneratorError):
    """Generator raised while running."""


# ── Configuration ────────────────────────────────────────────


class ConfigError(GenWizardError):
    """Configuration errors."""


class ConfigValidationError(ConfigError):
    """Configuration validation failure."""
