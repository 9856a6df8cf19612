"""
Wizard message protocol: message types, question union and JSON-lines codec.
"""

# GenWizard - Generator Wizard Bridge
# Copyright (C) 2026 GenWizard Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from genwizard.exceptions import MalformedMessageError

# ── Actions ────────────────────────────────────────────────────────

ACTION_OUTPUT = "output"
ACTION_INFORMATION = "informationMessage"
ACTION_ERROR = "errorMessage"
ACTION_PROMPT = "prompt"
ACTION_REPLY = "reply"


# ── Questions ──────────────────────────────────────────────────────

@dataclass
class Choice:
    """One entry of a pick-one question."""

    name: str
    value: Any = None
    detail: str | None = None

    def __post_init__(self) -> None:
        if self.value is None:
            self.value = self.name

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "value": self.value}
        if self.detail is not None:
            data["detail"] = self.detail
        return data

    @classmethod
    def from_raw(cls, raw: Any) -> Choice:
        if isinstance(raw, str):
            return cls(name=raw, value=raw)
        if isinstance(raw, dict) and "name" in raw:
            return cls(
                name=str(raw["name"]),
                value=raw.get("value"),
                detail=raw.get("detail"),
            )
        raise MalformedMessageError(f"Invalid choice: {raw!r}")


@dataclass
class ChoiceQuestion:
    """Question answered by picking one of ``choices``."""

    name: str
    message: str
    choices: list[Choice] = field(default_factory=list)
    default: Any = None

    def resolve(self, picked: Choice | None) -> Any:
        """Answer for *picked*; the question default when nothing was picked."""
        if picked is None:
            return self.default
        return picked.value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "message": self.message,
            "choices": [c.to_dict() for c in self.choices],
        }
        if self.default is not None:
            data["default"] = self.default
        return data


@dataclass
class FreeTextQuestion:
    """Question answered by typing text."""

    name: str
    message: str
    placeholder: str | None = None
    default: Any = None

    @property
    def effective_default(self) -> Any:
        # Confirm-style questions carry a bool default; the text box shows "y".
        if isinstance(self.default, bool):
            return "y"
        return self.default

    @property
    def effective_placeholder(self) -> str:
        return self.placeholder or self.name

    def resolve(self, answer: str | None) -> Any:
        """Typed *answer*, or the effective default when it is empty."""
        if answer:
            return answer
        default = self.effective_default
        return "" if default is None else default

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "message": self.message}
        if self.placeholder is not None:
            data["placeholder"] = self.placeholder
        if self.default is not None:
            data["default"] = self.default
        return data


Question = Union[ChoiceQuestion, FreeTextQuestion]


def question_from_dict(data: Any) -> Question:
    """Build a question; the presence of ``choices`` selects pick-one semantics."""
    if not isinstance(data, dict):
        raise MalformedMessageError(f"Question must be an object, got {type(data).__name__}")
    try:
        name = str(data["name"])
    except KeyError as e:
        raise MalformedMessageError("Question without 'name'") from e
    message = str(data.get("message", name))

    if data.get("choices") is not None:
        raw_choices = data["choices"]
        if not isinstance(raw_choices, list):
            raise MalformedMessageError("Question 'choices' must be a list")
        return ChoiceQuestion(
            name=name,
            message=message,
            choices=[Choice.from_raw(c) for c in raw_choices],
            default=data.get("default"),
        )
    return FreeTextQuestion(
        name=name,
        message=message,
        placeholder=data.get("placeholder"),
        default=data.get("default"),
    )


def as_question(value: Question | dict[str, Any]) -> Question:
    if isinstance(value, (ChoiceQuestion, FreeTextQuestion)):
        return value
    return question_from_dict(value)


# ── Messages ───────────────────────────────────────────────────────

@dataclass
class OutputMessage:
    """A log line to append to the wizard output view."""

    action: ClassVar[str] = ACTION_OUTPUT

    prefix: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action, "prefix": self.prefix, "message": self.message}


@dataclass
class InformationMessage:
    """An information notification."""

    action: ClassVar[str] = ACTION_INFORMATION

    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action, "message": self.message}


@dataclass
class ErrorMessage:
    """An error notification."""

    action: ClassVar[str] = ACTION_ERROR

    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.action, "message": self.message}


@dataclass
class PromptMessage:
    """Worker asks the host to collect one answer."""

    action: ClassVar[str] = ACTION_PROMPT

    promise_id: int
    question: Question

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "promiseId": self.promise_id,
            "question": self.question.to_dict(),
        }


@dataclass
class ReplyMessage:
    """Host answers the prompt carrying the same ``promise_id``."""

    action: ClassVar[str] = ACTION_REPLY

    promise_id: int
    replies: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action,
            "promiseId": self.promise_id,
            "replies": self.replies,
        }


Message = Union[OutputMessage, InformationMessage, ErrorMessage, PromptMessage, ReplyMessage]


# ── Codec ──────────────────────────────────────────────────────────

def encode_message(message: Message) -> str:
    """Serialize to a single JSON line (without the trailing newline)."""
    return json.dumps(message.to_dict(), default=str, ensure_ascii=False)


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise MalformedMessageError(f"'{data.get('action')}' message without '{key}'")
    return data[key]


def _promise_id(data: dict[str, Any]) -> int:
    raw = _require(data, "promiseId")
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise MalformedMessageError(f"promiseId must be an integer, got {raw!r}")
    return raw


def message_from_dict(data: Any) -> Message | None:
    """Decode a message object.

    Returns None for an unknown ``action`` so receivers can skip it.

    Raises:
        MalformedMessageError: A known action lacks required fields.
    """
    if not isinstance(data, dict):
        raise MalformedMessageError(f"Message must be an object, got {type(data).__name__}")

    action = data.get("action")
    if action == ACTION_OUTPUT:
        return OutputMessage(
            prefix=str(data.get("prefix") or ""),
            message=str(_require(data, "message")),
        )
    if action == ACTION_INFORMATION:
        return InformationMessage(message=str(_require(data, "message")))
    if action == ACTION_ERROR:
        return ErrorMessage(message=str(_require(data, "message")))
    if action == ACTION_PROMPT:
        return PromptMessage(
            promise_id=_promise_id(data),
            question=question_from_dict(_require(data, "question")),
        )
    if action == ACTION_REPLY:
        replies = _require(data, "replies")
        if not isinstance(replies, dict):
            raise MalformedMessageError("'replies' must be an object")
        return ReplyMessage(promise_id=_promise_id(data), replies=replies)
    return None


def decode_message(line: str) -> Message | None:
    """Deserialize one JSON line."""
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedMessageError(f"Invalid JSON: {e}") from e
    return message_from_dict(data)
