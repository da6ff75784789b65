"""Chat messages and the input record handed to the assistant graph."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


class Role(str, enum.Enum):
    """Who a message comes from."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass
class Message:
    """One chat message, or one streamed chunk of a message."""

    role: Role
    content: str = ""
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.name:
            data["name"] = self.name
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Message":
        if not isinstance(data, Mapping):
            raise ValueError("message must be a JSON object")
        if "role" not in data:
            raise ValueError("message has no role")
        role = Role(data["role"])
        content = data.get("content") or ""
        name = data.get("name") or ""
        if not isinstance(content, str) or not isinstance(name, str):
            raise ValueError("message content and name must be strings")
        return cls(role=role, content=content, name=name)

    def __str__(self) -> str:
        return f"{self.role.value}: {self.content}"


@dataclass
class UserMessage:
    """Input of the assistant graph: the query and the recent history."""

    id: str
    query: str
    history: list[Message] = field(default_factory=list)


def system_message(content: str) -> Message:
    return Message(Role.SYSTEM, content)


def user_message(content: str) -> Message:
    return Message(Role.USER, content)


def assistant_message(content: str) -> Message:
    return Message(Role.ASSISTANT, content)


def concat_messages(messages: Iterable[Message | None]) -> Message:
    """Join streamed chunks into one message.

    Raises ValueError when there is nothing to join, when a chunk is
    missing, or when the chunks disagree on role or name.
    """
    chunks = list(messages)
    if not chunks:
        raise ValueError("no messages to concatenate")
    if any(chunk is None for chunk in chunks):
        raise ValueError("unexpected nil chunk in message stream")

    roles = {chunk.role for chunk in chunks}
    if len(roles) > 1:
        raise ValueError(f"cannot concatenate messages with different roles: {sorted(r.value for r in roles)}")
    names = {chunk.name for chunk in chunks if chunk.name}
    if len(names) > 1:
        raise ValueError(f"cannot concatenate messages with different names: {sorted(names)}")

    return Message(
        role=chunks[0].role,
        content="".join(chunk.content for chunk in chunks),
        name=names.pop() if names else "",
    )