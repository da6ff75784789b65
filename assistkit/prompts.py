"""Chat templates with f-string style variables and history placeholders."""

from __future__ import annotations

import string
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Union

from assistkit.messages import (
    Message,
    UserMessage,
    assistant_message,
    system_message,
    user_message,
)


class TemplateError(ValueError):
    """A template could not be filled in."""


class _StrictFormatter(string.Formatter):
    def get_value(self, key, args, kwargs):
        if isinstance(key, int):
            raise TemplateError(f"positional field {{{key}}} is not supported")
        try:
            return kwargs[key]
        except KeyError:
            raise TemplateError(f"missing template variable: {key}") from None


_FORMATTER = _StrictFormatter()


def format_fstring(template: str, variables: Mapping[str, Any]) -> str:
    """Fill ``{name}`` fields of ``template`` from ``variables``."""
    try:
        return _FORMATTER.vformat(template, (), dict(variables))
    except TemplateError:
        raise
    except (ValueError, IndexError, AttributeError, KeyError) as exc:
        raise TemplateError(f"cannot format template: {exc}") from exc


@dataclass(frozen=True)
class MessagesPlaceholder:
    """Stands for a list of messages taken from the variable ``key``."""

    key: str
    optional: bool = False

    def _expand(self, variables: Mapping[str, Any]) -> list[Message]:
        if self.key not in variables:
            if self.optional:
                return []
            raise TemplateError(f"missing messages for placeholder: {self.key}")
        value = variables[self.key]
        if value is None and self.optional:
            return []
        if not isinstance(value, (list, tuple)) or not all(isinstance(m, Message) for m in value):
            raise TemplateError(f"placeholder {self.key} needs a list of messages")
        return list(value)


TemplatePart = Union[Message, MessagesPlaceholder]


class ChatTemplate:
    """A sequence of message templates and history placeholders."""

    def __init__(self, *parts: TemplatePart) -> None:
        self.parts: tuple[TemplatePart, ...] = parts

    def format(self, variables: Mapping[str, Any]) -> list[Message]:
        messages: list[Message] = []
        for part in self.parts:
            if isinstance(part, MessagesPlaceholder):
                messages.extend(part._expand(variables))
            else:
                messages.append(replace(part, content=format_fstring(part.content, variables)))
        return messages


def create_chat_template() -> ChatTemplate:
    """The encouraging-mentor template of the chat quickstart."""
    return ChatTemplate(
        system_message(
            "你是一个{role}。你需要用{style}的语气回答问题。你的目标是帮助程序员保持积极乐观的心态，"
            "提供技术建议的同时也要关注他们的心理健康。"
        ),
        MessagesPlaceholder("chat_history", optional=True),
        user_message("问题: {question}"),
    )


def create_messages_from_template() -> list[Message]:
    """Fill the quickstart template with its sample conversation."""
    return create_chat_template().format(
        {
            "role": "程序员鼓励师",
            "style": "积极、温暖且专业",
            "question": "我的代码一直报错，感觉好沮丧，该怎么办？",
            "chat_history": [
                user_message("你好"),
                assistant_message(
                    "嘿！我是你的程序员鼓励师！记住，每个优秀的程序员都是从 Debug 中成长起来的。有什么我可以帮你的吗？"
                ),
                user_message("我觉得自己写的代码太烂了"),
                assistant_message(
                    "每个程序员都经历过这个阶段！重要的是你在不断学习和进步。让我们一起看看代码，"
                    "我相信通过重构和优化，它会变得更好。记住，Rome wasn't built in a day，"
                    "代码质量是通过持续改进来提升的。"
                ),
            ],
        }
    )


SYSTEM_PROMPT = """
# Role: Eino Expert Assistant

## Core Competencies
- knowledge of Eino framework and ecosystem
- Project scaffolding and best practices consultation
- Documentation navigation and implementation guidance
- Search web, clone github repo, open file/url, task management

## Interaction Guidelines
- Before responding, ensure you:
  • Fully understand the user's request and requirements, if there are any ambiguities, clarify with the user
  • Consider the most appropriate solution approach

- When providing assistance:
  • Be clear and concise
  • Include practical examples when relevant
  • Reference documentation when helpful
  • Suggest improvements or next steps if applicable

- If a request exceeds your capabilities:
  • Clearly communicate your limitations, suggest alternative approaches if possible

- If the question is compound or complex, you need to think step by step, avoiding giving low-quality answers directly.

## Context Information
- Current Date: {date}
- Related Documents: |-
==== doc start ====
  {documents}
==== doc end ====
"""


def agent_chat_template() -> ChatTemplate:
    """System prompt, optional history, then the user's content."""
    return ChatTemplate(
        system_message(SYSTEM_PROMPT),
        MessagesPlaceholder("history", optional=True),
        user_message("{content}"),
    )


def query_from_input(user_message: UserMessage) -> str:
    """The retrieval query of a user message."""
    return user_message.query


def variables_from_input(user_message: UserMessage, now: datetime | None = None) -> dict[str, Any]:
    """Template variables for a user message: content, history and date."""
    moment = now if now is not None else datetime.now()
    return {
        "content": user_message.query,
        "history": user_message.history,
        "date": moment.strftime("%Y-%m-%d %H:%M:%S"),
    }