from datetime import datetime

import pytest

from assistkit.messages import Role, UserMessage, assistant_message, user_message
from assistkit.prompts import (
    SYSTEM_PROMPT,
    ChatTemplate,
    MessagesPlaceholder,
    TemplateError,
    agent_chat_template,
    create_chat_template,
    create_messages_from_template,
    format_fstring,
    query_from_input,
    variables_from_input,
)


def test_format_fstring_fills_fields():
    assert format_fstring("hi {who}", {"who": "you"}) == "hi you"


def test_format_fstring_escaped_braces():
    assert format_fstring("{{x}} {y}", {"y": "1"}) == "{x} 1"


def test_format_fstring_missing_variable():
    with pytest.raises(TemplateError):
        format_fstring("hi {who}", {})


def test_format_fstring_positional_field_rejected():
    with pytest.raises(TemplateError):
        format_fstring("hi {}", {"x": 1})


def test_quickstart_messages_match_documented_output():
    messages = create_messages_from_template()
    assert [m.role for m in messages] == [
        Role.SYSTEM,
        Role.USER,
        Role.ASSISTANT,
        Role.USER,
        Role.ASSISTANT,
        Role.USER,
    ]
    assert messages[0].content == (
        "你是一个程序员鼓励师。你需要用积极、温暖且专业的语气回答问题。你的目标是帮助程序员保持积极乐观的心态，"
        "提供技术建议的同时也要关注他们的心理健康。"
    )
    assert messages[1].content == "你好"
    assert messages[-1].content == "问题: 我的代码一直报错，感觉好沮丧，该怎么办？"


def test_optional_placeholder_may_be_absent():
    messages = create_chat_template().format({"role": "r", "style": "s", "question": "q"})
    assert [m.content for m in messages][1:] == ["问题: q"]


def test_required_placeholder_missing_fails():
    template = ChatTemplate(MessagesPlaceholder("conversations"))
    with pytest.raises(TemplateError):
        template.format({})


def test_placeholder_needs_messages():
    template = ChatTemplate(MessagesPlaceholder("conversations"))
    with pytest.raises(TemplateError):
        template.format({"conversations": ["text"]})


def test_placeholder_messages_are_not_formatted():
    history = [user_message("{literal}")]
    out = ChatTemplate(MessagesPlaceholder("h")).format({"h": history})
    assert out == history


def test_agent_template_layout():
    history = [user_message("earlier"), assistant_message("answer")]
    out = agent_chat_template().format(
        {"date": "D", "documents": "DOCS", "history": history, "content": "now"}
    )
    assert out[0].role is Role.SYSTEM
    assert "- Current Date: D" in out[0].content
    assert "  DOCS\n==== doc end ====" in out[0].content
    assert out[1:3] == history
    assert out[3] == user_message("now")


def test_agent_template_keeps_prompt_text():
    out = agent_chat_template().format({"date": "D", "documents": "X", "content": "c"})
    assert out[0].content.startswith("\n# Role: Eino Expert Assistant")
    assert len(out) == 2
    assert "{date}" in SYSTEM_PROMPT


def test_query_from_input():
    assert query_from_input(UserMessage(id="1", query="what is eino")) == "what is eino"


def test_variables_from_input():
    history = [user_message("x")]
    um = UserMessage(id="7", query="hello", history=history)
    variables = variables_from_input(um, datetime(2025, 1, 2, 3, 4, 5))
    assert variables == {"content": "hello", "history": history, "date": "2025-01-02 03:04:05"}


def test_variables_from_input_default_date_format():
    variables = variables_from_input(UserMessage(id="1", query="q"))
    parsed = datetime.strptime(variables["date"], "%Y-%m-%d %H:%M:%S")
    assert abs((datetime.now() - parsed).total_seconds()) < 60