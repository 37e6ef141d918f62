"""Tests for per-turn system prompt augmentation."""

from datetime import datetime

from aetheria.chat.augment import (
    FALLBACK_SYSTEM_PROMPT,
    GROUNDING_HEADER,
    REASONING_PROTOCOL,
    augment_messages,
    latest_user_text,
    time_marker,
)
from aetheria.llm.client import Message

NOW = datetime(2024, 3, 5, 14, 30)


def test_time_marker_format():
    assert time_marker(NOW) == "[CURRENT TIME: Tuesday, 05 March 2024 14:30]"


def test_time_marker_and_system_prompt_only():
    messages = [Message("system", "Be precise."), Message("user", "Explain TCP")]

    result = augment_messages(messages, NOW)

    assert result[0].role == "system"
    assert result[0].content == f"{time_marker(NOW)}\n\nBe precise."
    assert result[1:] == messages[1:]


def test_input_list_not_modified():
    messages = [Message("system", "Be precise."), Message("user", "hi")]

    augment_messages(messages, NOW, grounding="results", reasoning=True)

    assert messages[0].content == "Be precise."


def test_missing_system_message_uses_fallback():
    result = augment_messages([Message("user", "hi")], NOW)

    assert FALLBACK_SYSTEM_PROMPT in result[0].content
    assert [m.role for m in result] == ["system", "user"]


def test_grounding_and_reasoning_order():
    messages = [Message("system", "Be precise."), Message("user", "news?")]

    content = augment_messages(messages, NOW, grounding="1. Headline", reasoning=True)[0].content

    assert content.index("Be precise.") < content.index(GROUNDING_HEADER)
    assert content.index("[WEB RESULTS]\n1. Headline") < content.index(REASONING_PROTOCOL)


def test_no_grounding_header_without_grounding():
    messages = [Message("system", "Be precise."), Message("user", "news?")]

    content = augment_messages(messages, NOW, grounding=None)[0].content

    assert "NEURAL GROUNDING" not in content
    assert "REASONING PROTOCOL" not in content


def test_latest_user_text():
    messages = [
        Message("user", "first"),
        Message("assistant", "reply"),
        Message("user", "second"),
        Message("assistant", ""),
    ]

    assert latest_user_text(messages) == "second"
    assert latest_user_text([Message("system", "x")]) == ""
