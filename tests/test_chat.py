"""
Тесты для ChatAgent и ChatTranscript
"""

import pytest
from langchain_core.messages import AIMessage, HumanMessage

from agents.chat import (
    CHAT_SYSTEM_INSTRUCTION,
    ERROR_MESSAGE,
    WELCOME_MESSAGE,
    ChatAgent,
    ChatMessage,
    ChatTranscript,
)
from services.errors import StreamInterrupted
from tests.conftest import FakeClient


def transcript_for(**session_kwargs):
    client = FakeClient(**session_kwargs)
    return client, ChatTranscript(ChatAgent(client))


def test_transcript_starts_with_welcome():
    """Тест приветственного сообщения в начале ленты"""
    _, transcript = transcript_for()

    assert len(transcript.messages) == 1
    assert transcript.messages[0].id == "welcome"
    assert transcript.messages[0].text == WELCOME_MESSAGE


@pytest.mark.parametrize("chunks", [["He", "llo"], ["Hello"]])
def test_fragmentation_does_not_change_text(chunks):
    """Тест: разбиение на фрагменты не меняет итоговый текст"""
    _, transcript = transcript_for(chunks=chunks)

    fragments = list(transcript.send("hi"))

    assert fragments == chunks
    assert transcript.last_reply.text == "Hello"
    assert [m.role for m in transcript.messages] == ["model", "user", "model"]


def test_interruption_keeps_partial_reply_and_adds_error():
    """Тест обрыва: частичный ответ остается, ошибка добавляется отдельно"""
    _, transcript = transcript_for(chunks=["Par", "tial"], stream_error=ConnectionError("reset"))

    fragments = list(transcript.send("hi"))

    assert fragments == ["Par", "tial"]
    assert transcript.last_reply.text == "Partial"
    error = transcript.messages[-1]
    assert error.role == "system"
    assert error.is_error is True
    assert error.text == ERROR_MESSAGE


def test_interruption_before_first_fragment():
    """Тест обрыва до первого фрагмента"""
    _, transcript = transcript_for(stream_error=TimeoutError("timeout"))

    list(transcript.send("hi"))

    assert transcript.last_reply.text == ""
    assert transcript.messages[-1].is_error is True


def test_blank_message_is_ignored():
    """Тест: пустое сообщение игнорируется"""
    client, transcript = transcript_for(chunks=["x"])

    assert list(transcript.send("   ")) == []
    assert len(transcript.messages) == 1
    assert client.sessions == []


def test_history_replayed_without_error_messages():
    """Тест: история проигрывается без сообщений об ошибках"""
    client = FakeClient(chunks=["ok"])
    agent = ChatAgent(client)
    history = [
        ChatMessage(role="model", text="Welcome"),
        ChatMessage(role="user", text="Question"),
        ChatMessage(role="system", text=ERROR_MESSAGE, is_error=True),
    ]

    assert list(agent.stream_reply(history, "again")) == ["ok"]

    session = client.sessions[0]
    assert session.system_directive == CHAT_SYSTEM_INSTRUCTION
    assert [type(m) for m in session.seed_turns] == [AIMessage, HumanMessage]
    assert session.prompts == ["again"]
    assert session.closed is True


def test_stream_reply_wraps_errors():
    """Тест: сбой потока превращается в StreamInterrupted"""
    error = ConnectionError("reset")
    client = FakeClient(chunks=["a"], stream_error=error)
    agent = ChatAgent(client)

    stream = agent.stream_reply([], "hi")
    assert next(stream) == "a"
    with pytest.raises(StreamInterrupted) as exc_info:
        next(stream)

    assert exc_info.value.__cause__ is error
    assert client.sessions[0].closed is True


def test_each_turn_opens_new_session():
    """Тест: каждая реплика открывает новую сессию"""
    client, transcript = transcript_for(chunks=["ok"])

    list(transcript.send("one"))
    list(transcript.send("two"))

    assert len(client.sessions) == 2
    # welcome + первая пара реплик
    assert len(client.sessions[1].seed_turns) == 3


def test_empty_reply_not_replayed_after_early_interruption():
    """Тест: пустой ответ после обрыва не попадает в историю следующей реплики"""
    client = FakeClient(stream_error=TimeoutError("timeout"))
    transcript = ChatTranscript(ChatAgent(client))
    list(transcript.send("first"))

    client.session_kwargs = {"chunks": ["ok"]}
    list(transcript.send("second"))

    seed = client.sessions[1].seed_turns
    assert [type(m) for m in seed] == [AIMessage, HumanMessage]
    assert all(m.content for m in seed)
    assert transcript.last_reply.text == "ok"
