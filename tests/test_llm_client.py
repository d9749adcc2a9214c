"""
Тесты для ModelSession / LLMClient на фейковой chat-модели LangChain
"""

from typing import Any

import pytest
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_core.runnables import RunnableLambda

from quiz.models import build_batch_schema
from services.errors import ConfigurationError
from services.llm_client import LLMClient, content_to_text, create_chat_model
from tests.conftest import make_question_data


class StructuredFakeChatModel(GenericFakeChatModel):
    """Фейковая модель, у которой структурированный парсер ничего не вернул."""

    parsed: Any = None

    def with_structured_output(self, schema, *, include_raw=False, **kwargs):
        def respond(_):
            raw = next(self.messages)
            return {"raw": raw, "parsed": self.parsed, "parsing_error": None}

        return RunnableLambda(respond)


def fake_client(*replies):
    model = GenericFakeChatModel(messages=iter([AIMessage(content=r) for r in replies]))
    return LLMClient(model=model, model_name="fake")


def test_send_appends_exchange_to_history():
    """Тест: обмен репликами попадает в историю сессии"""
    session = fake_client("first answer").open_session("be helpful")

    reply = session.send("hello")

    assert reply == "first answer"
    assert isinstance(session.messages[0], SystemMessage)
    assert [type(m) for m in session.messages[1:]] == [HumanMessage, AIMessage]
    assert session.messages[-1].content == "first answer"


def test_seed_turns_follow_system_message():
    """Тест: seed-реплики идут после системного сообщения"""
    seed = [HumanMessage(content="doc"), AIMessage(content="ready")]
    session = fake_client("x").open_session("directive", seed_turns=seed)

    assert session.messages[0].content == "directive"
    assert session.messages[1:] == seed


def test_stream_yields_fragments_and_records_reply():
    """Тест потоковой выдачи и записи ответа в историю"""
    session = fake_client("hello world").open_session("be helpful")

    fragments = list(session.stream("hi"))

    assert "".join(fragments) == "hello world"
    assert all(fragments)
    assert session.messages[-1].content == "hello world"


def test_closed_session_cannot_be_reused():
    """Тест: закрытая сессия не принимает запросы"""
    session = fake_client("x").open_session("be helpful")
    session.close()

    with pytest.raises(RuntimeError):
        session.send("hello")


def test_concurrent_use_is_rejected():
    """Тест: занятая сессия отклоняет второй вызов"""
    session = fake_client("hello world", "second").open_session("be helpful")

    stream = session.stream("hi")
    next(stream)

    with pytest.raises(RuntimeError):
        session.send("again")

    stream.close()


def test_structured_send_recovers_json_from_raw_text():
    """Тест восстановления JSON из сырого ответа"""
    payload = '```json\n{"questions": [%s]}\n```' % (
        '{"id": 1, "question": "Q?", "options": ["Paris", "London", "Berlin", "Rome"], '
        '"correctAnswer": "Paris", "explanation": "", "difficulty": "Easy"}'
    )
    model = StructuredFakeChatModel(messages=iter([AIMessage(content=payload)]))
    session = LLMClient(model=model).open_session("be helpful")

    batch = session.send("format", schema=build_batch_schema(1))

    assert batch.questions[0].correct_answer == "Paris"
    assert '"correctAnswer"' in session.messages[-1].content


def test_structured_send_uses_parsed_dict():
    """Тест валидации dict от структурированного парсера"""
    model = StructuredFakeChatModel(
        messages=iter([AIMessage(content="")]),
        parsed={"questions": [make_question_data(1)]},
    )
    session = LLMClient(model=model).open_session("be helpful")

    batch = session.send("format", schema=build_batch_schema(1))

    assert batch.questions[0].id == 1


def test_structured_send_empty_response_fails_without_history():
    """Тест: пустой структурированный ответ не попадает в историю"""
    model = StructuredFakeChatModel(messages=iter([AIMessage(content="")]))
    session = LLMClient(model=model).open_session("be helpful")

    with pytest.raises(ValueError):
        session.send("format", schema=build_batch_schema(1))

    assert len(session.messages) == 1


def test_usage_stats_count_requests():
    """Тест подсчета запросов"""
    client = fake_client("one", "two")
    session = client.open_session("be helpful")
    session.send("a")
    session.send("b")

    assert client.get_usage_stats()["total_requests"] == 2


def test_content_to_text_handles_blocks():
    """Тест приведения блоков контента к строке"""
    content = [{"type": "text", "text": "Hello"}, {"type": "reasoning"}, " world"]
    assert content_to_text(content) == "Hello world"
    assert content_to_text(None) == ""


def test_create_chat_model_requires_key():
    """Тест: без ключа модель не создается"""
    with pytest.raises(ConfigurationError):
        create_chat_model({"provider": "openai"}, {})


def test_create_chat_model_unknown_provider():
    """Тест неизвестного провайдера"""
    with pytest.raises(ConfigurationError):
        create_chat_model({"provider": "unknown"}, {"openai_api_key": "x"})
