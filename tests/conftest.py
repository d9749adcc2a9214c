"""
Общие фикстуры: фейковые клиент и сессии вместо настоящей LLM.
"""

import pytest

from quiz.models import Question


def make_question_data(question_id, correct="Paris", **overrides):
    data = {
        "id": question_id,
        "question": f"Question {question_id}?",
        "options": ["Paris", "London", "Berlin", "Rome"],
        "correctAnswer": correct,
        "explanation": f"Explanation {question_id}",
        "difficulty": "Medium",
    }
    data.update(overrides)
    return data


def make_questions(count, start=1):
    return [Question.model_validate(make_question_data(i)) for i in range(start, start + count)]


class ScriptedSession:
    """Сессия, которая записывает промпты и отвечает заготовками."""

    def __init__(self, system_directive, seed_turns, formatter_payload=None, fail_at=None, error=None,
                 chunks=None, stream_error=None):
        self.system_directive = system_directive
        self.seed_turns = list(seed_turns or [])
        self.formatter_payload = formatter_payload
        self.fail_at = fail_at
        self.error = error or RuntimeError("network down")
        self.chunks = chunks or []
        self.stream_error = stream_error

        self.prompts = []
        self.schemas = []
        self.closed = False

    def send(self, message, schema=None):
        self.prompts.append(message)
        self.schemas.append(schema)
        if self.fail_at == len(self.prompts):
            raise self.error
        if schema is None:
            return f"reply #{len(self.prompts)}"
        return schema.model_validate(self.formatter_payload)

    def stream(self, message):
        self.prompts.append(message)
        for chunk in self.chunks:
            yield chunk
        if self.stream_error is not None:
            raise self.stream_error

    def close(self):
        self.closed = True


class FakeClient:
    """Заменяет LLMClient: каждая open_session() создает ScriptedSession."""

    def __init__(self, **session_kwargs):
        self.session_kwargs = session_kwargs
        self.sessions = []

    def open_session(self, system_directive, seed_turns=None):
        session = ScriptedSession(system_directive, seed_turns, **self.session_kwargs)
        self.sessions.append(session)
        return session

    def get_usage_stats(self):
        return {"prompt_tokens": 0, "completion_tokens": 0, "total_requests": len(self.sessions)}


@pytest.fixture
def sample_questions():
    """Фикстура с набором из 5 вопросов (id 1..5, правильный ответ Paris)"""
    return make_questions(5)


@pytest.fixture
def formatter_payload():
    """Корректный ответ Formatter-а на 5 вопросов"""
    return {"questions": [make_question_data(i) for i in range(1, 6)]}
