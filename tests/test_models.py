"""
Тесты для моделей квиза
"""

import pytest
from pydantic import ValidationError

from quiz.models import DifficultyTier, GenerationParameters, Question, build_batch_schema
from tests.conftest import make_question_data


def test_question_parses_camel_case_alias():
    """Тест разбора поля correctAnswer по алиасу"""
    question = Question.model_validate(make_question_data(1))

    assert question.correct_answer == "Paris"
    assert question.difficulty is DifficultyTier.MEDIUM
    assert question.model_dump(by_alias=True)["correctAnswer"] == "Paris"


def test_correct_answer_snaps_to_option_spelling():
    """Тест привязки правильного ответа к написанию варианта"""
    question = Question.model_validate(make_question_data(1, correct="  paris "))
    assert question.correct_answer == "Paris"


def test_correct_answer_outside_options_is_rejected():
    """Тест отказа, если правильного ответа нет среди вариантов"""
    with pytest.raises(ValidationError):
        Question.model_validate(make_question_data(1, correct="Madrid"))


@pytest.mark.parametrize("options", [["A", "B", "C"], ["A", "B", "C", "D", "E"]])
def test_question_requires_four_options(options):
    """Тест требования ровно четырех вариантов"""
    with pytest.raises(ValidationError):
        Question.model_validate(make_question_data(1, correct="A", options=options))


def test_unknown_difficulty_tier_is_rejected():
    """Тест отказа для неизвестного уровня сложности"""
    with pytest.raises(ValidationError):
        Question.model_validate(make_question_data(1, difficulty="Extreme"))


def test_schema_descriptions_are_english():
    """Тест описаний полей в JSON-схеме, которую видит модель"""
    properties = Question.model_json_schema(by_alias=True)["properties"]

    assert properties["options"]["description"] == "Exactly 4 answer options"
    assert all(prop.get("description", "").isascii() for prop in properties.values())


def test_batch_schema_enforces_exact_count():
    """Тест проверки точного количества вопросов схемой"""
    schema = build_batch_schema(3)

    batch = schema.model_validate({"questions": [make_question_data(i) for i in range(1, 4)]})
    assert len(batch.questions) == 3

    with pytest.raises(ValidationError):
        schema.model_validate({"questions": [make_question_data(i) for i in range(1, 3)]})
    with pytest.raises(ValidationError):
        schema.model_validate({"questions": [make_question_data(i) for i in range(1, 5)]})


def test_batch_schema_rejects_duplicate_ids():
    """Тест отказа для набора с повторяющимися id"""
    schema = build_batch_schema(2)

    with pytest.raises(ValidationError, match="unique"):
        schema.model_validate({"questions": [make_question_data(1), make_question_data(1)]})


def test_generation_parameters_defaults():
    """Тест значений параметров генерации по умолчанию"""
    params = GenerationParameters()

    assert params.difficulty == 5
    assert params.question_count == 5
    assert params.topic_label == "General Overview"


def test_generation_parameters_blank_topic_uses_default_label():
    """Тест подписи темы для пустой и заданной темы"""
    assert GenerationParameters(topic="   ").topic_label == "General Overview"
    assert GenerationParameters(topic="Thermodynamics").topic_label == "Thermodynamics"


@pytest.mark.parametrize("field,value", [
    ("difficulty", 0),
    ("difficulty", 11),
    ("question_count", 0),
    ("question_count", 21),
])
def test_generation_parameters_ranges(field, value):
    """Тест границ сложности и количества вопросов"""
    with pytest.raises(ValidationError):
        GenerationParameters(**{field: value})


def test_generation_parameters_are_frozen():
    """Тест неизменяемости параметров генерации"""
    params = GenerationParameters(difficulty=7)
    with pytest.raises(ValidationError):
        params.difficulty = 3
