"""
Тесты для постобработки ответов LLM
"""

import json

import pytest

from utils.text_cleaner import (
    extract_json_from_markdown,
    extract_json_object,
    parse_llm_json,
    remove_comments,
    truncate_text,
)


def test_extract_json_from_markdown():
    """Тест извлечения JSON из markdown-блока"""
    assert extract_json_from_markdown('```json\n{"a": 1}\n```').strip() == '{"a": 1}'
    assert extract_json_from_markdown('plain {"a": 1}') == 'plain {"a": 1}'


def test_remove_comments():
    """Тест удаления комментариев"""
    text = '{\n  // comment\n  "a": 1 /* inline */\n}'
    assert json.loads(remove_comments(text)) == {"a": 1}


def test_extract_json_object_from_prose():
    """Тест вырезания объекта из окружающего текста"""
    assert extract_json_object('Here you go: {"a": [1, 2]} thanks') == '{"a": [1, 2]}'


def test_parse_llm_json_fenced_with_prose():
    """Тест разбора JSON в markdown-блоке с текстом вокруг"""
    text = 'Sure!\n```json\n{"questions": [{"id": 1}]}\n```\nDone.'
    assert parse_llm_json(text) == {"questions": [{"id": 1}]}


def test_parse_llm_json_trailing_comma():
    """Тест починки висячих запятых"""
    assert parse_llm_json('{"a": 1, "b": [1, 2,],}') == {"a": 1, "b": [1, 2]}


@pytest.mark.parametrize("text", ["", "no json here"])
def test_parse_llm_json_failure(text):
    """Тест ошибки разбора для текста без JSON"""
    with pytest.raises(json.JSONDecodeError):
        parse_llm_json(text)


def test_truncate_text():
    """Тест обрезки текста для логов"""
    assert truncate_text("short") == "short"
    assert truncate_text("x" * 300, max_length=10) == "x" * 7 + "..."
