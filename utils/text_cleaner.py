# utils/text_cleaner.py

"""
Набор чистых функций (Pure Functions) для постобработки ответов от LLM.

Используется как запасной путь, когда структурированный парсер LangChain
не смог разобрать ответ Formatter-агента, а также для коротких превью в логах.

Основные задачи:
    - Извлечение JSON из текста с markdown разметкой
    - Удаление комментариев из JSON
    - Попытка "починки" невалидного JSON
"""

import json
import re
from typing import Any, Dict, List, Union


_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)


def extract_json_from_markdown(text: str) -> str:
    """
    Извлекает содержимое первого markdown-блока кода.

    LLM часто возвращает JSON в формате ```json { ... } ```.

    Args:
        text: Текст, потенциально содержащий JSON в markdown блоке

    Returns:
        str: Содержимое блока или исходный текст, если блока нет

    Examples:
        >>> extract_json_from_markdown('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
        >>> extract_json_from_markdown('Some text {"a": 1} more text')
        'Some text {"a": 1} more text'
    """
    text = text.strip()
    match = _FENCE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text


def remove_comments(text: str) -> str:
    """
    Удаляет комментарии // (только целые строки) и /* ... */.

    Комментарии в конце строки не трогаем: внутри значений бывают URL (http://...).

    Examples:
        >>> remove_comments('{\\n// comment\\n"a": 1}')
        '{\\n\\n"a": 1}'
    """
    text = re.sub(r'/\*.*?\*/', '', text, flags=re.DOTALL)
    text = re.sub(r'^\s*//.*$', '', text, flags=re.MULTILINE)
    return text


def extract_json_object(text: str) -> str:
    """
    Извлекает JSON объект или массив из окружающего текста.

    Берется участок от первой открывающей до последней закрывающей скобки
    того типа, который встречается в тексте раньше.

    Examples:
        >>> extract_json_object('Here: {"a": [1]} done')
        '{"a": [1]}'
        >>> extract_json_object('Text [1, 2, 3] end')
        '[1, 2, 3]'
    """
    starts = [i for i in (text.find('{'), text.find('[')) if i != -1]
    if not starts:
        return ""

    start = min(starts)
    closing = '}' if text[start] == '{' else ']'
    end = text.rfind(closing)
    if end <= start:
        return ""
    return text[start:end + 1]


def fix_common_json_errors(text: str) -> str:
    """
    Исправление частых ошибок LLM в JSON: висячие запятые и одинарные кавычки.

    Warning:
        Не гарантирует валидный JSON, только пытается исправить частые ошибки
    """
    if not text:
        return text

    text = re.sub(r',\s*]', ']', text)
    text = re.sub(r',\s*}', '}', text)

    text = re.sub(r"'([^']*)':", r'"\1":', text)
    text = re.sub(r":\s*'([^']*)'", r': "\1"', text)

    return text


def clean_json_text(text: str) -> str:
    """Markdown → без комментариев → strip."""
    text = extract_json_from_markdown(text)
    text = remove_comments(text)
    return text.strip()


def parse_llm_json(text: str) -> Union[Dict[str, Any], List[Any]]:
    """
    Парсинг JSON из ответа LLM с автоматической очисткой.

    Стратегии по очереди: прямой json.loads, очистка markdown/комментариев,
    вырезание объекта из окружающего текста, починка частых ошибок.

    Args:
        text: Текст от LLM, потенциально содержащий JSON

    Returns:
        Распарсенный dict/list

    Raises:
        json.JSONDecodeError: если ни одна стратегия не сработала

    Examples:
        >>> parse_llm_json('```json\\n{"a": 1}\\n```')
        {'a': 1}
    """
    if not text or not text.strip():
        raise json.JSONDecodeError("Empty string", text or "", 0)

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    cleaned = clean_json_text(text)
    try:
        return json.loads(cleaned, strict=False)
    except json.JSONDecodeError:
        pass

    extracted = extract_json_object(cleaned)
    if extracted:
        try:
            return json.loads(extracted, strict=False)
        except json.JSONDecodeError:
            pass

    # Последняя попытка: ошибку пробрасываем, чтобы было видно, что не так
    return json.loads(fix_common_json_errors(extracted or cleaned), strict=False)


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Обрезает текст до указанной длины с добавлением суффикса.
    Используется для превью длинных ответов LLM в логах.

    Examples:
        >>> truncate_text('a' * 100, max_length=10)
        'aaaaaaa...'
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
