"""
Слой утилит (Utility Layer).

Этот пакет содержит вспомогательные Pure Functions, которые используются
по всему проекту. Утилиты не содержат бизнес-логики и не обращаются к
внешним сервисам.

Модули:
    - text_cleaner: Постобработка ответов от LLM (очистка JSON, markdown)
    - forms_export: Рендеринг Google Apps Script для экспорта квиза в Google Forms

Принципы:
    - Детерминированность: одинаковый вход → одинаковый выход
    - Независимость от состояния системы
"""

# Импорты из модуля text_cleaner
from utils.text_cleaner import (
    extract_json_from_markdown,
    remove_comments,
    extract_json_object,
    clean_json_text,
    parse_llm_json,
    fix_common_json_errors,
    truncate_text,
)

# Импорты из модуля forms_export
from utils.forms_export import (
    render_apps_script,
    escape_script_string,
    questions_to_script_json,
)

# Публичный API пакета
__all__ = [
    # Функции очистки текста
    "extract_json_from_markdown",
    "remove_comments",
    "extract_json_object",
    "clean_json_text",
    "parse_llm_json",
    "fix_common_json_errors",
    "truncate_text",

    # Экспорт
    "render_apps_script",
    "escape_script_string",
    "questions_to_script_json",
]
