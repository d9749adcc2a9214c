"""
Слой бизнес-логики (Business Logic Layer).

Этот пакет содержит AI-агенты для генерации тестов по загруженному документу
и агента-ассистента для свободного диалога.

Архитектура агентов:
    - OrchestratorAgent: Центральный координатор, открывает сессию с LLM и запускает граф
    - ReaderAgent: Извлекает из документа факты с цитатами
    - TeacherAgent: Составляет черновики вопросов по фактам
    - CriticAgent: Проверяет вопросы на опору на текст и переписывает слабые
    - FormatterAgent: Возвращает итоговый набор в строгой JSON-схеме
    - ChatAgent: Потоковые ответы ассистента в чате

Workflow:
    1. OrchestratorAgent получает документ и параметры генерации
    2. ReaderAgent анализирует документ
    3. TeacherAgent пишет черновики
    4. CriticAgent рецензирует черновики
    5. FormatterAgent выдает структурированный результат

Примечание:
    Все четыре этапа работают в ОДНОЙ сессии с моделью: каждый следующий
    промпт опирается на ответы предыдущих этапов в истории диалога.
    Сами агенты stateless, сессия живет ровно один вызов генерации.
"""

from agents.orchestrator import OrchestratorAgent
from agents.reader import ReaderAgent
from agents.teacher import TeacherAgent
from agents.critic import CriticAgent
from agents.formatter import FormatterAgent
from agents.chat import ChatAgent, ChatMessage, ChatTranscript

# Публичный API пакета
__all__ = [
    # Главный координатор
    "OrchestratorAgent",

    # Этапы конвейера (stateless)
    "ReaderAgent",
    "TeacherAgent",
    "CriticAgent",
    "FormatterAgent",

    # Чат
    "ChatAgent",
    "ChatMessage",
    "ChatTranscript",
]

# Порядок вызова агентов в pipeline (для документации)
AGENT_PIPELINE = [
    "ReaderAgent",  # Шаг 1: Извлечение фактов
    "TeacherAgent",  # Шаг 2: Черновики вопросов
    "CriticAgent",  # Шаг 3: Рецензия
    "FormatterAgent",  # Шаг 4: Структурированный вывод
]
