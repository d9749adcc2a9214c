"""
Иерархия исключений приложения.

Каждое исключение соответствует одной точке отказа:
    - ConfigurationError: нет ключей или настроек до первого вызова LLM
    - IngestRejected: документ неподдерживаемого типа (сессия не открывается)
    - PipelineStageFailure: любой сбой в цепочке Reader → Teacher → Critic → Formatter
    - StreamInterrupted: обрыв потокового ответа в чате

Незаполненный квиз при submit() исключением НЕ является — это штатное
состояние, которое возвращается через SubmitResult (см. quiz.runner).
"""

from typing import Optional


class ConfigurationError(ValueError):
    """Отсутствуют обязательные ключи или настройки провайдера."""


class IngestRejected(ValueError):
    """Документ отклонён загрузчиком (тип не из белого списка или пустой файл)."""


class PipelineStageFailure(Exception):
    """
    Единая ошибка генерации вопросов.

    Оборачивает исходную причину (доступна через __cause__) и хранит имя
    этапа, на котором конвейер остановился.
    """

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class StreamInterrupted(Exception):
    """Потоковый ответ модели оборвался после нуля или более фрагментов."""
