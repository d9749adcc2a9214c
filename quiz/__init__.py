"""
Слой квиза (Assessment Layer).

In-memory модели и состояние квиза после генерации:
    - Question / GenerationParameters: модели данных (Pydantic)
    - QuestionSetEditor: ручная правка сгенерированных вопросов (Human in the Loop)
    - AssessmentRunner: сбор ответов, проверка заполненности, подсчет баллов

Слой не обращается к LLM и не знает об агентах.
"""

from quiz.models import (
    DifficultyTier,
    GenerationParameters,
    Question,
    QuestionBatch,
    build_batch_schema,
)
from quiz.editor import QuestionSetEditor
from quiz.runner import AssessmentRunner, AssessmentState, SubmitResult

__all__ = [
    "DifficultyTier",
    "GenerationParameters",
    "Question",
    "QuestionBatch",
    "build_batch_schema",
    "QuestionSetEditor",
    "AssessmentRunner",
    "AssessmentState",
    "SubmitResult",
]
