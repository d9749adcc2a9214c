"""
Модели данных квиза (Pydantic).

Одна и та же модель Question используется и как схема ответа Formatter-агента,
и как запись в редакторе/раннере. Имена полей в JSON-схеме совпадают с тем,
что видит модель: id, question, options, correctAnswer, explanation, difficulty.
"""

from enum import Enum
from typing import List, Optional, Type
import logging

from pydantic import BaseModel, ConfigDict, Field, create_model, model_validator

logger = logging.getLogger(__name__)


OPTIONS_PER_QUESTION = 4
MIN_DIFFICULTY, MAX_DIFFICULTY = 1, 10
MIN_QUESTIONS, MAX_QUESTIONS = 1, 20


class DifficultyTier(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


# ============================================================================
# ВОПРОС
# ============================================================================

class Question(BaseModel):
    """Один вопрос с четырьмя вариантами ответа."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(description="Unique question number within the set, starting from 1")
    question: str = Field(min_length=1, description="The question text")
    options: List[str] = Field(
        min_length=OPTIONS_PER_QUESTION,
        max_length=OPTIONS_PER_QUESTION,
        description="Exactly 4 answer options",
    )
    correct_answer: str = Field(
        alias="correctAnswer",
        description="Must match one of the options exactly",
    )
    explanation: str = Field(default="", description="Brief explanation referencing the source text")
    difficulty: DifficultyTier = Field(default=DifficultyTier.MEDIUM, description="One of: Easy, Medium, Hard")

    @model_validator(mode="after")
    def _bind_correct_answer(self) -> "Question":
        """
        Привязывает correct_answer к точному тексту одного из вариантов.

        LLM иногда меняет регистр или пробелы в правильном ответе, поэтому
        сравнение регистронезависимое; в поле записывается написание из options.
        Если совпадения нет совсем — вопрос невалиден.
        """
        if self.correct_answer in self.options:
            return self

        answer_norm = self.correct_answer.strip().lower()
        for option in self.options:
            if option.strip().lower() == answer_norm:
                logger.debug(f"[VALIDATION] correct_answer '{self.correct_answer}' snapped to '{option}'")
                self.correct_answer = option
                return self

        raise ValueError(
            f"correctAnswer '{self.correct_answer}' does not match any of the options {self.options}"
        )


class QuestionBatch(BaseModel):
    """Обертка ответа Formatter-агента: {"questions": [...]}."""
    questions: List[Question]

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "QuestionBatch":
        # Ответы и правки адресуются по id
        seen = set()
        duplicates = []
        for q in self.questions:
            if q.id in seen and q.id not in duplicates:
                duplicates.append(q.id)
            seen.add(q.id)
        if duplicates:
            raise ValueError(f"Question ids must be unique within the set, repeated: {duplicates}")
        return self


def build_batch_schema(question_count: int) -> Type[QuestionBatch]:
    """
    Схема ответа Formatter-а с жестко заданной длиной массива.

    Количество вопросов проверяется самой схемой (min = max = question_count),
    отдельной проверки после парсинга нет.
    """
    return create_model(
        "QuestionBatch",
        __base__=QuestionBatch,
        questions=(
            List[Question],
            Field(min_length=question_count, max_length=question_count),
        ),
    )


# ============================================================================
# ПАРАМЕТРЫ ГЕНЕРАЦИИ
# ============================================================================

class GenerationParameters(BaseModel):
    """Параметры одного запуска конвейера. Неизменяемы после создания."""

    model_config = ConfigDict(frozen=True)

    topic: Optional[str] = None
    difficulty: int = Field(default=5, ge=MIN_DIFFICULTY, le=MAX_DIFFICULTY)
    question_count: int = Field(default=5, ge=MIN_QUESTIONS, le=MAX_QUESTIONS)

    @property
    def topic_label(self) -> str:
        return self.topic.strip() if self.topic and self.topic.strip() else "General Overview"
