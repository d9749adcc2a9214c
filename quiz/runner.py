"""
Прохождение квиза: сбор ответов, проверка заполненности, подсчет результата.

Состояния:
    EDITING    — идет редактирование, ответы не принимаются
    ANSWERING  — пользователь отвечает (попытка не отправлена)
    SUBMITTED  — попытка отправлена, доступен результат

Переходы:
    ANSWERING --submit() [все отвечены]--> SUBMITTED
    SUBMITTED --reset()--> ANSWERING
    любое     --enter_edit_mode()--> EDITING (попытка аннулируется)
    EDITING   --exit_edit_mode()--> ANSWERING
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from quiz.editor import QuestionSetEditor
from quiz.models import Question

logger = logging.getLogger(__name__)


class AssessmentState(Enum):
    EDITING = "editing"
    ANSWERING = "answering"
    SUBMITTED = "submitted"


@dataclass
class SubmitResult:
    """
    Итог вызова submit().

    submitted=False и непустой missing_ids: остались вопросы без ответа. Это не
    ошибка, а штатное состояние: missing_ids перечислены в порядке следования
    вопросов, первый из них нужно показать пользователю.

    submitted=False и in_edit_mode=True: отправка отклонена, потому что набор
    редактируется; missing_ids в этом случае пуст.
    """
    submitted: bool
    missing_ids: List[int] = field(default_factory=list)
    in_edit_mode: bool = False

    @property
    def first_missing(self) -> Optional[int]:
        return self.missing_ids[0] if self.missing_ids else None


class AssessmentRunner:
    """Конечный автомат попытки прохождения поверх редактора вопросов."""

    def __init__(self, editor: QuestionSetEditor, edit_mode: bool = False):
        self.editor = editor
        self.answers: Dict[int, str] = {}
        self.validation_errors: List[int] = []
        self.is_submitted: bool = False
        self.is_edit_mode: bool = edit_mode

    @property
    def state(self) -> AssessmentState:
        if self.is_edit_mode:
            return AssessmentState.EDITING
        if self.is_submitted:
            return AssessmentState.SUBMITTED
        return AssessmentState.ANSWERING

    # ------------------------------------------------------------------
    # Режимы
    # ------------------------------------------------------------------

    def load_generated(self, questions: List[Question]) -> None:
        """Новый набор после генерации: старая попытка сбрасывается, включается редактирование."""
        self.editor.replace_all(questions)
        self.enter_edit_mode()

    def enter_edit_mode(self) -> None:
        """Редактирование аннулирует любую завершенную или начатую попытку."""
        self.is_edit_mode = True
        self.is_submitted = False
        self.answers.clear()
        self.validation_errors = []
        logger.info("Edit mode ON (attempt cleared)")

    def exit_edit_mode(self) -> None:
        self.is_edit_mode = False
        logger.info("Edit mode OFF")

    # ------------------------------------------------------------------
    # Попытка
    # ------------------------------------------------------------------

    def select_option(self, question_id: int, value: str) -> bool:
        """
        Запись выбранного варианта.

        Игнорируется после отправки, в режиме редактирования и для
        неизвестного id. Снимает отметку "не отвечено" с этого вопроса.
        """
        if self.is_submitted or self.is_edit_mode:
            logger.debug(f"select_option ignored in state {self.state.value}")
            return False

        if self.editor.get(question_id) is None:
            logger.warning(f"select_option: unknown question {question_id}")
            return False

        self.answers[question_id] = value
        if question_id in self.validation_errors:
            self.validation_errors = [qid for qid in self.validation_errors if qid != question_id]
        return True

    def submit(self) -> SubmitResult:
        if self.is_edit_mode:
            logger.debug("submit ignored in edit mode")
            return SubmitResult(submitted=False, in_edit_mode=True)
        if self.is_submitted:
            return SubmitResult(submitted=True)

        missing = [q.id for q in self.editor if not self.answers.get(q.id)]
        if missing:
            self.validation_errors = missing
            logger.info(f"Submit blocked: {len(missing)} unanswered questions {missing}")
            return SubmitResult(submitted=False, missing_ids=list(missing))

        self.is_submitted = True
        self.validation_errors = []
        logger.info(f"Quiz submitted: score={self.score()}%")
        return SubmitResult(submitted=True)

    def reset(self) -> None:
        self.is_submitted = False
        self.answers.clear()
        self.validation_errors = []
        logger.info("Attempt reset")

    # ------------------------------------------------------------------
    # Результат
    # ------------------------------------------------------------------

    def is_correct(self, question_id: int) -> bool:
        question = self.editor.get(question_id)
        if question is None:
            return False
        return self.answers.get(question_id) == question.correct_answer

    def correct_count(self) -> int:
        return sum(1 for q in self.editor if self.answers.get(q.id) == q.correct_answer)

    def score(self) -> int:
        """Процент правильных ответов, округленный до целого (0.5 — вверх)."""
        total = len(self.editor)
        if total == 0:
            return 0
        return int(self.correct_count() * 100 / total + 0.5)
