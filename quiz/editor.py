"""
Редактор набора вопросов (Human in the Loop).

После генерации пользователь вычитывает вопросы и правит их до того,
как квиз будет использован. Все операции синхронные и никогда не падают:
если вопрос не найден или аргумент некорректен, операция ничего не меняет
и возвращает False.

Правильный ответ привязан к ТЕКСТУ варианта, а не к его позиции, поэтому
правка варианта, который был правильным, переносит пометку на новый текст.

Ограничение: дубликаты текста среди вариантов не отклоняются. Если два
варианта совпадают с правильным ответом, привязка "по значению"
неоднозначна — при правке одного из них correct_answer переедет на новый текст.
"""

import logging
from typing import Any, Iterator, List, Optional

from quiz.models import DifficultyTier, Question

logger = logging.getLogger(__name__)


# Поля, доступные для update_field, и их альтернативные имена
_EDITABLE_FIELDS = {
    "question": "question",
    "prompt": "question",
    "explanation": "explanation",
    "difficulty": "difficulty",
    "difficultyTier": "difficulty",
}


class QuestionSetEditor:
    """
    Изменяемая коллекция вопросов с собственным счетчиком id.

    Новый id берется из счетчика, который только растет: удаленные id
    повторно не выдаются в пределах одного набора.
    """

    def __init__(self, questions: Optional[List[Question]] = None):
        self._questions: List[Question] = []
        self._next_id: int = 1
        self.replace_all(questions or [])

    # ------------------------------------------------------------------
    # Чтение
    # ------------------------------------------------------------------

    @property
    def questions(self) -> List[Question]:
        return list(self._questions)

    def ids(self) -> List[int]:
        return [q.id for q in self._questions]

    def get(self, question_id: int) -> Optional[Question]:
        for q in self._questions:
            if q.id == question_id:
                return q
        return None

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(list(self._questions))

    # ------------------------------------------------------------------
    # Операции редактирования
    # ------------------------------------------------------------------

    def replace_all(self, questions: List[Question]) -> None:
        """Полная замена набора (новая генерация). Счетчик id пересчитывается."""
        self._questions = list(questions)
        self._next_id = max((q.id for q in self._questions), default=0) + 1
        logger.info(f"Question set replaced: {len(self._questions)} questions, next_id={self._next_id}")

    def update_field(self, question_id: int, field: str, value: Any) -> bool:
        """
        Замена текста вопроса, пояснения или уровня сложности.

        Args:
            question_id: id вопроса
            field: 'question' / 'explanation' / 'difficulty'
            value: новое значение (для difficulty — 'Easy' / 'Medium' / 'Hard')

        Returns:
            bool: True если значение записано
        """
        question = self.get(question_id)
        if question is None:
            logger.debug(f"update_field: question {question_id} not found")
            return False

        attr = _EDITABLE_FIELDS.get(field)
        if attr is None:
            logger.warning(f"update_field: field '{field}' is not editable")
            return False

        if attr == "difficulty":
            try:
                value = DifficultyTier(value)
            except ValueError:
                logger.warning(f"update_field: invalid difficulty '{value}' for question {question_id}")
                return False
        else:
            value = "" if value is None else str(value)

        setattr(question, attr, value)
        logger.debug(f"Question {question_id}: {attr} updated")
        return True

    def update_option(self, question_id: int, index: int, new_value: str) -> bool:
        """
        Замена текста варианта ответа.

        Если заменяемый вариант был правильным ответом, correct_answer
        переписывается на new_value — пометка следует за текстом.
        """
        question = self.get(question_id)
        if question is None:
            logger.debug(f"update_option: question {question_id} not found")
            return False

        if not 0 <= index < len(question.options):
            logger.warning(f"update_option: index {index} out of range for question {question_id}")
            return False

        old_value = question.options[index]
        new_options = list(question.options)
        new_options[index] = new_value
        question.options = new_options

        if question.correct_answer == old_value:
            question.correct_answer = new_value
            logger.debug(f"Question {question_id}: correct answer follows edited option #{index}")

        return True

    def set_correct_answer(self, question_id: int, option_value: str) -> bool:
        """
        Пометить вариант как правильный.

        Значение должно совпадать с одним из текущих вариантов — иначе
        правильный ответ стал бы недостижимым, и вызов отклоняется.
        """
        question = self.get(question_id)
        if question is None:
            logger.debug(f"set_correct_answer: question {question_id} not found")
            return False

        if option_value not in question.options:
            logger.warning(
                f"set_correct_answer: '{option_value}' is not an option of question {question_id}, ignored"
            )
            return False

        question.correct_answer = option_value
        return True

    def delete_question(self, question_id: int) -> bool:
        """Удаление вопроса. Остальные id не перенумеровываются."""
        before = len(self._questions)
        self._questions = [q for q in self._questions if q.id != question_id]
        deleted = len(self._questions) < before
        if deleted:
            logger.info(f"Question {question_id} deleted ({len(self._questions)} left)")
        return deleted

    def add_question(self) -> Question:
        """Добавляет шаблонный вопрос в конец набора и возвращает его."""
        new_id = self._next_id
        self._next_id += 1

        question = Question(
            id=new_id,
            question="New Question",
            options=["Option 1", "Option 2", "Option 3", "Option 4"],
            correct_answer="Option 1",
            explanation="",
            difficulty=DifficultyTier.MEDIUM,
        )
        self._questions.append(question)
        logger.info(f"Question {new_id} added from template")
        return question
