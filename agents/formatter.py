from typing import List
import logging

from agents.base_agent import BaseAgent
from quiz.models import GenerationParameters, Question, build_batch_schema
from services.llm_client import ModelSession

logger = logging.getLogger(__name__)


class FormatterAgent(BaseAgent):
    """
    Агент-инженер. Переводит проверенные вопросы в строгую JSON-схему.

    Единственный этап со структурированным ответом: схема задает поля
    каждого вопроса и точное количество элементов массива, поэтому
    разбор ответа по схеме и есть проверка формы результата.
    """

    stage = "formatter"
    output_key = "questions"

    def __init__(self):
        super().__init__("FormatterAgent")

    def build_prompt(self, params: GenerationParameters) -> str:
        return (
            "[ACTIVATE: Formatter Agent]\n\n"
            "Output the final verified questions in the required JSON schema.\n"
            f"Ensure exactly {params.question_count} questions, numbered with id from 1.\n"
            "Each 'correctAnswer' must match one of its 'options' exactly.\n"
            "'difficulty' must be one of: Easy, Medium, Hard."
        )

    def _send(self, session: ModelSession, prompt: str, params: GenerationParameters) -> List[Question]:
        schema = build_batch_schema(params.question_count)
        batch = session.send(prompt, schema=schema)

        questions = list(batch.questions)
        logger.info(f"[STEP] Formatter returned {len(questions)} questions")
        return questions
