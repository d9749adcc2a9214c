from agents.base_agent import BaseAgent
from quiz.models import GenerationParameters


# Запас фактов сверх числа вопросов для Critic-агента
EXTRA_FACTS = 3


class ReaderAgent(BaseAgent):
    """Агент-аналитик. Извлекает из документа факты с цитатами для будущих вопросов."""

    stage = "reader"
    output_key = "reader_notes"

    def __init__(self):
        super().__init__("ReaderAgent")

    def build_prompt(self, params: GenerationParameters) -> str:
        """
        :param params: Параметры генерации (тема, сложность, количество вопросов)
        :return: Промпт этапа 1. Ответ — свободный текст, структура не требуется.
        """
        facts_count = params.question_count + EXTRA_FACTS
        return (
            "[ACTIVATE: Reader Agent]\n\n"
            "Analyze the uploaded document.\n"
            f"Target Topic: \"{params.topic_label}\"\n"
            f"Difficulty Level: {params.difficulty}/10\n\n"
            "Task:\n"
            "1. Scan the document for key concepts that match the topic.\n"
            f"2. Extract {facts_count} distinct facts or logical segments suitable for forming questions.\n"
            "3. Quote the exact text segment for each fact so every fact stays grounded in the document.\n\n"
            "Use ONLY information present in the document. Output your analysis as a structured list of facts."
        )
