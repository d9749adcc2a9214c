from agents.base_agent import BaseAgent
from quiz.models import GenerationParameters


class CriticAgent(BaseAgent):
    """
    Агент-рецензент. Сверяет каждый черновик с извлеченными фактами,
    переписывает вопросы без опоры на текст и подтверждает итоговое количество.

    Это единственная точка контроля "заземленности" вопросов: ответ
    рецензента не проверяется кодом и уходит в контекст Formatter-агенту.
    """

    stage = "critic"
    output_key = "reviewed_questions"

    def __init__(self):
        super().__init__("CriticAgent")

    def build_prompt(self, params: GenerationParameters) -> str:
        return (
            "[ACTIVATE: Critic Agent]\n\n"
            "Review the drafted questions.\n\n"
            "Checklist:\n"
            "1. Is the correct answer 100% supported by the extracted facts?\n"
            "2. Are the distractors unambiguous and clearly incorrect?\n"
            "3. Does any question rely on knowledge outside the document? Reject it.\n"
            f"4. Is the difficulty level appropriate for {params.difficulty}/10?\n\n"
            "If a question fails any check, REWRITE it completely using the source text.\n"
            f"Confirm the final set of exactly {params.question_count} valid questions."
        )
