from agents.base_agent import BaseAgent
from quiz.models import GenerationParameters, OPTIONS_PER_QUESTION


class TeacherAgent(BaseAgent):
    """
    Агент-методист. Составляет черновики вопросов строго по фактам Reader-агента.
    На этом этапе JSON не нужен — важно содержание и правдоподобные дистракторы.
    """

    stage = "teacher"
    output_key = "draft_questions"

    def __init__(self):
        super().__init__("TeacherAgent")

    def build_prompt(self, params: GenerationParameters) -> str:
        return (
            "[ACTIVATE: Teacher Agent]\n\n"
            "Based *strictly* on the Reader Agent's analysis above:\n"
            f"Draft {params.question_count} multiple-choice questions.\n\n"
            "Requirements:\n"
            f"- Difficulty: {params.difficulty}/10.\n"
            f"- Each question must have exactly {OPTIONS_PER_QUESTION} options.\n"
            "- Distractors must be plausible but clearly wrong according to the document.\n"
            "- Mark the correct answer.\n"
            "- Provide a brief explanation referencing the source text.\n\n"
            "Do not format as JSON yet. Focus on content quality and pedagogical value."
        )
