"""
State Schema - состояние LangGraph для конвейера генерации
Один экземпляр на один вызов OrchestratorAgent.generate_questions()
"""

from typing import Annotated, List, Optional, TypedDict
import operator

from quiz.models import GenerationParameters, Question
from services.llm_client import ModelSession


class PipelineState(TypedDict):
    """
    Состояние графа - передается между агентами

    Fields:
        session: единственная сессия с LLM, общая для всех четырех этапов
        params: параметры генерации (неизменяемые)
        reader_notes: факты, извлеченные Reader-агентом (свободный текст)
        draft_questions: черновики вопросов Teacher-агента (свободный текст)
        reviewed_questions: итог проверки Critic-агента (свободный текст)
        questions: финальный набор от Formatter-агента
        messages: журнал выполнения этапов
    """
    session: ModelSession
    params: GenerationParameters
    reader_notes: Optional[str]
    draft_questions: Optional[str]
    reviewed_questions: Optional[str]
    questions: Optional[List[Question]]
    messages: Annotated[List[str], operator.add]
