"""
LangGraph Workflow для четырех агентов конвейера
reader → teacher → critic → formatter → END
"""

from langgraph.graph import StateGraph, END
import logging

from agents.state_schema import PipelineState
from agents.reader import ReaderAgent
from agents.teacher import TeacherAgent
from agents.critic import CriticAgent
from agents.formatter import FormatterAgent

logger = logging.getLogger(__name__)


def build_pipeline_graph(
        reader: ReaderAgent,
        teacher: TeacherAgent,
        critic: CriticAgent,
        formatter: FormatterAgent
):
    """
    Построение линейного графа этапов.

    Этапы строго последовательны: промпт каждого следующего этапа
    опирается на ответ предыдущего, уже лежащий в истории сессии.
    Исключение внутри узла останавливает граф целиком.

    Returns:
        скомпилированный граф (invoke(state) -> финальный state)
    """
    workflow = StateGraph(PipelineState)

    workflow.add_node("reader", reader.process)
    workflow.add_node("teacher", teacher.process)
    workflow.add_node("critic", critic.process)
    workflow.add_node("formatter", formatter.process)

    workflow.set_entry_point("reader")
    workflow.add_edge("reader", "teacher")
    workflow.add_edge("teacher", "critic")
    workflow.add_edge("critic", "formatter")
    workflow.add_edge("formatter", END)

    compiled = workflow.compile()

    logger.info("✓ Workflow compiled: reader → teacher → critic → formatter → END")
    return compiled
