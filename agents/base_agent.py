"""
Базовый класс агента-этапа
Определяет общий интерфейс для Reader / Teacher / Critic / Formatter
"""

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

from quiz.models import GenerationParameters
from services.errors import PipelineStageFailure
from services.llm_client import ModelSession
from utils.text_cleaner import truncate_text

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """
    Абстрактный базовый класс для всех агентов конвейера.

    Агент не хранит состояние между вызовами: он получает state графа,
    отправляет свой промпт в общую сессию и возвращает обновление state.
    Промежуточные ответы не парсятся и не проверяются — они просто
    остаются в контексте сессии для следующего этапа.
    """

    #: имя этапа (для логов и PipelineStageFailure.stage)
    stage: str = ""
    #: ключ state, куда записывается результат этапа
    output_key: str = ""

    def __init__(self, agent_name: str):
        """
        Args:
            agent_name: имя агента для логирования
        """
        self.agent_name = agent_name
        self.logger = logging.getLogger(f"{__name__}.{agent_name}")
        self.logger.debug(f"{agent_name} initialized")

    @abstractmethod
    def build_prompt(self, params: GenerationParameters) -> str:
        """Текст промпта этапа для заданных параметров генерации."""

    def process(self, state: Dict[str, Any]) -> Dict[str, Any]:
        """
        Узел графа: один обмен сообщениями с моделью.

        Args:
            state: PipelineState (session, params, результаты прошлых этапов)

        Returns:
            обновление state: {output_key: результат, messages: [запись в журнал]}

        Raises:
            PipelineStageFailure: любой сбой этапа, исходная ошибка в __cause__
        """
        session: ModelSession = state["session"]
        params: GenerationParameters = state["params"]

        self.logger.info(f"[ACTIVATE] {self.agent_name} (stage: {self.stage})")
        prompt = self.build_prompt(params)
        self.log_input(prompt)

        try:
            result = self._send(session, prompt, params)
        except PipelineStageFailure:
            raise
        except Exception as e:
            self.logger.error(f"{self.agent_name} failed: {e}")
            raise PipelineStageFailure(f"{self.agent_name} stage failed: {e}", stage=self.stage) from e

        self.log_output(result)
        return {
            self.output_key: result,
            "messages": [f"{self.stage}: done"],
        }

    def _send(self, session: ModelSession, prompt: str, params: GenerationParameters) -> Any:
        return session.send(prompt)

    def log_input(self, data: Any):
        """Логирование входных данных"""
        self.logger.debug(f"Prompt: {truncate_text(str(data))}")

    def log_output(self, data: Any):
        """Логирование выходных данных"""
        self.logger.debug(f"Response: {truncate_text(str(data))}")
