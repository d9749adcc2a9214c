"""
ChatAgent — свободный диалог с ассистентом с потоковой выдачей ответа.

Входящие данные:
- history: List[ChatMessage] — предыдущие реплики (user / model)
- message: str — новое сообщение пользователя

Выходящие данные:
- генератор текстовых фрагментов в порядке поступления

ChatTranscript — сторона вызывающего кода: ведет ленту сообщений,
дописывает фрагменты в конец текущего ответа и при обрыве потока
добавляет отдельное сообщение об ошибке, не трогая уже полученный текст.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional
import logging
import uuid

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from services.errors import StreamInterrupted
from services.llm_client import LLMClient

logger = logging.getLogger(__name__)


CHAT_SYSTEM_INSTRUCTION = "You are a helpful, intelligent AI assistant for an enterprise education platform."

WELCOME_MESSAGE = (
    "Hello! I'm your QuizWizard AI assistant. I can help you understand complex topics, "
    "draft content, or navigate the platform. How can I assist you today?"
)

ERROR_MESSAGE = "Sorry, I encountered an error processing your request. Please try again."


@dataclass
class ChatMessage:
    role: str  # 'user' | 'model' | 'system'
    text: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)
    is_error: bool = False


class ChatAgent:
    """
    Агент-ассистент. Stateless: на каждую реплику открывает новую сессию,
    проигрывает в нее историю и стримит ответ.
    """

    def __init__(self, client: LLMClient, system_instruction: str = CHAT_SYSTEM_INSTRUCTION):
        self.client = client
        self.system_instruction = system_instruction
        logger.info("ChatAgent initialized")

    def stream_reply(self, history: List[ChatMessage], message: str) -> Iterator[str]:
        """
        Потоковый ответ на новое сообщение.

        Генератор ленивый и одноразовый: запрос уходит при первой итерации,
        остановка итерации = отмена. Уже выданные фрагменты не отзываются.

        Raises:
            StreamInterrupted: сбой сети / модели (исходная ошибка в __cause__)
        """
        session = self.client.open_session(
            self.system_instruction,
            seed_turns=self._to_langchain_history(history)
        )

        fragments = 0
        try:
            for fragment in session.stream(message):
                fragments += 1
                yield fragment
        except Exception as e:
            logger.error(f"Chat stream failed after {fragments} fragments: {e}", exc_info=True)
            raise StreamInterrupted(f"Chat stream interrupted: {e}") from e
        finally:
            session.close()

        logger.debug(f"Chat reply streamed in {fragments} fragments")

    @staticmethod
    def _to_langchain_history(history: List[ChatMessage]) -> List[BaseMessage]:
        # Сообщения об ошибках и пустые ответы (поток оборвался до первого фрагмента) не отправляем
        messages: List[BaseMessage] = []
        for msg in history:
            if msg.is_error or not msg.text:
                continue
            if msg.role == "user":
                messages.append(HumanMessage(content=msg.text))
            elif msg.role == "model":
                messages.append(AIMessage(content=msg.text))
        return messages


class ChatTranscript:
    """Лента сообщений чата с append-only накоплением потокового ответа."""

    def __init__(self, agent: ChatAgent, welcome: Optional[str] = WELCOME_MESSAGE):
        self.agent = agent
        self.messages: List[ChatMessage] = []
        if welcome:
            self.messages.append(ChatMessage(role="model", text=welcome, id="welcome"))

    def send(self, text: str) -> Iterator[str]:
        """
        Отправка сообщения пользователя.

        Фрагменты ответа дописываются в конец нового сообщения модели и
        одновременно отдаются вызывающему коду (например, для печати в консоль).
        При обрыве потока частичный ответ остается, а в ленту добавляется
        отдельное системное сообщение об ошибке.
        """
        if not text or not text.strip():
            return

        history = list(self.messages)
        self.messages.append(ChatMessage(role="user", text=text))

        reply = ChatMessage(role="model", text="")
        self.messages.append(reply)

        try:
            for fragment in self.agent.stream_reply(history, text):
                reply.text += fragment
                yield fragment
        except StreamInterrupted as e:
            logger.error(f"Chat reply interrupted, partial text kept ({len(reply.text)} chars): {e}")
            self.messages.append(ChatMessage(role="system", text=ERROR_MESSAGE, is_error=True))

    @property
    def last_reply(self) -> Optional[ChatMessage]:
        for msg in reversed(self.messages):
            if msg.role == "model":
                return msg
        return None
