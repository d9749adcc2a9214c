from typing import Any, Dict, Iterator, List, Optional, Sequence, Type, Union
from contextlib import contextmanager
import json
import logging
import threading

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel

from services.errors import ConfigurationError
from utils.text_cleaner import parse_llm_json


logger = logging.getLogger(__name__)


SUPPORTED_PROVIDERS = ("openai", "gigachat")

MessageContent = Union[str, List[Union[str, Dict[str, Any]]]]


def content_to_text(content: Any) -> str:
    """
    Приведение content сообщения LangChain к строке.

    Провайдеры возвращают либо строку, либо список блоков
    ({"type": "text", "text": ...}, служебные блоки reasoning и т.п.).
    Берем только текстовые блоки.
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(block.get("text", ""))
        return "".join(parts)
    return str(content)


class ModelSession:
    """
    Один диалоговый контекст с LLM.

    Хранит историю сообщений (system + seed-реплики + все последующие обмены)
    и отправляет каждый новый запрос вместе со всей историей.
    Сессией владеет ровно один вызов (конвейер или реплика чата):
    параллельная отправка и повторное использование закрытой сессии запрещены.
    """

    def __init__(
            self,
            model: BaseChatModel,
            system_directive: str,
            seed_turns: Optional[Sequence[BaseMessage]] = None,
            usage_tracker: Optional["TokenUsageTracker"] = None
    ):
        self.model = model
        self.messages: List[BaseMessage] = [SystemMessage(content=system_directive)]
        self.messages.extend(seed_turns or [])
        self.usage = usage_tracker or TokenUsageTracker()

        self._guard = threading.Lock()
        self.closed = False

    def send(
            self,
            message: MessageContent,
            schema: Optional[Type[BaseModel]] = None
    ) -> Union[str, BaseModel]:
        """
        Отправка сообщения в контекст сессии.

        Args:
            message: Текст (или список блоков контента) новой реплики пользователя
            schema: Pydantic-модель; если задана — ответ запрашивается
                    в строгом структурированном формате

        Returns:
            str без схемы, экземпляр schema со схемой

        Raises:
            RuntimeError: сессия закрыта или занята другим вызовом
            ValueError: структурированный ответ не удалось разобрать по схеме
            Exception: ошибки сети / API провайдера пробрасываются как есть
        """
        with self._exclusive():
            human = HumanMessage(content=message)
            request = self.messages + [human]

            if schema is None:
                response = self.model.invoke(request)
                self.usage.track(response)
                reply = AIMessage(content=content_to_text(response.content))
                result: Union[str, BaseModel] = reply.content
            else:
                result = self._invoke_structured(request, schema)
                reply = AIMessage(content=result.model_dump_json(by_alias=True))

            # История пополняется только после успешного ответа
            self.messages.extend([human, reply])
            return result

    def stream(self, message: MessageContent) -> Iterator[str]:
        """
        Потоковая отправка: генератор текстовых фрагментов в порядке поступления.

        Пустые фрагменты пропускаются. Ответ попадает в историю только если
        поток завершился полностью.
        """
        with self._exclusive():
            human = HumanMessage(content=message)
            collected: List[str] = []

            for chunk in self.model.stream(self.messages + [human]):
                text = content_to_text(chunk.content)
                if text:
                    collected.append(text)
                    yield text

            self.usage.track_text("".join(collected))
            self.messages.extend([human, AIMessage(content="".join(collected))])

    def close(self) -> None:
        self.closed = True
        logger.debug(f"Session closed ({len(self.messages)} messages)")

    def _invoke_structured(self, request: List[BaseMessage], schema: Type[BaseModel]) -> BaseModel:
        """
        Вызов со строгой схемой ответа (with_structured_output).

        Если парсер LangChain ничего не вернул, пробуем достать JSON из сырого
        текста ответа и провалидировать его той же схемой.
        """
        structured = self.model.with_structured_output(schema, include_raw=True)
        output = structured.invoke(request)

        raw = output.get("raw")
        if raw is not None:
            self.usage.track(raw)

        parsed = output.get("parsed")
        if isinstance(parsed, schema):
            return parsed
        if isinstance(parsed, dict):
            return schema.model_validate(parsed)

        raw_text = content_to_text(raw.content) if raw is not None else ""
        parsing_error = output.get("parsing_error")
        logger.warning(f"Structured parser returned nothing ({parsing_error}), trying raw text recovery")

        if not raw_text.strip():
            raise ValueError(f"Empty structured response from model: {parsing_error}")

        try:
            data = parse_llm_json(raw_text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Structured response is not valid JSON: {e}") from e

        return schema.model_validate(data)

    @contextmanager
    def _exclusive(self):
        if self.closed:
            raise RuntimeError("ModelSession is closed and cannot be reused")
        if not self._guard.acquire(blocking=False):
            raise RuntimeError("ModelSession is already in use by another call")
        try:
            yield
        finally:
            self._guard.release()


# ============================================================================
# СТАТИСТИКА ТОКЕНОВ
# ============================================================================

class TokenUsageTracker:
    """Учет токенов по запросам (из usage_metadata ответа провайдера)."""

    def __init__(self):
        self.prompt_tokens = 0
        self.completion_tokens = 0
        self.total_requests = 0

    def track(self, response: Any) -> None:
        prompt_tokens = 0
        completion_tokens = 0

        usage = getattr(response, "usage_metadata", None)
        if usage:
            prompt_tokens = usage.get("input_tokens", 0)
            completion_tokens = usage.get("output_tokens", 0)
        else:
            text = content_to_text(getattr(response, "content", ""))
            completion_tokens = self._estimate(text)

        self._add(prompt_tokens, completion_tokens)

    def track_text(self, text: str) -> None:
        # В потоке usage_metadata приходит не у всех провайдеров, оценка по длине текста
        self._add(0, self._estimate(text))

    def get_usage_stats(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_requests": self.total_requests
        }

    def _add(self, prompt_tokens: int, completion_tokens: int) -> None:
        self.prompt_tokens += prompt_tokens
        self.completion_tokens += completion_tokens
        self.total_requests += 1

        global_total = self.prompt_tokens + self.completion_tokens
        logger.info(
            f"💰 Token Usage [Req #{self.total_requests}]: "
            f"+{prompt_tokens + completion_tokens} (P:{prompt_tokens}/C:{completion_tokens}) "
            f"| Total Session: {global_total}"
        )

    @staticmethod
    def _estimate(text: str) -> int:
        return max(1, round(len(text) / 4.6)) if text else 0


# ============================================================================
# КЛИЕНТ
# ============================================================================

class LLMClient:
    """
    Обертка над LangChain chat-моделью.
    Открывает новые сессии и ведет общую статистику токенов.
    """

    def __init__(self, model: BaseChatModel, model_name: str = ""):
        self.model = model
        self.model_name = model_name
        self.usage = TokenUsageTracker()
        logger.info(f"LLM client ready: model={model_name or type(model).__name__}")

    def open_session(
            self,
            system_directive: str,
            seed_turns: Optional[Sequence[BaseMessage]] = None
    ) -> ModelSession:
        """Новая сессия с собственной историей. Сессии между вызовами не переиспользуются."""
        logger.debug(f"Opening session (seed turns: {len(seed_turns or [])})")
        return ModelSession(
            model=self.model,
            system_directive=system_directive,
            seed_turns=seed_turns,
            usage_tracker=self.usage
        )

    def get_usage_stats(self) -> Dict[str, int]:
        return self.usage.get_usage_stats()


def create_chat_model(llm_settings: dict, credentials: dict) -> BaseChatModel:
    """
    Создание LangChain chat-модели по настройкам провайдера.

    Args:
        llm_settings: секция llm_settings из config.json
        credentials: секреты из .env (см. main.load_credentials)

    Raises:
        ConfigurationError: неизвестный провайдер или нет ключа
    """
    provider = llm_settings.get("provider", "openai")
    temperature = llm_settings.get("temperature", 0.7)
    timeout = llm_settings.get("timeout", 120)

    if provider == "openai":
        api_key = credentials.get("openai_api_key")
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for provider 'openai'")

        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            api_key=api_key,
            model=llm_settings.get("model", "gpt-4o"),
            temperature=temperature,
            timeout=timeout
        )

    if provider == "gigachat":
        gigachat_credentials = credentials.get("gigachat_credentials")
        if not gigachat_credentials:
            raise ConfigurationError("GIGACHAT_CREDENTIALS is required for provider 'gigachat'")

        from langchain_gigachat import GigaChat

        return GigaChat(
            credentials=gigachat_credentials,
            scope=credentials.get("gigachat_scope", "GIGACHAT_API_PERS"),
            model=llm_settings.get("model", "GigaChat-Pro"),
            temperature=temperature,
            timeout=timeout,
            verify_ssl_certs=llm_settings.get("verify_ssl_certs", False)
        )

    raise ConfigurationError(
        f"Unknown LLM provider '{provider}'. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
    )


def create_client_from_config(config: dict, credentials: dict) -> LLMClient:
    """Фабрика LLMClient из config.json и секретов."""
    llm_settings = config.get("llm_settings", {})
    model = create_chat_model(llm_settings, credentials)
    return LLMClient(model=model, model_name=llm_settings.get("model", ""))
