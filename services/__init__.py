"""
Слой инфраструктуры (Infrastructure Layer).

Технические компоненты для работы с внешними сервисами и файлами.
Модули этого слоя не содержат бизнес-логики и не знают о квизах или агентах.

Компоненты:
    - LLMClient / ModelSession: диалоговый контекст с LLM через LangChain
      (обычные, потоковые и структурированные ответы)
    - document_ingestor: проверка типа документа и base64-кодирование
    - errors: исключения приложения
"""

from services.errors import (
    ConfigurationError,
    IngestRejected,
    PipelineStageFailure,
    StreamInterrupted,
)
from services.llm_client import (
    LLMClient,
    ModelSession,
    TokenUsageTracker,
    create_chat_model,
    create_client_from_config,
)
from services.document_ingestor import (
    ALLOWED_MIME_TYPES,
    DocumentPayload,
    encode,
    encode_bytes,
    ensure_supported,
)

# Публичный API пакета
__all__ = [
    # Клиент и сессия
    "LLMClient",
    "ModelSession",
    "TokenUsageTracker",

    # Фабричные функции
    "create_chat_model",
    "create_client_from_config",

    # Загрузка документов
    "ALLOWED_MIME_TYPES",
    "DocumentPayload",
    "encode",
    "encode_bytes",
    "ensure_supported",

    # Исключения
    "ConfigurationError",
    "IngestRejected",
    "PipelineStageFailure",
    "StreamInterrupted",
]
