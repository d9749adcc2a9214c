"""
Загрузка исходного документа для конвейера генерации.

Проверяет тип файла по белому списку MIME и кодирует содержимое в base64,
чтобы документ можно было передать модели прямо в сообщении.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any
import base64
import logging
import mimetypes

from services.errors import IngestRejected

logger = logging.getLogger(__name__)


PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

ALLOWED_MIME_TYPES = (PDF_MIME, DOCX_MIME)

UNSUPPORTED_TYPE_MESSAGE = "Unsupported file type. Please upload a PDF or Word document."


@dataclass(frozen=True)
class DocumentPayload:
    """Документ, готовый к передаче в LLM."""
    name: str
    mime_type: str
    data: str  # base64

    def to_content_block(self) -> Dict[str, Any]:
        """Стандартный блок контента LangChain для inline-файла."""
        return {
            "type": "file",
            "source_type": "base64",
            "mime_type": self.mime_type,
            "data": self.data,
            "filename": self.name,
        }


def ensure_supported(mime_type: str) -> None:
    """
    Raises:
        IngestRejected: если тип не входит в ALLOWED_MIME_TYPES
    """
    if mime_type not in ALLOWED_MIME_TYPES:
        logger.warning(f"Rejected document type: {mime_type}")
        raise IngestRejected(UNSUPPORTED_TYPE_MESSAGE)


def guess_mime_type(path: Path) -> str:
    # .docx есть не во всех системных таблицах mimetypes
    if path.suffix.lower() == ".docx":
        return DOCX_MIME
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or "application/octet-stream"


def encode_bytes(raw: bytes, mime_type: str, name: str = "Uploaded Document") -> DocumentPayload:
    """
    Кодирование содержимого документа.

    Args:
        raw: Байты файла
        mime_type: Заявленный MIME-тип
        name: Имя файла (для экспорта и логов)

    Returns:
        DocumentPayload с base64-данными

    Raises:
        IngestRejected: неподдерживаемый тип или пустой файл
    """
    ensure_supported(mime_type)

    if not raw:
        raise IngestRejected(f"Document '{name}' is empty")

    payload = DocumentPayload(
        name=name,
        mime_type=mime_type,
        data=base64.b64encode(raw).decode("ascii")
    )
    logger.info(f"✓ Document ingested: {name} ({mime_type}, {len(raw)} bytes)")
    return payload


def encode(path: str) -> DocumentPayload:
    """
    Чтение и кодирование файла с диска. Тип определяется по расширению.

    Raises:
        FileNotFoundError: файла нет
        IngestRejected: неподдерживаемый тип или пустой файл
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Document not found: {path}")

    mime_type = guess_mime_type(file_path)
    ensure_supported(mime_type)

    with open(file_path, 'rb') as f:
        raw = f.read()

    return encode_bytes(raw, mime_type, name=file_path.name)
