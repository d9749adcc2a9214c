import logging
import json
from typing import Any, Dict, List, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage

from agents.reader import ReaderAgent
from agents.teacher import TeacherAgent
from agents.critic import CriticAgent
from agents.formatter import FormatterAgent
from agents.workflow import build_pipeline_graph
from quiz.models import GenerationParameters, Question
from services.document_ingestor import DocumentPayload, ensure_supported
from services.errors import PipelineStageFailure
from services.llm_client import LLMClient


logger = logging.getLogger(__name__)


SYSTEM_DIRECTIVE = """
You are an advanced, production-grade Multi-Agent RAG System designed for high-stakes educational assessment creation.

Your architecture consists of four specialized AI agents working in a strictly defined workflow:

1. **Reader Agent (The Analyst)**:
   - Capability: Deep semantic analysis of documents.
   - Goal: Extract specific facts, definitions, and relationships relevant to the requested topic and difficulty.
   - Constraints: Use ONLY information present in the uploaded document. Zero outside-knowledge hallucination.

2. **Teacher Agent (The Creator)**:
   - Capability: Pedagogical question design (Bloom's Taxonomy).
   - Goal: Draft MCQs based *exclusively* on the Reader's extracted facts.
   - Constraints: Write plausible distractors. Match the requested difficulty level (1-10).

3. **Critic Agent (The Reviewer)**:
   - Capability: Fact-checking and logic verification.
   - Goal: Ruthlessly critique the Teacher's questions.
   - Actions:
     - Verify the correct answer is explicitly supported by the text.
     - Check that distractors are clearly incorrect but educational.
     - Reject any question that relies on external knowledge.
     - Refine phrasing for clarity.

4. **Formatter Agent (The Engineer)**:
   - Capability: Structured data output.
   - Goal: Convert the finalized, critiqued questions into the strict JSON schema required.

You will execute this pipeline step-by-step as prompted by the Orchestrator (User).
""".strip()

DOCUMENT_UPLOADED_TURN = "System Initialization: Source Document Uploaded. Awaiting agent activation."
DOCUMENT_READY_TURN = "System Ready. Document ingested. Agents are on standby."

FAILURE_MESSAGE = (
    "Failed to generate valid MCQs. The document might be too large or complex "
    "for the agent pipeline. Error: {error}"
)


class OrchestratorAgent:
    """
    Центральный координатор мульти-агентной системы.

    Каждый вызов generate_questions() открывает НОВУЮ сессию с LLM,
    кладет документ в первую реплику и прогоняет через одну и ту же
    сессию четыре этапа: Reader → Teacher → Critic → Formatter.
    Цепочка атомарна: либо полный набор вопросов, либо одна ошибка
    PipelineStageFailure без частичных результатов.
    """

    def __init__(self, client: LLMClient, config: Optional[dict] = None):
        """Инициализация оркестратора и всех подчиненных агентов."""
        logger.info("=" * 70)
        logger.info("ORCHESTRATOR INITIALIZATION")
        logger.info("=" * 70)

        self.client = client
        self.config = config or {}
        self.default_quiz_settings = self.config.get("quiz_settings", {})

        self.reader = ReaderAgent()
        self.teacher = TeacherAgent()
        self.critic = CriticAgent()
        self.formatter = FormatterAgent()

        self.graph = build_pipeline_graph(self.reader, self.teacher, self.critic, self.formatter)

        logger.info("✓ OrchestratorAgent initialized successfully")
        logger.info("=" * 70)

    def generate_questions(
            self,
            document_payload: str,
            mime_type: str,
            difficulty: Optional[int] = None,
            question_count: Optional[int] = None,
            topic: Optional[str] = None,
            document_name: str = "Uploaded Document"
    ) -> List[Question]:
        """
        Полный пайплайн генерации вопросов по документу.

        Args:
            document_payload: Содержимое документа в base64
            mime_type: MIME-тип документа (из белого списка загрузчика)
            difficulty: Сложность 1..10 (по умолчанию из quiz_settings)
            question_count: Количество вопросов 1..20 (по умолчанию из quiz_settings)
            topic: Тема (необязательно)
            document_name: Имя файла (передается провайдеру вместе с документом)

        Returns:
            List[Question]: ровно question_count вопросов

        Raises:
            IngestRejected: неподдерживаемый тип документа (сессия не открывается)
            ValueError: параметры вне допустимых диапазонов (сессия не открывается)
            PipelineStageFailure: любой сбой этапов, исходная ошибка в __cause__
        """
        ensure_supported(mime_type)
        params = GenerationParameters(
            topic=topic,
            difficulty=difficulty if difficulty is not None else self.default_quiz_settings.get("difficulty", 5),
            question_count=(
                question_count if question_count is not None
                else self.default_quiz_settings.get("questions_count", 5)
            ),
        )

        logger.info("\n" + "=" * 70)
        logger.info("ORCHESTRATOR: generate_questions() STARTED")
        logger.info("=" * 70)
        logger.info(f"Input parameters:")
        logger.info(f"  - document: {mime_type}, {len(document_payload)} base64 chars")
        logger.info(f"  - topic: {params.topic_label}")
        logger.info(f"  - difficulty: {params.difficulty}/10")
        logger.info(f"  - question_count: {params.question_count}")

        session = self.client.open_session(
            SYSTEM_DIRECTIVE,
            seed_turns=self._document_turns(
                DocumentPayload(name=document_name, mime_type=mime_type, data=document_payload)
            )
        )

        initial_state = {
            "session": session,
            "params": params,
            "reader_notes": None,
            "draft_questions": None,
            "reviewed_questions": None,
            "questions": None,
            "messages": [],
        }

        try:
            final_state = self.graph.invoke(initial_state)
        except PipelineStageFailure as e:
            cause = e.__cause__ or e
            logger.error(f"Multi-Agent Generation Failed at stage '{e.stage}': {cause}", exc_info=True)
            raise PipelineStageFailure(FAILURE_MESSAGE.format(error=cause), stage=e.stage) from cause
        except Exception as e:
            logger.error(f"Multi-Agent Generation Failed: {e}", exc_info=True)
            raise PipelineStageFailure(FAILURE_MESSAGE.format(error=e)) from e
        finally:
            session.close()

        questions: List[Question] = final_state.get("questions") or []
        self._log_data_transfer("FormatterAgent", "Orchestrator", questions, "generated_quiz")

        logger.info("\n" + "=" * 70)
        logger.info("ORCHESTRATOR: generate_questions() COMPLETED")
        logger.info(f"Stages: {final_state.get('messages', [])}")
        logger.info(f"Questions: {len(questions)} | LLM: {self.client.get_usage_stats()}")
        logger.info("=" * 70 + "\n")

        return questions

    def generate_from_document(
            self,
            document: DocumentPayload,
            difficulty: Optional[int] = None,
            question_count: Optional[int] = None,
            topic: Optional[str] = None
    ) -> List[Question]:
        """Обертка над generate_questions() для результата document_ingestor.encode()."""
        return self.generate_questions(
            document_payload=document.data,
            mime_type=document.mime_type,
            difficulty=difficulty,
            question_count=question_count,
            topic=topic,
            document_name=document.name
        )

    def get_session_stats(self) -> Dict[str, Any]:
        return {"llm_stats": self.client.get_usage_stats()}

    @staticmethod
    def _document_turns(document: DocumentPayload) -> List[BaseMessage]:
        """Первая реплика сессии: документ inline + подтверждение готовности от модели."""
        return [
            HumanMessage(content=[
                document.to_content_block(),
                {"type": "text", "text": DOCUMENT_UPLOADED_TURN},
            ]),
            AIMessage(content=DOCUMENT_READY_TURN),
        ]

    def _log_data_transfer(self, source: str, destination: str, data: Any, data_name: str):
        """
        Логирование передачи данных между компонентами.

        Args:
            source: Источник данных
            destination: Получатель данных
            data: Передаваемые данные
            data_name: Название данных
        """
        logger.info(f"\n📤 DATA TRANSFER: {source} → {destination}")
        logger.info(f"   Data type: {data_name}")

        if isinstance(data, (list, tuple)):
            logger.info(f"   Data size: {len(data)} items")
            if 0 < len(data) <= 5:
                preview = [item.model_dump(by_alias=True) if hasattr(item, "model_dump") else item for item in data]
                logger.debug(f" Data preview: {json.dumps(preview, ensure_ascii=False, indent=2, default=str)[:200]}...")
        else:
            logger.info(f"   Data type: {type(data)}")
