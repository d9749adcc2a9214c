# main.py

"""
CLI Точка входа в приложение «QuizWizard».

Мульти-агентная система для генерации тестов с вариантами ответа
по загруженному документу (PDF / DOCX) с помощью LLM.

Запуск:
    python main.py [FILE] [OPTIONS]

Аргументы:
    FILE                    Путь к документу .pdf или .docx (необязателен в режиме --chat)

Опции генерации:
    -d, --difficulty LEVEL  Сложность вопросов 1..10 [default: из config.json]
    -q, --questions N       Количество вопросов 1..20
    -t, --topic TEXT        Тема, на которой сфокусироваться
    -m, --model NAME        Модель провайдера (например: gpt-4o, GigaChat-Max)

Опции вывода:
    --export PATH           Сохранить Google Apps Script для экспорта в Google Forms

Режимы:
    --chat                  Чат с AI-ассистентом (после квиза или без документа)

Системные опции:
    --debug                 Включить подробное логирование (DEBUG level)
    -h, --help              Показать это справочное сообщение

Примеры:
    # Базовый запуск
    python main.py lectures/thermodynamics.pdf

    # Сложный квиз из 10 вопросов по теме
    python main.py handbook.docx -d 8 -q 10 -t "Sales Cycle"

    # Только чат
    python main.py --chat
"""


import argparse
import json
import logging
import os
import sys
from pathlib import Path
from dotenv import load_dotenv

from agents import ChatAgent, ChatTranscript, OrchestratorAgent
from quiz import AssessmentRunner, QuestionSetEditor, Question
from services import (
    ConfigurationError,
    IngestRejected,
    PipelineStageFailure,
    create_client_from_config,
    encode,
)
from utils import render_apps_script


# ============================================================================
# НАСТРОЙКА ЛОГИРОВАНИЯ
# ============================================================================

def setup_logging(debug_mode: bool = False, log_dir: str = "data/logs"):
    """
    Настройка системы логирования.

    Args:
        debug_mode: Если True - уровень DEBUG, иначе INFO
        log_dir: Каталог для app.log
    """
    level = logging.DEBUG if debug_mode else logging.INFO
    format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Создаем директорию для логов
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.FileHandler(Path(log_dir) / "app.log", encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )
    # Убираем лишний шум от библиотек
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


# ============================================================================
# ЗАГРУЗКА КОНФИГУРАЦИИ
# ============================================================================

def load_config(config_path: str = "config.json") -> dict:
    """Загрузка конфигурации из JSON файла."""
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Config file '{config_path}' not found")
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_credentials(provider: str) -> dict:
    """Загрузка секретных ключей провайдера из .env файла."""
    load_dotenv()

    if provider == "openai":
        api_key = os.getenv('OPENAI_API_KEY')
        if not api_key:
            raise ConfigurationError("Missing OPENAI_API_KEY in .env")
        return {'openai_api_key': api_key}

    if provider == "gigachat":
        gigachat_credentials = os.getenv('GIGACHAT_CREDENTIALS')
        if not gigachat_credentials:
            raise ConfigurationError("Missing GIGACHAT_CREDENTIALS in .env")
        return {
            'gigachat_credentials': gigachat_credentials,
            'gigachat_scope': os.getenv('GIGACHAT_SCOPE', 'GIGACHAT_API_PERS'),
        }

    raise ConfigurationError(f"Unknown LLM provider '{provider}' in config.json")


# ============================================================================
# РЕДАКТИРОВАНИЕ ВОПРОСОВ (HUMAN-IN-THE-LOOP)
# ============================================================================

EDIT_HELP = """
Команды редактора:
  list                          — показать все вопросы
  edit <id> question <текст>    — изменить формулировку
  edit <id> explanation <текст> — изменить пояснение
  edit <id> difficulty <Easy|Medium|Hard>
  option <id> <1-4> <текст>     — изменить вариант ответа
  correct <id> <1-4>            — отметить правильный вариант
  delete <id>                   — удалить вопрос
  add                           — добавить пустой вопрос
  done                          — перейти к прохождению
"""


def print_question(question: Question, show_answer: bool = False):
    print(f"\n❓ [{question.id}] ({question.difficulty.value}) {question.question}")
    for idx, opt in enumerate(question.options, 1):
        mark = " ✓" if show_answer and opt == question.correct_answer else ""
        print(f"   {idx}. {opt}{mark}")
    if show_answer and question.explanation:
        print(f"   💡 {question.explanation}")


def run_edit_session(runner: AssessmentRunner):
    """
    Интерактивная правка сгенерированного набора.

    Args:
        runner: Прохождение в режиме редактирования
    """
    editor = runner.editor

    print("\n" + "=" * 60)
    print(f"✏️ РЕДАКТОР ВОПРОСОВ. Всего вопросов: {len(editor)}")
    print("=" * 60)
    print(EDIT_HELP)

    for question in editor:
        print_question(question, show_answer=True)

    while True:
        parts = input("\n✏️ > ").strip().split(maxsplit=3)
        if not parts:
            continue
        command = parts[0].lower()

        try:
            if command == "done":
                if len(editor) == 0:
                    print("⚠️ В наборе нет вопросов. Добавьте хотя бы один (add).")
                    continue
                runner.exit_edit_mode()
                return
            elif command == "list":
                for question in editor:
                    print_question(question, show_answer=True)
            elif command == "add":
                question = editor.add_question()
                print(f"✅ Добавлен вопрос [{question.id}]")
            elif command == "delete" and len(parts) == 2:
                ok = editor.delete_question(int(parts[1]))
                print("✅ Удален" if ok else "❌ Вопрос не найден")
            elif command == "edit" and len(parts) == 4:
                ok = editor.update_field(int(parts[1]), parts[2], parts[3])
                print("✅ Сохранено" if ok else "❌ Не удалось изменить поле")
            elif command == "option" and len(parts) == 4:
                ok = editor.update_option(int(parts[1]), int(parts[2]) - 1, parts[3])
                print("✅ Сохранено" if ok else "❌ Вопрос или вариант не найден")
            elif command == "correct" and len(parts) == 3:
                question = editor.get(int(parts[1]))
                idx = int(parts[2]) - 1
                if question is None or not 0 <= idx < len(question.options):
                    print("❌ Вопрос или вариант не найден")
                    continue
                editor.set_correct_answer(question.id, question.options[idx])
                print(f"✅ Правильный ответ: {question.options[idx]}")
            else:
                print("❌ Неизвестная команда.")
                print(EDIT_HELP)
        except ValueError:
            print("❌ id и номер варианта должны быть числами.")


# ============================================================================
# ИНТЕРАКТИВНАЯ СЕССИЯ КВИЗА
# ============================================================================

def ask_answer(runner: AssessmentRunner, question: Question) -> bool:
    """Ввод ответа на один вопрос. False — пользователь вышел."""
    print_question(question)
    while True:
        user_input = input("\n👉 Ваш ответ: ").strip().lower()

        if user_input in ['exit', 'quit']:
            return False
        if user_input in ['', 'skip']:
            return True

        try:
            idx = int(user_input) - 1
            if 0 <= idx < len(question.options):
                runner.select_option(question.id, question.options[idx])
                return True
            print("❌ Некорректный ввод. Введите номер варианта.")
        except ValueError:
            print("❌ Введите число.")


def run_cli_quiz_session(runner: AssessmentRunner):
    """
    Интерактивный режим прохождения квиза в консоли.

    Args:
        runner: Прохождение (режим ответов)
    """
    print("\n" + "=" * 60)
    print(f"🚀 КВИЗ ГОТОВ! Всего вопросов: {len(runner.editor)}")
    print("=" * 60)
    print("Введите номер ответа, Enter — пропустить, 'exit' — выход.\n")

    pending = runner.editor.ids()
    while True:
        for question_id in pending:
            if not ask_answer(runner, runner.editor.get(question_id)):
                print("⚠️ Выход из квиза...")
                return

        result = runner.submit()
        if result.in_edit_mode:
            print("⚠️ Набор редактируется, отправка недоступна.")
            return
        if result.submitted:
            break

        print(f"\n⚠️ Ответьте на все вопросы. Без ответа: {result.missing_ids}")
        print(f"   Переходим к вопросу [{result.first_missing}]")
        pending = result.missing_ids

    # Итоги
    for question in runner.editor:
        verdict = "✅ ВЕРНО" if runner.is_correct(question.id) else "❌ ОШИБКА"
        print(f"\n{verdict}: [{question.id}] {question.question}")
        print(f"   Ваш ответ: {runner.answers.get(question.id)}")
        if not runner.is_correct(question.id):
            print(f"   Правильный ответ: {question.correct_answer}")
        if question.explanation:
            print(f"   💡 {question.explanation}")

    print("\n" + "=" * 60)
    print("🎉 ТЕСТ ЗАВЕРШЕН!")
    print("=" * 60)
    print(f"📊 Итоговый счет: {runner.correct_count()} из {len(runner.editor)} ({runner.score()}%)")
    print("=" * 60)


def run_assessment(runner: AssessmentRunner):
    """Цикл: правка → прохождение → повтор / правка / выход."""
    while True:
        if runner.is_edit_mode:
            run_edit_session(runner)

        run_cli_quiz_session(runner)

        choice = input("\n🔁 retry — пройти заново, edit — редактировать, Enter — дальше: ").strip().lower()
        if choice == "retry":
            runner.reset()
        elif choice == "edit":
            runner.enter_edit_mode()
        else:
            return


# ============================================================================
# ЧАТ С АССИСТЕНТОМ
# ============================================================================

def run_chat_session(transcript: ChatTranscript):
    """REPL чата с потоковой печатью ответа."""
    print("\n" + "=" * 60)
    print("💬 ЧАТ С АССИСТЕНТОМ ('exit' — выход)")
    print("=" * 60)
    print(f"\n🤖 {transcript.messages[0].text}")

    while True:
        text = input("\n🙂 Вы: ").strip()
        if text.lower() in ['exit', 'quit']:
            return
        if not text:
            continue

        print("🤖 ", end="", flush=True)
        for fragment in transcript.send(text):
            print(fragment, end="", flush=True)
        print()

        last = transcript.messages[-1]
        if last.is_error:
            print(f"❌ {last.text}")


# ============================================================================
# ПАРСИНГ АРГУМЕНТОВ КОМАНДНОЙ СТРОКИ
# ============================================================================

def difficulty_level(value: str) -> int:
    level = int(value)
    if not 1 <= level <= 10:
        raise argparse.ArgumentTypeError("difficulty must be between 1 and 10")
    return level


def questions_count(value: str) -> int:
    count = int(value)
    if not 1 <= count <= 20:
        raise argparse.ArgumentTypeError("questions count must be between 1 and 20")
    return count


def parse_arguments(argv=None):
    """
    Парсинг аргументов командной строки.
    """
    parser = argparse.ArgumentParser(
        description="🎓 QuizWizard - генератор тестов по документам (CLI версия)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:
  python main.py lecture.pdf
  python main.py handbook.docx -d 8 -q 10 -t "Sales Cycle"
  python main.py lecture.pdf --export quiz.gs --chat
        """
    )

    # Позиционный аргумент
    parser.add_argument(
        "file",
        nargs="?",
        help="Путь к документу (.pdf, .docx)"
    )

    # Группа настроек генерации
    gen_group = parser.add_argument_group('Настройки генерации')
    gen_group.add_argument(
        "-d", "--difficulty",
        type=difficulty_level,
        default=None,
        help="Сложность вопросов 1..10 (по умолчанию берется из config.json)"
    )
    gen_group.add_argument(
        "-q", "--questions",
        type=questions_count,
        default=None,
        help="Количество вопросов 1..20"
    )
    gen_group.add_argument(
        "-t", "--topic",
        type=str,
        default=None,
        help="Тема для фокуса (необязательно)"
    )
    gen_group.add_argument(
        "-m", "--model",
        type=str,
        default=None,
        help="Модель провайдера (например: gpt-4o, GigaChat-Max)"
    )

    # Группа вывода
    out_group = parser.add_argument_group('Вывод')
    out_group.add_argument(
        "--export",
        metavar="PATH",
        default=None,
        help="Сохранить Google Apps Script для создания квиза в Google Forms"
    )
    out_group.add_argument(
        "--chat",
        action="store_true",
        help="Открыть чат с AI-ассистентом"
    )

    # Группа системных настроек
    sys_group = parser.add_argument_group('Системные')
    sys_group.add_argument(
        "--debug",
        action="store_true",
        help="Режим отладки (подробное логирование в консоль и файл)"
    )

    args = parser.parse_args(argv)
    if not args.file and not args.chat:
        parser.error("укажите файл документа или --chat")
    return args


# ============================================================================
# ГЛАВНАЯ ФУНКЦИЯ
# ============================================================================

def main():
    """
    Главная функция приложения.

    Workflow:
    1. Парсинг аргументов командной строки
    2. Загрузка конфигурации и credentials
    3. Чтение и кодирование документа
    4. Запуск мульти-агентного пайплайна
    5. Редактирование и прохождение квиза
    6. Экспорт и чат (по флагам)
    """
    # 1. Парсинг аргументов
    args = parse_arguments()

    try:
        # 2. Инициализация системы
        config = load_config()
        setup_logging(args.debug, config.get("log_dir", "data/logs"))
        logger = logging.getLogger(__name__)

        logger.info("=" * 70)
        logger.info("APPLICATION START")
        logger.info("=" * 70)

        llm_settings = config.setdefault("llm_settings", {})

        # Если пользователь указал модель через флаг, переопределяем конфиг
        if args.model:
            old_model = llm_settings.get("model", "default")
            llm_settings["model"] = args.model

            print(f"🧠 Модель переопределена: {old_model} -> {args.model}")
            logger.info(f"Model override via CLI: {args.model}")

        credentials = load_credentials(llm_settings.get("provider", "openai"))

        if args.file:
            # 3. Чтение документа
            logger.info(f"Reading file: {args.file}")
            document = encode(args.file)

            print(f"\n⚙️ Запуск анализа файла: {document.name}")
            if args.topic:
                print(f"🔎 Тема: {args.topic}")
            if args.difficulty:
                print(f"🎯 Сложность: {args.difficulty}/10")
            if args.questions:
                print(f"📝 Количество вопросов: {args.questions}")
            print("⏳ Агенты работают: Reader → Teacher → Critic → Formatter...\n")

            # 4. Запуск пайплайна
            orchestrator = OrchestratorAgent(create_client_from_config(config, credentials), config)
            questions = orchestrator.generate_from_document(
                document,
                difficulty=args.difficulty,
                question_count=args.questions,
                topic=args.topic
            )
            print(f"✅ Сгенерировано вопросов: {len(questions)}")

            llm_stats = orchestrator.get_session_stats()["llm_stats"]
            print(
                f"💰 Запросов к LLM: {llm_stats['total_requests']}, "
                f"токенов: {llm_stats['prompt_tokens'] + llm_stats['completion_tokens']}"
            )

            # 5. Правка и прохождение
            runner = AssessmentRunner(QuestionSetEditor())
            runner.load_generated(questions)
            run_assessment(runner)

            # 6. Экспорт
            if args.export:
                script = render_apps_script(
                    runner.editor.questions,
                    topic=args.topic,
                    difficulty=args.difficulty or config.get("quiz_settings", {}).get("difficulty", 5),
                    source_name=document.name
                )
                Path(args.export).write_text(script, encoding='utf-8')
                print(f"\n📤 Скрипт для Google Forms сохранен: {args.export}")
                logger.info(f"Apps Script exported to {args.export}")

        # 7. Чат
        if args.chat:
            chat_settings = config.get("chat_settings", {})
            chat_config = dict(config, llm_settings=dict(
                llm_settings,
                temperature=chat_settings.get("temperature", llm_settings.get("temperature", 0.7))
            ))
            chat_agent = ChatAgent(create_client_from_config(chat_config, credentials))
            if chat_settings.get("system_instruction"):
                chat_agent.system_instruction = chat_settings["system_instruction"]
            run_chat_session(ChatTranscript(chat_agent))

        logger.info("Application finished successfully")

    except FileNotFoundError as e:
        print(f"\n❌ Ошибка: {e}")
        sys.exit(1)
    except IngestRejected as e:
        print(f"\n❌ {e}")
        sys.exit(1)
    except ConfigurationError as e:
        print(f"\n❌ Ошибка конфигурации: {e}")
        sys.exit(1)
    except PipelineStageFailure as e:
        print(f"\n❌ Ошибка генерации: {e}")
        print("Проверьте логи для подробностей.")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n⚠️ Программа прервана пользователем. До свидания!")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Critical Error: {e}", exc_info=True)
        print(f"\n❌ Критическая ошибка: {e}")
        print("Проверьте логи для подробностей.")
        sys.exit(1)


if __name__ == "__main__":
    main()
