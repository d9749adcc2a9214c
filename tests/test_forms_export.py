"""
Тесты для экспорта в Google Forms
"""

import json

from tests.conftest import make_question_data, make_questions
from quiz.models import Question
from utils.forms_export import questions_to_script_json, render_apps_script


def test_script_is_deterministic(sample_questions):
    """Тест детерминированности скрипта"""
    first = render_apps_script(sample_questions, topic="Geography", difficulty=4, source_name="atlas.pdf")
    second = render_apps_script(sample_questions, topic="Geography", difficulty=4, source_name="atlas.pdf")

    assert first == second
    assert first.startswith("function createQuizWizardQuiz() {")


def test_defaults_for_title_and_source(sample_questions):
    """Тест заголовка и источника по умолчанию"""
    script = render_apps_script(sample_questions)

    assert 'var title = "QuizWizard: Generated Quiz";' in script
    assert "Difficulty Level: 5/10" in script
    assert "Source: Uploaded Document" in script


def test_topic_quotes_and_backticks_escaped(sample_questions):
    """Тест экранирования кавычек и обратных апострофов в теме"""
    script = render_apps_script(sample_questions, topic='The "Big" `Bang`')

    assert 'QuizWizard: The \\"Big\\" \\`Bang\\`' in script


def test_questions_embedded_as_json():
    """Тест формата вопросов внутри скрипта"""
    questions = make_questions(2)

    data = json.loads(questions_to_script_json(questions))

    assert data[0] == {
        "text": "Question 1?",
        "options": ["Paris", "London", "Berlin", "Rome"],
        "correct": "Paris",
        "explanation": "Explanation 1",
    }
    assert len(data) == 2


def test_backticks_in_questions_escaped():
    """Тест экранирования обратных апострофов в вопросах"""
    question = Question.model_validate(make_question_data(1, question="Use `ls` here?"))

    script = render_apps_script([question])

    assert "Use \\`ls\\` here?" in script
    assert "Use `ls`" not in script
