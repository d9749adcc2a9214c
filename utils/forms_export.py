# utils/forms_export.py

"""
Экспорт набора вопросов в Google Forms.

Результат — текст Google Apps Script: пользователь вставляет его в
script.google.com и запускает функцию createQuizWizardQuiz(), которая
создает форму-квиз с баллами, правильными ответами и пояснениями.

Рендеринг детерминирован: одинаковые вопросы и параметры дают
одинаковый текст скрипта.
"""

import json
from string import Template
from typing import Iterable, Optional

from quiz.models import Question


DEFAULT_TITLE = "Generated Quiz"
DEFAULT_SOURCE = "Uploaded Document"

_SCRIPT_TEMPLATE = Template("""function createQuizWizardQuiz() {
  try {
    // 1. Create a new Google Form
    var title = "QuizWizard: ${topic}";
    var form = FormApp.create(title);

    form.setDescription("Generated by QuizWizard AI.\\nDifficulty Level: ${difficulty}/10\\nSource: ${source}");
    form.setIsQuiz(true);
    form.setConfirmationMessage("Thank you for completing the assessment!");

    var questions = ${questions};

    // 2. Add Questions
    questions.forEach(function(q, index) {
      var item = form.addMultipleChoiceItem();
      item.setTitle((index + 1) + ". " + q.text);

      var choices = q.options.map(function(opt) {
        return item.createChoice(opt, opt === q.correct);
      });

      item.setChoices(choices);
      item.setPoints(1);
      item.setRequired(true);

      if (q.explanation) {
        var feedback = FormApp.createFeedback()
          .setText(q.explanation)
          .build();
        item.setFeedbackForCorrect(feedback);
        item.setFeedbackForIncorrect(feedback);
      }
    });

    Logger.log("\\nSUCCESS! Form Created.");
    Logger.log("Edit URL: " + form.getEditUrl());
    Logger.log("Published URL: " + form.getPublishedUrl());

  } catch (e) {
    Logger.log("Error: " + e.toString());
  }
}""")


def escape_script_string(text: str) -> str:
    """Экранирование двойных кавычек и обратных апострофов для строкового литерала скрипта."""
    return text.replace('"', '\\"').replace("`", "\\`")


def questions_to_script_json(questions: Iterable[Question]) -> str:
    """JSON-массив вопросов в формате, который читает скрипт (text / options / correct / explanation)."""
    payload = [
        {
            "text": q.question,
            "options": list(q.options),
            "correct": q.correct_answer,
            "explanation": q.explanation,
        }
        for q in questions
    ]
    return json.dumps(payload, ensure_ascii=False, indent=2).replace("`", "\\`")


def render_apps_script(
        questions: Iterable[Question],
        topic: Optional[str] = None,
        difficulty: int = 5,
        source_name: Optional[str] = None
) -> str:
    """
    Генерация Google Apps Script для создания квиза в Google Forms.

    Args:
        questions: Итоговые вопросы (после редактирования)
        topic: Тема квиза, попадает в заголовок формы
        difficulty: Сложность 1..10, попадает в описание формы
        source_name: Имя исходного документа

    Returns:
        str: Текст скрипта с функцией createQuizWizardQuiz()
    """
    return _SCRIPT_TEMPLATE.substitute(
        topic=escape_script_string(topic or DEFAULT_TITLE),
        difficulty=difficulty,
        source=escape_script_string(source_name or DEFAULT_SOURCE),
        questions=questions_to_script_json(questions),
    )
