#!/usr/bin/env python3
"""
fetch.py (quizmend)

Read every Classic quiz in a Canvas course together with its questions.

Quizzes are fetched one at a time, in the order Canvas lists them, so the
reconcile step always sees the same ordering for the same course.
"""

from __future__ import annotations

import logging
from typing import List

import requests
from canvasapi.exceptions import CanvasException

from quizmend.errors import canvas_request_error
from quizmend.models import QuestionType, RemoteQuestion, RemoteQuiz

log = logging.getLogger(__name__)

# Errors that mean "Canvas could not be reached or refused the request"
CANVAS_ERRORS = (CanvasException, requests.exceptions.RequestException)


def to_remote_question(question, quiz_id: int) -> RemoteQuestion:
    """Convert a canvasapi QuizQuestion into a RemoteQuestion."""
    return RemoteQuestion(
        id=question.id,
        quiz_id=getattr(question, "quiz_id", None) or quiz_id,
        type=QuestionType.from_canvas(getattr(question, "question_type", None)),
        name=getattr(question, "question_name", "") or "",
        text=getattr(question, "question_text", "") or "",
    )


def fetch_quiz_questions(quiz) -> List[RemoteQuestion]:
    return [to_remote_question(q, quiz.id) for q in quiz.get_questions()]


def fetch_remote_quizzes(canvas, course_id: int) -> List[RemoteQuiz]:
    """
    GET /courses/:id/quizzes, then GET .../quizzes/:quiz_id/questions for each.

    Raises:
        NetworkError: On any failed request; nothing fetched so far is returned
    """
    try:
        course = canvas.get_course(course_id)
        quizzes = list(course.get_quizzes())
    except CANVAS_ERRORS as e:
        raise canvas_request_error("list quizzes", course_id, cause=e) from e

    log.info("[fetch] Found %d quiz(zes) in course %s", len(quizzes), course_id)

    remote: List[RemoteQuiz] = []
    for quiz in quizzes:
        try:
            questions = fetch_quiz_questions(quiz)
        except CANVAS_ERRORS as e:
            raise canvas_request_error(
                "list quiz questions", course_id, cause=e,
                quiz_id=quiz.id, quiz_title=quiz.title,
            ) from e

        log.debug("[fetch]   '%s' (id=%s): %d question(s)", quiz.title, quiz.id, len(questions))
        remote.append(RemoteQuiz(id=quiz.id, title=quiz.title or "", questions=questions))

    return remote
