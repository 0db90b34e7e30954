#!/usr/bin/env python3
"""
reconcile.py (quizmend)

Pair D2L Multi-Select records with Canvas questions that were imported as
single-answer multiple choice.

A record and a Canvas question are the same question when:

1. the quiz titles are equal, ignoring case;
2. the question title equals the Canvas question name exactly, unless the
   record has no title ("unknown title"), in which case titles are not compared;
3. the visible question text is equal, ignoring markup and case.

Every matching record adds an entry, so one Canvas question matched by two
records is listed twice.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from quizmend.markup import normalize_text
from quizmend.models import (
    MismatchEntry,
    QuestionRecord,
    QuestionType,
    RemoteQuestion,
    RemoteQuiz,
)

log = logging.getLogger(__name__)


def select_candidates(quizzes: Sequence[RemoteQuiz]) -> List[Tuple[RemoteQuiz, List[RemoteQuestion]]]:
    """
    Quizzes paired with their single-answer multiple choice questions.

    Quizzes with no questions, or none of that type, are dropped.
    """
    selected = []
    for quiz in quizzes:
        if not quiz.questions:
            continue
        candidates = [q for q in quiz.questions if q.type is QuestionType.MULTIPLE_CHOICE]
        if candidates:
            selected.append((quiz, candidates))
    return selected


def quiz_titles_match(quiz: RemoteQuiz, record: QuestionRecord) -> bool:
    return quiz.title.lower() == record.quiz_title.lower()


def is_match(quiz: RemoteQuiz, question: RemoteQuestion, record: QuestionRecord,
             text_cache: Optional[Dict[str, str]] = None) -> bool:
    if not quiz_titles_match(quiz, record):
        return False

    if record.has_title and record.question_title != question.name:
        return False

    if text_cache is None:
        text_cache = {}
    for blob in (record.question_text, question.text):
        if blob not in text_cache:
            text_cache[blob] = normalize_text(blob)
    return text_cache[record.question_text] == text_cache[question.text]


def find_mismatches(records: Sequence[QuestionRecord],
                    quizzes: Sequence[RemoteQuiz]) -> List[MismatchEntry]:
    """
    Canvas questions that should be multiple answers, in discovery order
    (quiz, then question, then record).
    """
    text_cache: Dict[str, str] = {}
    mismatched: List[MismatchEntry] = []

    for quiz, candidates in select_candidates(quizzes):
        for question in candidates:
            for record in records:
                if is_match(quiz, question, record, text_cache):
                    mismatched.append(MismatchEntry(question=question, record=record))
                    log.debug("[reconcile]   '%s' / '%s' (id=%s) matches '%s'",
                              quiz.title, question.name, question.id, record.question_title)

    distinct = len({(e.quiz_id, e.question_id) for e in mismatched})
    log.info("[reconcile] %d mismatched question(s) (%d distinct)", len(mismatched), distinct)
    return mismatched
