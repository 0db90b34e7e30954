#!/usr/bin/env python3
"""
repair.py (quizmend)

Change mismatched Canvas questions to multiple_answers_question.

Updates go out one at a time, in the order given. The first failed update
stops the run; updates already applied stay applied.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Sequence

import requests

from quizmend.errors import NetworkError, canvas_request_error
from quizmend.icons import EDIT, SKIP
from quizmend.models import MismatchEntry, QuestionType, RepairOutcome

log = logging.getLogger(__name__)

# (connect, read) seconds for each update
REQUEST_TIMEOUT = (10, 30)


def question_url(api_url: str, course_id: int, quiz_id: int, question_id: int) -> str:
    base = api_url.rstrip("/")
    return f"{base}/api/v1/courses/{course_id}/quizzes/{quiz_id}/questions/{question_id}"


def update_question_type(
    api_url: str,
    api_key: str,
    course_id: int,
    quiz_id: int,
    question_id: int,
    question_type: QuestionType = QuestionType.MULTIPLE_ANSWERS,
) -> Dict[str, Any]:
    """
    PUT /courses/:course_id/quizzes/:quiz_id/questions/:id with only the type changed.

    Raises:
        NetworkError: If the request fails or Canvas rejects it
    """
    url = question_url(api_url, course_id, quiz_id, question_id)
    headers = {"Authorization": f"Bearer {api_key}"}
    payload = {"question[question_type]": question_type.value}

    try:
        resp = requests.put(url, headers=headers, data=payload, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        return resp.json()
    except requests.exceptions.RequestException as e:
        raise canvas_request_error(
            "update question type", course_id, cause=e,
            quiz_id=quiz_id, question_id=question_id,
        ) from e


def repair_mismatches(
    entries: Sequence[MismatchEntry],
    course_id: int,
    api_url: str,
    api_key: str,
    dry_run: bool = False,
) -> RepairOutcome:
    """
    Issue one update per entry, stopping at the first failure.

    Duplicate entries get their own update call. The failure is returned on
    the outcome rather than raised, with the entries that were never tried
    listed in ``skipped``.
    """
    outcome = RepairOutcome(dry_run=dry_run)

    for position, entry in enumerate(entries):
        label = f"'{entry.question.name}' (quiz_id={entry.quiz_id}, id={entry.question_id})"

        if dry_run:
            log.info("[repair] (dry-run) Would change %s to %s",
                     label, QuestionType.MULTIPLE_ANSWERS.value)
            continue

        try:
            response = update_question_type(
                api_url, api_key, course_id, entry.quiz_id, entry.question_id,
            )
        except NetworkError as e:
            outcome.failure = e
            outcome.skipped = list(entries[position + 1:])
            log.error("[repair] Failed to update %s; %d update(s) not attempted",
                      label, len(outcome.skipped))
            break

        outcome.updated.append(response)
        log.info("[repair] %s Changed %s to %s", EDIT, label, QuestionType.MULTIPLE_ANSWERS.value)

    if outcome.skipped:
        for entry in outcome.skipped:
            log.debug("[repair]   %s not attempted: id=%s", SKIP, entry.question_id)

    log.info("[repair] Updated %d of %d question(s)", len(outcome.updated), len(entries))
    return outcome
