#!/usr/bin/env python3
"""
run.py (quizmend)

One fix run over one course:

    START -> EXTRACTING -> NO_QUESTIONS_FOUND                       (done)
                        -> FETCHING_REMOTE -> MATCHING -> NO_MISMATCHES (done)
                                                       -> REPAIRING -> REPORTING -> DONE

Any exception moves the run to ERROR. It is written to the course error
stream and is not raised. Whatever happens, ``on_complete(None, course)`` is
called exactly once, after the run has finished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from quizmend.config_utils import QuizmendConfig, parse_course_id
from quizmend.course import CourseContext, select_source_files
from quizmend.extract import extract_records
from quizmend.fetch import fetch_remote_quizzes
from quizmend.models import MismatchEntry, QuestionRecord, RemoteQuiz, RepairOutcome
from quizmend.reconcile import find_mismatches
from quizmend.repair import repair_mismatches
from quizmend.report import (
    STATUS_NO_MISMATCHES,
    STATUS_NO_QUESTIONS,
    report_outcome,
    report_status,
)

log = logging.getLogger(__name__)

Continuation = Callable[[Optional[Exception], CourseContext], None]


class RunState(Enum):
    START = "start"
    EXTRACTING = "extracting"
    NO_QUESTIONS_FOUND = "no_questions_found"
    FETCHING_REMOTE = "fetching_remote"
    MATCHING = "matching"
    NO_MISMATCHES = "no_mismatches"
    REPAIRING = "repairing"
    REPORTING = "reporting"
    DONE = "done"
    ERROR = "error"


@dataclass
class RunResult:
    state: RunState = RunState.START
    history: List[RunState] = field(default_factory=lambda: [RunState.START])
    records: List[QuestionRecord] = field(default_factory=list)
    quizzes: List[RemoteQuiz] = field(default_factory=list)
    mismatches: List[MismatchEntry] = field(default_factory=list)
    outcome: Optional[RepairOutcome] = None
    error: Optional[Exception] = None

    def advance(self, state: RunState):
        self.state = state
        self.history.append(state)
        log.debug("[run] -> %s", state.value)


def _run_stages(course: CourseContext, canvas, config: QuizmendConfig, result: RunResult):
    result.advance(RunState.EXTRACTING)
    files = select_source_files(course.content, config.prefixes)
    log.info("[run] Reading %d export file(s)", len(files))
    result.records = extract_records(f.xml() for f in files)

    if not result.records:
        report_status(course, STATUS_NO_QUESTIONS)
        result.advance(RunState.NO_QUESTIONS_FOUND)
        return

    result.advance(RunState.FETCHING_REMOTE)
    course_id = parse_course_id(course.course_id)
    result.quizzes = fetch_remote_quizzes(canvas, course_id)

    result.advance(RunState.MATCHING)
    result.mismatches = find_mismatches(result.records, result.quizzes)

    if not result.mismatches:
        report_status(course, STATUS_NO_MISMATCHES)
        result.advance(RunState.NO_MISMATCHES)
        return

    result.advance(RunState.REPAIRING)
    result.outcome = repair_mismatches(
        result.mismatches, course_id, config.api_url, config.api_key,
        dry_run=config.dry_run,
    )

    result.advance(RunState.REPORTING)
    report_outcome(course, result.outcome)
    result.advance(RunState.DONE)


def run_fix(
    course: CourseContext,
    canvas,
    config: QuizmendConfig,
    on_complete: Optional[Continuation] = None,
) -> RunResult:
    """
    Find and repair Multi-Select questions imported as single-answer.

    Args:
        course: Course id, export content and log sink
        canvas: canvasapi.Canvas used to read quizzes and questions
        config: Credentials, file prefixes and dry-run flag
        on_complete: Called once as on_complete(None, course) when the run ends

    Returns:
        RunResult with the final state and everything collected on the way
    """
    result = RunResult()
    try:
        _run_stages(course, canvas, config, result)
    except Exception as e:
        # Reported, never raised: the host keeps running
        result.error = e
        result.advance(RunState.ERROR)
        course.error(e)

    if on_complete is not None:
        on_complete(None, course)
    return result
