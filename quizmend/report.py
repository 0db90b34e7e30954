#!/usr/bin/env python3
"""
report.py (quizmend)

Turn a repair outcome into status entries on the course log.
"""

from __future__ import annotations

from quizmend.course import CourseContext
from quizmend.models import RepairOutcome

TAG = "fix-multi-select-questions"

STATUS_NO_QUESTIONS = "No multi-select questions found"
STATUS_NO_MISMATCHES = "No mismatched multi-select questions found"
STATUS_SUCCESS = "Multi-select questions updated"
STATUS_FAILURE = "No multi-select questions were updated"
STATUS_DRY_RUN = "Dry run: no questions were updated"


def report_status(course: CourseContext, status: str, **details):
    course.log(TAG, {"status": status, **details})


def report_outcome(course: CourseContext, outcome: RepairOutcome):
    """
    Success if at least one question was updated, failure otherwise.

    A failed update that stopped the run also goes to the error stream.
    """
    if outcome.dry_run:
        report_status(course, STATUS_DRY_RUN)
    elif outcome.succeeded:
        report_status(course, STATUS_SUCCESS, updated=len(outcome.updated))
    else:
        report_status(course, STATUS_FAILURE)

    if outcome.failure is not None:
        course.error(outcome.failure)
