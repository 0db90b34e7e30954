"""
models.py - Records passed between the extract, fetch, reconcile and repair steps.

Nothing here is cached or persisted; every run builds these fresh.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

# Quiz title given to a titleless question bank (questiondb.xml)
QUESTION_DATABASE_TITLE = "Question Database"

# Question title used when no enclosing item carries a title attribute
UNKNOWN_TITLE = "unknown title"


# ============================================================================
# Source export (D2L)
# ============================================================================

@dataclass(frozen=True)
class QuestionRecord:
    """
    A Multi-Select question found in a D2L export document.

    ``has_title`` is False when no enclosing item had a title; the title then
    reads "unknown title" and is not compared against Canvas question names.
    """
    quiz_title: str
    question_title: str
    question_text: str
    has_title: bool = True

    @classmethod
    def untitled(cls, quiz_title: str, question_text: str) -> "QuestionRecord":
        return cls(quiz_title, UNKNOWN_TITLE, question_text, has_title=False)


# ============================================================================
# Canvas
# ============================================================================

class QuestionType(Enum):
    MULTIPLE_CHOICE = "multiple_choice_question"
    MULTIPLE_ANSWERS = "multiple_answers_question"
    OTHER = "other"

    @classmethod
    def from_canvas(cls, value: Optional[str]) -> "QuestionType":
        for member in (cls.MULTIPLE_CHOICE, cls.MULTIPLE_ANSWERS):
            if member.value == value:
                return member
        return cls.OTHER


@dataclass(frozen=True)
class RemoteQuestion:
    id: int
    quiz_id: int
    type: QuestionType
    name: str
    text: str


@dataclass
class RemoteQuiz:
    id: int
    title: str
    questions: List[RemoteQuestion] = field(default_factory=list)


# ============================================================================
# Reconcile / repair results
# ============================================================================

@dataclass(frozen=True)
class MismatchEntry:
    """
    A Canvas question that should be multiple_answers_question.

    The same question can appear in several entries when more than one
    export record matched it.
    """
    question: RemoteQuestion
    record: QuestionRecord

    @property
    def quiz_id(self) -> int:
        return self.question.quiz_id

    @property
    def question_id(self) -> int:
        return self.question.id


@dataclass
class RepairOutcome:
    """Responses from the updates that succeeded, and the error that stopped the rest."""
    updated: List[Dict[str, Any]] = field(default_factory=list)
    failure: Optional[Exception] = None
    skipped: List[MismatchEntry] = field(default_factory=list)
    dry_run: bool = False

    @property
    def succeeded(self) -> bool:
        return bool(self.updated)
