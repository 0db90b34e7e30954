# errors.py
"""
Custom exception classes with improved error messages for quizmend

All exceptions include:
- Clear error description
- Actionable suggestions
- Relevant context
"""
from typing import Optional, Dict, Any

from quizmend.icons import ERROR, HINT


class QuizmendError(Exception):
    """Base exception for all quizmend errors"""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error with all details"""
        lines = [
            "",
            "=" * 70,
            f"{ERROR} {self.__class__.__name__}",
            "=" * 70,
            "",
            self.message,
        ]

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append("")
            lines.append(f"{HINT} Suggestion:")
            lines.append(f"  {self.suggestion}")

        if self.cause:
            lines.append("")
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        lines.append("")
        lines.append("=" * 70)
        lines.append("")

        return "\n".join(lines)


class ConfigurationError(QuizmendError):
    """Configuration is missing or invalid"""
    pass


class ParseError(QuizmendError):
    """Source export document is not well-formed XML"""
    pass


class ElementLookupError(QuizmendError, LookupError):
    """A required structural element is missing from a source document"""
    pass


class NetworkError(QuizmendError):
    """Error communicating with the Canvas API"""
    pass


# Specific error factory functions

def missing_course_id_error() -> ConfigurationError:
    """Create error for missing course ID"""
    return ConfigurationError(
        message="Course ID not configured",
        suggestion=(
            "Set course ID using one of these methods:\n\n"
            "1. Command line:\n"
            "   quizmend fix EXPORT --course-id 12345\n\n"
            "2. Environment variable:\n"
            "   export COURSE_ID=12345\n\n"
            "3. Create quizmend.yaml in the working directory:\n"
            "   course_id: 12345"
        ),
        context={
            "checked_locations": [
                "--course-id option",
                "COURSE_ID environment variable",
                "quizmend.yaml",
                "~/.quizmend/config.yaml",
            ]
        }
    )


def malformed_document_error(
    document_index: int,
    cause: Optional[Exception] = None
) -> ParseError:
    """Create error for an export document lxml could not parse"""
    return ParseError(
        message=f"Export document #{document_index} is not well-formed XML",
        suggestion=(
            "Re-export the course from D2L, or check the file for truncation.\n"
            "Only quiz_d2l_*.xml and questiondb.xml files are read."
        ),
        context={"document_index": document_index},
        cause=cause
    )


def missing_question_text_error(quiz_title: str, question_title: str) -> ElementLookupError:
    """Create error for a Multi-Select item with no presentation text"""
    return ElementLookupError(
        message="Multi-Select question has no presentation text",
        suggestion=(
            "The item should contain presentation/flow/material/mattext.\n"
            "Check the export file by hand for this question."
        ),
        context={
            "quiz_title": quiz_title,
            "question_title": question_title,
        }
    )


def canvas_request_error(
    action: str,
    course_id: int,
    cause: Optional[Exception] = None,
    **context: Any
) -> NetworkError:
    """Create error when a Canvas request fails"""
    return NetworkError(
        message=f"Canvas request failed while trying to {action}",
        suggestion=(
            "Possible causes:\n"
            "  - API token lacks permission for this course\n"
            "  - Course or quiz was deleted in Canvas\n"
            "  - Canvas is unreachable or rate limiting requests\n\n"
            "Nothing is retried; re-run once the problem is fixed."
        ),
        context={"course_id": course_id, **context},
        cause=cause
    )


def unreadable_export_error(name: str, cause: Optional[Exception] = None) -> ParseError:
    """Create error for an export file that could not be read"""
    return ParseError(
        message=f"Cannot read export file: {name}",
        suggestion="Check that the export .zip is complete and the file is readable.",
        context={"file": name},
        cause=cause
    )
