#!/usr/bin/env python3
"""
course.py (quizmend)

The course a run works on: its Canvas id, the D2L export files, and the
log/error stream that run outcomes are written to.

Export files can come from an unzipped export directory or straight from the
export .zip.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from quizmend.config_utils import QUESTION_BANK_PREFIX, QUIZ_EXPORT_PREFIX
from quizmend.errors import QuizmendError, unreadable_export_error

logger = logging.getLogger(__name__)

DEFAULT_PREFIXES = (QUIZ_EXPORT_PREFIX, QUESTION_BANK_PREFIX)


# ============================================================================
# Export files
# ============================================================================

@dataclass(frozen=True)
class ExportFile:
    """An export document on disk."""
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    def xml(self) -> bytes:
        """Raw document bytes; the XML declaration decides the encoding."""
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise unreadable_export_error(str(self.path), cause=e) from e


@dataclass(frozen=True)
class ExportArchiveFile:
    """An export document inside a D2L export .zip."""
    archive: Path
    member: str

    @property
    def name(self) -> str:
        return Path(self.member).name

    def xml(self) -> bytes:
        try:
            with zipfile.ZipFile(self.archive) as zf:
                return zf.read(self.member)
        except (OSError, KeyError, zipfile.BadZipFile) as e:
            raise unreadable_export_error(f"{self.archive.name}:{self.member}", cause=e) from e


def load_export(path: Union[str, Path]) -> List[Union[ExportFile, ExportArchiveFile]]:
    """
    List the XML documents of a D2L export (directory or .zip), sorted by name.
    """
    path = Path(path)
    if path.is_dir():
        return [ExportFile(p) for p in sorted(path.rglob("*.xml")) if p.is_file()]

    if zipfile.is_zipfile(path):
        with zipfile.ZipFile(path) as zf:
            members = sorted(
                m for m in zf.namelist()
                if m.lower().endswith(".xml") and not m.endswith("/")
            )
        return [ExportArchiveFile(path, m) for m in members]

    raise QuizmendError(
        message=f"Not a D2L export directory or .zip: {path}",
        suggestion="Point quizmend at the unzipped export folder or the export .zip itself.",
        context={"path": str(path)},
    )


def select_source_files(files: Iterable[Any], prefixes: Sequence[str] = DEFAULT_PREFIXES) -> List[Any]:
    """Files whose name starts with a quiz export or question bank prefix."""
    prefixes = tuple(prefixes)
    return [f for f in files if f.name.startswith(prefixes)]


# ============================================================================
# Course context
# ============================================================================

@dataclass
class CourseContext:
    """
    What the host hands a run: course id, export content and the log sink.

    ``log`` and ``error`` keep every entry so the host (or a test) can read
    them back after the run.
    """
    course_id: Optional[int]
    content: List[Any] = field(default_factory=list)
    logs: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)
    errors: List[Any] = field(default_factory=list)

    def log(self, tag: str, data: Dict[str, Any]):
        self.logs.append((tag, data))
        logger.info("[%s] %s", tag, ", ".join(f"{k}: {v}" for k, v in data.items()))

    def error(self, err: Any):
        self.errors.append(err)
        if isinstance(err, BaseException):
            logger.error("%s", err)
        else:
            logger.error("[error] %s", err)
