"""Student directory client (httpx) and per-request memo."""

from app.infrastructure.external.directory.client import (
    HttpStudentDirectory,
    MemoizedStudentDirectory,
    parse_student_record,
)

__all__ = ["HttpStudentDirectory", "MemoizedStudentDirectory", "parse_student_record"]
