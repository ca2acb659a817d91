"""Service interfaces (ports) for the application layer.

Protocols define contracts for collaborators outside this service (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.directory import StudentDirectoryRecord


class IStudentDirectory(Protocol):
    """Protocol for the external student directory.

    Implementations raise ResourceNotFoundException for unknown students
    and UpstreamServiceException when the directory cannot be reached.
    """

    async def get_student(self, student_id: str) -> StudentDirectoryRecord:
        """Return school, classes, grade, and parents for a student."""

    async def get_children(self, parent_id: str) -> list[str]:
        """Return student ids linked to a parent."""


class ICacheService(Protocol):
    """Minimal cache protocol for directory caching (DIP)."""

    def is_available(self) -> bool:
        """Return True if cache is connected."""

    async def get(self, key: str) -> Any:
        """Return cached value or None."""

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """Store value with TTL. Returns True on success."""

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True on success."""
