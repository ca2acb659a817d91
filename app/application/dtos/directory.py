"""DTOs for data read from the external student directory."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StudentDirectoryRecord:
    """School placement and guardians of one student."""

    student_id: str
    school_id: str | None = None
    class_ids: tuple[str, ...] = ()
    parent_ids: tuple[str, ...] = ()
    grade: str | None = None

    @property
    def primary_parent_id(self) -> str | None:
        return self.parent_ids[0] if self.parent_ids else None
