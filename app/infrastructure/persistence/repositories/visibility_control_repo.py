"""Visibility control repository: one override row per (task, controller type, controller id)."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from sqlalchemy import and_, literal_column, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from app.application.dtos.visibility import SetControlResult, VisibilityControlResult
from app.core.constants import DEFAULT_CONTROL_REASON
from app.domain.enums import ControllerType
from app.infrastructure.persistence.models.task_visibility_control import (
    TaskVisibilityControl,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def _to_result(c: TaskVisibilityControl) -> VisibilityControlResult:
    """Map TaskVisibilityControl ORM to VisibilityControlResult DTO."""
    return VisibilityControlResult(
        id=c.id,
        task_id=c.task_id,
        controller_type=ControllerType(c.controller_type),
        controller_id=c.controller_id,
        is_visible=c.is_visible,
        controlled_student_ids=tuple(c.controlled_student_ids or ()),
        changed_by=c.changed_by,
        changed_by_role=c.changed_by_role,
        reason=c.reason,
        metadata=dict(c.control_metadata or {}),
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


class VisibilityControlRepository(BaseRepository[TaskVisibilityControl]):
    """Visibility control repository. Implements IVisibilityControlRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskVisibilityControl)

    async def upsert(
        self,
        task_id: str,
        controller_type: ControllerType,
        controller_id: str,
        student_ids: Sequence[str],
        is_visible: bool,
        changed_by: str,
        changed_by_role: str,
        reason: str | None,
    ) -> SetControlResult:
        """Insert or replace the control for the triple in one statement.

        controlled_student_ids is replaced, not merged. A missing reason stores
        the default on insert and keeps the existing reason on update. xmax = 0
        on the returned row means the statement inserted it.
        """
        stmt = insert(TaskVisibilityControl).values(
            id=generate_cuid(),
            task_id=task_id,
            controller_type=controller_type.value,
            controller_id=controller_id,
            is_visible=is_visible,
            controlled_student_ids=list(student_ids),
            changed_by=changed_by,
            changed_by_role=changed_by_role,
            reason=reason or DEFAULT_CONTROL_REASON,
        )
        changes = {
            "is_visible": stmt.excluded.is_visible,
            "controlled_student_ids": stmt.excluded.controlled_student_ids,
            "changed_by": stmt.excluded.changed_by,
            "changed_by_role": stmt.excluded.changed_by_role,
            "updated_at": func.now(),
        }
        if reason:
            changes["reason"] = stmt.excluded.reason
        stmt = stmt.on_conflict_do_update(
            constraint="uq_task_visibility_control_controller", set_=changes
        ).returning(
            TaskVisibilityControl.id, literal_column("(xmax = 0)").label("created")
        )
        row = (await self.db.execute(stmt)).one()
        control = await self.db.execute(
            select(TaskVisibilityControl)
            .where(TaskVisibilityControl.id == row.id)
            .execution_options(populate_existing=True)
        )
        result = SetControlResult(
            control=_to_result(control.scalar_one()), created=bool(row.created)
        )
        logger.info(
            "Visibility control %s: task=%s controller=%s:%s visible=%s students=%d",
            "created" if result.created else "updated",
            task_id,
            controller_type.value,
            controller_id,
            is_visible,
            len(student_ids),
        )
        return result

    async def find_applicable(
        self,
        task_ids: Sequence[str],
        student_id: str,
        controllers: Mapping[ControllerType, str],
    ) -> list[VisibilityControlResult]:
        """Return controls on task_ids owned by the given controllers that list student_id."""
        if not task_ids or not controllers:
            return []
        owned_by = or_(
            *(
                and_(
                    TaskVisibilityControl.controller_type == ctype.value,
                    TaskVisibilityControl.controller_id == cid,
                )
                for ctype, cid in controllers.items()
            )
        )
        result = await self.db.execute(
            select(TaskVisibilityControl).where(
                TaskVisibilityControl.task_id.in_(list(task_ids)),
                owned_by,
                TaskVisibilityControl.controlled_student_ids.contains([student_id]),
            )
        )
        return [_to_result(c) for c in result.scalars().all()]

    async def list_for_task(
        self,
        task_id: str,
        controller_type: ControllerType | None = None,
        controller_id: str | None = None,
    ) -> list[VisibilityControlResult]:
        """Return controls on a task, optionally for one controller."""
        stmt = select(TaskVisibilityControl).where(
            TaskVisibilityControl.task_id == task_id
        )
        if controller_type is not None:
            stmt = stmt.where(TaskVisibilityControl.controller_type == controller_type.value)
        if controller_id is not None:
            stmt = stmt.where(TaskVisibilityControl.controller_id == controller_id)
        result = await self.db.execute(
            stmt.order_by(TaskVisibilityControl.updated_at.desc())
        )
        return [_to_result(c) for c in result.scalars().all()]

    async def list_for_controller(
        self,
        controller_type: ControllerType,
        controller_id: str,
        task_id: str | None = None,
    ) -> list[VisibilityControlResult]:
        """Return a controller's controls, newest first."""
        stmt = select(TaskVisibilityControl).where(
            TaskVisibilityControl.controller_type == controller_type.value,
            TaskVisibilityControl.controller_id == controller_id,
        )
        if task_id is not None:
            stmt = stmt.where(TaskVisibilityControl.task_id == task_id)
        result = await self.db.execute(
            stmt.order_by(TaskVisibilityControl.updated_at.desc())
        )
        return [_to_result(c) for c in result.scalars().all()]
