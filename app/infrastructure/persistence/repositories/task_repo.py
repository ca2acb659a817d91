"""Task repository: authoring CRUD plus candidate and controllable queries.

Targeting lives in the target_criteria JSONB column; candidate queries use
containment (@>) so the GIN index on target_criteria applies.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import ColumnElement, and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.actor import Actor
from app.application.dtos.directory import StudentDirectoryRecord
from app.application.dtos.task import TaskCreate, TaskFilters, TaskResult
from app.domain.enums import ActorRole, AssignmentStrategy, ControllerType
from app.domain.value_objects.core import DefaultVisibility, TargetCriteria
from app.infrastructure.persistence.models.task import Task
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

# DTO field name -> ORM attribute where they differ.
_COLUMN_ALIASES = {"metadata": "task_metadata"}
_UPDATABLE = frozenset(
    {
        "title",
        "description",
        "category",
        "sub_category",
        "point_value",
        "due_date",
        "status",
        "target_criteria",
        "default_visibility",
        "task_metadata",
    }
)


def _to_result(t: Task) -> TaskResult:
    """Map Task ORM to TaskResult DTO."""
    return TaskResult(
        id=t.id,
        title=t.title,
        description=t.description,
        category=t.category,
        sub_category=t.sub_category,
        point_value=t.point_value,
        status=t.status,
        created_by=t.created_by,
        creator_role=t.creator_role,
        assignment_strategy=AssignmentStrategy(t.assignment_strategy),
        target_criteria=TargetCriteria.from_dict(t.target_criteria),
        default_visibility=DefaultVisibility.from_dict(t.default_visibility),
        due_date=t.due_date,
        is_deleted=t.is_deleted,
        deleted_at=t.deleted_at,
        deleted_by=t.deleted_by,
        metadata=dict(t.task_metadata or {}),
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def _strategy(value: AssignmentStrategy) -> ColumnElement[bool]:
    return Task.assignment_strategy == value.value


def _criteria_has(key: str, value: str) -> ColumnElement[bool]:
    """target_criteria[key] (a JSON array) contains value."""
    return Task.target_criteria.contains({key: [value]})


def _default_visibility_is(key: str) -> ColumnElement[bool]:
    return Task.default_visibility.contains({key: True})


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def _on_after_create(self, obj: Task) -> None:
        logger.info(
            "Task created: id=%s strategy=%s by=%s",
            obj.id,
            obj.assignment_strategy,
            obj.created_by,
        )

    def _live(self, status: str | None, category: str | None) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = [Task.is_deleted.is_(False)]
        if status:
            clauses.append(Task.status == status)
        if category:
            clauses.append(Task.category == category)
        return clauses

    async def _page(
        self, clauses: Sequence[ColumnElement[bool]], skip: int, limit: int
    ) -> list[TaskResult]:
        stmt = (
            select(Task)
            .where(*clauses)
            .order_by(Task.created_at.desc(), Task.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_to_result(t) for t in result.scalars().all()]

    async def create_task(self, data: TaskCreate, actor: Actor) -> TaskResult:
        """Persist a new task authored by actor and return the result DTO."""
        task = Task(
            title=data.title,
            description=data.description,
            category=data.category,
            sub_category=data.sub_category,
            point_value=data.point_value,
            status=data.status,
            created_by=actor.user_id,
            creator_role=actor.role,
            assignment_strategy=data.assignment_strategy.value,
            target_criteria=data.target_criteria.to_dict(),
            default_visibility=data.default_visibility.to_dict(),
            due_date=ensure_utc(data.due_date),
            task_metadata=dict(data.metadata),
        )
        await self.add(task)
        return _to_result(task)

    async def get_by_id(self, task_id: str) -> TaskResult | None:
        """Return task by ID, including soft-deleted tasks."""
        task = await self.get_model(task_id)
        return _to_result(task) if task else None

    async def get_many(self, task_ids: Sequence[str]) -> dict[str, TaskResult]:
        """Return non-deleted tasks keyed by ID."""
        if not task_ids:
            return {}
        result = await self.db.execute(
            select(Task).where(Task.id.in_(list(task_ids)), Task.is_deleted.is_(False))
        )
        return {t.id: _to_result(t) for t in result.scalars().all()}

    async def list_tasks(
        self, filters: TaskFilters, skip: int = 0, limit: int = 20
    ) -> list[TaskResult]:
        """Return tasks matching filters, newest first."""
        clauses: list[ColumnElement[bool]] = []
        if not filters.include_deleted:
            clauses.append(Task.is_deleted.is_(False))
        if filters.status:
            clauses.append(Task.status == filters.status)
        if filters.category:
            clauses.append(Task.category == filters.category)
        if filters.assignment_strategy:
            clauses.append(_strategy(filters.assignment_strategy))
        if filters.created_by:
            clauses.append(Task.created_by == filters.created_by)
        return await self._page(clauses, skip, limit)

    async def update_task(
        self, task_id: str, values: Mapping[str, Any]
    ) -> TaskResult | None:
        """Apply column values to a non-deleted task; None if it does not exist."""
        columns = {_COLUMN_ALIASES.get(k, k): v for k, v in values.items()}
        if columns.get("due_date") is not None:
            columns["due_date"] = ensure_utc(columns["due_date"])
        unknown = set(columns) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update task columns: {sorted(unknown)}")
        task = await self._lock_live(task_id)
        if task is None:
            return None
        for name, value in columns.items():
            setattr(task, name, value)
        await self.db.flush()
        await self.db.refresh(task)
        return _to_result(task)

    async def _lock_live(self, task_id: str) -> Task | None:
        result = await self.db.execute(
            select(Task)
            .where(Task.id == task_id, Task.is_deleted.is_(False))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def edit_specific_users(
        self,
        task_id: str,
        add: Sequence[str] = (),
        remove: Sequence[str] = (),
    ) -> TaskResult | None:
        """Add and remove specific_user_ids under the row lock.

        The merge reads the list from the locked row, so concurrent assigns
        on one task serialize instead of overwriting each other's additions.
        Removal wins when an id is in both add and remove.
        """
        task = await self._lock_live(task_id)
        if task is None:
            return None
        criteria = TargetCriteria.from_dict(task.target_criteria)
        dropped = set(remove)
        kept = [sid for sid in criteria.specific_user_ids if sid not in dropped]
        merged = kept + [
            sid for sid in dict.fromkeys(add) if sid not in dropped and sid not in kept
        ]
        if merged != list(criteria.specific_user_ids):
            task.target_criteria = criteria.with_specific_users(merged).to_dict()
            await self.db.flush()
            await self.db.refresh(task)
            logger.debug(
                "Task %s specific users: +%d -%d",
                task_id,
                len(merged) - len(kept),
                len(criteria.specific_user_ids) - len(kept),
            )
        return _to_result(task)

    async def soft_delete(self, task_id: str, deleted_by: str) -> bool:
        """Mark task deleted. Returns False when missing or already deleted."""
        result = await self.db.execute(
            update(Task)
            .where(Task.id == task_id, Task.is_deleted.is_(False))
            .values(is_deleted=True, deleted_at=utc_now(), deleted_by=deleted_by)
        )
        deleted = (result.rowcount or 0) > 0
        if deleted:
            logger.info("Task soft-deleted: id=%s by=%s", task_id, deleted_by)
        return deleted

    async def list_candidates_for_student(
        self,
        student: StudentDirectoryRecord,
        status: str | None = None,
        category: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> list[TaskResult]:
        """Return non-deleted tasks whose targeting could include the student.

        The result is a superset: the caller re-checks criteria per task
        (grade and exclusion rules are evaluated in Python).
        """
        targeted: list[ColumnElement[bool]] = [
            _strategy(AssignmentStrategy.GLOBAL),
            and_(
                _strategy(AssignmentStrategy.ROLE_BASED),
                _criteria_has("roles", ActorRole.STUDENT.value),
            ),
            and_(
                _strategy(AssignmentStrategy.SPECIFIC),
                _criteria_has("specific_user_ids", student.student_id),
            ),
        ]
        school_based: list[ColumnElement[bool]] = []
        if student.school_id:
            school_based.append(_criteria_has("school_ids", student.school_id))
        school_based.extend(_criteria_has("class_ids", cid) for cid in student.class_ids)
        if student.grade:
            school_based.append(Task.target_criteria.contains({"grade_level": student.grade}))
        if school_based:
            targeted.append(
                and_(_strategy(AssignmentStrategy.SCHOOL_BASED), or_(*school_based))
            )
        clauses = self._live(status, category)
        clauses.append(or_(*targeted))
        return await self._page(clauses, skip, limit)

    async def list_controllable(
        self,
        controller_type: ControllerType,
        controller_id: str,
        status: str | None = None,
        category: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> list[TaskResult]:
        """Return non-deleted tasks the controller may manage.

        parent: tasks targeting the parent role, plus global and student-role
        tasks whose default policy lets parents approve.
        school/class: school-based tasks naming the school (or class), plus
        global and student-role tasks whose default policy lets schools approve.
        """
        student_role = and_(
            _strategy(AssignmentStrategy.ROLE_BASED),
            _criteria_has("roles", ActorRole.STUDENT.value),
        )
        if controller_type is ControllerType.PARENT:
            policy = _default_visibility_is("for_parents")
            targeted = or_(
                and_(
                    _strategy(AssignmentStrategy.ROLE_BASED),
                    _criteria_has("roles", ActorRole.PARENT.value),
                ),
                and_(_strategy(AssignmentStrategy.GLOBAL), policy),
                and_(student_role, policy),
            )
        else:
            key = "school_ids" if controller_type is ControllerType.SCHOOL else "class_ids"
            policy = _default_visibility_is("for_schools")
            targeted = or_(
                and_(
                    _strategy(AssignmentStrategy.SCHOOL_BASED),
                    _criteria_has(key, controller_id),
                ),
                and_(_strategy(AssignmentStrategy.GLOBAL), policy),
                and_(student_role, policy),
            )
        clauses = self._live(status, category)
        clauses.append(targeted)
        return await self._page(clauses, skip, limit)
