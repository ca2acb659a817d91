"""HTTP client for the student directory service.

The directory owns school placement, classes, grade and guardians. This
service only reads it: GET /students/{id} and GET /parents/{id}/children.
Responses may be flat or wrapped in {"data": ...}, with snake_case or
camelCase keys.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from app.application.dtos.directory import StudentDirectoryRecord
from app.application.interfaces.services import ICacheService, IStudentDirectory
from app.domain.exceptions import ResourceNotFoundException, UpstreamServiceException
from app.infrastructure.cache.keys import directory_children_key, directory_student_key

logger = logging.getLogger(__name__)

SERVICE_NAME = "student-directory"


def _pick(data: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return None


def _ids(value: Any) -> tuple[str, ...]:
    """Normalize a list of ids or of {"id"/"_id": ...} objects."""
    if not value:
        return ()
    out: list[str] = []
    for item in value:
        if isinstance(item, Mapping):
            item = _pick(item, "id", "_id", "userId", "user_id")
        if item:
            out.append(str(item))
    return tuple(dict.fromkeys(out))


def parse_student_record(student_id: str, payload: Mapping[str, Any]) -> StudentDirectoryRecord:
    """Build a StudentDirectoryRecord from a directory response body."""
    data = payload.get("data", payload) if isinstance(payload, Mapping) else {}
    if not isinstance(data, Mapping):
        data = {}
    school_id = _pick(data, "school_id", "schoolId")
    grade = _pick(data, "grade", "grade_level", "gradeLevel")
    class_ids = _pick(data, "class_ids", "classIds")
    if class_ids is None and _pick(data, "class_id", "classId"):
        class_ids = [_pick(data, "class_id", "classId")]
    return StudentDirectoryRecord(
        student_id=student_id,
        school_id=str(school_id) if school_id else None,
        class_ids=_ids(class_ids),
        parent_ids=_ids(_pick(data, "parent_ids", "parentIds")),
        grade=str(grade) if grade is not None else None,
    )


def _record_to_cache(record: StudentDirectoryRecord) -> dict[str, Any]:
    return {
        "school_id": record.school_id,
        "class_ids": list(record.class_ids),
        "parent_ids": list(record.parent_ids),
        "grade": record.grade,
    }


class HttpStudentDirectory:
    """IStudentDirectory over HTTP with an optional Redis cache.

    404 raises ResourceNotFoundException; timeouts, connection errors and
    5xx raise UpstreamServiceException. Nothing is retried.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        timeout: float = 5.0,
        cache: ICacheService | None = None,
        cache_ttl: int = 120,
        api_key: str | None = None,
    ) -> None:
        self.http = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.api_key = api_key

    def _cache_ready(self) -> bool:
        return self.cache is not None and self.cache.is_available()

    async def _get_json(self, path: str, resource_type: str, resource_id: str) -> Any:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        url = f"{self.base_url}{path}"
        try:
            response = await self.http.get(url, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.warning("Directory timeout: GET %s", path)
            raise UpstreamServiceException(SERVICE_NAME, "Student directory timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Directory unreachable: GET %s (%s)", path, e)
            raise UpstreamServiceException(SERVICE_NAME, "Student directory unreachable") from e

        if response.status_code == 404:
            raise ResourceNotFoundException(resource_type, resource_id)
        if response.status_code != 200:
            logger.error("Directory GET %s failed: status=%d", path, response.status_code)
            raise UpstreamServiceException(
                SERVICE_NAME,
                f"Student directory returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamServiceException(
                SERVICE_NAME, "Student directory returned invalid JSON"
            ) from e

    async def get_student(self, student_id: str) -> StudentDirectoryRecord:
        """Return school, classes, grade and parents for a student."""
        key = directory_student_key(student_id)
        if self._cache_ready():
            cached = await self.cache.get(key)
            if cached is not None:
                return parse_student_record(student_id, cached)

        payload = await self._get_json(f"/students/{student_id}", "student", student_id)
        record = parse_student_record(student_id, payload)
        if self._cache_ready():
            await self.cache.set(key, _record_to_cache(record), ttl=self.cache_ttl)
        return record

    async def get_children(self, parent_id: str) -> list[str]:
        """Return the student ids linked to a parent."""
        key = directory_children_key(parent_id)
        if self._cache_ready():
            cached = await self.cache.get(key)
            if cached is not None:
                return list(cached)

        payload = await self._get_json(f"/parents/{parent_id}/children", "parent", parent_id)
        data = payload.get("data", payload) if isinstance(payload, Mapping) else payload
        if isinstance(data, Mapping):
            data = _pick(data, "children", "student_ids", "studentIds") or []
        children = list(_ids(data))
        if self._cache_ready():
            await self.cache.set(key, children, ttl=self.cache_ttl)
        return children


class MemoizedStudentDirectory:
    """Per-request memo over another IStudentDirectory.

    One instance lives for one request, so a student is fetched at most
    once however many tasks are resolved. Errors are not memoized.
    """

    def __init__(self, inner: IStudentDirectory) -> None:
        self.inner = inner
        self._students: dict[str, StudentDirectoryRecord] = {}
        self._children: dict[str, list[str]] = {}

    async def get_student(self, student_id: str) -> StudentDirectoryRecord:
        if student_id not in self._students:
            self._students[student_id] = await self.inner.get_student(student_id)
        return self._students[student_id]

    async def get_children(self, parent_id: str) -> list[str]:
        if parent_id not in self._children:
            self._children[parent_id] = await self.inner.get_children(parent_id)
        return list(self._children[parent_id])
