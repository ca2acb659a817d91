"""HttpStudentDirectory tests against httpx.MockTransport (no network)."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.domain.exceptions import ResourceNotFoundException, UpstreamServiceException
from app.infrastructure.external.directory import (
    HttpStudentDirectory,
    MemoizedStudentDirectory,
)
from app.infrastructure.external.directory.client import parse_student_record

BASE_URL = "http://directory.test"


def _directory(handler, **kwargs) -> HttpStudentDirectory:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpStudentDirectory(client, BASE_URL, **kwargs)


def test_parse_flat_snake_case() -> None:
    record = parse_student_record(
        "stu-1",
        {"school_id": "sch-1", "class_ids": ["cls-1"], "parent_ids": ["par-1"], "grade": 5},
    )
    assert record.school_id == "sch-1"
    assert record.class_ids == ("cls-1",)
    assert record.parent_ids == ("par-1",)
    assert record.grade == "5"


def test_parse_wrapped_camel_case_with_single_class() -> None:
    record = parse_student_record(
        "stu-1",
        {"data": {"schoolId": "sch-1", "classId": "cls-2", "parentIds": [{"id": "par-1"}]}},
    )
    assert record.school_id == "sch-1"
    assert record.class_ids == ("cls-2",)
    assert record.primary_parent_id == "par-1"
    assert record.grade is None


async def test_get_student_sends_api_key() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization", "")
        return httpx.Response(200, json={"school_id": "sch-1"})

    record = await _directory(handler, api_key="k-123").get_student("stu-1")
    assert record.school_id == "sch-1"
    assert seen == {"path": "/students/stu-1", "auth": "Bearer k-123"}


async def test_get_student_404_is_not_found() -> None:
    directory = _directory(lambda request: httpx.Response(404))
    with pytest.raises(ResourceNotFoundException):
        await directory.get_student("stu-1")


async def test_get_student_5xx_is_upstream_error() -> None:
    directory = _directory(lambda request: httpx.Response(503))
    with pytest.raises(UpstreamServiceException) as exc_info:
        await directory.get_student("stu-1")
    assert exc_info.value.details["upstream_status"] == 503


async def test_get_student_timeout_is_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(UpstreamServiceException, match="timed out"):
        await _directory(handler).get_student("stu-1")


async def test_get_student_invalid_json_is_upstream_error() -> None:
    directory = _directory(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(UpstreamServiceException, match="invalid JSON"):
        await directory.get_student("stu-1")


@pytest.mark.parametrize(
    "body",
    [
        ["stu-1", "stu-2"],
        {"data": {"children": [{"id": "stu-1"}, {"id": "stu-2"}]}},
        {"student_ids": ["stu-1", "stu-2", "stu-1"]},
    ],
)
async def test_get_children_accepts_response_shapes(body) -> None:
    directory = _directory(lambda request: httpx.Response(200, json=body))
    assert await directory.get_children("par-1") == ["stu-1", "stu-2"]


async def test_cached_student_skips_http() -> None:
    cache = MagicMock()
    cache.is_available.return_value = True
    cache.get = AsyncMock(return_value={"school_id": "sch-cached"})
    cache.set = AsyncMock()

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("directory should not be called")

    record = await _directory(handler, cache=cache).get_student("stu-1")
    assert record.school_id == "sch-cached"
    cache.get.assert_awaited_once_with("directory:student:stu-1")


async def test_fetched_student_is_cached_with_ttl() -> None:
    cache = MagicMock()
    cache.is_available.return_value = True
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    directory = _directory(
        lambda request: httpx.Response(200, json={"school_id": "sch-1"}),
        cache=cache,
        cache_ttl=60,
    )
    await directory.get_student("stu-1")
    key, value = cache.set.await_args.args
    assert key == "directory:student:stu-1"
    assert value["school_id"] == "sch-1"
    assert cache.set.await_args.kwargs == {"ttl": 60}


async def test_memoized_directory_fetches_once() -> None:
    inner = AsyncMock()
    inner.get_student = AsyncMock(return_value=parse_student_record("stu-1", {}))
    memo = MemoizedStudentDirectory(inner)
    await memo.get_student("stu-1")
    await memo.get_student("stu-1")
    inner.get_student.assert_awaited_once_with("stu-1")


async def test_memoized_directory_does_not_memoize_errors() -> None:
    inner = AsyncMock()
    inner.get_student = AsyncMock(
        side_effect=[UpstreamServiceException("student-directory"), parse_student_record("stu-1", {})]
    )
    memo = MemoizedStudentDirectory(inner)
    with pytest.raises(UpstreamServiceException):
        await memo.get_student("stu-1")
    record = await memo.get_student("stu-1")
    assert record.student_id == "stu-1"
