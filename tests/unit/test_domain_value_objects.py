"""Tests for domain value objects (TargetCriteria, DefaultVisibility, VisibilityContext, StudentIdSet)."""

import pytest

from app.domain.value_objects.core import (
    DefaultVisibility,
    StudentIdSet,
    TargetCriteria,
    VisibilityContext,
    validate_entity_id,
)


class TestEntityId:
    """Ids: 1-64 chars of letters, digits, '-' or '_'."""

    def test_valid(self) -> None:
        assert validate_entity_id("stu_1-A") == "stu_1-A"
        assert validate_entity_id("a" * 64) == "a" * 64

    @pytest.mark.parametrize("bad", ["", "a" * 65, "stu 1", "stu;1", None, 42])
    def test_invalid(self, bad) -> None:
        with pytest.raises(ValueError, match="task_id"):
            validate_entity_id(bad, "task_id")


class TestTargetCriteria:
    def test_deduplicates_keeping_order(self) -> None:
        criteria = TargetCriteria(specific_user_ids=("stu-2", "stu-1", "stu-2"))
        assert criteria.specific_user_ids == ("stu-2", "stu-1")

    def test_rejects_string_instead_of_list(self) -> None:
        with pytest.raises(ValueError, match="list"):
            TargetCriteria(school_ids="sch-1")

    def test_rejects_malformed_id(self) -> None:
        with pytest.raises(ValueError, match="class_ids"):
            TargetCriteria(class_ids=("cls 1",))

    def test_blank_grade_is_none(self) -> None:
        assert TargetCriteria(grade_level="  ").grade_level is None

    def test_from_dict_ignores_unknown_keys_and_nulls(self) -> None:
        criteria = TargetCriteria.from_dict(
            {"roles": ["student"], "school_ids": None, "region": "north"}
        )
        assert criteria.roles == ("student",)
        assert criteria.school_ids == ()

    def test_to_dict_uses_lists(self) -> None:
        data = TargetCriteria(roles=("student",)).to_dict()
        assert data["roles"] == ["student"]
        assert data["specific_user_ids"] == []
        assert TargetCriteria.from_dict(data) == TargetCriteria(roles=("student",))

    def test_with_specific_users_keeps_other_fields(self) -> None:
        criteria = TargetCriteria(exclude_user_ids=("stu-9",), specific_user_ids=("stu-1",))
        updated = criteria.with_specific_users(["stu-2"])
        assert updated.specific_user_ids == ("stu-2",)
        assert updated.exclude_user_ids == ("stu-9",)


class TestDefaultVisibility:
    def test_defaults(self) -> None:
        policy = DefaultVisibility.from_dict({})
        assert (policy.for_parents, policy.for_schools, policy.for_students) == (
            True,
            True,
            False,
        )

    def test_partial_dict_keeps_other_defaults(self) -> None:
        policy = DefaultVisibility.from_dict({"for_students": True})
        assert policy.for_students is True
        assert policy.for_parents is True


class TestVisibilityContext:
    def test_empty_context_is_valid(self) -> None:
        assert VisibilityContext().parent_id is None

    def test_malformed_id_rejected(self) -> None:
        with pytest.raises(ValueError, match="school_id"):
            VisibilityContext(school_id="sch 1")


class TestStudentIdSet:
    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError, match="student_ids array is required"):
            StudentIdSet(())

    def test_deduplicated(self) -> None:
        assert list(StudentIdSet(("stu-1", "stu-1", "stu-2"))) == ["stu-1", "stu-2"]
