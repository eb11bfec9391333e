"""Tests for mark recording and pass/fail queries (F3)."""

import pytest

from certification.core.errors import (
    EvaluatorNotAssignedToCourse,
    InvalidMark,
    NoCourseRegisteredForUser,
    StudentAlreadyEvaluated,
    StudentCannotBeEvaluator,
    StudentNotEnrolled,
    Unauthorized,
    WrongUnitBalance,
)
from certification.core.evaluation import validate_mark
from certification.core.roles import Role

ADMIN = "0x" + "a" * 40
EVALUATOR = "0x" + "e" * 40
SECOND_EVALUATOR = "0x" + "f" * 40
STUDENT_A = "0x" + "1" * 40
STUDENT_B = "0x" + "2" * 40
STUDENT_C = "0x" + "3" * 40


class TestValidateMark:
    """Tests for the mark range."""

    @pytest.mark.parametrize("mark", [1, 5, 6, 10])
    def test_in_range(self, mark):
        assert validate_mark(mark) == mark

    @pytest.mark.parametrize("mark", [0, 11, -3, 5.5, True, "7"])
    def test_out_of_range(self, mark):
        with pytest.raises(InvalidMark):
            validate_mark(mark)


class TestEvaluate:
    """Tests for evaluate."""

    def test_pass_increments_tally(self, enrolled_platform):
        platform = enrolled_platform
        record = platform.evaluate(EVALUATOR, 1, STUDENT_A, 8)

        assert record.mark == 8
        assert record.passed
        assert record.student == STUDENT_A
        assert record.evaluator == EVALUATOR
        assert record.timestamp == "2024-01-01T00:00:00+00:00"
        assert platform.passed_students(1) == 1
        assert platform.is_student_evaluated(1, STUDENT_A)

    def test_fail_does_not_increment_tally(self, enrolled_platform):
        platform = enrolled_platform
        record = platform.evaluate(EVALUATOR, 1, STUDENT_B, 5)
        assert not record.passed
        assert platform.passed_students(1) == 0

    def test_pass_mark_boundary(self, enrolled_platform):
        platform = enrolled_platform
        assert platform.evaluate(EVALUATOR, 1, STUDENT_A, 6).passed
        assert not platform.evaluate(EVALUATOR, 1, STUDENT_B, 5).passed

    def test_invalid_mark_checked_first(self, enrolled_platform):
        """The mark range is checked before the caller's role."""
        with pytest.raises(InvalidMark):
            enrolled_platform.evaluate(ADMIN, 1, STUDENT_A, 11)

    def test_caller_without_role(self, enrolled_platform):
        with pytest.raises(Unauthorized):
            enrolled_platform.evaluate(ADMIN, 1, STUDENT_A, 7)

    def test_evaluator_of_another_course(self, enrolled_platform):
        platform = enrolled_platform
        platform.create_course(ADMIN, 2, 5, "", "0.01")
        platform.set_up_evaluator(ADMIN, SECOND_EVALUATOR, 2)
        with pytest.raises(EvaluatorNotAssignedToCourse):
            platform.evaluate(SECOND_EVALUATOR, 1, STUDENT_A, 7)

    def test_student_cannot_be_evaluator(self, enrolled_platform):
        platform = enrolled_platform
        platform.set_up_evaluator(ADMIN, SECOND_EVALUATOR, 1)
        with pytest.raises(StudentCannotBeEvaluator):
            platform.evaluate(EVALUATOR, 1, SECOND_EVALUATOR, 7)

    def test_student_not_enrolled(self, enrolled_platform):
        with pytest.raises(StudentNotEnrolled):
            enrolled_platform.evaluate(EVALUATOR, 1, STUDENT_C, 7)

    def test_single_shot(self, enrolled_platform):
        """The first mark stands; a second attempt is rejected."""
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 4)
        with pytest.raises(StudentAlreadyEvaluated) as exc_info:
            platform.evaluate(EVALUATOR, 1, STUDENT_A, 9)
        assert exc_info.value.details["recorded_mark"] == 4
        assert platform.passed_students(1) == 0
        assert len(platform.get_evaluations(1)) == 1

    def test_student_without_unit(self, course_with_evaluator):
        platform = course_with_evaluator
        platform.buy_place(STUDENT_A, 1, "0.01")
        with pytest.raises(WrongUnitBalance) as exc_info:
            platform.evaluate(EVALUATOR, 1, STUDENT_A, 7)
        assert exc_info.value.details["balance"] == 0

    def test_student_with_two_units(self, enrolled_platform):
        platform = enrolled_platform
        platform.safe_transfer_from(ADMIN, ADMIN, STUDENT_A, 1, 1)
        with pytest.raises(WrongUnitBalance):
            platform.evaluate(EVALUATOR, 1, STUDENT_A, 7)

    def test_empty_course_index(self, enrolled_platform):
        """A student whose course index was emptied cannot be marked."""
        platform = enrolled_platform
        platform.enrollment.user_courses[STUDENT_A] = []
        with pytest.raises(NoCourseRegisteredForUser):
            platform.evaluate(EVALUATOR, 1, STUDENT_A, 7)

    def test_removed_evaluator_loses_access(self, enrolled_platform):
        platform = enrolled_platform
        platform.remove_evaluator(ADMIN, EVALUATOR, 1)
        assert not platform.has_role(Role.EVALUATOR, EVALUATOR)
        with pytest.raises(Unauthorized):
            platform.evaluate(EVALUATOR, 1, STUDENT_A, 7)


class TestEvaluationQueries:
    """Tests for evaluation listings."""

    def test_get_evaluations_in_record_order(self, enrolled_platform):
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_B, 3)
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 9)

        records = platform.get_evaluations(1)
        assert [r.student for r in records] == [STUDENT_B, STUDENT_A]
        assert [r.mark for r in records] == [3, 9]

    def test_passed_and_failed(self, enrolled_platform):
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 8)
        platform.evaluate(EVALUATOR, 1, STUDENT_B, 4)

        passed, failed = platform.get_passed_and_failed(1)
        assert passed == [STUDENT_A]
        assert failed == [STUDENT_B]

    def test_unknown_course_is_empty(self, platform):
        assert platform.get_evaluations(5) == []
        assert platform.get_passed_and_failed(5) == ([], [])
        assert not platform.is_student_evaluated(5, STUDENT_A)
