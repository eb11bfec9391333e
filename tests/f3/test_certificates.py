"""Tests for course finalization (F3)."""

import pytest

from certification.core.errors import CourseNotFound, InsufficientBalance, Unauthorized

ADMIN = "0x" + "a" * 40
EVALUATOR = "0x" + "e" * 40
STUDENT_A = "0x" + "1" * 40
STUDENT_B = "0x" + "2" * 40


class TestMakeCertificates:
    """Tests for make_certificates."""

    def test_full_course_lifecycle(self, enrolled_platform):
        """A passes with 8, B fails with 4: A keeps the unit, B and unsold are burned."""
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 8)
        platform.evaluate(EVALUATOR, 1, STUDENT_B, 4)

        report = platform.make_certificates(ADMIN, 1, "ipfs://cert")

        assert platform.balance_of(STUDENT_A, 1) == 1
        assert platform.balance_of(STUDENT_B, 1) == 0
        assert platform.balance_of(ADMIN, 1) == 0
        assert platform.uri(1) == "ipfs://cert"
        assert platform.passed_students(1) == 1

        assert report.unsold_burned == 8
        assert report.certified == [STUDENT_A]
        assert report.revoked == [STUDENT_B]
        assert report.uri == "ipfs://cert"

    def test_survivors_match_passed_count(self, enrolled_platform):
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 6)
        platform.evaluate(EVALUATOR, 1, STUDENT_B, 10)

        platform.make_certificates(ADMIN, 1, "ipfs://cert")
        holders = [s for s in (STUDENT_A, STUDENT_B) if platform.balance_of(s, 1) == 1]
        assert len(holders) == platform.passed_students(1) == 2

    def test_no_passes_keeps_uri(self, enrolled_platform):
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 2)

        report = platform.make_certificates(ADMIN, 1, "ipfs://cert")
        assert platform.uri(1) == "ipfs://base"
        assert report.certified == []
        assert report.revoked == [STUDENT_A]

    def test_unevaluated_students_keep_units(self, enrolled_platform):
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 2)
        platform.make_certificates(ADMIN, 1, "ipfs://cert")
        assert platform.balance_of(STUDENT_B, 1) == 1

    def test_second_run_fails_and_rolls_back(self, enrolled_platform):
        """Finalization is not idempotent; a failing rerun changes nothing."""
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 8)
        platform.evaluate(EVALUATOR, 1, STUDENT_B, 4)
        platform.make_certificates(ADMIN, 1, "ipfs://cert")
        emitted = len(platform.events)

        with pytest.raises(InsufficientBalance):
            platform.make_certificates(ADMIN, 1, "ipfs://other")

        assert platform.uri(1) == "ipfs://cert"
        assert platform.balance_of(STUDENT_A, 1) == 1
        assert len(platform.events) == emitted

    def test_non_admin_rejected(self, enrolled_platform):
        with pytest.raises(Unauthorized):
            enrolled_platform.make_certificates(EVALUATOR, 1, "ipfs://cert")
        assert enrolled_platform.balance_of(ADMIN, 1) == 8

    def test_unknown_course(self, platform):
        with pytest.raises(CourseNotFound):
            platform.make_certificates(ADMIN, 3, "ipfs://cert")

    def test_emits_notification(self, enrolled_platform):
        platform = enrolled_platform
        platform.evaluate(EVALUATOR, 1, STUDENT_A, 8)
        platform.make_certificates(ADMIN, 1, "ipfs://cert")

        issued = platform.events.named("certificates_issued")
        assert len(issued) == 1
        assert issued[0].payload["certified"] == [STUDENT_A]
