"""Tests for the certify CLI (F5)."""

import json

import pytest
from typer.testing import CliRunner

from certification.cli.commands import app
from certification.store.state_repository import state_path

runner = CliRunner()

ADMIN = "0x" + "a" * 40
EVALUATOR = "0x" + "e" * 40
STUDENT_A = "0x" + "1" * 40
STUDENT_B = "0x" + "2" * 40


@pytest.fixture
def env(tmp_path):
    """Environment pointing the CLI at an isolated data directory."""
    return {"CERTIFY_DATA_DIR": str(tmp_path)}


@pytest.fixture
def initialized(env):
    result = runner.invoke(app, ["init", "--admin", ADMIN], env=env)
    assert result.exit_code == 0, result.stdout
    return env


def _invoke(env, *args):
    return runner.invoke(app, list(args), env=env)


def _state(env):
    from pathlib import Path

    return json.loads(state_path(Path(env["CERTIFY_DATA_DIR"])).read_text(encoding="utf-8"))


class TestInitCommand:
    """Tests for certify init."""

    def test_init_creates_state(self, initialized):
        state = _state(initialized)
        assert state["$schema"] == "certification_state_v1"
        assert state["roles"]["admin"] == [ADMIN]

    def test_init_refuses_to_overwrite(self, initialized):
        result = _invoke(initialized, "init", "--admin", ADMIN)
        assert result.exit_code == 1
        assert "--force" in result.stdout

    def test_init_force(self, initialized):
        result = _invoke(initialized, "init", "--admin", STUDENT_A, "--force")
        assert result.exit_code == 0
        assert _state(initialized)["roles"]["admin"] == [STUDENT_A]

    def test_init_invalid_admin(self, env):
        result = _invoke(env, "init", "--admin", "nobody")
        assert result.exit_code == 1
        assert "✗" in result.stdout

    def test_command_without_state(self, env):
        result = _invoke(env, "create-course", "1", "10", "--as", ADMIN)
        assert result.exit_code == 1
        assert "certify init" in result.stdout


class TestCourseCommands:
    """Tests for course and enrollment commands."""

    def test_full_flow(self, initialized):
        env = initialized
        steps = [
            ["create-course", "1", "10", "--uri", "ipfs://base", "--fee", "0.01", "--as", ADMIN],
            ["add-evaluator", "1", EVALUATOR, "--as", ADMIN],
            ["buy-place", "1", "--value", "0.01", "--as", STUDENT_A],
            ["buy-place", "1", "--value", "0.01", "--as", STUDENT_B],
            ["transfer-place", "1", STUDENT_A, "--as", ADMIN],
            ["transfer-place", "1", STUDENT_B, "--as", ADMIN],
            ["evaluate", "1", STUDENT_A, "8", "--as", EVALUATOR],
            ["evaluate", "1", STUDENT_B, "4", "--as", EVALUATOR],
            ["make-certificates", "1", "--uri", "ipfs://cert", "--as", ADMIN],
        ]
        for step in steps:
            result = _invoke(env, *step)
            assert result.exit_code == 0, f"{step}: {result.stdout}"

        state = _state(env)
        course = state["inventory"]["courses"][0]
        assert course["metadata_uri"] == "ipfs://cert"
        assert course["passed_count"] == 1
        assert state["ledger"]["balances"]["1"] == {STUDENT_A: 1}
        assert state["treasury"]["balance"] == "0.02"

    def test_course_shows_students(self, initialized):
        env = initialized
        _invoke(env, "create-course", "1", "10", "--as", ADMIN)
        _invoke(env, "add-evaluator", "1", EVALUATOR, "--as", ADMIN)
        _invoke(env, "buy-place", "1", "--value", "0.01", "--as", STUDENT_A)

        result = _invoke(env, "course", "1")
        assert result.exit_code == 0
        assert "Curso 1" in result.stdout
        assert "1/10" in result.stdout

    def test_domain_error_does_not_save(self, initialized):
        env = initialized
        _invoke(env, "create-course", "1", "10", "--as", ADMIN)
        before = _state(env)

        result = _invoke(env, "buy-place", "1", "--value", "0.01", "--as", STUDENT_A)
        assert result.exit_code == 1
        assert "no tiene evaluadores" in result.stdout
        assert _state(env) == before

    def test_non_admin_rejected(self, initialized):
        result = _invoke(initialized, "create-course", "1", "10", "--as", STUDENT_A)
        assert result.exit_code == 1
        assert "✗" in result.stdout

    def test_set_limits(self, initialized):
        result = _invoke(initialized, "set-limits", "--max-evaluators", "3", "--as", ADMIN)
        assert result.exit_code == 0
        assert _state(initialized)["inventory"]["limits"]["max_evaluators_per_course"] == 3

    def test_set_limits_requires_a_value(self, initialized):
        result = _invoke(initialized, "set-limits", "--as", ADMIN)
        assert result.exit_code == 1

    def test_grant_role(self, initialized):
        result = _invoke(initialized, "grant-role", "admin", STUDENT_B, "--as", ADMIN)
        assert result.exit_code == 0
        assert _state(initialized)["roles"]["admin"] == [ADMIN, STUDENT_B]


class TestTreasuryCommands:
    """Tests for balance and withdraw."""

    def test_withdraw_and_balance(self, initialized):
        env = initialized
        _invoke(env, "create-course", "1", "10", "--fee", "0.5", "--as", ADMIN)
        _invoke(env, "add-evaluator", "1", EVALUATOR, "--as", ADMIN)
        _invoke(env, "buy-place", "1", "--value", "0.5", "--as", STUDENT_A)

        result = _invoke(env, "withdraw", "0.2", "--as", ADMIN)
        assert result.exit_code == 0
        assert "0.3" in result.stdout

        result = _invoke(env, "balance")
        assert result.exit_code == 0
        assert "0.3" in result.stdout

    def test_withdraw_too_much(self, initialized):
        result = _invoke(initialized, "withdraw", "1", "--as", ADMIN)
        assert result.exit_code == 1
        assert "Fondos insuficientes" in result.stdout

    def test_balance_of_owner(self, initialized):
        env = initialized
        _invoke(env, "create-course", "1", "4", "--as", ADMIN)
        result = _invoke(env, "balance", "--owner", ADMIN, "--course", "1")
        assert result.exit_code == 0
        assert "4 unidad" in result.stdout

    def test_balance_owner_needs_course(self, initialized):
        result = _invoke(initialized, "balance", "--owner", ADMIN)
        assert result.exit_code == 1
