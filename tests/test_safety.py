"""Safety tests to ensure test suite doesn't modify production data.

These tests verify that running the test suite does NOT touch:
- ./data/state (the platform state used by the CLI and the API)
- ./data/config (the shipped configuration)

All tests MUST use temporary directories via pytest fixtures.
"""

import hashlib
import os
from pathlib import Path

import pytest


def _hash_directory(path: Path) -> str | None:
    """Create a hash of directory structure and file contents.

    Returns None if directory doesn't exist.
    """
    if not path.exists():
        return None

    hasher = hashlib.sha256()

    for root, dirs, files in os.walk(path):
        # Sort for consistent ordering
        dirs.sort()
        files.sort()

        for filename in files:
            filepath = Path(root) / filename
            hasher.update(str(filepath.relative_to(path)).encode())
            hasher.update(filepath.read_bytes())

    return hasher.hexdigest()


class TestDataDirectorySafety:
    """Tests ensuring ./data is never modified by test suite."""

    @pytest.fixture(scope="class")
    def data_dir_state_before(self):
        """Capture state of ./data/state and ./data/config before tests."""
        return {
            "state_exists": Path("data/state").exists(),
            "state_hash": _hash_directory(Path("data/state")),
            "config_hash": _hash_directory(Path("data/config")),
        }

    def test_state_directory_not_created(self, data_dir_state_before):
        """Test suite should not create ./data/state if it didn't exist."""
        if not data_dir_state_before["state_exists"] and Path("data/state").exists():
            pytest.fail(
                "./data/state was created during test run. "
                "Pass tmp_path as data_dir or set CERTIFY_DATA_DIR."
            )

    def test_state_directory_not_modified(self, data_dir_state_before):
        if data_dir_state_before["state_exists"]:
            if _hash_directory(Path("data/state")) != data_dir_state_before["state_hash"]:
                pytest.fail("./data/state was modified during test run.")

    def test_config_not_modified(self, data_dir_state_before):
        if _hash_directory(Path("data/config")) != data_dir_state_before["config_hash"]:
            pytest.fail("./data/config was modified during test run.")


class TestTestIsolation:
    """Meta-tests ensuring test files use temp directories."""

    def test_cli_tests_set_data_dir(self):
        """Every CLI invocation in the suite points at an isolated data dir."""
        violations = []

        for test_file in sorted(Path("tests").glob("f*/test_*.py")):
            content = test_file.read_text(encoding="utf-8")
            if "CliRunner" in content and "CERTIFY_DATA_DIR" not in content:
                violations.append(f"{test_file}: invokes the CLI without CERTIFY_DATA_DIR")
            if "save_platform(" in content and "tmp_path" not in content:
                violations.append(f"{test_file}: saves state without tmp_path")

        if violations:
            pytest.fail(
                "Test files may not be properly isolated:\n" +
                "\n".join(f"  - {v}" for v in violations)
            )
