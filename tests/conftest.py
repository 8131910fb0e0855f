"""Pytest configuration and shared fixtures.

Run pytest from this project's root; pythonpath in pyproject.toml puts src/
and the project root on the import path.
"""

import textwrap
from pathlib import Path
from typing import Callable

import pytest

from tests.detector_test_utils import RecordingReporter


@pytest.fixture
def recorder() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def php_tree(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a PHP file under tmp_path; source is dedented."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source).lstrip("\n"), encoding="utf-8")
        return path

    return _write
