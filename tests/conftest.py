# tests/conftest.py

import pytest
from pathlib import Path

from typer.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()

@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    return tmp_path / "media"
