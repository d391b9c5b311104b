from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def scratch(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the scratch directory at a per-test temp dir."""
    directory = tmp_path / "scratch"
    monkeypatch.setenv("RESEARCH_TMP_DIR", str(directory))
    return directory
