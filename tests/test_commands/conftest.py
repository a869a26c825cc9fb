from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
from click.testing import CliRunner

from nuscout.utils.console import reconfigure_console
from nuscout.utils.logger import disable_logging


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cli(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Run every command from an empty directory with a clean environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NUSCOUT_CONFIG", raising=False)
    monkeypatch.delenv("NUGET_PACKAGES", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    yield
    # The CLI installs a handler bound to the runner's stderr
    disable_logging()
    reconfigure_console()
