from __future__ import annotations

import sys
from typing import Generator
from unittest.mock import patch

import pytest
from rich.console import Console
from rich.table import Table

from nuscout.utils.console import (
    NUSCOUT_THEME,
    _get_console,
    _should_use_color,
    colorize_version,
    print_error,
    print_table,
    print_warning,
    reconfigure_console,
)


@pytest.fixture(autouse=True)
def reset_console() -> Generator[None, None, None]:
    """Reset the console singleton around each test."""
    reconfigure_console()
    yield
    reconfigure_console()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("CI", raising=False)


@pytest.mark.unit
class TestTheme:
    @pytest.mark.parametrize(
        "style_name", ["error", "warning", "info", "stable", "prerelease"]
    )
    def test_theme_defines_style(self, style_name: str) -> None:
        assert style_name in NUSCOUT_THEME.styles


@pytest.mark.unit
class TestShouldUseColor:
    def test_no_color_env_disables_color(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("NO_COLOR", "1")

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is False

    def test_ci_env_disables_color(
        self, clean_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CI", "true")

        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is False

    def test_follows_tty(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color() is True
        with patch.object(sys.stdout, "isatty", return_value=False):
            assert _should_use_color() is False

    def test_isatty_errors_disable_color(self, clean_env: None) -> None:
        with patch.object(sys.stdout, "isatty", side_effect=OSError):
            assert _should_use_color() is False


@pytest.mark.unit
class TestConsoleLifecycle:
    def test_singleton_returns_same_instance(self) -> None:
        assert _get_console() is _get_console()

    def test_reconfigure_creates_new_instance(self) -> None:
        first = _get_console()
        reconfigure_console()

        assert _get_console() is not first


@pytest.mark.unit
class TestStatusMessages:
    def test_print_error(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_error("Lock file unreadable")

        mock_print.assert_called_once_with("[ERROR] Lock file unreadable", style="error")

    def test_print_warning_custom_prefix(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_warning("No packages found", prefix="!")

        mock_print.assert_called_once_with("! No packages found", style="warning")


@pytest.mark.unit
class TestPrintTable:
    def test_empty_data_prints_nothing(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table([])

        mock_print.assert_not_called()

    def test_prints_rows_in_header_order(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table(
                [{"Package": "Foo", "Version": "1.0.0"}],
                headers=["Version", "Package"],
                title="Results",
            )

        table = mock_print.call_args[0][0]
        assert isinstance(table, Table)
        assert table.title == "Results"
        assert [c.header for c in table.columns] == ["Version", "Package"]
        assert table.row_count == 1

    def test_missing_keys_render_empty(self) -> None:
        with patch.object(Console, "print") as mock_print:
            print_table([{"Kind": "compile"}], headers=["Kind", "Path"])

        table = mock_print.call_args[0][0]
        assert list(table.columns[1].cells) == [""]


@pytest.mark.unit
class TestColorizeVersion:
    def test_stable_version(self) -> None:
        assert colorize_version("1.0.0", prerelease=False) == "[stable]1.0.0[/stable]"

    def test_prerelease_version(self) -> None:
        assert (
            colorize_version("1.0.0-rc.1", prerelease=True)
            == "[prerelease]1.0.0-rc.1[/prerelease]"
        )
