"""Unit tests for CLI logic functions."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import comment_translate.config as config
from comment_translate.cli import app, process_text_input
from comment_translate.translate.errors import (
    BackendFailureError,
    BackendUnavailableError,
)
from test_helpers import FakeBackend

runner = CliRunner()


def test_process_text_input_with_valid_text() -> None:
    """Test that process_text_input returns text when provided."""
    result = process_text_input("Hello world")
    assert result == "Hello world"


def test_process_text_input_with_whitespace() -> None:
    """Test that process_text_input preserves surrounding whitespace."""
    result = process_text_input("  Hello   world  ")
    assert result == "  Hello   world  "


def test_process_text_input_with_multiline() -> None:
    """Test that process_text_input handles multiline text."""
    text = "Line 1\nLine 2\nLine 3"
    result = process_text_input(text)
    assert result == text


@pytest.mark.parametrize("text", [None, "", "   \n"])
def test_process_text_input_without_text_raises_value_error(text) -> None:
    """Test that process_text_input raises ValueError when there is nothing to translate."""
    with pytest.raises(ValueError, match="No text provided"):
        process_text_input(text)


class TestTranslateCommand:
    """Test the translate command end to end with a fake backend."""

    @pytest.fixture(autouse=True)
    def config_file(self, isolate_config) -> None:
        config.CONFIG_DIR.mkdir(parents=True)
        config.CONFIG_PATH.write_text('[translate]\ntarget_language = "ja"\n')

    def test_translates_argument(self) -> None:
        backend = FakeBackend()
        with patch("comment_translate.cli.BackendRegistry.resolve", return_value=backend):
            result = runner.invoke(app, ["hello"])

        assert result.exit_code == 0
        assert result.output.strip() == "[ja] hello"

    def test_flags_override_config(self) -> None:
        """Test --target, --source and --service take precedence over the file."""
        backend = FakeBackend()
        with patch(
            "comment_translate.cli.BackendRegistry.resolve", return_value=backend
        ) as mock_resolve:
            result = runner.invoke(
                app, ["hello", "-t", "de", "-s", "en", "-p", "codebuddy"]
            )

        assert result.exit_code == 0
        mock_resolve.assert_called_once_with("codebuddy")
        assert backend.calls[0][:3] == ("hello", "de", "en")

    def test_reads_file(self, tmp_path) -> None:
        source = tmp_path / "comment.txt"
        source.write_text("from a file")
        with patch("comment_translate.cli.BackendRegistry.resolve", return_value=FakeBackend()):
            result = runner.invoke(app, ["-f", str(source)])

        assert result.exit_code == 0
        assert "[ja] from a file" in result.output

    def test_missing_file(self, tmp_path) -> None:
        result = runner.invoke(app, ["-f", str(tmp_path / "nope.txt")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_no_text(self) -> None:
        """Test a blank argument is rejected before any backend work."""
        result = runner.invoke(app, ["   "])

        assert result.exit_code == 1
        assert "No text provided" in result.output

    def test_text_too_long(self) -> None:
        config.CONFIG_PATH.write_text('[translate]\ntarget_language = "ja"\nmax_length = 3\n')
        config.reset_config()
        with patch("comment_translate.cli.BackendRegistry.resolve", return_value=FakeBackend()):
            result = runner.invoke(app, ["hello"])

        assert result.exit_code == 1
        assert "longer than 3 bytes" in result.output

    @pytest.mark.parametrize(
        "error",
        [BackendUnavailableError("codebuddy missing"), BackendFailureError("HTTP 500")],
    )
    def test_backend_errors_exit_1(self, error) -> None:
        backend = FakeBackend(error=error)
        with patch("comment_translate.cli.BackendRegistry.resolve", return_value=backend):
            result = runner.invoke(app, ["hello"])

        assert result.exit_code == 1
        assert f"Error: {error}" in result.output

    def test_unknown_service_exits_1(self) -> None:
        """Test a misspelled --service fails instead of translating with google."""
        result = runner.invoke(app, ["hello", "-p", "babelfish"])

        assert result.exit_code == 1
        assert "Unknown translation service 'babelfish'" in result.output
        assert "google" in result.output

    def test_multibyte_text_too_long(self) -> None:
        config.CONFIG_PATH.write_text('[translate]\ntarget_language = "ja"\nmax_length = 6\n')
        config.reset_config()
        backend = FakeBackend()
        with patch("comment_translate.cli.BackendRegistry.resolve", return_value=backend):
            result = runner.invoke(app, ["中文注"])

        assert result.exit_code == 1
        assert "longer than 6 bytes" in result.output
        assert backend.calls == []

    def test_list_services(self) -> None:
        result = runner.invoke(app, ["--list-services"])

        assert result.exit_code == 0
        assert "google" in result.output
        assert "codebuddy" in result.output

    def test_init_config(self) -> None:
        config.CONFIG_PATH.unlink()

        result = runner.invoke(app, ["--init-config"])

        assert result.exit_code == 0
        assert config.CONFIG_PATH.read_text() == config.DEFAULT_CONFIG
