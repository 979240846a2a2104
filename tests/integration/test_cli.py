"""Integration tests for the netsift-cli commands."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from typer.testing import CliRunner

from netsift.capture.files import export_capture
from netsift.capture.store import CaptureStore
from netsift.cli import app

pytestmark = pytest.mark.integration

runner = CliRunner()


@pytest.fixture
def capture_file(shop_store: CaptureStore, tmp_path: Path) -> Path:
    path = tmp_path / "capture.json"
    asyncio.run(export_capture(shop_store, path))
    return path


class TestCli:
    """Tests for the offline capture CLI."""

    def test_list(self, capture_file: Path) -> None:
        result = runner.invoke(app, ["list", str(capture_file)])

        assert result.exit_code == 0
        assert "[GET] https://shop.example.com/api/items?page=1 => [200] OK" in result.output
        assert "gtag.js" not in result.output

    def test_search(self, capture_file: Path) -> None:
        result = runner.invoke(app, ["search", str(capture_file), "soap", "--in", "responseBody"])

        assert result.exit_code == 0
        assert ">>>Soap<<<" in result.output

    def test_search_invalid_regex(self, capture_file: Path) -> None:
        result = runner.invoke(app, ["search", str(capture_file), "(", "--regex"])

        assert result.exit_code == 1
        assert "invalid_pattern" in result.output

    def test_download(self, capture_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "items.json"

        result = runner.invoke(app, ["download", str(capture_file), "items", "-o", str(output)])

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == '{"items":["Soap"]}'

    def test_download_not_found(self, capture_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "missing.json"

        result = runner.invoke(app, ["download", str(capture_file), "nonexistent", "-o", str(output)])

        assert result.exit_code == 1
        assert "not_found" in result.output
        assert not output.exists()

    def test_download_unwritable_output(self, capture_file: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")

        result = runner.invoke(app, ["download", str(capture_file), "items", "-o", str(blocker / "items.json")])

        assert result.exit_code == 1
        assert "Failed to write file" in result.output
        assert not isinstance(result.exception, OSError)

    def test_missing_capture_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["list", str(tmp_path / "nope.json")])

        assert result.exit_code == 1

    def test_grep(self, tmp_path: Path) -> None:
        page = tmp_path / "page.html"
        page.write_text("<p>price: 120</p>", encoding="utf-8")

        result = runner.invoke(app, ["grep", str(page), r"\d+", "--regex"])

        assert result.exit_code == 0
        assert ">>>120<<<" in result.output
